import enum
import logging
import os
import typing
import wave

import numpy

import midisynth.errors


logger = logging.getLogger(__name__)


class SampleFormat (enum.Enum):

	"""
	PCM sample encodings the writer can produce.
	"""

	SIGNED_16 = 2	# sample width in bytes


def write_wave (
	path: typing.Union[str, os.PathLike],
	samples: numpy.ndarray,
	sample_rate: int,
	sample_format: SampleFormat = SampleFormat.SIGNED_16
) -> None:

	"""Write a PCM buffer to an uncompressed WAV file.

	Parameters:
		path: Destination file.  It is only replaced once the whole file has
			been written, so a failure never leaves a truncated WAV behind.
		samples: int16 array shaped ``(frames, channels)``, or one dimensional
			for mono.
		sample_rate: Frames per second.
		sample_format: Must be ``SampleFormat.SIGNED_16``.

	Raises:
		WaveWriteError: If the file cannot be written.
	"""

	if sample_format is not SampleFormat.SIGNED_16:
		raise ValueError(f"Unsupported sample format: {sample_format}")

	if samples.ndim == 1:
		samples = samples[:, numpy.newaxis]

	frames = numpy.ascontiguousarray(samples, dtype="<i2")
	partial_path = f"{os.fspath(path)}.part"

	try:
		with wave.open(partial_path, "wb") as wav_file:
			wav_file.setnchannels(frames.shape[1])
			wav_file.setsampwidth(sample_format.value)
			wav_file.setframerate(sample_rate)
			wav_file.writeframes(frames.tobytes())

		os.replace(partial_path, path)

	except (OSError, wave.Error) as e:
		if os.path.exists(partial_path):
			os.remove(partial_path)
		raise midisynth.errors.WaveWriteError(f"Failed to write {os.fspath(path)}: {e}") from e

	logger.info(f"Wrote {frames.shape[0]} frames ({frames.shape[1]} channel(s), {sample_rate} Hz) to {os.fspath(path)}")
