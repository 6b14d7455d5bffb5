"""Offline periodic-waveform synthesizer.

Renders a command sequence (see ``midisynth.sequence``) into a signed 16-bit
sample buffer.  Each instrument channel owns one waveform generator; every
sounding voice is an independent oscillator started at phase zero, scaled
by its volume and the master gain, and mixed additively.

Voice rules:

- A ``StartNote`` on a voice that is already sounding retriggers it.
- A ``StopNote`` on a silent voice is ignored.
- Voices still sounding after the last command stop at that command's time,
  which is also the length of the buffer.
"""

import dataclasses
import enum
import logging
import typing

import numpy

import midisynth.constants.pcm
import midisynth.errors
import midisynth.sequence


logger = logging.getLogger(__name__)


FrequencyLookup = typing.Callable[[int], float]


class Waveform (enum.Enum):

	"""
	The periodic generator used by an instrument.
	"""

	SQUARE = "square"
	TRIANGLE = "triangle"
	SAWTOOTH = "sawtooth"


	@classmethod
	def from_name (cls, name: typing.Optional[str]) -> "Waveform":

		"""Parse a waveform name, falling back to square.

		Any unrecognised name (including ``None`` and the empty string)
		selects ``SQUARE``.  The fallback is deliberate, not an error, and
		is logged so a typo is still visible.  A value that is not a string
		raises ``ValueError``.
		"""

		if isinstance(name, Waveform):
			return name

		if name is not None and not isinstance(name, str):
			raise ValueError(f"Waveform must be a name, got {name!r}")

		key = (name or "").strip().lower()

		for waveform in cls:
			if waveform.value == key:
				return waveform

		if key:
			logger.warning(f"Unknown waveform {name!r}, falling back to {cls.SQUARE.value!r}")

		return cls.SQUARE


	def render (self, phase: numpy.ndarray) -> numpy.ndarray:

		"""
		Map phase values in [0, 1) to samples in [-1, 1].
		"""

		if self is Waveform.SQUARE:
			return numpy.where(phase < 0.5, 1.0, -1.0)

		if self is Waveform.TRIANGLE:
			# Starts at 0, peaks at phase 0.25, troughs at 0.75
			return 1.0 - 4.0 * numpy.abs(numpy.mod(phase + 0.25, 1.0) - 0.5)

		return 2.0 * phase - 1.0


@dataclasses.dataclass
class Instrument:

	"""
	A sound source assigned to a channel.
	"""

	waveform: Waveform = Waveform.SQUARE


@dataclasses.dataclass (frozen=True)
class PcmParameters:

	"""
	Output sample rate and channel count.
	"""

	sample_rate: int = midisynth.constants.pcm.DEFAULT_SAMPLE_RATE
	channels: int = midisynth.constants.pcm.DEFAULT_CHANNELS


	def __post_init__ (self) -> None:

		if self.sample_rate <= 0:
			raise ValueError("Sample rate must be positive")

		if self.channels <= 0:
			raise ValueError("Channel count must be positive")


def note_frequency (note: int, reference: float = midisynth.constants.pcm.REFERENCE_FREQUENCY) -> float:

	"""
	Equal-tempered frequency of a MIDI note, A4 (69) = ``reference`` Hz.
	"""

	semitones = note - midisynth.constants.pcm.REFERENCE_NOTE

	return float(reference * 2.0 ** (semitones / midisynth.constants.pcm.SEMITONES_PER_OCTAVE))


@dataclasses.dataclass
class _SoundingVoice:

	start_frame: int
	volume: float


class Synthesizer:

	"""
	Renders voice commands into a PCM buffer.
	"""

	def __init__ (
		self,
		instruments: typing.Dict[int, Instrument],
		params: typing.Optional[PcmParameters] = None,
		frequency_lookup: FrequencyLookup = note_frequency,
		gain: float = midisynth.constants.pcm.DEFAULT_GAIN
	) -> None:

		"""Configure the synthesizer.

		Parameters:
			instruments: Instrument per channel.  Commands for other channels
				raise ``InvalidVoiceReference``.
			params: Output sample rate and channel count.
			frequency_lookup: Maps a MIDI note number to a frequency in Hz.
			gain: Master scale applied to every voice before mixing.
		"""

		if gain < 0:
			raise ValueError("Gain cannot be negative")

		self.instruments = instruments
		self.params = params if params is not None else PcmParameters()
		self.frequency_lookup = frequency_lookup
		self.gain = gain


	def run (self, commands: typing.Sequence[midisynth.sequence.Command]) -> numpy.ndarray:

		"""
		Render ``commands`` and return int16 samples shaped ``(frames, channels)``.
		"""

		ordered = sorted(commands, key=lambda command: command.time)

		for command in ordered:
			if command.voice.channel not in self.instruments:
				raise midisynth.errors.InvalidVoiceReference(command.voice.channel, stage="synthesis")

		total_frames = self._to_frame(ordered[-1].time) if ordered else 0
		mix = numpy.zeros(total_frames, dtype=numpy.float64)

		sounding: typing.Dict[midisynth.sequence.VoiceKey, _SoundingVoice] = {}

		for command in ordered:

			frame = self._to_frame(command.time)
			voice = sounding.pop(command.voice, None)

			if voice is not None:
				self._render_voice(mix, command.voice, voice, frame)

			elif isinstance(command, midisynth.sequence.StopNote):
				logger.debug(f"Ignoring stop for silent voice {tuple(command.voice)} at {command.time:.3f}s")

			if isinstance(command, midisynth.sequence.StartNote):
				sounding[command.voice] = _SoundingVoice(start_frame=frame, volume=command.volume)

		for key, voice in sounding.items():
			self._render_voice(mix, key, voice, total_frames)

		numpy.clip(mix, -1.0, 1.0, out=mix)

		samples = numpy.round(mix * midisynth.constants.pcm.INT16_MAX).astype(numpy.int16)

		logger.info(f"Synthesized {total_frames} frames ({total_frames / self.params.sample_rate:.2f}s) at {self.params.sample_rate} Hz")

		return numpy.repeat(samples[:, numpy.newaxis], self.params.channels, axis=1)


	def _to_frame (self, seconds: float) -> int:

		return int(round(seconds * self.params.sample_rate))


	def _render_voice (self, mix: numpy.ndarray, key: midisynth.sequence.VoiceKey, voice: _SoundingVoice, end_frame: int) -> None:

		"""
		Add one note, from its start frame up to ``end_frame``, into ``mix``.
		"""

		length = end_frame - voice.start_frame

		if length <= 0:
			return

		frequency = self.frequency_lookup(key.note)
		phase = numpy.mod(numpy.arange(length) * (frequency / self.params.sample_rate), 1.0)

		waveform = self.instruments[key.channel].waveform

		mix[voice.start_frame:end_frame] += waveform.render(phase) * (voice.volume * self.gain)
