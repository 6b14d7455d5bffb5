import dataclasses
import logging
import os
import typing

import yaml

import midisynth.constants.pcm
import midisynth.synthesizer


logger = logging.getLogger(__name__)


ORDERINGS = ("merge", "append")

# YAML section -> keys it may contain
_SECTIONS: typing.Dict[str, typing.Tuple[str, ...]] = {
	"synth": ("waveform", "gain"),
	"output": ("sample_rate", "channels"),
	"sequence": ("ordering", "instrument_channel"),
}


@dataclasses.dataclass
class SynthConfig:

	"""Settings for one conversion.

	Attributes:
		waveform: Generator for the single instrument.
		sample_rate: Output frames per second.
		channels: Output channel count; the mono mix is copied to each.
		gain: Master scale applied to every voice before mixing.
		ordering: ``"merge"`` interleaves all tracks by time so they play
			together; ``"append"`` keeps commands track after track.
		instrument_channel: Channel the instrument is assigned to.
	"""

	waveform: midisynth.synthesizer.Waveform = midisynth.synthesizer.Waveform.SQUARE
	sample_rate: int = midisynth.constants.pcm.DEFAULT_SAMPLE_RATE
	channels: int = midisynth.constants.pcm.DEFAULT_CHANNELS
	gain: float = midisynth.constants.pcm.DEFAULT_GAIN
	ordering: str = "merge"
	instrument_channel: int = 0


	def __post_init__ (self) -> None:

		self.waveform = midisynth.synthesizer.Waveform.from_name(self.waveform)  # type: ignore[arg-type]

		for name in ("sample_rate", "channels", "instrument_channel"):
			value = getattr(self, name)
			if isinstance(value, bool) or not isinstance(value, int):
				raise ValueError(f"{name} must be an integer, got {value!r}")

		if isinstance(self.gain, bool) or not isinstance(self.gain, (int, float)):
			raise ValueError(f"gain must be a number, got {self.gain!r}")

		if self.sample_rate <= 0:
			raise ValueError("Sample rate must be positive")

		if self.channels <= 0:
			raise ValueError("Channel count must be positive")

		if self.gain < 0:
			raise ValueError("Gain cannot be negative")

		if self.ordering not in ORDERINGS:
			raise ValueError(f"Ordering must be one of {ORDERINGS}, got {self.ordering!r}")

		if self.instrument_channel < 0:
			raise ValueError("Instrument channel cannot be negative")


	def replace (self, **overrides: typing.Any) -> "SynthConfig":

		"""
		Return a copy with the given fields replaced, skipping overrides that are ``None``.
		"""

		values = {key: value for key, value in overrides.items() if value is not None}

		return dataclasses.replace(self, **values)


def load_config (config_path: str = 'midisynth.yaml') -> SynthConfig:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return SynthConfig()

	with open(config_path, 'r') as f:
		try:
			data = yaml.safe_load(f) or {}
		except yaml.YAMLError as e:
			raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping")

	return config_from_dict(data)


def config_from_dict (data: typing.Dict[str, typing.Any]) -> SynthConfig:

	"""
	Build a ``SynthConfig`` from parsed YAML sections, ignoring unknown keys.
	"""

	values: typing.Dict[str, typing.Any] = {}

	for section, body in data.items():

		if section not in _SECTIONS:
			logger.warning(f"Ignoring unknown config section {section!r}")
			continue

		if body is None:
			continue

		if not isinstance(body, dict):
			raise ValueError(f"Config section {section!r} must be a mapping")

		for key, value in body.items():

			if key not in _SECTIONS[section]:
				logger.warning(f"Ignoring unknown config key {section}.{key}")
				continue

			values[key] = value

	return SynthConfig(**values)
