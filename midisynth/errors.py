"""Exceptions raised by the conversion pipeline.

Every error carries a ``stage`` naming the part of the pipeline that failed
(``"load"``, ``"discovery"``, ``"sequencing"``, ``"synthesis"`` or
``"output"``) so the command line can report it.  All of them are terminal
for the file being converted.
"""


class MidiSynthError (Exception):

	"""Base class for all conversion failures."""

	stage = "pipeline"


class MidiFileError (MidiSynthError):

	"""The MIDI file could not be opened or parsed."""

	stage = "load"


class UnsupportedTimeResolution (MidiSynthError):

	"""The file uses a timecode (SMPTE) division instead of ticks per quarter note."""

	stage = "load"


class InvalidVoiceReference (MidiSynthError):

	"""A command targets a channel that has no configured instrument."""

	stage = "sequencing"

	def __init__ (self, channel: int, stage: str = "sequencing") -> None:

		super().__init__(f"No instrument configured for channel {channel}")
		self.channel = channel
		self.stage = stage


class MalformedVolume (MidiSynthError):

	"""A volume outside the range [0, 1] was passed to the sequence builder."""

	stage = "sequencing"


class WaveWriteError (MidiSynthError):

	"""The output WAV file could not be written."""

	stage = "output"


class InvalidTempo (MidiSynthError):

	"""A tempo change carries a tempo that cannot be used (zero microseconds per quarter note)."""

	stage = "discovery"
