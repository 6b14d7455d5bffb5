import dataclasses
import heapq
import logging
import math
import typing

import midisynth.constants.velocity
import midisynth.errors
import midisynth.tempo_map
import midisynth.timing


logger = logging.getLogger(__name__)


class VoiceKey (typing.NamedTuple):

	"""
	One addressable sound slot: an instrument channel and a MIDI note number.
	"""

	channel: int
	note: int


@dataclasses.dataclass (frozen=True)
class StartNote:

	"""
	Start sounding a voice at ``time`` seconds.
	"""

	time: float
	voice: VoiceKey
	volume: float


@dataclasses.dataclass (frozen=True)
class StopNote:

	"""
	Stop a voice at ``time`` seconds.
	"""

	time: float
	voice: VoiceKey


Command = typing.Union[StartNote, StopNote]


def velocity_to_volume (velocity: int) -> float:

	"""
	Map a MIDI velocity (1-127) to a volume in [0, 1].
	"""

	volume = velocity / midisynth.constants.velocity.VOLUME_DIVISOR

	return min(1.0, max(0.0, volume))


def merge_by_time (tracks: typing.Iterable[typing.List[Command]]) -> typing.List[Command]:

	"""
	Merge per-track command lists into one list ordered by time.

	Each input list must already be time ordered.  The merge is stable:
	commands at the same time keep track order, then insertion order.
	"""

	return list(heapq.merge(*tracks, key=lambda command: command.time))


class SequenceBuilder:

	"""
	Turns each track's delta-timed note events into timed voice commands.

	Every track starts its own clock at zero (``reset_for_new_track()``),
	and all tracks write into one builder.  ``sequence`` gives the commands
	in append order (track by track); ``merged()`` interleaves the tracks
	by time so they play together from the start of the file.
	"""

	def __init__ (
		self,
		tempo_map: midisynth.tempo_map.TempoMap,
		ticks_per_quarter_note: int,
		instrument_channels: typing.Iterable[int] = (0,),
		channel: int = 0
	) -> None:

		"""Create a builder bound to a resolved tempo map.

		Parameters:
			tempo_map: Tempo changes from the discovery pass.
			ticks_per_quarter_note: The file's time resolution.
			instrument_channels: Channels that have an instrument configured.
				Commands for any other channel are rejected.
			channel: The instrument channel that ``note_on()`` and
				``note_off()`` address.
		"""

		if ticks_per_quarter_note <= 0:
			raise ValueError("Ticks per quarter note must be positive")

		self.tempo_map = tempo_map
		self.ticks_per_quarter_note = ticks_per_quarter_note
		self.instrument_channels: typing.FrozenSet[int] = frozenset(instrument_channels)
		self.channel = channel

		self.tick = 0
		self.current_time = 0.0

		self.tracks: typing.List[typing.List[Command]] = []


	@property
	def sequence (self) -> typing.List[Command]:

		"""
		All commands in append order: every command of a track follows every command of the tracks before it.
		"""

		return [command for track in self.tracks for command in track]


	def merged (self) -> typing.List[Command]:

		"""
		All commands in one time-ordered stream, tracks playing concurrently.
		"""

		return merge_by_time(self.tracks)


	def reset_for_new_track (self) -> None:

		"""
		Zero the tick cursor and the time offset, and open a new track.
		"""

		self.tick = 0
		self.current_time = 0.0
		self.tracks.append([])


	def advance_time (self, delta_ticks: int) -> None:

		"""
		Move the cursor forward by ``delta_ticks``.

		The tempo is looked up at the cursor's new position and the whole
		delta is converted at that tempo.
		"""

		if delta_ticks < 0:
			raise ValueError("Delta ticks cannot be negative")

		self.tick += delta_ticks

		tempo = self.tempo_map.resolve(self.tick)

		self.current_time += midisynth.timing.elapsed_seconds(delta_ticks, tempo, self.ticks_per_quarter_note)


	def start_note (self, voice: VoiceKey, volume: float) -> None:

		"""
		Emit a ``StartNote`` for ``voice`` at the current time.
		"""

		self._check_voice(voice)

		if math.isnan(volume) or not 0.0 <= volume <= 1.0:
			raise midisynth.errors.MalformedVolume(f"Volume {volume!r} for note {voice.note} is outside [0, 1]")

		self._emit(StartNote(time=self.current_time, voice=voice, volume=volume))


	def stop_note (self, voice: VoiceKey) -> None:

		"""
		Emit a ``StopNote`` for ``voice`` at the current time.

		A stop with no preceding start is allowed; the synthesizer ignores it.
		"""

		self._check_voice(voice)
		self._emit(StopNote(time=self.current_time, voice=voice))


	def note_on (self, key: int, velocity: int) -> None:

		"""
		Handle a MIDI note-on.  Velocity 0 is a note-off.
		"""

		voice = VoiceKey(self.channel, key)

		if velocity > 0:
			self.start_note(voice, velocity_to_volume(velocity))
		else:
			self.stop_note(voice)


	def note_off (self, key: int) -> None:

		"""
		Handle a MIDI note-off.  Release velocity is ignored.
		"""

		self.stop_note(VoiceKey(self.channel, key))


	def _check_voice (self, voice: VoiceKey) -> None:

		if voice.channel not in self.instrument_channels:
			raise midisynth.errors.InvalidVoiceReference(voice.channel)


	def _emit (self, command: Command) -> None:

		if not self.tracks:
			self.tracks.append([])

		self.tracks[-1].append(command)
