import bisect
import dataclasses
import logging
import typing

import mido

import midisynth.constants.timing


logger = logging.getLogger(__name__)


@dataclasses.dataclass (frozen=True)
class TempoEvent:

	"""
	A tempo change at an absolute tick position.
	"""

	tick: int
	microseconds_per_quarter_note: int
	order: int = dataclasses.field(default=0, compare=False)	# discovery order, breaks ties on equal ticks


class TempoMap:

	"""
	A file-wide piecewise tempo function.

	Tempo changes are recorded from any track during a discovery pass and
	then resolved by tick.  The map is sorted once, the first time it is
	resolved after a change, and looked up by binary search from then on.

	When several changes share a tick the one recorded last wins, so a
	tempo change later in file order overrides an earlier one at the same
	position.  Ticks before the first change (and every tick of an empty
	map) resolve to the default of 500,000 microseconds per quarter note.
	"""

	def __init__ (self, default_tempo: int = midisynth.constants.timing.DEFAULT_TEMPO) -> None:

		"""
		Create an empty map with the tempo used before the first change.
		"""

		if default_tempo <= 0:
			raise ValueError("Default tempo must be positive")

		self.default_tempo = default_tempo

		self._events: typing.List[TempoEvent] = []
		self._ticks: typing.List[int] = []
		self._dirty = False


	def __len__ (self) -> int:

		return len(self._events)


	def __iter__ (self) -> typing.Iterator[TempoEvent]:

		"""
		Iterate the recorded changes in resolution order (ascending tick, ties in discovery order).
		"""

		self.freeze()
		return iter(self._events)


	def record (self, tick: int, microseconds_per_quarter_note: int) -> None:

		"""
		Append a tempo change.  No ordering is required between calls.
		"""

		if tick < 0:
			raise ValueError("Tempo change tick cannot be negative")

		if microseconds_per_quarter_note <= 0:
			raise ValueError("Tempo must be positive")

		self._events.append(TempoEvent(tick, microseconds_per_quarter_note, order=len(self._events)))
		self._dirty = True

		logger.debug(f"Tempo change at tick {tick}: {microseconds_per_quarter_note} us/quarter")


	def freeze (self) -> None:

		"""
		Sort the recorded changes so they can be binary searched.

		Called automatically by ``resolve()``.  Calling it right after the
		discovery pass keeps the sort out of the sequencing loop.
		"""

		if not self._dirty:
			return

		self._events.sort(key=lambda event: (event.tick, event.order))
		self._ticks = [event.tick for event in self._events]
		self._dirty = False


	def resolve (self, tick: int) -> int:

		"""
		Return the tempo in microseconds per quarter note in effect at ``tick``.
		"""

		self.freeze()

		# Rightmost event with event.tick <= tick; among equal ticks that is the last recorded.
		index = bisect.bisect_right(self._ticks, tick)

		if index == 0:
			return self.default_tempo

		return self._events[index - 1].microseconds_per_quarter_note


	def bpm_at (self, tick: int) -> float:

		"""
		Return the tempo in effect at ``tick`` as beats per minute.
		"""

		return float(mido.tempo2bpm(self.resolve(tick)))


	def changes (self) -> typing.List[typing.Tuple[int, int]]:

		"""
		Return the recorded changes as ``(tick, tempo)`` pairs in resolution order.
		"""

		return [(event.tick, event.microseconds_per_quarter_note) for event in self]
