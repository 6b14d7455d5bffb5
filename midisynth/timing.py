"""Tick to wall-clock conversion.

Only the ticks-per-quarter-note time base is supported.  Standard MIDI Files
may instead declare an SMPTE division (frames per second and ticks per
frame); those are rejected up front rather than timed incorrectly.
"""

import midisynth.constants.timing
import midisynth.errors


def elapsed_seconds (delta_ticks: int, microseconds_per_quarter_note: int, ticks_per_quarter_note: int) -> float:

	"""
	Convert a tick delta to seconds at a fixed tempo and resolution.

	Example: at 500,000 us/quarter and 480 ticks per quarter, 480 ticks
	take 0.5 seconds.
	"""

	if ticks_per_quarter_note <= 0:
		raise ValueError("Ticks per quarter note must be positive")

	microseconds_per_tick = microseconds_per_quarter_note / ticks_per_quarter_note

	return microseconds_per_tick * delta_ticks / midisynth.constants.timing.MICROSECONDS_PER_SECOND


def check_time_resolution (division: int) -> int:

	"""
	Validate a MIDI header division and return it as ticks per quarter note.

	mido reads the division as a signed 16-bit value, so an SMPTE division
	shows up as a negative number.  The raw unsigned form (high bit set) is
	rejected too.
	"""

	if division < 0 or division & midisynth.constants.timing.SMPTE_DIVISION_FLAG:
		raise midisynth.errors.UnsupportedTimeResolution(
			f"Unsupported time resolution: SMPTE timecode division ({division}); only ticks per quarter note is supported"
		)

	if division == 0:
		raise midisynth.errors.MidiFileError("Invalid time resolution: 0 ticks per quarter note")

	return division
