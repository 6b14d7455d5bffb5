"""Tick and tempo constants.

Tempo is expressed the way Standard MIDI Files store it: microseconds per
quarter note.  Smaller values are faster.
"""

# 120 BPM, used until the first tempo change (or when a file has none)
DEFAULT_TEMPO = 500000

MICROSECONDS_PER_SECOND = 1_000_000

# Header division word: high bit set means SMPTE frames, not ticks per beat
SMPTE_DIVISION_FLAG = 0x8000
