"""Output audio defaults."""

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_CHANNELS = 1

# Headroom applied to every voice before mixing
DEFAULT_GAIN = 0.25

# A4 = MIDI note 69 = 440 Hz, twelve-tone equal temperament
REFERENCE_NOTE = 69
REFERENCE_FREQUENCY = 440.0
SEMITONES_PER_OCTAVE = 12

INT16_MAX = 32767
