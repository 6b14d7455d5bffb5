"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127).  A note-on with velocity 0 is a
note-off by convention.
"""

# Velocity is divided by this to obtain a volume; 127 maps just under 1.0
VOLUME_DIVISOR = 128.0
