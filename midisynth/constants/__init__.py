"""Constants for midisynth.

- ``midisynth.constants.timing`` - Default tempo and MIDI header division flags
- ``midisynth.constants.velocity`` - Velocity-to-volume scaling
- ``midisynth.constants.pcm`` - Output audio defaults and tuning reference
"""
