"""
midisynth - render Standard MIDI Files to WAV with simple periodic waveforms.

A file is converted in two passes.  The first collects every tempo change
from every track into one tempo map; the second replays each track,
converting tick deltas to seconds with that map, and turns note events
into timed start/stop commands for a small synthesizer.  The result is
written as a 16-bit PCM WAV file.

- **Tempo map.** Tempo changes from any track apply to the whole file.
  Ticks before the first change play at 120 BPM.
- **Concurrent tracks.** Each track starts at time zero; by default the
  tracks are merged by time so they play together.
- **Waveforms.** ``square`` (default), ``triangle`` or ``sawtooth``.

Minimal example:

    ```python
    import midisynth

    config = midisynth.SynthConfig(waveform="triangle", sample_rate=22050)
    midisynth.convert("song.mid", "song.wav", config)
    ```

Or from the shell::

    midisynth song.mid song.wav triangle

Package-level exports: ``convert``, ``SynthConfig``, ``TempoMap``,
``SequenceBuilder``, ``Synthesizer``, ``Waveform``.
"""

import midisynth.config
import midisynth.pipeline
import midisynth.sequence
import midisynth.synthesizer
import midisynth.tempo_map


convert = midisynth.pipeline.convert
SynthConfig = midisynth.config.SynthConfig
TempoMap = midisynth.tempo_map.TempoMap
SequenceBuilder = midisynth.sequence.SequenceBuilder
Synthesizer = midisynth.synthesizer.Synthesizer
Waveform = midisynth.synthesizer.Waveform
