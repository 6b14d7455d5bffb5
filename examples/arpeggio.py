import logging

import mido

import midisynth


logging.basicConfig(level=logging.INFO)

TICKS_PER_BEAT = 480

# A C minor arpeggio on one track, a held bass note on another, and a
# conductor track that speeds up from 100 to 140 BPM halfway through.
conductor = mido.MidiTrack()
conductor.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(100), time=0))
conductor.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(140), time=8 * TICKS_PER_BEAT))

arpeggio = mido.MidiTrack()
for i in range(32):
	note = (60, 63, 67, 72)[i % 4]
	arpeggio.append(mido.Message('note_on', note=note, velocity=90, time=0))
	arpeggio.append(mido.Message('note_on', note=note, velocity=0, time=TICKS_PER_BEAT // 2))

bass = mido.MidiTrack()
bass.append(mido.Message('note_on', note=36, velocity=70, time=0))
bass.append(mido.Message('note_off', note=36, velocity=0, time=16 * TICKS_PER_BEAT))

midi_file = mido.MidiFile(type=1, ticks_per_beat=TICKS_PER_BEAT)
midi_file.tracks.extend([conductor, arpeggio, bass])
midi_file.save("arpeggio.mid")

midisynth.convert("arpeggio.mid", "arpeggio.wav", midisynth.SynthConfig(waveform=midisynth.Waveform.TRIANGLE))
