import pathlib
import typing

import mido
import pytest


def make_midi_file (
	tracks: typing.List[typing.List[mido.Message]],
	ticks_per_beat: int = 480
) -> mido.MidiFile:

	"""Build an in-memory Type 1 MIDI file from lists of delta-timed messages."""

	midi_file = mido.MidiFile(type=1, ticks_per_beat=ticks_per_beat)

	for messages in tracks:
		track = mido.MidiTrack()
		track.extend(messages)
		track.append(mido.MetaMessage('end_of_track', time=0))
		midi_file.tracks.append(track)

	return midi_file


@pytest.fixture
def single_note_file () -> mido.MidiFile:

	"""One track: middle C for a quarter note at 500,000 us/quarter and 480 ticks per quarter."""

	return make_midi_file([[
		mido.MetaMessage('set_tempo', tempo=500000, time=0),
		mido.Message('note_on', note=60, velocity=100, time=0),
		mido.Message('note_on', note=60, velocity=0, time=240),
	]])


@pytest.fixture
def two_track_file () -> mido.MidiFile:

	"""A conductor track with a tempo change at beat 2, and two note tracks."""

	return make_midi_file([
		[
			mido.MetaMessage('set_tempo', tempo=500000, time=0),
			mido.MetaMessage('set_tempo', tempo=250000, time=960),
		],
		[
			mido.Message('note_on', note=60, velocity=64, time=0),
			mido.Message('note_off', note=60, velocity=0, time=960),
			mido.Message('note_on', note=62, velocity=64, time=0),
			mido.Message('note_off', note=62, velocity=0, time=480),
		],
		[
			mido.Message('note_on', note=67, velocity=127, time=480),
			mido.Message('note_off', note=67, velocity=0, time=480),
		],
	])


@pytest.fixture
def saved_midi (tmp_path: pathlib.Path, two_track_file: mido.MidiFile) -> pathlib.Path:

	"""The two-track file written to disk."""

	path = tmp_path / "song.mid"
	two_track_file.save(str(path))

	return path
