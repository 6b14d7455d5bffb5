import pathlib
import wave

import mido
import numpy
import pytest

import conftest
import midisynth.config
import midisynth.errors
import midisynth.pipeline
import midisynth.sequence


def _summary (commands):

	"""(kind, time, note) triples, with times rounded for comparison."""

	return [(type(command).__name__, round(command.time, 9), command.voice.note) for command in commands]


# ---------------------------------------------------------------------------
# Discovery pass
# ---------------------------------------------------------------------------

def test_discover_tempos_collects_all_tracks (two_track_file: mido.MidiFile) -> None:

	"""Tempo changes are placed at their absolute tick within their own track."""

	tempo_map = midisynth.pipeline.discover_tempos(two_track_file)

	assert tempo_map.changes() == [(0, 500000), (960, 250000)]


def test_tempo_changes_from_several_tracks_share_one_map () -> None:

	"""A tempo change in any track applies to the whole file."""

	midi_file = conftest.make_midi_file([
		[mido.MetaMessage('set_tempo', tempo=600000, time=480)],
		[mido.Message('note_on', note=60, velocity=64, time=0), mido.MetaMessage('set_tempo', tempo=300000, time=960)],
	])

	tempo_map = midisynth.pipeline.discover_tempos(midi_file)

	assert tempo_map.resolve(0) == 500000
	assert tempo_map.resolve(480) == 600000
	assert tempo_map.resolve(960) == 300000


def test_file_without_tempo_uses_default () -> None:

	"""With no set_tempo messages, notes are timed at 120 BPM."""

	midi_file = conftest.make_midi_file([[
		mido.Message('note_on', note=60, velocity=64, time=0),
		mido.Message('note_off', note=60, velocity=0, time=960),
	]])

	tempo_map = midisynth.pipeline.discover_tempos(midi_file)
	commands = midisynth.pipeline.build_sequence(midi_file, tempo_map)

	assert len(tempo_map) == 0
	assert commands[-1].time == pytest.approx(1.0)


def test_zero_tempo_fails_in_discovery () -> None:

	"""A tempo of zero is reported by the discovery stage."""

	midi_file = conftest.make_midi_file([[mido.MetaMessage('set_tempo', tempo=0, time=0)]])

	with pytest.raises(midisynth.errors.InvalidTempo) as excinfo:
		midisynth.pipeline.discover_tempos(midi_file)

	assert excinfo.value.stage == "discovery"


# ---------------------------------------------------------------------------
# Sequencing pass
# ---------------------------------------------------------------------------

def test_single_note_round_trip (single_note_file: mido.MidiFile) -> None:

	"""A note-on at tick 0 and a velocity 0 note-on at tick 240 become a start and a stop."""

	tempo_map = midisynth.pipeline.discover_tempos(single_note_file)
	start, stop = midisynth.pipeline.build_sequence(single_note_file, tempo_map)

	assert start == midisynth.sequence.StartNote(time=0.0, voice=midisynth.sequence.VoiceKey(0, 60), volume=0.78125)
	assert isinstance(stop, midisynth.sequence.StopNote)
	assert stop.voice == (0, 60)
	assert stop.time == pytest.approx(0.25)


def test_append_ordering_keeps_tracks_sequential (two_track_file: mido.MidiFile) -> None:

	"""With append ordering each track's commands follow the previous track's, each restarting at zero."""

	tempo_map = midisynth.pipeline.discover_tempos(two_track_file)
	commands = midisynth.pipeline.build_sequence(two_track_file, tempo_map, ordering="append")

	assert _summary(commands) == [
		("StartNote", 0.0, 60),
		("StopNote", 0.5, 60),
		("StartNote", 0.5, 62),
		("StopNote", 0.75, 62),
		("StartNote", 0.5, 67),
		("StopNote", 0.75, 67),
	]


def test_merge_ordering_is_globally_time_sorted (two_track_file: mido.MidiFile) -> None:

	"""The default ordering interleaves tracks so they play together."""

	tempo_map = midisynth.pipeline.discover_tempos(two_track_file)
	merged = midisynth.pipeline.build_sequence(two_track_file, tempo_map)
	appended = midisynth.pipeline.build_sequence(two_track_file, tempo_map, ordering="append")

	times = [command.time for command in merged]

	assert times == sorted(times)
	assert sorted(_summary(merged)) == sorted(_summary(appended))
	assert _summary(merged)[0] == ("StartNote", 0.0, 60)


def test_volume_follows_velocity (two_track_file: mido.MidiFile) -> None:

	"""Velocity 64 plays at half volume and 127 just below full."""

	tempo_map = midisynth.pipeline.discover_tempos(two_track_file)
	commands = midisynth.pipeline.build_sequence(two_track_file, tempo_map)

	volumes = {command.voice.note: command.volume for command in commands if isinstance(command, midisynth.sequence.StartNote)}

	assert volumes == {60: 0.5, 62: 0.5, 67: 127 / 128}


def test_velocity_zero_and_note_off_stop_at_same_time () -> None:

	"""Both spellings of note-off produce identical stops."""

	def _file (release: mido.Message) -> mido.MidiFile:
		return conftest.make_midi_file([[mido.Message('note_on', note=60, velocity=90, time=0), release]])

	with_velocity = _file(mido.Message('note_on', note=60, velocity=0, time=300))
	with_note_off = _file(mido.Message('note_off', note=60, velocity=64, time=300))

	tempo_map = midisynth.pipeline.discover_tempos(with_velocity)

	assert midisynth.pipeline.build_sequence(with_velocity, tempo_map) == midisynth.pipeline.build_sequence(with_note_off, tempo_map)


def test_non_note_messages_still_advance_time () -> None:

	"""Control changes and meta messages carry delta time too."""

	midi_file = conftest.make_midi_file([[
		mido.Message('control_change', control=7, value=100, time=480),
		mido.MetaMessage('text', text="verse", time=480),
		mido.Message('note_on', note=60, velocity=64, time=0),
	]])

	tempo_map = midisynth.pipeline.discover_tempos(midi_file)
	(start,) = midisynth.pipeline.build_sequence(midi_file, tempo_map)

	assert start.time == pytest.approx(1.0)


def test_smpte_file_is_rejected_before_processing () -> None:

	"""A timecode division fails fast with UnsupportedTimeResolution."""

	midi_file = conftest.make_midi_file(
		[[mido.Message('note_on', note=60, velocity=64, time=0)]],
		ticks_per_beat=-6360
	)

	with pytest.raises(midisynth.errors.UnsupportedTimeResolution):
		midisynth.pipeline.render_midi_file(midi_file)


def test_unknown_ordering_is_rejected (single_note_file: mido.MidiFile) -> None:

	"""Only merge and append are accepted."""

	tempo_map = midisynth.pipeline.discover_tempos(single_note_file)

	with pytest.raises(ValueError):
		midisynth.pipeline.build_sequence(single_note_file, tempo_map, ordering="shuffle")


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------

def test_convert_writes_wave (saved_midi: pathlib.Path, tmp_path: pathlib.Path) -> None:

	"""A converted file lasts as long as its last note."""

	output = tmp_path / "song.wav"
	config = midisynth.config.SynthConfig(sample_rate=8000, waveform="triangle")  # type: ignore[arg-type]

	midisynth.pipeline.convert(saved_midi, output, config)

	with wave.open(str(output), "rb") as wav_file:
		assert wav_file.getframerate() == 8000
		assert wav_file.getsampwidth() == 2
		assert wav_file.getnchannels() == 1
		assert wav_file.getnframes() == 6000


def test_pipeline_is_idempotent (saved_midi: pathlib.Path, tmp_path: pathlib.Path) -> None:

	"""Converting the same file twice gives byte-identical output."""

	config = midisynth.config.SynthConfig(sample_rate=8000)

	first = tmp_path / "first.wav"
	second = tmp_path / "second.wav"

	midisynth.pipeline.convert(saved_midi, first, config)
	midisynth.pipeline.convert(saved_midi, second, config)

	assert first.read_bytes() == second.read_bytes()

	midi_file = midisynth.pipeline.load_midi_file(saved_midi)

	assert numpy.array_equal(
		midisynth.pipeline.render_midi_file(midi_file, config),
		midisynth.pipeline.render_midi_file(midi_file, config)
	)


def test_missing_input_is_a_load_error (tmp_path: pathlib.Path) -> None:

	"""A missing file fails at load and writes nothing."""

	output = tmp_path / "out.wav"

	with pytest.raises(midisynth.errors.MidiFileError) as excinfo:
		midisynth.pipeline.convert(tmp_path / "missing.mid", output)

	assert excinfo.value.stage == "load"
	assert not output.exists()


def test_malformed_input_is_a_load_error (tmp_path: pathlib.Path) -> None:

	"""Bytes that are not a MIDI file fail at load."""

	bogus = tmp_path / "bogus.mid"
	bogus.write_bytes(b"not a midi file at all")

	with pytest.raises(midisynth.errors.MidiFileError):
		midisynth.pipeline.load_midi_file(bogus)
