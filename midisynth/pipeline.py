"""MIDI file to WAV conversion pipeline.

Conversion runs in two passes over the tracks of a Standard MIDI File:

1. **Discovery.**  Every track is walked with its own absolute tick counter
   and each ``set_tempo`` message is recorded into one shared tempo map.
   Tempo is a property of the whole file, so a change in any track applies
   to all of them.
2. **Sequencing.**  Every track is replayed from time zero through a
   ``SequenceBuilder``, turning note events into timed start/stop commands.

The commands are then rendered by the ``Synthesizer`` and written as a
16-bit WAV file.  Any failure aborts the conversion before the output file
is created.
"""

import logging
import os
import typing

import mido
import numpy

import midisynth.config
import midisynth.errors
import midisynth.sequence
import midisynth.synthesizer
import midisynth.tempo_map
import midisynth.timing
import midisynth.wave_writer


logger = logging.getLogger(__name__)


def load_midi_file (path: typing.Union[str, os.PathLike]) -> mido.MidiFile:

	"""
	Read a Standard MIDI File, raising ``MidiFileError`` if it cannot be opened or parsed.
	"""

	try:
		midi_file = mido.MidiFile(os.fspath(path))
	except (OSError, EOFError, ValueError, KeyError) as e:
		raise midisynth.errors.MidiFileError(f"Failed to read MIDI file {os.fspath(path)}: {e}") from e

	logger.info(f"Loaded {os.fspath(path)}: type {midi_file.type}, {len(midi_file.tracks)} track(s), division {midi_file.ticks_per_beat}")

	return midi_file


def discover_tempos (midi_file: mido.MidiFile) -> midisynth.tempo_map.TempoMap:

	"""
	Collect the tempo changes of every track into one frozen tempo map.
	"""

	tempo_map = midisynth.tempo_map.TempoMap()

	for track_index, track in enumerate(midi_file.tracks):

		tick = 0

		for message in track:
			tick += message.time

			if message.type != 'set_tempo':
				continue

			try:
				tempo_map.record(tick, message.tempo)
			except ValueError as e:
				raise midisynth.errors.InvalidTempo(f"Track {track_index}, tick {tick}: {e}") from e

	tempo_map.freeze()

	if len(tempo_map):
		logger.info(f"Found {len(tempo_map)} tempo change(s), starting at {tempo_map.bpm_at(0):.2f} BPM")
	else:
		logger.info("No tempo changes found, using the default of 120 BPM")

	return tempo_map


def build_sequence (
	midi_file: mido.MidiFile,
	tempo_map: midisynth.tempo_map.TempoMap,
	instrument_channel: int = 0,
	ordering: str = "merge"
) -> typing.List[midisynth.sequence.Command]:

	"""Replay every track into a list of voice commands.

	Each track restarts at time zero.  With ``ordering="merge"`` the tracks
	are interleaved by time (a stable merge, so equal times keep track
	order); with ``"append"`` each track's commands follow the previous
	track's.
	"""

	if ordering not in midisynth.config.ORDERINGS:
		raise ValueError(f"Ordering must be one of {midisynth.config.ORDERINGS}, got {ordering!r}")

	ticks_per_quarter_note = midisynth.timing.check_time_resolution(midi_file.ticks_per_beat)

	builder = midisynth.sequence.SequenceBuilder(
		tempo_map = tempo_map,
		ticks_per_quarter_note = ticks_per_quarter_note,
		instrument_channels = (instrument_channel,),
		channel = instrument_channel
	)

	for track in midi_file.tracks:

		builder.reset_for_new_track()

		for message in track:
			builder.advance_time(message.time)

			if message.type == 'note_on':
				builder.note_on(message.note, message.velocity)

			elif message.type == 'note_off':
				builder.note_off(message.note)

	commands = builder.merged() if ordering == "merge" else builder.sequence

	logger.info(f"Built {len(commands)} command(s) from {len(builder.tracks)} track(s)")

	return commands


def synthesize (
	commands: typing.Sequence[midisynth.sequence.Command],
	config: midisynth.config.SynthConfig
) -> numpy.ndarray:

	"""
	Render commands with the single instrument described by ``config``.
	"""

	instruments = {config.instrument_channel: midisynth.synthesizer.Instrument(waveform=config.waveform)}

	synth = midisynth.synthesizer.Synthesizer(
		instruments = instruments,
		params = midisynth.synthesizer.PcmParameters(sample_rate=config.sample_rate, channels=config.channels),
		frequency_lookup = midisynth.synthesizer.note_frequency,
		gain = config.gain
	)

	return synth.run(commands)


def render_midi_file (midi_file: mido.MidiFile, config: typing.Optional[midisynth.config.SynthConfig] = None) -> numpy.ndarray:

	"""
	Run both passes and the synthesizer over an already loaded file.
	"""

	if config is None:
		config = midisynth.config.SynthConfig()

	# Reject SMPTE files before doing any work.
	midisynth.timing.check_time_resolution(midi_file.ticks_per_beat)

	tempo_map = discover_tempos(midi_file)
	commands = build_sequence(midi_file, tempo_map, instrument_channel=config.instrument_channel, ordering=config.ordering)

	return synthesize(commands, config)


def convert (
	input_path: typing.Union[str, os.PathLike],
	output_path: typing.Union[str, os.PathLike],
	config: typing.Optional[midisynth.config.SynthConfig] = None
) -> None:

	"""Convert a MIDI file to a WAV file.

	Raises:
		MidiSynthError: Identifying the failed stage.  Nothing is written to
			``output_path`` when this is raised.
	"""

	if config is None:
		config = midisynth.config.SynthConfig()

	logger.info(f"Converting {os.fspath(input_path)} -> {os.fspath(output_path)} ({config.waveform.value} wave)")

	midi_file = load_midi_file(input_path)
	samples = render_midi_file(midi_file, config)

	midisynth.wave_writer.write_wave(output_path, samples, config.sample_rate)
