import argparse
import logging
import sys
import typing

import midisynth.config
import midisynth.errors
import midisynth.pipeline


logger = logging.getLogger(__name__)


def parse_args (argv: typing.Optional[typing.List[str]] = None) -> argparse.Namespace:

	"""
	Parse command line arguments.
	"""

	parser = argparse.ArgumentParser(prog="midisynth", description="Synthesize a MIDI file to a WAV file")
	parser.add_argument("input", help="Input .mid file")
	parser.add_argument("output", help="Output .wav file")
	parser.add_argument(
		"function",
		nargs="?",
		default=None,
		help="Sound generator function: 'square' (default), 'triangle' or 'sawtooth'. Unknown names fall back to square."
	)
	parser.add_argument("--config", default=None, help="YAML config file")
	parser.add_argument("--sample-rate", type=int, default=None, help="Output sample rate in Hz (default 44100)")
	parser.add_argument("--channels", type=int, default=None, help="Output channel count (default 1)")
	parser.add_argument("--gain", type=float, default=None, help="Per-voice gain before mixing (default 0.25)")
	parser.add_argument("--ordering", choices=midisynth.config.ORDERINGS, default=None, help="Merge tracks by time, or append them track after track")
	parser.add_argument("-v", "--verbose", action="store_true", help="Log per-event detail")

	return parser.parse_args(argv)


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the midisynth command.
	"""

	args = parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	try:
		config = midisynth.config.load_config(args.config) if args.config else midisynth.config.SynthConfig()
		config = config.replace(
			waveform = args.function,
			sample_rate = args.sample_rate,
			channels = args.channels,
			gain = args.gain,
			ordering = args.ordering
		)
	except (ValueError, TypeError, OSError) as e:
		logger.error(f"configuration failed: {e}")
		return 1

	try:
		midisynth.pipeline.convert(args.input, args.output, config)
	except midisynth.errors.MidiSynthError as e:
		logger.error(f"{e.stage} failed: {e}")
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
