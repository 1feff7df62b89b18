import argparse
import logging
import math
import os
import random
import typing

import yaml

import cliptransform.clip
import cliptransform.midi_utils
import cliptransform.pitch
import cliptransform.transform


logger = logging.getLogger(__name__)


def load_config (config_path: str = 'config.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def resolve_time_signature (config: dict, file_time_signature: cliptransform.clip.TimeSignature) -> cliptransform.clip.TimeSignature:

	"""
	Use the ``time_signature`` section of the config when present, else the file's.
	"""

	section = config.get('time_signature') or {}

	if not section:
		return file_time_signature

	return cliptransform.clip.TimeSignature(
		numerator = section.get('numerator', file_time_signature.numerator),
		denominator = section.get('denominator', file_time_signature.denominator)
	)


def build_clip_context (
	config: dict,
	notes: typing.Sequence[cliptransform.clip.NoteEvent],
	time_signature: cliptransform.clip.TimeSignature
) -> cliptransform.clip.ClipContext:

	"""
	Build the clip context from the ``clip`` section of the config.

	Without an explicit ``clip.duration`` (musical beats) the clip runs to the
	end of the bar containing the last note's end.
	"""

	clip_config = config.get('clip') or {}
	bar_duration = time_signature.numerator

	clip_duration = clip_config.get('duration')

	if clip_duration is None:
		end = max((time_signature.to_musical(n.start_time + n.duration) for n in notes), default=0.0)
		clip_duration = max(1, math.ceil(end / bar_duration)) * bar_duration

	scale_mask: typing.Optional[int] = None
	scale_config = clip_config.get('scale') or {}

	if scale_config.get('key'):
		scale_mask = cliptransform.pitch.scale_mask(scale_config['key'], scale_config.get('mode', 'ionian'))

	return cliptransform.clip.ClipContext(
		clip_duration = clip_duration,
		clip_index = clip_config.get('index', 0),
		clip_count = clip_config.get('count', 1),
		bar_duration = bar_duration,
		arrangement_start = clip_config.get('arrangement_start'),
		scale_mask = scale_mask
	)


def main (argv: typing.Optional[typing.List[str]] = None) -> None:

	"""
	Apply a transform program to the notes of a MIDI file.
	"""

	parser = argparse.ArgumentParser(prog="cliptransform", description="Apply a transform program to a MIDI file")
	parser.add_argument("program", help="Path to the transform program")
	parser.add_argument("input", help="MIDI file to read")
	parser.add_argument("output", help="MIDI file to write")
	parser.add_argument("--config", default="config.yaml", help="YAML config file (default: config.yaml)")
	parser.add_argument("--seed", type=int, default=None, help="Seed for rand(), choose() and noise()")
	args = parser.parse_args(argv)

	config = load_config(args.config)

	level_name = str((config.get('logging') or {}).get('level', 'INFO')).upper()
	logging.basicConfig(level=getattr(logging, level_name, logging.INFO))

	with open(args.program, 'r') as f:
		program = f.read()

	notes, file_time_signature = cliptransform.midi_utils.read_midi_notes(args.input)
	time_signature = resolve_time_signature(config, file_time_signature)
	clip_context = build_clip_context(config, notes, time_signature)

	seed = args.seed if args.seed is not None else (config.get('transform') or {}).get('seed')
	rng = random.Random(seed)

	cliptransform.transform.apply_transforms(notes, program, time_signature, clip_context, rng)

	ticks_per_beat = (config.get('midi') or {}).get('ticks_per_beat', cliptransform.midi_utils.DEFAULT_TICKS_PER_BEAT)
	cliptransform.midi_utils.write_midi_notes(args.output, notes, time_signature, ticks_per_beat)

	logger.info(f"Transformed {args.input} → {args.output} ({len(notes)} notes)")


if __name__ == "__main__":
	main()
