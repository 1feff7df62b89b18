"""Apply transform programs to MIDI notes.

``apply_transforms()`` runs a program over a clip's notes. Assignments run in
program order, and each is applied to every matching note before the next one
starts, so a later line sees the values written by an earlier one:

    C3: pitch = seq(60, 62)
    C3: pitch = seq(64, 65)

The second line only matches the notes still at C3 after the first.

``evaluate_transform()`` previews a program for a single position without
touching any notes.
"""

import dataclasses
import logging
import random
import typing

import cliptransform.bar_beat
import cliptransform.clip
import cliptransform.constants
import cliptransform.errors
import cliptransform.evaluator
import cliptransform.nodes
import cliptransform.parser
import cliptransform.pitch
import cliptransform.ranges


logger = logging.getLogger(__name__)

Program = typing.Union[str, typing.Sequence[cliptransform.nodes.Assignment], None]


@dataclasses.dataclass(frozen=True)
class TransformResult:

	"""
	A previewed assignment result: the operator and the unclamped value.
	"""

	operator: str
	value: float


def apply_transforms (
	notes: typing.List[cliptransform.clip.NoteEvent],
	program: Program,
	time_signature: typing.Optional[cliptransform.clip.TimeSignature] = None,
	clip_context: typing.Optional[cliptransform.clip.ClipContext] = None,
	rng: typing.Optional[random.Random] = None
) -> typing.List[cliptransform.clip.NoteEvent]:

	"""
	Apply a transform program to notes in place.

	The notes are sorted by start time then pitch (so ``note.index`` follows
	musical order), transformed, and notes left with a velocity below 1 or a
	non-positive duration are removed. A program that fails to parse is
	logged and leaves the notes untouched; an expression that fails for one
	note is logged and skipped for that note only.

	Parameters:
		notes: The clip's notes. The list itself is mutated and returned.
		program: Program text or a list of parsed assignments.
		time_signature: The clip's time signature (default 4/4).
		clip_context: Values for ``clip.*``, ``bar.*`` and ``scale.*`` variables.
		rng: Random source for ``rand``, ``choose`` and ``noise``.

	Example:
		```python
		notes = [NoteEvent(60, 0.0, 1.0), NoteEvent(64, 1.0, 1.0)]
		apply_transforms(notes, "velocity = seq(80, 100)")
		# → velocities 80 and 100
		```
	"""

	if not program or not notes:
		return notes

	assignments = load_program(program)

	if not assignments:
		return notes

	time_signature = time_signature or cliptransform.clip.TimeSignature()

	if any(a.parameter in cliptransform.constants.AUDIO_PARAMETERS for a in assignments):
		logger.warning("Audio parameters (gain, pitchShift) ignored for MIDI clips")

	notes.sort(key=lambda n: (n.start_time, n.pitch))

	clip_range = cliptransform.ranges.clip_time_range(notes, time_signature)
	pitch_ranges = cliptransform.ranges.resolve_pitch_ranges(assignments)
	clip_vars = cliptransform.clip.clip_variables(clip_context)

	for assignment, pitch_range in zip(assignments, pitch_ranges):

		if assignment.parameter in cliptransform.constants.AUDIO_PARAMETERS:
			continue

		_apply_assignment(assignment, pitch_range, notes, time_signature, clip_range, clip_vars, rng)

	surviving = [
		note for note in notes
		if note.velocity >= cliptransform.constants.VELOCITY_MIN and note.duration > 0
	]

	if len(surviving) < len(notes):
		logger.debug(f"Removed {len(notes) - len(surviving)} note(s) with velocity < 1 or duration <= 0")

	notes[:] = surviving

	return notes


def load_program (program: Program) -> typing.List[cliptransform.nodes.Assignment]:

	"""
	Parse program text, or pass a parsed program through. A syntax error
	is logged and gives an empty program.
	"""

	if program is None:
		return []

	if isinstance(program, str):
		try:
			return cliptransform.parser.parse(program)
		except cliptransform.parser.TransformSyntaxError as exc:
			logger.warning(f"Transform syntax error, no transforms applied: {exc}")
			return []

	return list(program)


def _apply_assignment (
	assignment: cliptransform.nodes.Assignment,
	pitch_range: typing.Optional[cliptransform.nodes.PitchRange],
	notes: typing.List[cliptransform.clip.NoteEvent],
	time_signature: cliptransform.clip.TimeSignature,
	clip_range: cliptransform.clip.TimeRange,
	clip_vars: typing.Dict[str, float],
	rng: typing.Optional[random.Random]
) -> None:

	"""
	Apply one assignment to every matching note, writing each result immediately.

	``note.index`` counts the notes matching the pitch range, including those
	the time range then skips.
	"""

	if pitch_range is None:
		count = len(notes)
	else:
		count = sum(1 for note in notes if pitch_range.contains(note.pitch))

	index = 0
	applied = 0

	for note in notes:

		if pitch_range is not None and not pitch_range.contains(note.pitch):
			continue

		note_index = index
		index += 1

		bar, beat = cliptransform.bar_beat.position_to_bar_beat(note.start_time, time_signature)
		time_range = cliptransform.ranges.active_time_range(assignment, bar, beat, time_signature, clip_range)

		if time_range is None:
			continue

		ctx = cliptransform.evaluator.EvalContext(
			position = time_signature.to_musical(note.start_time),
			time_signature = time_signature,
			time_range = time_range,
			variables = _note_variables(note, note_index, count, time_signature, clip_vars),
			rng = rng
		)

		try:
			value = cliptransform.evaluator.evaluate(assignment.expression, ctx)
		except cliptransform.errors.EvaluationError as exc:
			logger.warning(f'Failed to evaluate transform for parameter "{assignment.parameter}": {exc}')
			continue

		apply_result(note, assignment.parameter, assignment.operator, value, time_signature)
		applied += 1

	logger.debug(f"{assignment.parameter} {assignment.operator}: applied to {applied} of {count} note(s)")


def _note_variables (
	note: cliptransform.clip.NoteEvent,
	index: int,
	count: int,
	time_signature: cliptransform.clip.TimeSignature,
	clip_vars: typing.Dict[str, float]
) -> typing.Dict[str, float]:

	variables: typing.Dict[str, float] = {
		"note.pitch": note.pitch,
		"note.start": time_signature.to_musical(note.start_time),
		"note.velocity": note.velocity,
		"note.deviation": note.velocity_deviation,
		"note.duration": time_signature.to_musical(note.duration),
		"note.probability": note.probability,
		"note.index": index,
		"note.count": count,
	}

	variables.update(clip_vars)

	return variables


def apply_result (
	note: cliptransform.clip.NoteEvent,
	parameter: str,
	operator: str,
	value: float,
	time_signature: cliptransform.clip.TimeSignature
) -> None:

	"""
	Write one evaluated value to a note, clamping and converting units.

	Timing and duration values are musical beats and are converted to
	quarter-note beats before they are written. Velocity is only capped at
	127; notes pushed below 1 are removed after the program runs.
	"""

	add = operator == "add"

	if parameter == "velocity":
		raw = note.velocity + value if add else value
		note.velocity = min(cliptransform.constants.VELOCITY_MAX, raw)

	elif parameter == "timing":
		quarter = time_signature.to_quarter(value)
		note.start_time = note.start_time + quarter if add else quarter

	elif parameter == "duration":
		quarter = time_signature.to_quarter(value)
		note.duration = note.duration + quarter if add else quarter

	elif parameter == "probability":
		raw = note.probability + value if add else value
		note.probability = _clamp(raw, cliptransform.constants.PROBABILITY_MIN, cliptransform.constants.PROBABILITY_MAX)

	elif parameter == "deviation":
		raw = note.velocity_deviation + value if add else value
		note.velocity_deviation = _clamp(raw, cliptransform.constants.DEVIATION_MIN, cliptransform.constants.DEVIATION_MAX)

	elif parameter == "pitch":
		raw = note.pitch + value if add else value
		note.pitch = int(_clamp(
			cliptransform.pitch.round_half_up(raw),
			cliptransform.constants.MIDI_PITCH_MIN,
			cliptransform.constants.MIDI_PITCH_MAX
		))


def _clamp (value: float, low: float, high: float) -> float:

	return max(low, min(high, value))


def evaluate_transform (
	program: Program,
	note_context: cliptransform.clip.NoteContext,
	properties: typing.Optional[typing.Dict[str, float]] = None,
	rng: typing.Optional[random.Random] = None
) -> typing.Dict[str, TransformResult]:

	"""
	Evaluate a program at a single position and return the raw results.

	Pitch ranges (including inherited ones) are checked against
	``note_context.pitch`` and time ranges against ``note_context.bar`` and
	``beat``; an assignment whose selector does not match is left out, as is
	one whose expression fails. When several assignments target the same
	parameter, the last one wins.

	Parameters:
		program: Program text or a list of parsed assignments.
		note_context: Position, time signature and optional pitch and bar|beat.
		properties: Variables keyed by ``"namespace.name"``, e.g. ``{"note.velocity": 100}``.
		rng: Random source for ``rand``, ``choose`` and ``noise``.

	Example:
		```python
		evaluate_transform("velocity += 10 * cos(1t)", NoteContext(position=0.5))
		# → {"velocity": TransformResult(operator="add", value=-10.0)}
		```
	"""

	if not program:
		return {}

	assignments = load_program(program)
	time_signature = note_context.time_signature
	clip_range = note_context.clip_time_range or cliptransform.clip.TimeRange(0.0, note_context.position)
	pitch_ranges = cliptransform.ranges.resolve_pitch_ranges(assignments)

	results: typing.Dict[str, TransformResult] = {}

	for assignment, pitch_range in zip(assignments, pitch_ranges):

		if pitch_range is not None and note_context.pitch is not None and not pitch_range.contains(note_context.pitch):
			continue

		time_range = cliptransform.ranges.active_time_range(
			assignment,
			note_context.bar,
			note_context.beat,
			time_signature,
			clip_range
		)

		if time_range is None:
			continue

		ctx = cliptransform.evaluator.EvalContext(
			position = note_context.position,
			time_signature = time_signature,
			time_range = time_range,
			variables = dict(properties or {}),
			audio = assignment.parameter in cliptransform.constants.AUDIO_PARAMETERS,
			rng = rng
		)

		try:
			value = cliptransform.evaluator.evaluate(assignment.expression, ctx)
		except cliptransform.errors.EvaluationError as exc:
			logger.warning(f'Failed to evaluate transform for parameter "{assignment.parameter}": {exc}')
			continue

		results[assignment.parameter] = TransformResult(assignment.operator, value)

	return results
