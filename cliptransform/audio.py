import dataclasses
import logging
import random
import typing

import cliptransform.clip
import cliptransform.constants
import cliptransform.errors
import cliptransform.evaluator
import cliptransform.transform


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class AudioTransformResult:

	"""
	New gain (dB) and pitch shift (semitones) for an audio clip.

	A field is ``None`` when no assignment to that parameter was applied.
	"""

	gain: typing.Optional[float] = None
	pitch_shift: typing.Optional[float] = None


def apply_audio_transforms (
	gain: float,
	pitch_shift: float,
	program: cliptransform.transform.Program,
	clip_context: typing.Optional[cliptransform.clip.ClipContext] = None,
	time_signature: typing.Optional[cliptransform.clip.TimeSignature] = None,
	rng: typing.Optional[random.Random] = None
) -> AudioTransformResult:

	"""
	Apply the gain and pitchShift assignments of a program to an audio clip.

	Assignments run in order and each sees the running values through
	``audio.gain`` and ``audio.pitchShift``. The expression is evaluated once,
	at position 0, with the whole clip as its time range. Final values are
	clamped to -70..24 dB and -48..48 semitones. Note parameters are ignored
	with a single warning, and ``note.*`` variables are unavailable.

	Example:
		```python
		apply_audio_transforms(-6.0, 0.0, "gain += 3\\npitchShift = 12")
		# → AudioTransformResult(gain=-3.0, pitch_shift=12.0)
		```
	"""

	if not program:
		return AudioTransformResult()

	assignments = cliptransform.transform.load_program(program)

	if not assignments:
		return AudioTransformResult()

	time_signature = time_signature or cliptransform.clip.TimeSignature()

	if any(a.parameter in cliptransform.constants.NOTE_PARAMETERS for a in assignments):
		logger.warning("MIDI parameters (velocity, timing, duration, probability, deviation, pitch) ignored for audio clips")

	if clip_context is not None:
		time_range = cliptransform.clip.TimeRange(0.0, clip_context.clip_duration)
	else:
		time_range = cliptransform.clip.TimeRange(0.0, 0.0)

	values = {"gain": gain, "pitchShift": pitch_shift}
	applied: typing.Set[str] = set()

	for assignment in assignments:

		if assignment.parameter not in cliptransform.constants.AUDIO_PARAMETERS:
			continue

		variables = cliptransform.clip.clip_variables(clip_context)
		variables["audio.gain"] = values["gain"]
		variables["audio.pitchShift"] = values["pitchShift"]

		ctx = cliptransform.evaluator.EvalContext(
			position = 0.0,
			time_signature = time_signature,
			time_range = time_range,
			variables = variables,
			audio = True,
			rng = rng
		)

		try:
			value = cliptransform.evaluator.evaluate(assignment.expression, ctx)
		except cliptransform.errors.EvaluationError as exc:
			logger.warning(f'Failed to evaluate transform for parameter "{assignment.parameter}": {exc}')
			continue

		if assignment.operator == "add":
			values[assignment.parameter] += value
		else:
			values[assignment.parameter] = value

		applied.add(assignment.parameter)

	result_gain: typing.Optional[float] = None
	result_pitch_shift: typing.Optional[float] = None

	if "gain" in applied:
		result_gain = max(cliptransform.constants.GAIN_MIN_DB, min(cliptransform.constants.GAIN_MAX_DB, values["gain"]))

	if "pitchShift" in applied:
		result_pitch_shift = max(
			cliptransform.constants.PITCH_SHIFT_MIN,
			min(cliptransform.constants.PITCH_SHIFT_MAX, values["pitchShift"])
		)

	return AudioTransformResult(gain=result_gain, pitch_shift=result_pitch_shift)
