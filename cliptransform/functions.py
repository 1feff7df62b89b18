"""Built-in functions callable from transform expressions.

Arguments are evaluated left to right through the ``evaluate`` callback so
that nested expressions (variables, other calls) resolve against the same
context. ``seq`` is the exception: only the selected argument is evaluated.

Waveform functions take a period as their first argument - either a
``bars:beats`` literal such as ``1:0t`` or any expression in musical beats.
"""

from __future__ import annotations

import math
import typing

import cliptransform.errors
import cliptransform.nodes
import cliptransform.period
import cliptransform.pitch
import cliptransform.waveforms

if typing.TYPE_CHECKING:
	import cliptransform.evaluator


EvaluateFn = typing.Callable[["cliptransform.nodes.Expression", "cliptransform.evaluator.EvalContext"], float]

WAVEFORM_FUNCTIONS = frozenset({"cos", "sin", "tri", "saw", "square"})

_MATH_REDUCERS: typing.Dict[str, typing.Callable[[float], float]] = {
	"round": lambda value: float(cliptransform.pitch.round_half_up(value)),
	"floor": lambda value: float(math.floor(value)),
	"ceil": lambda value: float(math.ceil(value)),
	"abs": abs,
}


def call_function (
	node: cliptransform.nodes.FunctionCall,
	ctx: cliptransform.evaluator.EvalContext,
	evaluate: EvaluateFn
) -> float:

	"""
	Evaluate a function call node.

	Raises:
		EvaluationError: For an unknown function, the wrong number of
			arguments, or an invalid period, speed or exponent.
	"""

	if node.sync and node.name not in WAVEFORM_FUNCTIONS:
		raise cliptransform.errors.EvaluationError(f"sync is only supported by waveform functions, not {node.name}()")

	if node.name in WAVEFORM_FUNCTIONS:
		return _call_waveform(node, ctx, evaluate)

	handler = _HANDLERS.get(node.name)

	if handler is None:
		raise cliptransform.errors.EvaluationError(f"Unknown function: {node.name}()")

	return handler(node, ctx, evaluate)


def _check_arity (node: cliptransform.nodes.FunctionCall, minimum: int, maximum: typing.Optional[int], usage: str) -> None:

	count = len(node.args)

	if count < minimum or (maximum is not None and count > maximum):
		raise cliptransform.errors.EvaluationError(f"Function {node.name}() expects {usage}, got {count} argument(s)")


def _evaluate_args (
	node: cliptransform.nodes.FunctionCall,
	ctx: cliptransform.evaluator.EvalContext,
	evaluate: EvaluateFn
) -> typing.List[float]:

	return [evaluate(arg, ctx) for arg in node.args]


# ─── Randomness ───────────────────────────────────────────────────────────────


def _noise (node, ctx, evaluate) -> float:

	_check_arity(node, 0, 0, "no arguments")
	return cliptransform.waveforms.rand(-1.0, 1.0, ctx.rng)


def _rand (node, ctx, evaluate) -> float:

	"""rand() → [-1, 1], rand(max) → [0, max], rand(min, max) → [min, max]."""

	_check_arity(node, 0, 2, "0-2 arguments: rand(), rand(max) or rand(min, max)")
	args = _evaluate_args(node, ctx, evaluate)

	if not args:
		return cliptransform.waveforms.rand(-1.0, 1.0, ctx.rng)

	if len(args) == 1:
		return cliptransform.waveforms.rand(0.0, args[0], ctx.rng)

	return cliptransform.waveforms.rand(args[0], args[1], ctx.rng)


def _choose (node, ctx, evaluate) -> float:

	_check_arity(node, 1, None, "at least 1 argument")
	return cliptransform.waveforms.choose(_evaluate_args(node, ctx, evaluate), ctx.rng)


# ─── Math ─────────────────────────────────────────────────────────────────────


def _math_reducer (node, ctx, evaluate) -> float:

	_check_arity(node, 1, 1, "1 argument")
	return _MATH_REDUCERS[node.name](evaluate(node.args[0], ctx))


def _clamp (node, ctx, evaluate) -> float:

	_check_arity(node, 3, 3, "3 arguments: clamp(value, min, max)")
	value, low, high = _evaluate_args(node, ctx, evaluate)

	if low > high:
		low, high = high, low

	return max(low, min(high, value))


def _pow (node, ctx, evaluate) -> float:

	_check_arity(node, 2, 2, "2 arguments: pow(base, exponent)")
	base, exponent = _evaluate_args(node, ctx, evaluate)

	try:
		result = math.pow(base, exponent)
	except (ValueError, OverflowError) as exc:
		raise cliptransform.errors.EvaluationError(f"Function pow({base}, {exponent}) is undefined") from exc

	if not math.isfinite(result):
		raise cliptransform.errors.EvaluationError(f"Function pow({base}, {exponent}) is not finite")

	return result


def _min_max (node, ctx, evaluate) -> float:

	_check_arity(node, 2, None, "at least 2 arguments")
	args = _evaluate_args(node, ctx, evaluate)

	return min(args) if node.name == "min" else max(args)


# ─── Ramps ────────────────────────────────────────────────────────────────────


def _range_phase (ctx: cliptransform.evaluator.EvalContext) -> float:

	"""Position within the active time range, 0 at its start and 1 at its end."""

	width = ctx.time_range.end - ctx.time_range.start

	if width <= 0:
		return 0.0

	return (ctx.position - ctx.time_range.start) / width


def _ramp (node, ctx, evaluate) -> float:

	_check_arity(node, 2, 3, "2-3 arguments: ramp(start, end, speed?)")
	args = _evaluate_args(node, ctx, evaluate)
	speed = args[2] if len(args) == 3 else 1.0

	if speed <= 0:
		raise cliptransform.errors.EvaluationError(f"Function ramp() speed must be > 0, got {speed}")

	return cliptransform.waveforms.ramp(_range_phase(ctx), args[0], args[1], speed)


def _curve (node, ctx, evaluate) -> float:

	_check_arity(node, 3, 3, "3 arguments: curve(start, end, exponent)")
	start, end, exponent = _evaluate_args(node, ctx, evaluate)

	if exponent <= 0:
		raise cliptransform.errors.EvaluationError(f"Function curve() exponent must be > 0, got {exponent}")

	return cliptransform.waveforms.curve(_range_phase(ctx), start, end, exponent)


# ─── Sequencing and scales ────────────────────────────────────────────────────


def _seq (node, ctx, evaluate) -> float:

	"""
	Cycle through the arguments by note index (or clip index for audio clips).
	"""

	_check_arity(node, 1, None, "at least 1 argument")

	index = ctx.variables.get("note.index", ctx.variables.get("clip.index", 0))
	selected = node.args[int(index) % len(node.args)]

	return evaluate(selected, ctx)


def _quant (node, ctx, evaluate) -> float:

	_check_arity(node, 1, 1, "1 argument: quant(pitch)")
	pitch = evaluate(node.args[0], ctx)
	mask = ctx.variables.get("scale.mask")

	if mask is None:
		return pitch

	return float(cliptransform.pitch.quantize_to_scale(pitch, int(mask)))


def _step (node, ctx, evaluate) -> float:

	_check_arity(node, 2, 2, "2 arguments: step(base, offset)")
	base, offset = _evaluate_args(node, ctx, evaluate)
	mask = ctx.variables.get("scale.mask")

	if mask is None:
		return base + offset

	return float(cliptransform.pitch.step_in_scale(base, offset, int(mask)))


# ─── Waveforms ────────────────────────────────────────────────────────────────


def _resolve_period (node, ctx, evaluate) -> float:

	period_arg = node.args[0]

	if isinstance(period_arg, cliptransform.nodes.Period):
		return cliptransform.period.parse_period(period_arg, ctx.time_signature.numerator)

	period = evaluate(period_arg, ctx)

	if period <= 0:
		raise cliptransform.errors.EvaluationError(f"Function {node.name}() period must be > 0, got {period}")

	return period


def _call_waveform (
	node: cliptransform.nodes.FunctionCall,
	ctx: cliptransform.evaluator.EvalContext,
	evaluate: EvaluateFn
) -> float:

	"""
	Evaluate ``name(period, phaseOffset=0)`` or ``square(period, phaseOffset=0, pulseWidth=0.5)``.

	With ``sync`` the clip's arrangement start is added to the position so
	the waveform lines up across clips on the arrangement timeline.
	"""

	if node.name == "square":
		_check_arity(node, 1, 3, "1-3 arguments: square(period, phaseOffset?, pulseWidth?)")
	else:
		_check_arity(node, 1, 2, f"1-2 arguments: {node.name}(period, phaseOffset?)")

	period = _resolve_period(node, ctx, evaluate)
	position = ctx.position

	if node.sync:
		arrangement_start = ctx.variables.get("clip.position")

		if arrangement_start is None:
			raise cliptransform.errors.EvaluationError("sync requires an arrangement clip (no clip.position available)")

		position += arrangement_start

	phase = (position / period) % 1.0

	if len(node.args) >= 2:
		phase += evaluate(node.args[1], ctx)

	if node.name == "square":
		pulse_width = evaluate(node.args[2], ctx) if len(node.args) == 3 else 0.5
		return cliptransform.waveforms.square(phase, pulse_width)

	return cliptransform.waveforms.PERIODIC_WAVEFORMS[node.name](phase)


HandlerFn = typing.Callable[
	["cliptransform.nodes.FunctionCall", "cliptransform.evaluator.EvalContext", EvaluateFn],
	float
]

_HANDLERS: typing.Dict[str, HandlerFn] = {
	"noise": _noise,
	"rand": _rand,
	"choose": _choose,
	"round": _math_reducer,
	"floor": _math_reducer,
	"ceil": _math_reducer,
	"abs": _math_reducer,
	"clamp": _clamp,
	"pow": _pow,
	"min": _min_max,
	"max": _min_max,
	"ramp": _ramp,
	"curve": _curve,
	"seq": _seq,
	"quant": _quant,
	"step": _step,
}

FUNCTION_NAMES = frozenset(_HANDLERS) | WAVEFORM_FUNCTIONS
