"""Expression evaluation.

An :class:`EvalContext` describes where a single evaluation happens: the
position in musical beats, the time signature, the active time range and the
variables in scope. ``evaluate()`` walks an expression tree against it.
"""

import dataclasses
import math
import random
import typing

import cliptransform.clip
import cliptransform.constants
import cliptransform.errors
import cliptransform.functions
import cliptransform.nodes


@dataclasses.dataclass
class EvalContext:

	"""
	Everything an expression can see while it is evaluated.

	Parameters:
		position: Position in musical beats from the clip start.
		time_signature: The clip's time signature.
		time_range: Active time range in musical beats (drives ``ramp`` and ``curve``).
		variables: Values keyed by ``"namespace.name"`` (e.g. ``"note.velocity"``).
		audio: True when evaluating for an audio clip rather than a note.
		rng: Random source for ``rand``, ``choose`` and ``noise``.
	"""

	position: float
	time_signature: cliptransform.clip.TimeSignature = dataclasses.field(default_factory=cliptransform.clip.TimeSignature)
	time_range: cliptransform.clip.TimeRange = dataclasses.field(default_factory=lambda: cliptransform.clip.TimeRange(0.0, 0.0))
	variables: typing.Dict[str, float] = dataclasses.field(default_factory=dict)
	audio: bool = False
	rng: typing.Optional[random.Random] = None


def evaluate (node: cliptransform.nodes.Expression, ctx: EvalContext) -> float:

	"""
	Evaluate an expression tree to a number.

	Raises:
		EvaluationError: If a variable is unavailable, a function call is
			invalid, a period literal appears outside a waveform call, or any
			sub-expression is not a finite number.

	Example:
		```python
		ctx = EvalContext(position=0.0, variables={"note.velocity": 100})
		evaluate(parse("velocity = note.velocity + 10")[0].expression, ctx)  # → 110.0
		```
	"""

	value = _evaluate_node(node, ctx)

	if not math.isfinite(value):
		raise cliptransform.errors.EvaluationError(f"Expression result is not a finite number: {value}")

	return value


def _evaluate_node (node: cliptransform.nodes.Expression, ctx: EvalContext) -> float:

	if isinstance(node, cliptransform.nodes.Number):
		return node.value

	if isinstance(node, cliptransform.nodes.Variable):
		return _resolve_variable(node, ctx)

	if isinstance(node, cliptransform.nodes.BinaryOp):
		return _apply_binary(node.kind, evaluate(node.left, ctx), evaluate(node.right, ctx))

	if isinstance(node, cliptransform.nodes.FunctionCall):
		return cliptransform.functions.call_function(node, ctx, evaluate)

	if isinstance(node, cliptransform.nodes.Period):
		raise cliptransform.errors.EvaluationError(
			f"Period {node.bars}:{node.beats}t is only valid as a waveform period"
		)

	raise cliptransform.errors.EvaluationError(f"Unknown expression node: {node!r}")


def _resolve_variable (node: cliptransform.nodes.Variable, ctx: EvalContext) -> float:

	key = f"{node.namespace}.{node.name}"

	if node.namespace == "audio" and not ctx.audio:
		raise cliptransform.errors.EvaluationError(f"Cannot use audio.{node.name} variable in MIDI note context")

	if node.namespace == "note" and ctx.audio:
		raise cliptransform.errors.EvaluationError(f"Cannot use note.{node.name} variable in audio clip context")

	if key not in ctx.variables:
		if key == "clip.position":
			raise cliptransform.errors.EvaluationError(
				'Variable "clip.position" is not available for session clips'
			)
		raise cliptransform.errors.EvaluationError(f'Variable "{key}" is not available in this context')

	return ctx.variables[key]


def _apply_binary (kind: str, left: float, right: float) -> float:

	if kind == "add":
		return left + right

	if kind == "subtract":
		return left - right

	if kind == "multiply":
		return left * right

	if kind == "divide":
		if right == 0:
			return 0.0
		return left / right

	if kind == "modulo":
		if right == 0:
			return 0.0
		return math.fmod(math.fmod(left, right) + right, right)

	raise cliptransform.errors.EvaluationError(f"Unknown operator: {kind}")
