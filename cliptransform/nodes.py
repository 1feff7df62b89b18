"""Syntax tree for transform programs.

A program is a list of :class:`Assignment` objects in source order. Each
assignment holds an expression tree built from:

- :class:`Number` - a numeric literal (pitch literals such as ``C3`` become numbers)
- :class:`Variable` - ``namespace.name``, e.g. ``note.velocity``
- :class:`BinaryOp` - add, subtract, multiply, divide or modulo
- :class:`FunctionCall` - ``name(args...)`` with an optional ``sync`` flag
- :class:`Period` - a ``bars:beats`` literal with a ``t`` suffix, only valid
  as the period argument of a waveform function
"""

import dataclasses
import typing


@dataclasses.dataclass(frozen=True)
class Number:

	value: float


@dataclasses.dataclass(frozen=True)
class Variable:

	namespace: str
	name: str


@dataclasses.dataclass(frozen=True)
class BinaryOp:

	kind: str
	left: "Expression"
	right: "Expression"


@dataclasses.dataclass(frozen=True)
class FunctionCall:

	name: str
	args: typing.Tuple["Expression", ...] = ()
	sync: bool = False


@dataclasses.dataclass(frozen=True)
class Period:

	"""
	A duration literal such as ``1:0t`` (one bar) or ``0.5t`` (half a beat).
	"""

	bars: float
	beats: float


Expression = typing.Union[Number, Variable, BinaryOp, FunctionCall, Period]


@dataclasses.dataclass(frozen=True)
class PitchRange:

	"""
	An inclusive range of MIDI pitches.
	"""

	start_pitch: int
	end_pitch: int

	def contains (self, pitch: float) -> bool:

		return self.start_pitch <= pitch <= self.end_pitch


@dataclasses.dataclass(frozen=True)
class BarBeatRange:

	"""
	A ``bar|beat-bar|beat`` selector. Bars and beats are 1-based.
	"""

	start_bar: int
	start_beat: float
	end_bar: int
	end_beat: float


@dataclasses.dataclass(frozen=True)
class Assignment:

	"""
	One line of a program: ``[selectors:] parameter op expression``.
	"""

	parameter: str
	operator: str
	expression: Expression
	pitch_range: typing.Optional[PitchRange] = None
	time_range: typing.Optional[BarBeatRange] = None
