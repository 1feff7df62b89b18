"""Parse transform program text into assignments.

One assignment per line:

    [selectors:] parameter operator expression

**Selectors** (optional, in either order, followed by ``:``):
- ``C3`` or ``C3-E3`` - only notes in this pitch range. Carries forward to
  later lines that have no pitch selector of their own.
- ``1|1-2|4`` - only notes from bar 1 beat 1 to bar 2 beat 4 (inclusive).

**Parameters:** velocity, timing, duration, probability, deviation, pitch
(MIDI clips) and gain, pitchShift (audio clips).

**Operators:** ``=`` sets, ``+=`` adds, ``*=`` and ``/=`` scale the current
value.

**Expressions:** numbers (``10``, ``-0.5``, ``.5``), pitch literals (``C3``
is 60), variables (``note.velocity``), function calls (``cos(1:0t)``),
``+ - * / %`` and parentheses. Operators of equal precedence group from the
left. Period literals (``1t``, ``0.5t``, ``/4t``, ``1:0t``, ``2:1.5t``) may
only appear as a whole function argument, and a waveform call may end with
the ``sync`` keyword.

Comments start with ``//`` or ``#`` and run to the end of the line;
``/* ... */`` may span lines.
"""

import dataclasses
import re
import typing

import cliptransform.bar_beat
import cliptransform.constants
import cliptransform.functions
import cliptransform.nodes
import cliptransform.pitch


class TransformSyntaxError(Exception):
	pass


VARIABLE_PROPERTIES: typing.Dict[str, typing.FrozenSet[str]] = {
	"note": frozenset(["pitch", "start", "velocity", "deviation", "duration", "probability", "index", "count"]),
	"audio": frozenset(["gain", "pitchShift"]),
	"clip": frozenset(["duration", "index", "count", "position"]),
	"bar": frozenset(["duration"]),
	"scale": frozenset(["mask"]),
}

# Variable holding each parameter's current value, used by *= and /=
CURRENT_VALUE_VARIABLES: typing.Dict[str, cliptransform.nodes.Variable] = {
	"velocity": cliptransform.nodes.Variable("note", "velocity"),
	"timing": cliptransform.nodes.Variable("note", "start"),
	"duration": cliptransform.nodes.Variable("note", "duration"),
	"probability": cliptransform.nodes.Variable("note", "probability"),
	"deviation": cliptransform.nodes.Variable("note", "deviation"),
	"pitch": cliptransform.nodes.Variable("note", "pitch"),
	"gain": cliptransform.nodes.Variable("audio", "gain"),
	"pitchShift": cliptransform.nodes.Variable("audio", "pitchShift"),
}

_ASSIGNMENT_OPERATORS = {"=": "set", "+=": "add", "*=": "multiply", "/=": "divide"}

_BEAT = r"\d+\+\d+/\d+|\d*/\d+|\d+(?:\.\d+)?|\.\d+"
_PERIOD_BEAT = r"\d*/\d+|\d+(?:\.\d+)?|\.\d+"

_TOKEN_SPEC: typing.List[typing.Tuple[str, str]] = [
	("block_comment", r"/\*.*?\*/"),
	("line_comment", r"(?://|#)[^\n]*"),
	("newline", r"\n"),
	("space", r"[ \t\r]+"),
	("time_range", rf"\d+\|(?:{_BEAT})-\d+\|(?:{_BEAT})"),
	("period", rf"(?:\d+(?:\.\d+)?:)?(?:{_PERIOD_BEAT})t(?![A-Za-z0-9_])"),
	("number", r"\d+(?:\.\d*)?|\.\d+"),
	("note", r"[A-Ga-g][#b]?-?\d+(?![A-Za-z0-9_.])"),
	("name", r"[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?"),
	("assign", r"\+=|\*=|/=|="),
	("op", r"[-+*/%]"),
	("punct", r"[(),:]"),
]

_TOKEN_RE = re.compile("|".join(f"(?P<{kind}>{pattern})" for kind, pattern in _TOKEN_SPEC), re.DOTALL)

_SKIPPED = {"block_comment", "line_comment", "space"}


@dataclasses.dataclass
class Token:

	kind: str
	text: str
	line: int
	column: int


def parse (text: str) -> typing.List[cliptransform.nodes.Assignment]:

	"""
	Parse a transform program.

	Returns an empty list for a blank program (or one with only comments).

	Raises:
		TransformSyntaxError: If the program is malformed.

	Example:
		```python
		parse("C3-E3: velocity += 20 * cos(1:0t)")
		# → [Assignment(parameter="velocity", operator="add", ...,
		#               pitch_range=PitchRange(60, 64))]
		```
	"""

	return _Parser(_tokenize(text)).parse_program()


def _tokenize (text: str) -> typing.List[Token]:

	tokens: typing.List[Token] = []
	pos = 0
	line = 1
	line_start = 0

	while pos < len(text):

		if text.startswith("/*", pos) and text.find("*/", pos + 2) == -1:
			raise TransformSyntaxError(f"Unterminated comment at line {line}, column {pos - line_start + 1}")

		match = _TOKEN_RE.match(text, pos)

		if match is None:
			raise TransformSyntaxError(f"Unexpected character {text[pos]!r} at line {line}, column {pos - line_start + 1}")

		kind = typing.cast(str, match.lastgroup)
		value = match.group()

		if kind not in _SKIPPED:
			tokens.append(Token(kind, value, line, pos - line_start + 1))

		newlines = value.count("\n")

		if newlines:
			line += newlines
			line_start = pos + value.rindex("\n") + 1

		pos = match.end()

	return tokens


class _Parser:

	"""
	Recursive-descent parser over the token list.
	"""

	def __init__ (self, tokens: typing.List[Token]) -> None:

		self.tokens = tokens
		self.index = 0

	# ─── Token helpers ────────────────────────────────────────────────────────

	def _peek (self, offset: int = 0) -> typing.Optional[Token]:

		position = self.index + offset
		return self.tokens[position] if position < len(self.tokens) else None

	def _advance (self) -> Token:

		token = self._peek()

		if token is None:
			raise TransformSyntaxError("Unexpected end of program")

		self.index += 1
		return token

	def _at (self, kind: str, text: typing.Optional[str] = None) -> bool:

		token = self._peek()
		return token is not None and token.kind == kind and (text is None or token.text == text)

	def _expect (self, kind: str, text: typing.Optional[str] = None, what: str = "") -> Token:

		if not self._at(kind, text):
			self._fail(f"Expected {what or text or kind}")

		return self._advance()

	def _fail (self, message: str, token: typing.Optional[Token] = None) -> typing.NoReturn:

		token = token or self._peek()

		if token is None:
			raise TransformSyntaxError(f"{message} at end of program")

		raise TransformSyntaxError(f"{message} at line {token.line}, column {token.column} (found {token.text!r})")

	def _skip_newlines (self) -> None:

		while self._at("newline"):
			self.index += 1

	# ─── Statements ───────────────────────────────────────────────────────────

	def parse_program (self) -> typing.List[cliptransform.nodes.Assignment]:

		assignments: typing.List[cliptransform.nodes.Assignment] = []
		self._skip_newlines()

		while self._peek() is not None:
			assignments.append(self._parse_assignment())

			if self._peek() is not None:
				self._expect("newline", what="end of line")

			self._skip_newlines()

		return assignments

	def _parse_assignment (self) -> cliptransform.nodes.Assignment:

		pitch_range: typing.Optional[cliptransform.nodes.PitchRange] = None
		time_range: typing.Optional[cliptransform.nodes.BarBeatRange] = None

		if self._at("note") or self._at("time_range"):

			while not self._at("punct", ":"):

				if self._at("note") and pitch_range is None:
					pitch_range = self._parse_pitch_range()
				elif self._at("time_range") and time_range is None:
					time_range = self._parse_time_range(self._advance())
				else:
					self._fail("Expected ':' after selector")

			self._advance()

		parameter_token = self._expect("name", what="parameter name")

		if parameter_token.text not in cliptransform.constants.PARAMETERS:
			self._fail(f"Unknown parameter {parameter_token.text!r}", parameter_token)

		operator_token = self._expect("assign", what="assignment operator")
		expression = self._parse_expression()
		operator = _ASSIGNMENT_OPERATORS[operator_token.text]

		if operator in ("multiply", "divide"):
			current = CURRENT_VALUE_VARIABLES[parameter_token.text]
			expression = cliptransform.nodes.BinaryOp(operator, current, expression)
			operator = "set"

		return cliptransform.nodes.Assignment(
			parameter = parameter_token.text,
			operator = operator,
			expression = expression,
			pitch_range = pitch_range,
			time_range = time_range
		)

	def _parse_pitch_range (self) -> cliptransform.nodes.PitchRange:

		start_token = self._advance()
		start = self._note_value(start_token)
		end = start

		if self._at("op", "-"):
			self._advance()
			end = self._note_value(self._expect("note", what="pitch after '-'"))

		if end < start:
			self._fail(f"Invalid pitch range: end pitch {end} is below start pitch {start}", start_token)

		return cliptransform.nodes.PitchRange(start, end)

	def _parse_time_range (self, token: Token) -> cliptransform.nodes.BarBeatRange:

		start_text, end_text = re.split(r"(?<=\d)-(?=\d+\|)", token.text, maxsplit=1)
		start_bar, start_beat = self._bar_beat(start_text, token)
		end_bar, end_beat = self._bar_beat(end_text, token)

		return cliptransform.nodes.BarBeatRange(start_bar, start_beat, end_bar, end_beat)

	def _bar_beat (self, text: str, token: Token) -> typing.Tuple[int, float]:

		bar_text, beat_text = text.split("|")

		try:
			beat = cliptransform.bar_beat.parse_beat_value(beat_text)
		except ValueError as exc:
			self._fail(str(exc), token)

		bar = int(bar_text)

		if bar < 1 or beat < 1:
			self._fail(f"Bar and beat must be >= 1 in {text!r}", token)

		return bar, beat

	def _note_value (self, token: Token) -> int:

		try:
			return cliptransform.pitch.note_name_to_midi(token.text)
		except ValueError as exc:
			self._fail(str(exc), token)

	# ─── Expressions ──────────────────────────────────────────────────────────

	def _parse_expression (self) -> cliptransform.nodes.Expression:

		node = self._parse_term()

		while self._at("op", "+") or self._at("op", "-"):
			kind = "add" if self._advance().text == "+" else "subtract"
			node = cliptransform.nodes.BinaryOp(kind, node, self._parse_term())

		return node

	def _parse_term (self) -> cliptransform.nodes.Expression:

		node = self._parse_unary()
		kinds = {"*": "multiply", "/": "divide", "%": "modulo"}

		while self._at("op") and typing.cast(Token, self._peek()).text in kinds:
			kind = kinds[self._advance().text]
			node = cliptransform.nodes.BinaryOp(kind, node, self._parse_unary())

		return node

	def _parse_unary (self) -> cliptransform.nodes.Expression:

		if self._at("op", "-"):
			self._advance()
			operand = self._parse_unary()

			if isinstance(operand, cliptransform.nodes.Number):
				return cliptransform.nodes.Number(-operand.value)

			return cliptransform.nodes.BinaryOp("subtract", cliptransform.nodes.Number(0.0), operand)

		return self._parse_primary()

	def _parse_primary (self) -> cliptransform.nodes.Expression:

		token = self._peek()

		if token is None:
			self._fail("Expected expression")

		if token.kind == "number":
			self._advance()
			return cliptransform.nodes.Number(float(token.text))

		if token.kind == "note":
			self._advance()
			return cliptransform.nodes.Number(float(self._note_value(token)))

		if token.kind == "punct" and token.text == "(":
			self._advance()
			node = self._parse_expression()
			self._expect("punct", ")")
			return node

		if token.kind == "name":
			self._advance()

			if "." in token.text:
				return self._variable(token)

			if self._at("punct", "("):
				return self._parse_call(token)

			self._fail(f"Unknown identifier {token.text!r}", token)

		if token.kind == "period":
			self._fail("Period literals are only valid as function arguments", token)

		self._fail("Expected expression", token)

	def _variable (self, token: Token) -> cliptransform.nodes.Variable:

		namespace, name = token.text.split(".", 1)

		if namespace not in VARIABLE_PROPERTIES or name not in VARIABLE_PROPERTIES[namespace]:
			self._fail(f"Unknown variable {token.text!r}", token)

		return cliptransform.nodes.Variable(namespace, name)

	def _parse_call (self, name_token: Token) -> cliptransform.nodes.FunctionCall:

		name = name_token.text

		if name not in cliptransform.functions.FUNCTION_NAMES:
			self._fail(f"Unknown function {name!r}", name_token)

		self._expect("punct", "(")
		args: typing.List[cliptransform.nodes.Expression] = []
		sync = False

		if not self._at("punct", ")"):

			while True:

				if self._at("name", "sync"):
					sync_token = self._advance()

					if name not in cliptransform.functions.WAVEFORM_FUNCTIONS:
						self._fail(f"sync is only valid for waveform functions, not {name}()", sync_token)

					if not self._at("punct", ")"):
						self._fail("sync must be the last argument")

					sync = True
					break

				args.append(self._parse_argument())

				if not self._at("punct", ","):
					break

				self._advance()

		self._expect("punct", ")")

		return cliptransform.nodes.FunctionCall(name, tuple(args), sync)

	def _parse_argument (self) -> cliptransform.nodes.Expression:

		if self._at("period"):
			token = self._advance()

			if not (self._at("punct", ",") or self._at("punct", ")")):
				self._fail("Period literals must be a whole function argument")

			return _period(token)

		return self._parse_expression()


def _period (token: Token) -> cliptransform.nodes.Period:

	"""``2:1.5t`` → Period(bars=2, beats=1.5); ``/4t`` → Period(bars=0, beats=0.25)."""

	bars_text, _, beats_text = token.text[:-1].rpartition(":")

	bars = float(bars_text) if bars_text else 0.0
	beats = cliptransform.bar_beat.parse_beat_value(beats_text)

	return cliptransform.nodes.Period(bars, beats)
