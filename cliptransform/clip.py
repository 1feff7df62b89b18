"""Notes, clips and the two beat units.

Two time units are in play and must never be mixed:

- **Quarter-note beats** - the fixed unit of ``NoteEvent.start_time`` and
  ``NoteEvent.duration``.
- **Musical beats** - one unit of the time signature's denominator (an eighth
  note in 6/8, a half note in 2/2). Every timing value read or written by a
  transform program is in musical beats.

``TimeSignature.to_musical()`` and ``TimeSignature.to_quarter()`` are the only
places the conversion factor lives.
"""

import dataclasses
import typing

import cliptransform.constants


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	A time signature such as 4/4 or 6/8.
	"""

	numerator: int = cliptransform.constants.DEFAULT_TIME_SIG_NUMERATOR
	denominator: int = cliptransform.constants.DEFAULT_TIME_SIG_DENOMINATOR

	def __post_init__ (self) -> None:

		if self.numerator <= 0:
			raise ValueError(f"Time signature numerator must be positive, got {self.numerator}")

		if self.denominator <= 0:
			raise ValueError(f"Time signature denominator must be positive, got {self.denominator}")

	def to_musical (self, quarter_beats: float) -> float:

		"""Convert quarter-note beats to musical beats."""

		return quarter_beats * (self.denominator / 4)

	def to_quarter (self, musical_beats: float) -> float:

		"""Convert musical beats to quarter-note beats."""

		return musical_beats * (4 / self.denominator)


@dataclasses.dataclass(frozen=True)
class TimeRange:

	"""
	A span of time in musical beats.
	"""

	start: float
	end: float


@dataclasses.dataclass
class NoteEvent:

	"""
	A single note in a clip.

	``start_time`` and ``duration`` are in quarter-note beats. Transforms
	mutate notes in place.
	"""

	pitch: int
	start_time: float
	duration: float
	velocity: float = 100
	probability: float = 1.0
	velocity_deviation: float = 0.0


@dataclasses.dataclass(frozen=True)
class ClipContext:

	"""
	Clip-level values exposed to programs as ``clip.*``, ``bar.*`` and ``scale.*``.

	Parameters:
		clip_duration: Clip length in musical beats.
		clip_index: 0-based position of this clip in a multi-clip operation.
		clip_count: Number of clips in the operation.
		bar_duration: Musical beats per bar (the time signature numerator).
		arrangement_start: Arrangement position in musical beats, or ``None``
			for a session clip.
		scale_mask: 12-bit pitch-class mask of the active scale, or ``None``.
	"""

	clip_duration: float
	clip_index: int = 0
	clip_count: int = 1
	bar_duration: float = cliptransform.constants.DEFAULT_TIME_SIG_NUMERATOR
	arrangement_start: typing.Optional[float] = None
	scale_mask: typing.Optional[int] = None


@dataclasses.dataclass
class NoteContext:

	"""
	Where a single evaluation happens, used when previewing a program.
	"""

	position: float
	time_signature: TimeSignature = dataclasses.field(default_factory=TimeSignature)
	pitch: typing.Optional[int] = None
	bar: typing.Optional[int] = None
	beat: typing.Optional[float] = None
	clip_time_range: typing.Optional[TimeRange] = None


def clip_variables (clip_context: typing.Optional[ClipContext]) -> typing.Dict[str, float]:

	"""
	Build the ``clip.*``, ``bar.*`` and ``scale.*`` variables for a clip.

	Optional values are left out so that referencing them fails with a
	descriptive error instead of evaluating to a placeholder.
	"""

	if clip_context is None:
		return {}

	variables: typing.Dict[str, float] = {
		"clip.duration": clip_context.clip_duration,
		"clip.index": clip_context.clip_index,
		"clip.count": clip_context.clip_count,
		"bar.duration": clip_context.bar_duration,
	}

	if clip_context.arrangement_start is not None:
		variables["clip.position"] = clip_context.arrangement_start

	if clip_context.scale_mask is not None:
		variables["scale.mask"] = clip_context.scale_mask

	return variables
