"""Waveforms and random sources used by transform functions.

Periodic waveforms map a *phase* to a value in [-1, 1]. Only the fractional
part of the phase matters - ``cos(1.25) == cos(0.25)``. Every shape except
``sin`` starts at its peak (1.0) at phase 0 and descends, so ``velocity +=
20 * tri(1:0t)`` accents each downbeat:

    "cos"     Smooth cosine, 1 → -1 → 1.
    "sin"     Sine, 0 → 1 → 0 → -1 → 0.
    "tri"     Linear fall to -1 at phase 0.5, then linear rise.
    "saw"     Linear fall from 1 to -1 across the cycle.
    "square"  1 while phase < pulse width, otherwise -1.

Ramps interpolate between two values instead of producing [-1, 1]:

    ramp(phase, start, end, speed)     Linear, repeating ``speed`` times.
    curve(phase, start, end, exponent) Shaped by ``phase ** exponent``.

Random sources accept an optional ``random.Random`` so results can be
reproduced with a seed.
"""

import math
import random
import typing


_DEFAULT_RNG = random.Random()


# ─── Periodic waveforms ───────────────────────────────────────────────────────


def cos (phase: float) -> float:
	"""Cosine: 1.0 at phase 0, -1.0 at phase 0.5."""
	return math.cos(2.0 * math.pi * phase)


def sin (phase: float) -> float:
	"""Sine: 0.0 at phase 0, 1.0 at phase 0.25."""
	return math.sin(2.0 * math.pi * phase)


def tri (phase: float) -> float:
	"""Triangle: 1.0 at phase 0, -1.0 at phase 0.5, back to 1.0."""
	p = phase % 1.0
	if p <= 0.5:
		return 1.0 - 4.0 * p
	return -3.0 + 4.0 * p


def saw (phase: float) -> float:
	"""Falling sawtooth: 1.0 at phase 0, approaching -1.0 at the end of the cycle."""
	return 1.0 - 2.0 * (phase % 1.0)


def square (phase: float, pulse_width: float = 0.5) -> float:
	"""Pulse: 1.0 for the first ``pulse_width`` of the cycle, -1.0 after."""
	return 1.0 if phase % 1.0 < pulse_width else -1.0


PeriodicFn = typing.Callable[[float], float]

PERIODIC_WAVEFORMS: typing.Dict[str, PeriodicFn] = {
	"cos": cos,
	"sin": sin,
	"tri": tri,
	"saw": saw,
}


# ─── Ramps ────────────────────────────────────────────────────────────────────


def ramp (phase: float, start: float, end: float, speed: float = 1.0) -> float:

	"""Linear interpolation from *start* to *end*, repeating *speed* times per phase cycle.

	The interpolation point is ``(phase * speed) mod 1``, so with ``speed=2``
	the ramp runs twice across the range.
	"""

	t = (phase * speed) % 1.0
	return start + (end - start) * t


def curve (phase: float, start: float, end: float, exponent: float) -> float:

	"""Interpolation from *start* to *end* shaped by ``t ** exponent``.

	``exponent > 1`` starts slowly and accelerates; ``exponent < 1`` starts
	quickly and levels off; ``exponent == 1`` is a plain linear ramp.
	"""

	t = (phase % 1.0) ** exponent
	return start + (end - start) * t


# ─── Random sources ───────────────────────────────────────────────────────────


def rand (min_val: float = -1.0, max_val: float = 1.0, rng: typing.Optional[random.Random] = None) -> float:
	"""Uniform random value between *min_val* and *max_val*."""
	return (rng or _DEFAULT_RNG).uniform(min_val, max_val)


def choose (options: typing.Sequence[float], rng: typing.Optional[random.Random] = None) -> float:

	"""Pick one of *options* uniformly at random.

	Raises :class:`ValueError` when *options* is empty.
	"""

	if not options:
		raise ValueError("choose() needs at least one option")

	return (rng or _DEFAULT_RNG).choice(list(options))
