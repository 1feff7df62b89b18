"""Bar|beat positions and bar:beat durations.

Positions are 1-based (``1|1`` is the downbeat of the first bar) and durations
are 0-based (``1:0`` is one bar long). Both count *musical* beats, so the
number of beats in a bar is the time signature numerator.

Beat values accept decimals (``2.5``), fractions (``1/3``, or ``/3`` with an
implied numerator of 1) and mixed numbers (``1+1/2``).
"""

import math
import re
import typing

import cliptransform.clip


_BEAT_VALUE_RE = re.compile(r"^(?:(\d+)\+(\d+)/(\d+)|(\d*)/(\d+)|(\d+(?:\.\d*)?|\.\d+))$")


def parse_beat_value (text: str) -> float:

	"""
	Parse a beat value string.

	Example:
		```python
		parse_beat_value("1.5")    # → 1.5
		parse_beat_value("/4")     # → 0.25
		parse_beat_value("1+1/2")  # → 1.5
		```
	"""

	match = _BEAT_VALUE_RE.match(text)

	if not match:
		raise ValueError(f"Invalid beat value: {text!r}")

	whole, mixed_num, mixed_den, frac_num, frac_den, decimal = match.groups()

	if whole is not None:
		if int(mixed_den) == 0:
			raise ValueError(f"Division by zero in beat value: {text!r}")
		return int(whole) + int(mixed_num) / int(mixed_den)

	if frac_den is not None:
		if int(frac_den) == 0:
			raise ValueError(f"Division by zero in beat value: {text!r}")
		return (int(frac_num) if frac_num else 1) / int(frac_den)

	return float(decimal)


def bar_beat_to_musical (bar: int, beat: float, beats_per_bar: float) -> float:

	"""
	Convert a 1-based bar|beat position to musical beats from the clip start.
	"""

	return (bar - 1) * beats_per_bar + (beat - 1)


def position_to_bar_beat (
	start_time: float,
	time_signature: cliptransform.clip.TimeSignature
) -> typing.Tuple[int, float]:

	"""
	Convert a note's start time (quarter-note beats) to a 1-based bar and beat.

	The position is rounded to 3 decimal places before the bar and beat are
	split, so positions produced by float arithmetic still land on the bar
	and beat values users type.

	Example:
		```python
		# Beat 2 of bar 2 in 4/4
		position_to_bar_beat(5.0, TimeSignature(4, 4))  # → (2, 2.0)

		# In 6/8 a quarter note is two eighth-note beats
		position_to_bar_beat(1.0, TimeSignature(6, 8))  # → (1, 3.0)
		```
	"""

	musical = round(time_signature.to_musical(start_time), 3)
	beats_per_bar = time_signature.numerator
	bar_index = math.floor(musical / beats_per_bar)
	beat = musical - bar_index * beats_per_bar + 1

	return bar_index + 1, round(beat, 3)
