"""Pitch-range and time-range selection for assignments.

A pitch range carries forward: once an assignment names one, every following
assignment without its own uses it too. A time range applies only to the
assignment that names it.
"""

import typing

import cliptransform.bar_beat
import cliptransform.clip
import cliptransform.nodes


def resolve_pitch_ranges (
	assignments: typing.Sequence[cliptransform.nodes.Assignment]
) -> typing.List[typing.Optional[cliptransform.nodes.PitchRange]]:

	"""
	Return the effective pitch range of each assignment, in program order.

	Example:
		```python
		# C3: velocity = 100      → C3-C3
		# duration = 0.5          → C3-C3 (inherited)
		# E3-G3: probability = 1  → E3-G3
		```
	"""

	effective: typing.List[typing.Optional[cliptransform.nodes.PitchRange]] = []
	current: typing.Optional[cliptransform.nodes.PitchRange] = None

	for assignment in assignments:

		if assignment.pitch_range is not None:
			current = assignment.pitch_range

		effective.append(current)

	return effective


def active_time_range (
	assignment: cliptransform.nodes.Assignment,
	bar: typing.Optional[int],
	beat: typing.Optional[float],
	time_signature: cliptransform.clip.TimeSignature,
	clip_range: cliptransform.clip.TimeRange
) -> typing.Optional[cliptransform.clip.TimeRange]:

	"""
	Work out which time range an assignment sees for a note at ``bar|beat``.

	Returns ``None`` when the note falls outside the assignment's own
	``bar|beat`` range, meaning the assignment is skipped for that note.
	Otherwise returns the assignment's range in musical beats, or
	*clip_range* when it has none or the note position is unknown.
	"""

	selector = assignment.time_range

	if selector is None or bar is None or beat is None:
		return clip_range

	after_start = bar > selector.start_bar or (bar == selector.start_bar and beat >= selector.start_beat)
	before_end = bar < selector.end_bar or (bar == selector.end_bar and beat <= selector.end_beat)

	if not (after_start and before_end):
		return None

	beats_per_bar = time_signature.numerator

	return cliptransform.clip.TimeRange(
		start = cliptransform.bar_beat.bar_beat_to_musical(selector.start_bar, selector.start_beat, beats_per_bar),
		end = cliptransform.bar_beat.bar_beat_to_musical(selector.end_bar, selector.end_beat, beats_per_bar)
	)


def clip_time_range (
	notes: typing.Sequence[cliptransform.clip.NoteEvent],
	time_signature: cliptransform.clip.TimeSignature
) -> cliptransform.clip.TimeRange:

	"""
	Span from the first note's start to the last note's end, in musical beats.

	*notes* must already be sorted by start time. An empty list gives a
	zero-width range at 0.
	"""

	if not notes:
		return cliptransform.clip.TimeRange(0.0, 0.0)

	first = notes[0]
	last = notes[-1]

	return cliptransform.clip.TimeRange(
		start = time_signature.to_musical(first.start_time),
		end = time_signature.to_musical(last.start_time + last.duration)
	)
