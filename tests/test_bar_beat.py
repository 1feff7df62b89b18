import pytest

import cliptransform.bar_beat
import cliptransform.clip
import cliptransform.errors
import cliptransform.nodes
import cliptransform.period


def test_parse_beat_value_forms ():

	assert cliptransform.bar_beat.parse_beat_value("2") == 2.0
	assert cliptransform.bar_beat.parse_beat_value("1.5") == 1.5
	assert cliptransform.bar_beat.parse_beat_value(".25") == 0.25
	assert cliptransform.bar_beat.parse_beat_value("3/4") == 0.75
	assert cliptransform.bar_beat.parse_beat_value("/4") == 0.25
	assert cliptransform.bar_beat.parse_beat_value("1+1/2") == 1.5


def test_parse_beat_value_errors ():

	for text in ["", "abc", "1/0", "1+1/0", "1.2.3"]:
		with pytest.raises(ValueError):
			cliptransform.bar_beat.parse_beat_value(text)


def test_bar_beat_to_musical ():

	assert cliptransform.bar_beat.bar_beat_to_musical(1, 1, 4) == 0
	assert cliptransform.bar_beat.bar_beat_to_musical(2, 1, 4) == 4
	assert cliptransform.bar_beat.bar_beat_to_musical(2, 4, 4) == 7
	assert cliptransform.bar_beat.bar_beat_to_musical(2, 1, 6) == 6


def test_position_to_bar_beat_common_time ():

	ts = cliptransform.clip.TimeSignature(4, 4)

	assert cliptransform.bar_beat.position_to_bar_beat(0.0, ts) == (1, 1.0)
	assert cliptransform.bar_beat.position_to_bar_beat(5.0, ts) == (2, 2.0)
	assert cliptransform.bar_beat.position_to_bar_beat(7.5, ts) == (2, 4.5)


def test_position_to_bar_beat_compound_time ():

	"""In 6/8 a quarter note is two eighth-note beats and a bar is six of them."""

	ts = cliptransform.clip.TimeSignature(6, 8)

	assert cliptransform.bar_beat.position_to_bar_beat(1.0, ts) == (1, 3.0)
	assert cliptransform.bar_beat.position_to_bar_beat(3.0, ts) == (2, 1.0)


def test_position_rounds_float_noise ():

	ts = cliptransform.clip.TimeSignature(4, 4)

	assert cliptransform.bar_beat.position_to_bar_beat(0.1 + 0.2, ts) == (1, 1.3)


def test_position_just_below_bar_line ():

	"""A start a hair before the bar line belongs to the next bar, not beat 5."""

	ts = cliptransform.clip.TimeSignature(4, 4)

	assert cliptransform.bar_beat.position_to_bar_beat(3.9999999, ts) == (2, 1.0)
	assert cliptransform.bar_beat.position_to_bar_beat(8.0000001, ts) == (3, 1.0)


def test_time_signature_conversions ():

	six_eight = cliptransform.clip.TimeSignature(6, 8)
	two_two = cliptransform.clip.TimeSignature(2, 2)

	assert six_eight.to_musical(1.0) == 2.0
	assert six_eight.to_quarter(1.0) == 0.5
	assert two_two.to_musical(2.0) == 1.0
	assert two_two.to_quarter(1.0) == 2.0


def test_time_signature_validation ():

	with pytest.raises(ValueError):
		cliptransform.clip.TimeSignature(0, 4)

	with pytest.raises(ValueError):
		cliptransform.clip.TimeSignature(4, 0)


# ─── Periods ──────────────────────────────────────────────────────────────────


def test_parse_period_uses_numerator ():

	period = cliptransform.nodes.Period(1.0, 0.0)

	assert cliptransform.period.parse_period(period, 4) == 4
	assert cliptransform.period.parse_period(period, 3) == 3
	assert cliptransform.period.parse_period(period, 6) == 6


def test_parse_period_bars_and_beats ():

	assert cliptransform.period.parse_period(cliptransform.nodes.Period(2.0, 1.5), 4) == 9.5
	assert cliptransform.period.parse_period(cliptransform.nodes.Period(0.0, 0.25), 4) == 0.25


def test_parse_period_must_be_positive ():

	with pytest.raises(cliptransform.errors.EvaluationError, match="must be > 0"):
		cliptransform.period.parse_period(cliptransform.nodes.Period(0.0, 0.0), 4)
