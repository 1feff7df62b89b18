import random

import pytest

import cliptransform.waveforms


# ─── Anchor values ────────────────────────────────────────────────────────────


def test_cos_anchors ():

	assert cliptransform.waveforms.cos(0.0) == pytest.approx(1.0)
	assert cliptransform.waveforms.cos(0.25) == pytest.approx(0.0, abs=1e-12)
	assert cliptransform.waveforms.cos(0.5) == pytest.approx(-1.0)


def test_sin_anchors ():

	assert cliptransform.waveforms.sin(0.0) == pytest.approx(0.0)
	assert cliptransform.waveforms.sin(0.25) == pytest.approx(1.0)
	assert cliptransform.waveforms.sin(0.75) == pytest.approx(-1.0)


def test_tri_anchors ():

	assert cliptransform.waveforms.tri(0.0) == pytest.approx(1.0)
	assert cliptransform.waveforms.tri(0.25) == pytest.approx(0.0)
	assert cliptransform.waveforms.tri(0.5) == pytest.approx(-1.0)
	assert cliptransform.waveforms.tri(0.75) == pytest.approx(0.0)


def test_saw_anchors ():

	assert cliptransform.waveforms.saw(0.0) == pytest.approx(1.0)
	assert cliptransform.waveforms.saw(0.5) == pytest.approx(0.0)
	assert cliptransform.waveforms.saw(0.75) == pytest.approx(-0.5)


def test_square_pulse_width ():

	assert cliptransform.waveforms.square(0.0) == 1.0
	assert cliptransform.waveforms.square(0.49) == 1.0
	assert cliptransform.waveforms.square(0.5) == -1.0
	assert cliptransform.waveforms.square(0.2, pulse_width=0.25) == 1.0
	assert cliptransform.waveforms.square(0.3, pulse_width=0.25) == -1.0


def test_phase_wraps ():

	"""Only the fractional part of the phase matters."""

	for name, fn in cliptransform.waveforms.PERIODIC_WAVEFORMS.items():
		assert fn(1.25) == pytest.approx(fn(0.25)), name
		assert fn(3.6) == pytest.approx(fn(0.6)), name


def test_periodic_output_range ():

	for name, fn in cliptransform.waveforms.PERIODIC_WAVEFORMS.items():
		for i in range(100):
			value = fn(i / 100)
			assert -1.0 - 1e-9 <= value <= 1.0 + 1e-9, f"{name}({i / 100}) = {value}"


# ─── Ramps ────────────────────────────────────────────────────────────────────


def test_ramp_interpolates ():

	assert cliptransform.waveforms.ramp(0.0, 0, 100) == pytest.approx(0.0)
	assert cliptransform.waveforms.ramp(0.5, 0, 100) == pytest.approx(50.0)
	assert cliptransform.waveforms.ramp(0.25, 100, 0) == pytest.approx(75.0)


def test_ramp_speed_repeats ():

	"""Speed 2 runs the ramp twice over the phase cycle."""

	assert cliptransform.waveforms.ramp(0.25, 0, 100, speed=2) == pytest.approx(50.0)
	assert cliptransform.waveforms.ramp(0.5, 0, 100, speed=2) == pytest.approx(0.0)


def test_curve_shapes ():

	assert cliptransform.waveforms.curve(0.5, 0, 100, 1) == pytest.approx(50.0)
	assert cliptransform.waveforms.curve(0.5, 0, 100, 2) == pytest.approx(25.0)
	assert cliptransform.waveforms.curve(0.25, 0, 100, 0.5) == pytest.approx(50.0)


# ─── Random sources ───────────────────────────────────────────────────────────


def test_rand_within_bounds (rng: random.Random):

	for _ in range(200):
		value = cliptransform.waveforms.rand(-5, 5, rng)
		assert -5 <= value <= 5


def test_rand_is_repeatable_with_seed ():

	first = [cliptransform.waveforms.rand(0, 1, random.Random(7)) for _ in range(3)]
	second = [cliptransform.waveforms.rand(0, 1, random.Random(7)) for _ in range(3)]

	assert first == second


def test_choose_picks_option (rng: random.Random):

	options = [60.0, 64.0, 67.0]
	picks = {cliptransform.waveforms.choose(options, rng) for _ in range(100)}

	assert picks == set(options)


def test_choose_empty ():

	with pytest.raises(ValueError):
		cliptransform.waveforms.choose([])
