import random
import typing

import pytest

import cliptransform.clip


NoteSpec = typing.Tuple[int, float]


def _make_notes (
	specs: typing.Iterable[NoteSpec],
	duration: float = 1.0,
	velocity: float = 100
) -> typing.List[cliptransform.clip.NoteEvent]:

	"""Build notes from (pitch, start_time) pairs sharing a duration and velocity."""

	return [
		cliptransform.clip.NoteEvent(pitch=pitch, start_time=start, duration=duration, velocity=velocity)
		for pitch, start in specs
	]


@pytest.fixture
def make_notes () -> typing.Callable[..., typing.List[cliptransform.clip.NoteEvent]]:

	"""Factory for note lists: ``make_notes([(60, 0.0), (64, 1.0)])``."""

	return _make_notes


@pytest.fixture
def rng () -> random.Random:

	"""A seeded random source so random functions are repeatable."""

	return random.Random(42)


@pytest.fixture
def c_major_mask () -> int:

	"""Pitch-class mask of C major (C D E F G A B)."""

	return 0b101010110101
