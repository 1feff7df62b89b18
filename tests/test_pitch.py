import pytest

import cliptransform.pitch


def test_note_name_to_midi ():

	assert cliptransform.pitch.note_name_to_midi("C3") == 60
	assert cliptransform.pitch.note_name_to_midi("c3") == 60
	assert cliptransform.pitch.note_name_to_midi("A3") == 69
	assert cliptransform.pitch.note_name_to_midi("F#2") == 54
	assert cliptransform.pitch.note_name_to_midi("Bb-1") == 22
	assert cliptransform.pitch.note_name_to_midi("C-2") == 0
	assert cliptransform.pitch.note_name_to_midi("G8") == 127


def test_note_name_out_of_range ():

	for name in ["C9", "G#8", "C-3", "B-3"]:
		with pytest.raises(ValueError, match="outside valid range"):
			cliptransform.pitch.note_name_to_midi(name)


def test_note_name_malformed ():

	for name in ["H3", "C", "3C", "C##3"]:
		with pytest.raises(ValueError):
			cliptransform.pitch.note_name_to_midi(name)


def test_midi_to_note_name ():

	assert cliptransform.pitch.midi_to_note_name(60) == "C3"
	assert cliptransform.pitch.midi_to_note_name(61) == "Db3"
	assert cliptransform.pitch.midi_to_note_name(0) == "C-2"
	assert cliptransform.pitch.midi_to_note_name(127) == "G8"


def test_round_half_up ():

	assert cliptransform.pitch.round_half_up(2.5) == 3
	assert cliptransform.pitch.round_half_up(3.5) == 4
	assert cliptransform.pitch.round_half_up(-2.5) == -2
	assert cliptransform.pitch.round_half_up(2.49) == 2


def test_scale_mask (c_major_mask: int):

	assert cliptransform.pitch.scale_mask("C") == c_major_mask
	assert cliptransform.pitch.scale_mask("C", "major") == 2741
	assert cliptransform.pitch.scale_mask("A", "minor") == c_major_mask
	assert cliptransform.pitch.scale_mask("C", "chromatic") == 0xFFF


def test_scale_mask_errors ():

	with pytest.raises(ValueError, match="Unknown mode"):
		cliptransform.pitch.scale_mask("C", "bebop_lydian")

	with pytest.raises(ValueError, match="Unknown key name"):
		cliptransform.pitch.scale_mask("H")


def test_in_scale (c_major_mask: int):

	assert cliptransform.pitch.in_scale(60, c_major_mask)
	assert not cliptransform.pitch.in_scale(61, c_major_mask)
	assert cliptransform.pitch.in_scale(71, c_major_mask)


def test_quantize_keeps_scale_tones (c_major_mask: int):

	for pitch in [60, 62, 64, 65, 67, 69, 71, 72]:
		assert cliptransform.pitch.quantize_to_scale(pitch, c_major_mask) == pitch


def test_quantize_ties_resolve_lower (c_major_mask: int):

	"""C# is equidistant from C and D - the lower pitch class wins."""

	assert cliptransform.pitch.quantize_to_scale(61, c_major_mask) == 60
	assert cliptransform.pitch.quantize_to_scale(63, c_major_mask) == 62


def test_quantize_rounds_first (c_major_mask: int):

	assert cliptransform.pitch.quantize_to_scale(63.6, c_major_mask) == 64
	assert cliptransform.pitch.quantize_to_scale(66.4, c_major_mask) == 65


def test_quantize_wraps_across_octave ():

	"""B is a semitone below C, so C snaps down to B in a scale without C."""

	b_only = 1 << 11

	assert cliptransform.pitch.quantize_to_scale(60, b_only) == 59


def test_quantize_clamps_to_in_scale_pitch (c_major_mask: int):

	# 127 is G, in C major
	assert cliptransform.pitch.quantize_to_scale(130, c_major_mask) == 127
	# only C# set: G is a tritone from C# either way and snaps down
	assert cliptransform.pitch.quantize_to_scale(127, 1 << 1) == 121
	# only A set: 128 snaps up to 129, clamped to the highest A
	assert cliptransform.pitch.quantize_to_scale(128, 1 << 9) == 117


def test_quantize_empty_mask ():

	assert cliptransform.pitch.quantize_to_scale(61.4, 0) == 61
	assert cliptransform.pitch.quantize_to_scale(200, 0) == 127


def test_step_in_scale (c_major_mask: int):

	assert cliptransform.pitch.step_in_scale(60, 2, c_major_mask) == 64
	assert cliptransform.pitch.step_in_scale(60, -1, c_major_mask) == 59
	assert cliptransform.pitch.step_in_scale(60, 7, c_major_mask) == 72
	assert cliptransform.pitch.step_in_scale(61, 0, c_major_mask) == 60


def test_step_in_scale_clamps (c_major_mask: int):

	assert cliptransform.pitch.step_in_scale(124, 10, c_major_mask) == 127
	assert cliptransform.pitch.step_in_scale(2, -10, c_major_mask) == 0


def test_step_without_scale ():

	assert cliptransform.pitch.step_in_scale(60, 3, 0) == 63
