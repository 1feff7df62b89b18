import logging

import mido
import pytest

import cliptransform.clip
import cliptransform.midi_utils


def test_write_then_read (tmp_path, make_notes):

	path = str(tmp_path / "clip.mid")
	notes = make_notes([(60, 0.0), (64, 0.5), (67, 1.0)], duration=0.5, velocity=90)

	cliptransform.midi_utils.write_midi_notes(path, notes, cliptransform.clip.TimeSignature(3, 4))
	read_notes, time_signature = cliptransform.midi_utils.read_midi_notes(path)

	assert time_signature == cliptransform.clip.TimeSignature(3, 4)
	assert [(n.pitch, n.start_time, n.duration, n.velocity) for n in read_notes] == [
		(60, 0.0, 0.5, 90),
		(64, 0.5, 0.5, 90),
		(67, 1.0, 0.5, 90),
	]


def test_write_clamps_velocity (tmp_path):

	path = str(tmp_path / "clip.mid")
	notes = [
		cliptransform.clip.NoteEvent(pitch=60, start_time=0.0, duration=1.0, velocity=126.6),
		cliptransform.clip.NoteEvent(pitch=62, start_time=1.0, duration=1.0, velocity=1.2),
	]

	cliptransform.midi_utils.write_midi_notes(path, notes)

	velocities = [m.velocity for m in mido.MidiFile(path).tracks[0] if m.type == "note_on"]
	assert velocities == [127, 1]


def test_write_back_to_back_notes (tmp_path, make_notes):

	"""A note ending where the next same-pitch note starts is written off-before-on."""

	path = str(tmp_path / "clip.mid")
	notes = make_notes([(60, 0.0), (60, 1.0)])

	cliptransform.midi_utils.write_midi_notes(path, notes)
	read_notes, _ = cliptransform.midi_utils.read_midi_notes(path)

	assert [(n.start_time, n.duration) for n in read_notes] == [(0.0, 1.0), (1.0, 1.0)]


def test_read_merges_tracks_and_note_on_zero (tmp_path):

	path = str(tmp_path / "raw.mid")

	mid = mido.MidiFile(type=1, ticks_per_beat=96)
	first = mido.MidiTrack()
	second = mido.MidiTrack()
	mid.tracks.extend([first, second])

	first.append(mido.MetaMessage("time_signature", numerator=6, denominator=8, time=0))
	first.append(mido.Message("note_on", note=60, velocity=80, time=0))
	first.append(mido.Message("note_on", note=60, velocity=0, time=48))
	second.append(mido.Message("note_on", note=72, velocity=100, time=96))
	second.append(mido.Message("note_off", note=72, velocity=0, time=96))
	mid.save(path)

	notes, time_signature = cliptransform.midi_utils.read_midi_notes(path)

	assert time_signature == cliptransform.clip.TimeSignature(6, 8)
	assert [(n.pitch, n.start_time, n.duration, n.velocity) for n in notes] == [
		(60, 0.0, 0.5, 80),
		(72, 1.0, 1.0, 100),
	]


def test_read_defaults_to_common_time (tmp_path):

	path = str(tmp_path / "plain.mid")

	mid = mido.MidiFile(type=0)
	track = mido.MidiTrack()
	mid.tracks.append(track)
	track.append(mido.Message("note_on", note=60, velocity=100, time=0))
	track.append(mido.Message("note_off", note=60, velocity=0, time=480))
	mid.save(path)

	notes, time_signature = cliptransform.midi_utils.read_midi_notes(path)

	assert time_signature == cliptransform.clip.TimeSignature(4, 4)
	assert notes[0].duration == pytest.approx(1.0)


def test_read_drops_unterminated_notes (tmp_path, caplog):

	path = str(tmp_path / "hanging.mid")

	mid = mido.MidiFile(type=0)
	track = mido.MidiTrack()
	mid.tracks.append(track)
	track.append(mido.Message("note_on", note=60, velocity=100, time=0))
	mid.save(path)

	with caplog.at_level(logging.WARNING, logger="cliptransform.midi_utils"):
		notes, _ = cliptransform.midi_utils.read_midi_notes(path)

	assert notes == []
	assert "without a note-off" in caplog.text
