"""Pitch names, scale masks and scale-aware pitch movement.

Pitch names follow the **C3 = 60** convention (``midi = (octave + 2) * 12 + pc``),
so the valid range is C-2 (0) to G8 (127).

A scale is carried as a 12-bit *pitch-class mask*: bit N is set when pitch
class N (0 = C, 1 = C#/Db, …, 11 = B) belongs to the scale. C major is
``0b101010110101`` (2741).
"""

import math
import re
import typing

import cliptransform.constants


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = ["C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B"]

SCALE_INTERVALS: typing.Dict[str, typing.List[int]] = {
	"ionian": [0, 2, 4, 5, 7, 9, 11],
	"major": [0, 2, 4, 5, 7, 9, 11],
	"dorian": [0, 2, 3, 5, 7, 9, 10],
	"phrygian": [0, 1, 3, 5, 7, 8, 10],
	"lydian": [0, 2, 4, 6, 7, 9, 11],
	"mixolydian": [0, 2, 4, 5, 7, 9, 10],
	"aeolian": [0, 2, 3, 5, 7, 8, 10],
	"minor": [0, 2, 3, 5, 7, 8, 10],
	"locrian": [0, 1, 3, 5, 6, 8, 10],
	"harmonic_minor": [0, 2, 3, 5, 7, 8, 11],
	"melodic_minor": [0, 2, 3, 5, 7, 9, 11],
	"major_pentatonic": [0, 2, 4, 7, 9],
	"minor_pentatonic": [0, 3, 5, 7, 10],
	"blues": [0, 3, 5, 6, 7, 10],
	"whole_tone": [0, 2, 4, 6, 8, 10],
	"chromatic": [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11],
}

_NOTE_NAME_RE = re.compile(r"^([A-Ga-g])([#b]?)(-?\d+)$")


def round_half_up (value: float) -> int:

	"""Round to the nearest integer, with .5 always rounding up (3.5 → 4, -3.5 → -3)."""

	return int(math.floor(value + 0.5))


def key_name_to_pc (key_name: str) -> int:

	"""Validate a key name and return its pitch class (0–11).

	Parameters:
		key_name: Note name without octave (e.g. ``"C"``, ``"F#"``, ``"Bb"``).

	Raises:
		ValueError: If the key name is not recognised.
	"""

	if key_name not in NOTE_NAME_TO_PC:
		raise ValueError(
			f"Unknown key name: {key_name!r}. Expected e.g. 'C', 'F#', 'Bb'."
		)

	return NOTE_NAME_TO_PC[key_name]


def note_name_to_midi (name: str) -> int:

	"""
	Convert a note name to a MIDI note number.

	Accepts sharps and flats and a lower-case letter (``"C3"``, ``"c#3"``,
	``"Bb-1"``).

	Raises:
		ValueError: If the name is malformed or falls outside 0–127.

	Example:
		```python
		note_name_to_midi("C3")   # → 60
		note_name_to_midi("C-2")  # → 0
		note_name_to_midi("G8")   # → 127
		```
	"""

	match = _NOTE_NAME_RE.match(name)

	if not match:
		raise ValueError(f"Invalid note name: {name!r}")

	letter, accidental, octave = match.groups()
	pc = key_name_to_pc(letter.upper() + accidental)
	midi = (int(octave) + 2) * 12 + pc

	if midi < cliptransform.constants.MIDI_PITCH_MIN or midi > cliptransform.constants.MIDI_PITCH_MAX:
		raise ValueError(f"Note {name!r} is outside valid range (MIDI {midi}, expected 0-127)")

	return midi


def midi_to_note_name (midi: int) -> str:

	"""Convert a MIDI note number to a name using flats, e.g. 61 → ``"Db3"``."""

	if midi < cliptransform.constants.MIDI_PITCH_MIN or midi > cliptransform.constants.MIDI_PITCH_MAX:
		raise ValueError(f"MIDI note must be 0-127, got {midi}")

	return f"{PC_TO_NOTE_NAME[midi % 12]}{midi // 12 - 2}"


def intervals_to_mask (intervals: typing.Iterable[int], root_pc: int = 0) -> int:

	"""
	Build a pitch-class mask from scale intervals and a root pitch class.

	Example:
		```python
		intervals_to_mask([0, 2, 4, 5, 7, 9, 11], 0)  # → 2741 (C major)
		```
	"""

	mask = 0

	for interval in intervals:
		mask |= 1 << ((root_pc + interval) % 12)

	return mask


def scale_mask (key: str, mode: str = "ionian") -> int:

	"""
	Return the pitch-class mask of a key and mode, e.g. ``scale_mask("D", "dorian")``.

	Raises:
		ValueError: For an unknown key name or mode.
	"""

	if mode not in SCALE_INTERVALS:
		raise ValueError(f"Unknown mode '{mode}'. Available: {sorted(SCALE_INTERVALS)}")

	return intervals_to_mask(SCALE_INTERVALS[mode], key_name_to_pc(key))


def in_scale (pitch: int, mask: int) -> bool:

	"""Return True if the pitch class of *pitch* is set in *mask*."""

	return bool((mask >> (pitch % 12)) & 1)


def quantize_to_scale (pitch: float, mask: int) -> int:

	"""
	Snap a pitch to the nearest in-scale pitch.

	The input is rounded first. Candidate pitch classes are scanned from C
	upward and the first one at the smallest circular distance wins, so a
	tie resolves toward the lower pitch class. The result is clamped to the
	highest or lowest in-scale pitch within 0–127.

	Example:
		```python
		c_major = scale_mask("C")
		quantize_to_scale(61, c_major)  # → 60 (C# ties between C and D)
		quantize_to_scale(62, c_major)  # → 62
		```
	"""

	rounded = round_half_up(pitch)
	mask &= cliptransform.constants.CHROMATIC_SCALE_MASK

	if mask == 0:
		return _clamp_pitch(rounded)

	pitch_pc = rounded % 12
	best_offset: typing.Optional[int] = None

	for pc in range(12):

		if not (mask >> pc) & 1:
			continue

		offset = (pc - pitch_pc) % 12

		if offset >= 6:
			offset -= 12

		if best_offset is None or abs(offset) < abs(best_offset):
			best_offset = offset

	return _clamp_to_scale(rounded + typing.cast(int, best_offset), mask)


def step_in_scale (base_pitch: float, offset: float, mask: int) -> int:

	"""
	Move *base_pitch* by *offset* scale steps.

	The base pitch is quantized to the scale first, then walked one in-scale
	pitch at a time (offset is rounded). Walking past 0 or 127 stops at the
	outermost in-scale pitch.

	Example:
		```python
		c_major = scale_mask("C")
		step_in_scale(60, 2, c_major)   # → 64 (C → D → E)
		step_in_scale(60, -1, c_major)  # → 59 (C → B)
		```
	"""

	mask &= cliptransform.constants.CHROMATIC_SCALE_MASK

	if mask == 0:
		return _clamp_pitch(round_half_up(base_pitch + offset))

	current = quantize_to_scale(base_pitch, mask)
	steps = round_half_up(offset)

	if steps == 0:
		return current

	direction = 1 if steps > 0 else -1
	remaining = abs(steps)

	while remaining > 0:
		current += direction

		if current < cliptransform.constants.MIDI_PITCH_MIN or current > cliptransform.constants.MIDI_PITCH_MAX:
			return _clamp_to_scale(current, mask)

		if in_scale(current, mask):
			remaining -= 1

	return current


def _clamp_pitch (pitch: int) -> int:

	return max(cliptransform.constants.MIDI_PITCH_MIN, min(cliptransform.constants.MIDI_PITCH_MAX, pitch))


def _clamp_to_scale (pitch: int, mask: int) -> int:

	"""
	Clamp to 0–127, landing on the nearest in-scale pitch inside the range.
	"""

	if pitch > cliptransform.constants.MIDI_PITCH_MAX:
		for candidate in range(cliptransform.constants.MIDI_PITCH_MAX, cliptransform.constants.MIDI_PITCH_MIN - 1, -1):
			if in_scale(candidate, mask):
				return candidate

	if pitch < cliptransform.constants.MIDI_PITCH_MIN:
		for candidate in range(cliptransform.constants.MIDI_PITCH_MIN, cliptransform.constants.MIDI_PITCH_MAX + 1):
			if in_scale(candidate, mask):
				return candidate

	return pitch
