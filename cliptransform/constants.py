"""Value bounds and parameter sets for transform programs.

Note parameters are written to ``NoteEvent`` fields; audio parameters to a
clip's gain (dB) and pitch shift (semitones). A program may mix both - each
applier keeps its own set and ignores the other:

- `NOTE_PARAMETERS`: velocity, timing, duration, probability, deviation, pitch
- `AUDIO_PARAMETERS`: gain, pitchShift

Clamp bounds:
- `VELOCITY_MAX = 127` (no lower clamp - notes below `VELOCITY_MIN` are removed)
- `DEVIATION_MIN/MAX = ±127`
- `GAIN_MIN_DB = -70`, `GAIN_MAX_DB = 24`
- `PITCH_SHIFT_MIN/MAX = ±48`
"""

NOTE_PARAMETERS = frozenset(["velocity", "timing", "duration", "probability", "deviation", "pitch"])
AUDIO_PARAMETERS = frozenset(["gain", "pitchShift"])
PARAMETERS = NOTE_PARAMETERS | AUDIO_PARAMETERS

MIDI_PITCH_MIN = 0
MIDI_PITCH_MAX = 127

VELOCITY_MIN = 1
VELOCITY_MAX = 127

DEVIATION_MIN = -127
DEVIATION_MAX = 127

PROBABILITY_MIN = 0.0
PROBABILITY_MAX = 1.0

GAIN_MIN_DB = -70.0
GAIN_MAX_DB = 24.0

PITCH_SHIFT_MIN = -48.0
PITCH_SHIFT_MAX = 48.0

# Bit N set = pitch class N in scale
CHROMATIC_SCALE_MASK = 0xFFF

DEFAULT_TIME_SIG_NUMERATOR = 4
DEFAULT_TIME_SIG_DENOMINATOR = 4
