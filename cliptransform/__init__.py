"""
cliptransform - a small language for modulating MIDI notes and audio clips.

A transform program is a list of assignments, one per line. Each line sets
or nudges one parameter of every matching note, and the value can come from
waveforms, ramps, randomness, sequences and the note's own properties:

    velocity += 20 * cos(1:0t)          // accent each downbeat
    C1-C2: probability = seq(1, 0.5)    // thin out every other kick
    1|1-4|4: timing += rand(-0.05, 0.05)
    pitch = quant(note.pitch + choose(0, 3, 7))

Programs are parsed once and evaluated per note (MIDI clips) or once per
clip (audio clips). Assignments run in order, and each is applied to every
note before the next one starts, so later lines see earlier changes.

Usage:
    ```python
    import cliptransform

    notes = [cliptransform.NoteEvent(pitch=60, start_time=0.0, duration=1.0)]
    cliptransform.apply_transforms(notes, "velocity = 90", cliptransform.TimeSignature(4, 4))
    ```

Command line:
    ```
    python -m cliptransform program.txt in.mid out.mid --config config.yaml
    ```

Package-level exports: ``parse``, ``apply_transforms``,
``apply_audio_transforms``, ``evaluate_transform``, ``NoteEvent``,
``ClipContext``, ``NoteContext``, ``TimeSignature``, ``EvaluationError``,
``TransformSyntaxError``.
"""

import cliptransform.audio
import cliptransform.clip
import cliptransform.errors
import cliptransform.parser
import cliptransform.transform


parse = cliptransform.parser.parse
apply_transforms = cliptransform.transform.apply_transforms
apply_audio_transforms = cliptransform.audio.apply_audio_transforms
evaluate_transform = cliptransform.transform.evaluate_transform
NoteEvent = cliptransform.clip.NoteEvent
ClipContext = cliptransform.clip.ClipContext
NoteContext = cliptransform.clip.NoteContext
TimeSignature = cliptransform.clip.TimeSignature
EvaluationError = cliptransform.errors.EvaluationError
TransformSyntaxError = cliptransform.parser.TransformSyntaxError
