import collections
import logging
import typing

import mido

import cliptransform.clip
import cliptransform.pitch

logger = logging.getLogger(__name__)

DEFAULT_TICKS_PER_BEAT = 480


def read_midi_notes(path: str) -> typing.Tuple[typing.List[cliptransform.clip.NoteEvent], cliptransform.clip.TimeSignature]:
    """
    Read the notes and time signature of a standard MIDI file.

    All tracks are merged into one clip. Note-on and note-off messages are
    paired first-in first-out per channel and pitch, and times are converted
    to quarter-note beats. The first time signature in the file is used
    (4/4 when there is none).

    Returns:
        A tuple of (notes sorted by start time then pitch, time_signature).
    """
    mid = mido.MidiFile(path)
    ticks_per_beat = mid.ticks_per_beat

    time_signature: typing.Optional[cliptransform.clip.TimeSignature] = None
    pending: typing.Dict[typing.Tuple[int, int], typing.Deque[typing.Tuple[int, int]]] = collections.defaultdict(collections.deque)
    notes: typing.List[cliptransform.clip.NoteEvent] = []
    tick = 0

    for message in mido.merge_tracks(mid.tracks):
        tick += message.time

        if message.type == "time_signature":
            if time_signature is None:
                time_signature = cliptransform.clip.TimeSignature(message.numerator, message.denominator)
            continue

        if message.type == "note_on" and message.velocity > 0:
            pending[(message.channel, message.note)].append((tick, message.velocity))
            continue

        if message.type in ("note_off", "note_on"):
            queue = pending.get((message.channel, message.note))

            if not queue:
                logger.debug(f"Ignoring note-off without a matching note-on (note {message.note})")
                continue

            start_tick, velocity = queue.popleft()
            notes.append(
                cliptransform.clip.NoteEvent(
                    pitch=message.note,
                    start_time=start_tick / ticks_per_beat,
                    duration=(tick - start_tick) / ticks_per_beat,
                    velocity=velocity
                )
            )

    unterminated = sum(len(queue) for queue in pending.values())

    if unterminated:
        logger.warning(f"Dropped {unterminated} note(s) without a note-off in {path}")

    notes.sort(key=lambda n: (n.start_time, n.pitch))

    logger.info(f"Read {len(notes)} notes from {path}")

    return notes, time_signature or cliptransform.clip.TimeSignature()


def write_midi_notes(
    path: str,
    notes: typing.Sequence[cliptransform.clip.NoteEvent],
    time_signature: typing.Optional[cliptransform.clip.TimeSignature] = None,
    ticks_per_beat: int = DEFAULT_TICKS_PER_BEAT
) -> None:
    """
    Write notes to a type 1 MIDI file with a single track.

    Velocities are rounded and kept within 1-127. Probability and velocity
    deviation have no standard MIDI representation and are not written.
    """
    time_signature = time_signature or cliptransform.clip.TimeSignature()

    mid = mido.MidiFile(type=1)
    mid.ticks_per_beat = ticks_per_beat
    track = mido.MidiTrack()
    mid.tracks.append(track)

    track.append(
        mido.MetaMessage(
            "time_signature",
            numerator=time_signature.numerator,
            denominator=time_signature.denominator,
            time=0
        )
    )

    # (tick, order, message) - note-offs sort before note-ons at the same tick
    events: typing.List[typing.Tuple[int, int, mido.Message]] = []

    for note in notes:
        start_tick = max(0, round(note.start_time * ticks_per_beat))
        end_tick = max(start_tick, round((note.start_time + note.duration) * ticks_per_beat))
        velocity = max(1, min(127, cliptransform.pitch.round_half_up(note.velocity)))

        events.append((start_tick, 1, mido.Message("note_on", note=note.pitch, velocity=velocity)))
        events.append((end_tick, 0, mido.Message("note_off", note=note.pitch, velocity=0)))

    events.sort(key=lambda event: (event[0], event[1]))

    last_tick = 0

    for tick, _, message in events:
        message.time = tick - last_tick
        track.append(message)
        last_tick = tick

    mid.save(path)
    logger.info(f"Wrote {len(notes)} notes to {path}")
