"""Rendering chords to MIDI files and previewing them.

Modification summary
--------------------
* ``create_chord_midi`` creates the destination directory automatically so
  callers can pass a path in a new folder without preparing it.
* ``create_chord_midi`` validates ``bpm``, ``beats_per_chord``, ``program``
  and ``velocity`` so invalid values fail before anything is written.
* Imports from ``mido`` are deferred inside ``create_chord_midi`` so the
  theory modules can be used without the MIDI dependency installed.
* An optional drone pitch is written on a separate track and sustained
  under every chord.

Each chord is written as a block: all three notes start on the same tick
and stop together ``beats_per_chord`` beats later.  The default half note
at velocity ``89`` (roughly 70% of full scale) matches the way chords are
auditioned in the practice and explore modes.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Optional, Sequence, Union

if TYPE_CHECKING:
    from mido import MidiFile

from .pitch import Pitch, parse_note

__all__ = ["create_chord_midi"]

TICKS_PER_BEAT = 480

# The drone sits a little under the chords so it supports rather than masks.
DRONE_VELOCITY = 70
DRONE_CHANNEL = 1

NoteLike = Union[Pitch, str]


def _to_midi(note: NoteLike) -> int:
    pitch = note if isinstance(note, Pitch) else parse_note(note)
    return pitch.midi


def create_chord_midi(
    chords: Sequence[Iterable[NoteLike]],
    output_file: str,
    *,
    bpm: int = 120,
    beats_per_chord: float = 2,
    velocity: int = 89,
    program: int = 0,
    drone: Optional[NoteLike] = None,
) -> "MidiFile":
    """Write ``chords`` one after another to ``output_file``.

    Parameters
    ----------
    chords:
        Sequence of chords; each chord is an iterable of :class:`Pitch`
        objects or note strings such as ``"C#4"``.
    output_file:
        Destination path. Missing parent directories are created.
    bpm:
        Tempo in beats per minute. Must be positive.
    beats_per_chord:
        How long each chord sounds, in quarter-note beats.
    velocity:
        Note-on velocity for chord tones (``1-127``).
    program:
        General MIDI program for the chord track (``0-127``).
    drone:
        Optional pitch sustained on its own track for the whole file.

    Returns
    -------
    MidiFile
        In-memory representation of the written file.

    Raises
    ------
    ValueError
        If ``chords`` is empty, a numeric argument is out of range or a note
        cannot be represented in MIDI.
    ImportError
        If ``mido`` is not installed.
    """

    try:
        import mido
        from mido import Message, MidiFile, MidiTrack
    except ModuleNotFoundError as exc:
        raise ImportError(
            "mido is required to create MIDI files; install it with 'pip install mido'"
        ) from exc

    if bpm <= 0:
        raise ValueError("bpm must be a positive integer")
    if beats_per_chord <= 0:
        raise ValueError("beats_per_chord must be positive")
    if not 0 <= program <= 127:
        raise ValueError("program must be between 0 and 127")
    if not 1 <= velocity <= 127:
        raise ValueError("velocity must be between 1 and 127")
    if not chords:
        raise ValueError("chords must contain at least one chord")

    # Convert everything up front so a bad note aborts before any events exist.
    midi_chords: List[List[int]] = [[_to_midi(n) for n in chord] for chord in chords]
    if any(not chord for chord in midi_chords):
        raise ValueError("chords must not be empty")

    mid = MidiFile(ticks_per_beat=TICKS_PER_BEAT)
    track = MidiTrack()
    mid.tracks.append(track)
    track.append(mido.MetaMessage("set_tempo", tempo=mido.bpm2tempo(bpm)))
    track.append(Message("program_change", program=program, time=0))

    chord_ticks = int(beats_per_chord * TICKS_PER_BEAT)
    for notes in midi_chords:
        for note in notes:
            track.append(Message("note_on", note=note, velocity=velocity, time=0))
        # The first note_off carries the chord's duration; the rest follow on
        # the same tick.
        for i, note in enumerate(notes):
            track.append(
                Message(
                    "note_off",
                    note=note,
                    velocity=velocity,
                    time=chord_ticks if i == 0 else 0,
                )
            )

    if drone is not None:
        drone_midi = _to_midi(drone)
        drone_track = MidiTrack()
        mid.tracks.append(drone_track)
        drone_track.append(
            Message(
                "note_on",
                note=drone_midi,
                velocity=DRONE_VELOCITY,
                time=0,
                channel=DRONE_CHANNEL,
            )
        )
        drone_track.append(
            Message(
                "note_off",
                note=drone_midi,
                velocity=DRONE_VELOCITY,
                time=chord_ticks * len(midi_chords),
                channel=DRONE_CHANNEL,
            )
        )

    path = Path(output_file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)

    mid.save(str(path))
    logging.info("MIDI file saved to %s", path)
    return mid


def _open_default_player(path: str, *, delete_after: bool = False) -> None:
    """Launch ``path`` asynchronously with the system default MIDI player.

    ``open_default_player`` blocks until the external program exits, so the
    call runs in a daemon thread.  The thread removes ``path`` after playback
    when ``delete_after`` is ``True``.
    """

    from .playback import open_default_player

    def runner() -> None:
        try:
            open_default_player(path, delete_after=delete_after)
        except Exception as exc:  # pragma: no cover - platform dependent
            logging.error("Could not open MIDI file: %s", exc)

    threading.Thread(target=runner, daemon=True).start()
