"""Pitch representation and semitone arithmetic.

A :class:`Pitch` pairs a pitch class (``0`` for C through ``11`` for B) with
an octave number in scientific pitch notation.  Every other part of the
package builds on :func:`transpose`, so the octave carry rules live here and
nowhere else.

Example
-------
>>> from chord_sense.pitch import parse_note, transpose
>>> str(transpose(parse_note("C4"), 12))
'C5'
>>> str(transpose(parse_note("C4"), -1))
'B3'
"""

# Modification Summary
# ---------------------
# * ``transpose`` uses floor division for the octave so deltas larger than
#   one octave (``+24``, ``-13``) carry or borrow the correct number of
#   octaves instead of at most one.
# * ``parse_note`` normalises flat spellings to sharps so ``Db4`` and ``C#4``
#   compare equal.
# * ``Pitch.midi`` raises ``ValueError`` outside ``0-127`` rather than
#   clamping, matching ``midi_to_pitch``.
# * Ordering compares absolute height (``Pitch.semitones``) instead of the
#   field tuple, which sorted ``C4`` below ``B3``.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache, total_ordering
from typing import Tuple

__all__ = [
    "NOTES",
    "NOTE_TO_SEMITONE",
    "Pitch",
    "transpose",
    "parse_note",
    "midi_to_pitch",
]

# Canonical sharp spellings indexed by pitch class.
NOTES: Tuple[str, ...] = (
    "C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B",
)

# Both sharp and flat spellings map to the same semitone so enharmonic input
# (``Db`` and ``C#``) parses to a single pitch class.
NOTE_TO_SEMITONE = {
    "C": 0,
    "B#": 0,
    "C#": 1,
    "Db": 1,
    "D": 2,
    "D#": 3,
    "Eb": 3,
    "E": 4,
    "Fb": 4,
    "E#": 5,
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
    "Cb": 11,
}

_NOTE_RE = re.compile(r"([A-Ga-g][#b]?)(-?\d+)")


@total_ordering
@dataclass(frozen=True)
class Pitch:
    """A pitch class plus octave, e.g. ``Pitch(7, 4)`` for ``G4``.

    ``pitch_class`` is reduced modulo 12 on construction so callers may pass
    any integer; the octave is left untouched.  Instances are immutable and
    hashable, which lets chords be stored as plain tuples.
    Pitches order by absolute height, so ``B3 < C4`` and ``min(chord)``
    is the bass note.
    """

    pitch_class: int
    octave: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "pitch_class", self.pitch_class % 12)

    @property
    def name(self) -> str:
        """Sharp spelling of the pitch class without the octave."""
        return NOTES[self.pitch_class]

    @property
    def midi(self) -> int:
        """MIDI note number, ``C4 == 60``.

        Raises
        ------
        ValueError
            If the pitch lies outside the MIDI range ``0-127``.
        """

        # MIDI octave numbers start one below scientific pitch notation.
        value = (self.octave + 1) * 12 + self.pitch_class
        if not 0 <= value <= 127:
            raise ValueError(f"Computed MIDI value {value} out of range 0-127 for note {self}")
        return value

    @property
    def semitones(self) -> int:
        """Semitones above ``C0``; unlike :attr:`midi` this is never range checked."""
        return self.octave * 12 + self.pitch_class

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Pitch):
            return NotImplemented
        return self.semitones < other.semitones

    def transpose(self, semitones: int) -> "Pitch":
        return transpose(self, semitones)

    def __str__(self) -> str:
        return f"{self.name}{self.octave}"


def transpose(pitch: Pitch, semitones: int) -> Pitch:
    """Return ``pitch`` moved by ``semitones`` (which may be negative).

    The pitch class wraps into ``0-11`` and the octave changes by one for
    every multiple of twelve crossed, so ``B3 + 1 == C4`` and
    ``C4 - 1 == B3``.  ``pitch`` itself is never modified.
    """

    octave_shift, pitch_class = divmod(pitch.pitch_class + semitones, 12)
    return Pitch(pitch_class, pitch.octave + octave_shift)


@lru_cache(maxsize=None)
def parse_note(note: str) -> Pitch:
    """Parse scientific pitch notation such as ``"C#4"`` or ``"Db-1"``.

    Raises
    ------
    ValueError
        If ``note`` is not a letter ``A-G`` with an optional ``#``/``b``
        followed by a signed integer octave.
    """

    match = _NOTE_RE.fullmatch(note.strip())
    if not match:
        logging.error("Invalid note format: %s", note)
        raise ValueError(f"Invalid note format: {note}")

    name, octave = match.groups()
    # ``capitalize`` keeps the accidental lowercase so ``"db4"`` -> ``"Db"``.
    name = name.capitalize()
    semitone = NOTE_TO_SEMITONE[name]
    # Spellings such as ``Cb`` and ``B#`` cross the octave boundary.
    octave_adjust = {"Cb": -1, "B#": 1}.get(name, 0)
    return Pitch(semitone, int(octave) + octave_adjust)


def midi_to_pitch(midi_note: int) -> Pitch:
    """Convert a MIDI number into a :class:`Pitch`.

    >>> str(midi_to_pitch(61))
    'C#4'
    """

    if not 0 <= midi_note <= 127:
        raise ValueError(f"MIDI note {midi_note} out of range 0-127")
    octave, pitch_class = divmod(midi_note, 12)
    return Pitch(pitch_class, octave - 1)
