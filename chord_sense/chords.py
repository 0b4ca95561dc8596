"""Diatonic triads of C major and the inversion engine.

:data:`BASE_SCALE_DEGREES` is the only place chord tones are written down.
Other keys are reached by transposing these triads, and inversions by
re-ordering and re-octaving their notes with :func:`invert`.

Example
-------
>>> from chord_sense.chords import base_triad, invert, Inversion
>>> [str(p) for p in invert(base_triad("I"), Inversion.FIRST)]
['E4', 'G4', 'C5']
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Tuple, Union

from .pitch import Pitch, parse_note

__all__ = [
    "InvalidDegree",
    "InvalidConfiguration",
    "DEGREE_NAMES",
    "BASE_SCALE_DEGREES",
    "Inversion",
    "base_triad",
    "transpose_chord",
    "invert",
]

Triad = Tuple[Pitch, Pitch, Pitch]


class InvalidDegree(ValueError):
    """Raised when a degree name is not one of ``I`` through ``vii``."""


class InvalidConfiguration(ValueError):
    """Raised for caller errors such as an empty set of inversions."""


DEGREE_NAMES: Tuple[str, ...] = ("I", "ii", "iii", "IV", "V", "vi", "vii")

# Root position triads of C major spanning roughly C4 to F5.
BASE_SCALE_DEGREES: Mapping[str, Triad] = MappingProxyType(
    {
        degree: tuple(parse_note(n) for n in notes)
        for degree, notes in (
            ("I", ("C4", "E4", "G4")),
            ("ii", ("D4", "F4", "A4")),
            ("iii", ("E4", "G4", "B4")),
            ("IV", ("F4", "A4", "C5")),
            ("V", ("G4", "B4", "D5")),
            ("vi", ("A4", "C5", "E5")),
            ("vii", ("B4", "D5", "F5")),
        )
    }
)


class Inversion(Enum):
    """Which chord member is voiced lowest."""

    ROOT = "root"
    FIRST = "first"
    SECOND = "second"

    @property
    def label(self) -> str:
        return _INVERSION_LABELS[self]

    @classmethod
    def parse(cls, name: Union["Inversion", str]) -> "Inversion":
        """Return the member for ``name`` (case-insensitive).

        Raises
        ------
        InvalidConfiguration
            If ``name`` is not ``root``, ``first`` or ``second``.
        """

        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise InvalidConfiguration(f"Unknown inversion: {name}") from None


_INVERSION_LABELS = {
    Inversion.ROOT: "Root Position",
    Inversion.FIRST: "First Inversion",
    Inversion.SECOND: "Second Inversion",
}


def base_triad(degree: str) -> Triad:
    """Return the C major root position triad for ``degree``.

    Raises
    ------
    InvalidDegree
        If ``degree`` is not in :data:`DEGREE_NAMES`.  Names are case
        sensitive: ``"iv"`` is not ``"IV"``.
    """

    try:
        return BASE_SCALE_DEGREES[degree]
    except (KeyError, TypeError):
        raise InvalidDegree(f"Unknown degree: {degree}") from None


def transpose_chord(chord: Iterable[Pitch], semitones: int) -> Tuple[Pitch, ...]:
    """Transpose every note of ``chord`` by ``semitones``."""
    return tuple(p.transpose(semitones) for p in chord)


def invert(chord: Iterable[Pitch], inversion: Union[Inversion, str]) -> Triad:
    """Voice the three-note ``chord`` (root, third, fifth) in ``inversion``.

    * root: unchanged.
    * first: the root moves up an octave, giving (third, fifth, root).
    * second: root and third move up an octave, giving (fifth, root, third).

    Only octaves and order change, never the set of pitch classes.

    Raises
    ------
    ValueError
        If ``chord`` does not contain exactly three pitches.
    InvalidConfiguration
        If ``inversion`` is not a recognised name.
    """

    notes = tuple(chord)
    if len(notes) != 3:
        raise ValueError(f"Inversions require a three-note chord, got {len(notes)}")
    inversion = Inversion.parse(inversion)
    root, third, fifth = notes

    if inversion is Inversion.FIRST:
        return (third, fifth, root.transpose(12))
    if inversion is Inversion.SECOND:
        return (fifth, root.transpose(12), third.transpose(12))
    return notes
