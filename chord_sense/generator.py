"""Chord generation for the explore and practice modes.

Two policies are offered on top of the tables in :mod:`chord_sense.chords`:

* :func:`generate_independent_chord` draws a new inversion every time it is
  called.  Exploring a single degree repeatedly therefore reveals its
  different voicings.
* :func:`generate_round` draws a single inversion and applies it to every
  enabled degree, so the chord that was played and the chords the user
  guesses with are voiced the same way.

All random choices go through ``rng``, any object with a ``choice`` method
compatible with :class:`random.Random`.  Passing a seeded ``Random`` makes
results reproducible; omitting it uses the module level :mod:`random`
functions so ``random.seed`` works as usual.

Algorithm Pseudocode
--------------------
::

    inversion = rng.choice(allowed_inversions)
    for degree in enabled_degrees:
        triad = BASE_SCALE_DEGREES.get(degree) or skip
        chord = invert(transpose(triad, offset_of(key)), inversion)

:class:`PracticeRound` wraps one such round together with the resolved key
and a target degree, and :class:`PracticeSession` adds first-guess scoring
across rounds.  :class:`ExploreSession` keeps one resolved key for its whole
lifetime while still drawing a fresh inversion per chord.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from .chords import (
    BASE_SCALE_DEGREES,
    InvalidConfiguration,
    Inversion,
    invert,
    transpose_chord,
)
from .keys import offset_of, resolve_key
from .pitch import Pitch

__all__ = [
    "Chord",
    "RoundChords",
    "GuessResult",
    "PracticeRound",
    "PracticeSession",
    "ExploreSession",
    "generate_independent_chord",
    "generate_round",
    "generate_scale_degrees",
]

logger = logging.getLogger(__name__)

Chord = Tuple[Pitch, ...]
InversionLike = Union[Inversion, str]


def _normalise_inversions(allowed: Iterable[InversionLike]) -> Tuple[Inversion, ...]:
    """Parse ``allowed`` into unique inversions, preserving order.

    Raises
    ------
    InvalidConfiguration
        If ``allowed`` is empty or names an unknown inversion.
    """

    inversions = tuple(dict.fromkeys(Inversion.parse(i) for i in allowed))
    if not inversions:
        raise InvalidConfiguration("At least one inversion must be allowed")
    return inversions


def _voice(degree: str, offset: int, inversion: Inversion) -> Optional[Chord]:
    triad = BASE_SCALE_DEGREES.get(degree)
    if triad is None:
        return None
    return invert(transpose_chord(triad, offset), inversion)


def generate_independent_chord(
    degree: str,
    key: str,
    allowed_inversions: Iterable[InversionLike],
    *,
    rng: Optional[random.Random] = None,
) -> Optional[Chord]:
    """Return ``degree`` in ``key`` voiced in a randomly drawn inversion.

    Each call draws again, so repeated calls may return different voicings
    of the same degree.

    Parameters
    ----------
    degree:
        Degree name such as ``"V"``.  Unknown names yield ``None`` so callers
        can probe names without handling an exception.
    key:
        Concrete key name.  Resolve :data:`~chord_sense.keys.RANDOM_KEY`
        first; unknown keys raise :class:`~chord_sense.keys.InvalidKey`.
    allowed_inversions:
        Non-empty collection of inversions (members or names).

    Raises
    ------
    InvalidConfiguration
        If ``allowed_inversions`` is empty.
    """

    inversions = _normalise_inversions(allowed_inversions)
    if degree not in BASE_SCALE_DEGREES:
        logger.debug("No chord available for degree %r", degree)
        return None
    offset = offset_of(key)
    inversion = (rng or random).choice(inversions)
    return _voice(degree, offset, inversion)


@dataclass(frozen=True)
class RoundChords:
    """Chords for every enabled degree plus the inversion they share."""

    chords: Dict[str, Chord]
    inversion: Inversion


def generate_round(
    key: str,
    allowed_inversions: Iterable[InversionLike],
    enabled_degrees: Iterable[str],
    *,
    rng: Optional[random.Random] = None,
) -> RoundChords:
    """Voice every degree of ``enabled_degrees`` with one shared inversion.

    Unknown degree names are skipped.  When none of the names are known the
    returned mapping is empty and the caller cannot pick a target.  The
    mapping follows the order of ``enabled_degrees``.

    Raises
    ------
    InvalidConfiguration
        If ``allowed_inversions`` is empty.
    InvalidKey
        If ``key`` is unknown or is the unresolved random sentinel.
    """

    inversions = _normalise_inversions(allowed_inversions)
    offset = offset_of(key)
    inversion = (rng or random).choice(inversions)

    chords: Dict[str, Chord] = {}
    for degree in enabled_degrees:
        chord = _voice(degree, offset, inversion)
        if chord is None:
            logger.debug("Skipping unknown degree %r", degree)
            continue
        chords[degree] = chord
    return RoundChords(chords=chords, inversion=inversion)


def generate_scale_degrees(
    key: str,
    allowed_inversions: Iterable[InversionLike],
    enabled_degrees: Iterable[str],
    *,
    rng: Optional[random.Random] = None,
) -> Dict[str, Chord]:
    """Like :func:`generate_round` but each degree draws its own inversion."""

    inversions = _normalise_inversions(allowed_inversions)
    offset = offset_of(key)
    choose = (rng or random).choice

    chords: Dict[str, Chord] = {}
    for degree in enabled_degrees:
        if degree not in BASE_SCALE_DEGREES:
            continue
        chords[degree] = _voice(degree, offset, choose(inversions))
    return chords


@dataclass(frozen=True)
class PracticeRound:
    """One practice trial: a resolved key, a shared inversion and a target.

    Instances are created with :meth:`start` and are never mutated.  Every
    chord in :attr:`chords` uses :attr:`key` and :attr:`inversion`.
    """

    key: str
    inversion: Inversion
    chords: Dict[str, Chord]
    target: str

    @classmethod
    def start(
        cls,
        requested_key: str,
        allowed_inversions: Iterable[InversionLike],
        enabled_degrees: Iterable[str],
        *,
        rng: Optional[random.Random] = None,
    ) -> "PracticeRound":
        """Resolve ``requested_key`` once and build a round around it.

        Raises
        ------
        InvalidConfiguration
            If no inversion is allowed or no enabled degree is recognised,
            since a round without chords has no target to guess.
        """

        rng = rng or random
        key = resolve_key(requested_key, rng)
        result = generate_round(key, allowed_inversions, enabled_degrees, rng=rng)
        if not result.chords:
            raise InvalidConfiguration("No recognised degrees enabled for practice")
        target = rng.choice(list(result.chords))
        logger.debug(
            "New round: key=%s inversion=%s target=%s",
            key,
            result.inversion.value,
            target,
        )
        return cls(key=key, inversion=result.inversion, chords=result.chords, target=target)

    @property
    def degrees(self) -> List[str]:
        return list(self.chords)

    @property
    def target_chord(self) -> Chord:
        return self.chords[self.target]

    def chord_for(self, degree: str) -> Optional[Chord]:
        """Return the chord for ``degree`` in this round, or ``None``."""
        return self.chords.get(degree)

    def is_correct(self, degree: str) -> bool:
        return degree == self.target


@dataclass(frozen=True)
class GuessResult:
    """Outcome of :meth:`PracticeSession.guess`.

    ``chord`` is the guessed degree voiced like the target (``None`` if the
    degree is not part of the round).  ``scored`` is ``True`` only for the
    first guess of a round, the one that counts towards the score.
    """

    degree: str
    chord: Optional[Chord]
    correct: bool
    scored: bool
    target: str


@dataclass
class PracticeSession:
    """Sequence of practice rounds sharing one configuration.

    The requested key is resolved again for every round, so a session set
    to ``"Random"`` moves between keys from round to round but never within
    one.
    """

    requested_key: str
    allowed_inversions: Sequence[InversionLike]
    enabled_degrees: Sequence[str]
    rng: Optional[random.Random] = None
    current: Optional[PracticeRound] = field(default=None, init=False)
    correct: int = field(default=0, init=False)
    attempted: int = field(default=0, init=False)
    _guessed: bool = field(default=False, init=False, repr=False)

    def next_round(self) -> PracticeRound:
        self.current = PracticeRound.start(
            self.requested_key,
            self.allowed_inversions,
            self.enabled_degrees,
            rng=self.rng,
        )
        self._guessed = False
        return self.current

    def _require_round(self) -> PracticeRound:
        if self.current is None:
            raise RuntimeError("No active round; call next_round() first")
        return self.current

    def repeat(self) -> Chord:
        """Return the target chord of the current round again."""
        return self._require_round().target_chord

    def guess(self, degree: str) -> GuessResult:
        """Check ``degree`` against the target; only the first guess scores."""

        current = self._require_round()
        correct = current.is_correct(degree)
        scored = not self._guessed
        if scored:
            self._guessed = True
            self.attempted += 1
            if correct:
                self.correct += 1
        return GuessResult(
            degree=degree,
            chord=current.chord_for(degree),
            correct=correct,
            scored=scored,
            target=current.target,
        )

    @property
    def has_guessed(self) -> bool:
        return self._guessed

    @property
    def score(self) -> Tuple[int, int]:
        """``(correct, attempted)`` over all rounds so far."""
        return self.correct, self.attempted


class ExploreSession:
    """Free exploration in a key that stays fixed for the session.

    The key is resolved once when the session starts, while :meth:`play`
    draws a fresh inversion on every call.
    """

    def __init__(
        self,
        requested_key: str,
        allowed_inversions: Sequence[InversionLike],
        *,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.rng = rng
        self.allowed_inversions = _normalise_inversions(allowed_inversions)
        self.key = resolve_key(requested_key, rng)
        # Validate eagerly so a bad key fails at session start, not first play.
        offset_of(self.key)

    def play(self, degree: str) -> Optional[Chord]:
        return generate_independent_chord(
            degree, self.key, self.allowed_inversions, rng=self.rng
        )
