"""Major key table and key resolution.

Keys are identified by their conventional names (flats for the black keys,
``"Db"`` rather than ``"C#"``) and map to a semitone offset from C.  The
pseudo-key :data:`RANDOM_KEY` may be *requested* by a user but is never
playable; :func:`resolve_key` turns a request into a concrete key name.

Callers resolve once per unit of interaction (one practice round, one
explore session) and reuse the result.  Resolving again halfway through a
round would let the target chord and the guesses land in different keys.
"""

from __future__ import annotations

import logging
import random
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .pitch import Pitch

__all__ = [
    "InvalidKey",
    "KEYS",
    "KEY_OFFSETS",
    "KEY_CHOICES",
    "KEY_DISPLAY_NAMES",
    "RANDOM_KEY",
    "offset_of",
    "resolve_key",
    "drone_note",
]

logger = logging.getLogger(__name__)


class InvalidKey(ValueError):
    """Raised when a key name is not one of the twelve supported keys."""


RANDOM_KEY = "Random"

# Ordered chromatically from C so ``KEYS[offset]`` is the key with that offset.
KEYS: Tuple[str, ...] = (
    "C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B",
)

KEY_OFFSETS: Mapping[str, int] = MappingProxyType(
    {name: offset for offset, name in enumerate(KEYS)}
)

# Everything a settings screen offers, the sentinel last.
KEY_CHOICES: Tuple[str, ...] = KEYS + (RANDOM_KEY,)

KEY_DISPLAY_NAMES: Mapping[str, str] = MappingProxyType(
    {**{name: f"{name} Major" for name in KEYS}, RANDOM_KEY: RANDOM_KEY}
)

# Reference pitch the drone is transposed from.
_DRONE_BASE = Pitch(0, 2)


def offset_of(key: str) -> int:
    """Return the semitone offset of ``key`` from C.

    Raises
    ------
    InvalidKey
        If ``key`` is unknown.  The :data:`RANDOM_KEY` sentinel is rejected
        as well because it must be resolved before any lookup.
    """

    try:
        return KEY_OFFSETS[key]
    except (KeyError, TypeError):
        if key == RANDOM_KEY:
            raise InvalidKey(
                f"'{RANDOM_KEY}' must be resolved with resolve_key() before use"
            ) from None
        raise InvalidKey(f"Unknown key: {key}") from None


def resolve_key(requested: str, rng: Optional[random.Random] = None) -> str:
    """Return a concrete key for ``requested``.

    The sentinel produces an independent uniform draw from :data:`KEYS` on
    every call.  Any other value is returned unchanged; validating it is the
    job of :func:`offset_of`.
    """

    if requested != RANDOM_KEY:
        return requested
    key = (rng or random).choice(KEYS)
    logger.debug("Resolved random key to %s", key)
    return key


def drone_note(key: str) -> Pitch:
    """Return the drone pitch for ``key``: ``C2`` moved up by its offset."""

    return _DRONE_BASE.transpose(offset_of(key))
