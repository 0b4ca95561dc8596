"""Parsing helpers shared by the command line and settings loader.

Usage Example
-------------
>>> from chord_sense.utils import parse_degree_list, validate_key_choice
>>> parse_degree_list("I, IV,V")
['I', 'IV', 'V']
>>> validate_key_choice("db")
'Db'
"""

from __future__ import annotations

from typing import Iterable, List, Union

from .chords import DEGREE_NAMES, InvalidConfiguration, InvalidDegree, Inversion
from .keys import KEY_CHOICES, InvalidKey

__all__ = ["parse_degree_list", "parse_inversion_list", "validate_key_choice"]

# Case-insensitive lookup tables.  Degrees stay case sensitive because
# ``IV`` and ``iv`` are different chords in general; only exact names pass.
_CANONICAL_KEYS = {name.lower(): name for name in KEY_CHOICES}


def _split(value: Union[str, Iterable[str]]) -> List[str]:
    # Values may come from a hand-edited settings file, so anything other
    # than a string or a list of strings is a configuration error.
    if isinstance(value, str):
        items = value.split(",")
    else:
        try:
            items = list(value)
        except TypeError:
            raise InvalidConfiguration(f"Expected a list of names, got {value!r}") from None
    if not all(isinstance(item, str) for item in items):
        raise InvalidConfiguration(f"Expected a list of names, got {value!r}")
    return [item.strip() for item in items if item.strip()]


def validate_key_choice(name: str) -> str:
    """Return the canonical spelling of key ``name`` or the random sentinel.

    Raises
    ------
    InvalidKey
        If ``name`` is not a supported key.
    """

    key = _CANONICAL_KEYS.get(str(name).strip().lower())
    if key is None:
        raise InvalidKey(f"Unknown key: {name}")
    return key


def parse_degree_list(value: Union[str, Iterable[str]]) -> List[str]:
    """Parse a comma separated list (or iterable) of degree names.

    Duplicates are dropped and the input order kept.

    Raises
    ------
    InvalidDegree
        If any name is not one of ``I`` through ``vii``.
    InvalidConfiguration
        If the list is empty.
    """

    degrees = list(dict.fromkeys(_split(value)))
    for degree in degrees:
        if degree not in DEGREE_NAMES:
            raise InvalidDegree(f"Unknown degree: {degree}")
    if not degrees:
        raise InvalidConfiguration("At least one degree must be enabled")
    return degrees


def parse_inversion_list(value: Union[str, Iterable[str]]) -> List[Inversion]:
    """Parse inversion names such as ``"root,first"``.

    Raises
    ------
    InvalidConfiguration
        If the list is empty or contains an unknown name.
    """

    inversions = list(dict.fromkeys(Inversion.parse(v) for v in _split(value)))
    if not inversions:
        raise InvalidConfiguration("At least one inversion must be enabled")
    return inversions
