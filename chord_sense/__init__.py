#!/usr/bin/env python3
"""Chord Sense ear-training library.

Chord Sense generates the diatonic triads of a major key in a chosen
inversion so a listener can practise recognising scale degrees by ear.  A
typical workflow starts a :class:`PracticeRound`, plays its target chord with
:func:`create_chord_midi` and :func:`chord_sense.playback.play_midi`, then
compares the listener's guess with :attr:`PracticeRound.target`.

Underlying Algorithm
--------------------
The seven triads of C major are stored once in root position.  A chord in
another key is obtained by transposing every note by the key's semitone
offset from C, carrying into the next octave where needed.  Inversions move
the lowest one or two notes up an octave and rotate the order so the third
or the fifth ends up in the bass.  Practice rounds draw a single inversion
for every degree, which keeps comparisons between the played chord and the
guessed chords fair; explore mode draws a new inversion per chord.

Features include:
- Twelve major keys plus a ``Random`` pseudo-key resolved once per round.
- Root position, first and second inversions.
- First-guess scoring across practice rounds.
- MIDI rendering with an optional drone note and FluidSynth playback.
- A command line interface with persisted settings.
"""

__version__ = "0.1.0"

# ---------------------------------------------------------------
# Modification Summary
# ---------------------------------------------------------------
# * ``load_settings`` and ``save_settings`` persist the selected key, degrees
#   and inversions as JSON.  ``CHORD_SENSE_SETTINGS_FILE`` overrides the
#   default location in the user's home directory.
# * ``offset_of`` no longer falls back to C for unknown keys; it raises
#   ``InvalidKey`` so typos are not silently played in the wrong key.
# * ``PracticeRound.start`` resolves a ``Random`` key exactly once per round.
# ---------------------------------------------------------------

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .pitch import NOTES, Pitch, midi_to_pitch, parse_note, transpose
from .keys import (
    KEY_CHOICES,
    KEY_DISPLAY_NAMES,
    KEY_OFFSETS,
    KEYS,
    RANDOM_KEY,
    InvalidKey,
    drone_note,
    offset_of,
    resolve_key,
)
from .chords import (
    BASE_SCALE_DEGREES,
    DEGREE_NAMES,
    InvalidConfiguration,
    InvalidDegree,
    Inversion,
    base_triad,
    invert,
    transpose_chord,
)
from .generator import (
    ExploreSession,
    GuessResult,
    PracticeRound,
    PracticeSession,
    RoundChords,
    generate_independent_chord,
    generate_round,
    generate_scale_degrees,
)
from .midi_io import create_chord_midi

__all__ = [
    "NOTES",
    "Pitch",
    "midi_to_pitch",
    "parse_note",
    "transpose",
    "KEY_CHOICES",
    "KEY_DISPLAY_NAMES",
    "KEY_OFFSETS",
    "KEYS",
    "RANDOM_KEY",
    "InvalidKey",
    "drone_note",
    "offset_of",
    "resolve_key",
    "BASE_SCALE_DEGREES",
    "DEGREE_NAMES",
    "InvalidConfiguration",
    "InvalidDegree",
    "Inversion",
    "base_triad",
    "invert",
    "transpose_chord",
    "ExploreSession",
    "GuessResult",
    "PracticeRound",
    "PracticeSession",
    "RoundChords",
    "generate_independent_chord",
    "generate_round",
    "generate_scale_degrees",
    "create_chord_midi",
    "DEFAULT_SETTINGS",
    "default_settings_path",
    "load_settings",
    "save_settings",
    "main",
]

# Settings used when nothing has been saved yet: C major, root position only
# and every degree enabled.
DEFAULT_SETTINGS = {
    "key": "C",
    "inversions": [Inversion.ROOT.value],
    "degrees": list(DEGREE_NAMES),
}


def default_settings_path() -> Path:
    """Return the settings file location.

    ``CHORD_SENSE_SETTINGS_FILE`` takes precedence over the default file in
    the user's home directory.
    """

    env_path = os.environ.get("CHORD_SENSE_SETTINGS_FILE")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".chord_sense_settings.json"


def load_settings(path: Optional[Path] = None) -> dict:
    """Load saved user settings from ``path`` if it exists.

    @param path (Path): Location of the settings file. Defaults to
        :func:`default_settings_path`.
    @returns dict: Loaded settings or an empty dictionary when unavailable.
    """

    path = path or default_settings_path()
    if path.is_file():
        try:
            with open(path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logging.error("Could not load settings: %s", exc)
            return {}
        if isinstance(data, dict):
            return data
        logging.error("Ignoring settings file %s: expected a JSON object", path)
    return {}


def save_settings(settings: dict, path: Optional[Path] = None) -> None:
    """Save user ``settings`` to ``path`` as JSON.

    Write failures are logged and ignored so they never interrupt practice.

    @param settings (dict): Options to be persisted.
    @param path (Path): Destination file path.
    """

    path = path or default_settings_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            json.dump(settings, fh, indent=2)
    except OSError as exc:
        logging.error("Could not save settings: %s", exc)


def main() -> None:
    """Console entry point; see :func:`chord_sense.cli.main`."""
    from .cli import main as _main

    _main()
