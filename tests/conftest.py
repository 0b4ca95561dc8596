"""Shared fixtures for the Chord Sense test-suite.

``scripted_rng`` builds a stand-in for :class:`random.Random` whose
``choice`` returns pre-arranged values.  Tests use it to pin the key,
inversion and target chosen by the generator so expected chords can be
written out literally.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the package is importable regardless of the current working directory
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))


class ScriptedRng:
    """Return queued values from ``choice`` in order."""

    def __init__(self, picks):
        self.picks = list(picks)
        self.calls = []

    def choice(self, seq):
        seq = list(seq)
        self.calls.append(seq)
        if not self.picks:
            raise AssertionError("ScriptedRng ran out of picks")
        value = self.picks.pop(0)
        assert value in seq, f"{value!r} not among {seq!r}"
        return value


@pytest.fixture
def scripted_rng():
    """Factory fixture: ``scripted_rng(["G", Inversion.ROOT, "I"])``."""
    return ScriptedRng
