"""Tests for chord generation in explore and practice modes.

``scripted_rng`` (see ``conftest.py``) fixes each random choice so expected
chords can be spelled out, while seeded :class:`random.Random` instances
cover the statistical properties: one inversion per round, and fresh
inversions per explore call.
"""

import random

import pytest

from chord_sense.chords import (
    DEGREE_NAMES,
    InvalidConfiguration,
    Inversion,
    base_triad,
    invert,
    transpose_chord,
)
from chord_sense.generator import (
    ExploreSession,
    PracticeRound,
    generate_independent_chord,
    generate_round,
    generate_scale_degrees,
)
from chord_sense.keys import RANDOM_KEY, InvalidKey, offset_of

ALL_INVERSIONS = ["root", "first", "second"]


def names(chord):
    return [str(p) for p in chord]


def bass_inversion(chord, key, degree):
    """Infer which inversion ``chord`` is from its lowest pitch class."""
    triad = transpose_chord(base_triad(degree), offset_of(key))
    member = [p.pitch_class for p in triad].index(chord[0].pitch_class)
    return [Inversion.ROOT, Inversion.FIRST, Inversion.SECOND][member]


def test_round_end_to_end_in_c(scripted_rng):
    result = generate_round(
        "C", ["root"], ["I", "IV", "V"], rng=scripted_rng([Inversion.ROOT])
    )
    assert result.inversion is Inversion.ROOT
    assert {d: names(c) for d, c in result.chords.items()} == {
        "I": ["C4", "E4", "G4"],
        "IV": ["F4", "A4", "C5"],
        "V": ["G4", "B4", "D5"],
    }


def test_round_draws_exactly_one_inversion(scripted_rng):
    rng = scripted_rng([Inversion.SECOND])
    result = generate_round("C", ALL_INVERSIONS, DEGREE_NAMES, rng=rng)
    assert len(rng.calls) == 1
    assert names(result.chords["V"]) == ["D5", "G5", "B5"]


@pytest.mark.parametrize("seed", range(40))
def test_round_consistency(seed):
    """Every degree in a round shares the drawn inversion and the key."""

    result = generate_round("D", ALL_INVERSIONS, DEGREE_NAMES, rng=random.Random(seed))
    assert list(result.chords) == list(DEGREE_NAMES)
    for degree, chord in result.chords.items():
        expected = invert(transpose_chord(base_triad(degree), 2), result.inversion)
        assert chord == expected
        assert bass_inversion(chord, "D", degree) is result.inversion


def test_round_skips_unknown_degrees_and_keeps_order(scripted_rng):
    result = generate_round(
        "C", ["root"], ["V", "bogus", "I"], rng=scripted_rng([Inversion.ROOT])
    )
    assert list(result.chords) == ["V", "I"]


def test_round_with_no_known_degrees_is_empty():
    assert generate_round("C", ["root"], ["x", "y"]).chords == {}
    assert generate_round("C", ["root"], []).chords == {}


def test_round_requires_inversions():
    with pytest.raises(InvalidConfiguration):
        generate_round("C", [], ["I"])


def test_round_rejects_unresolved_random_key():
    with pytest.raises(InvalidKey):
        generate_round(RANDOM_KEY, ["root"], ["I"])


def test_independent_chord_in_g(scripted_rng):
    chord = generate_independent_chord(
        "I", "G", ["root", "first"], rng=scripted_rng([Inversion.FIRST])
    )
    assert names(chord) == ["B4", "D5", "G5"]


def test_independent_chord_unknown_degree_returns_none():
    assert generate_independent_chord("VIII", "C", ["root"]) is None


def test_independent_chord_requires_inversions():
    with pytest.raises(InvalidConfiguration):
        generate_independent_chord("I", "C", [])


def test_independent_chord_rejects_unknown_key():
    with pytest.raises(InvalidKey):
        generate_independent_chord("I", "H", ["root"])


def test_independent_chord_varies_between_calls():
    """Nothing is cached: repeated calls reach more than one inversion."""

    rng = random.Random(7)
    seen = {
        bass_inversion(generate_independent_chord("IV", "E", ALL_INVERSIONS, rng=rng), "E", "IV")
        for _ in range(100)
    }
    assert len(seen) > 1


def test_independent_chord_only_uses_allowed_inversions():
    rng = random.Random(3)
    for _ in range(50):
        chord = generate_independent_chord("ii", "F", ["second"], rng=rng)
        assert bass_inversion(chord, "F", "ii") is Inversion.SECOND


def test_scale_degrees_draw_per_degree(scripted_rng):
    chords = generate_scale_degrees(
        "C",
        ["root", "second"],
        ["I", "nope", "V"],
        rng=scripted_rng([Inversion.ROOT, Inversion.SECOND]),
    )
    assert {d: names(c) for d, c in chords.items()} == {
        "I": ["C4", "E4", "G4"],
        "V": ["D5", "G5", "B5"],
    }


def test_practice_round_resolves_random_key_once(scripted_rng):
    rng = scripted_rng(["Eb", Inversion.FIRST, "IV"])
    rnd = PracticeRound.start(RANDOM_KEY, ALL_INVERSIONS, ["I", "IV"], rng=rng)
    assert rnd.key == "Eb"
    assert rnd.inversion is Inversion.FIRST
    assert rnd.target == "IV"
    assert names(rnd.target_chord) == ["C5", "D#5", "G#5"]
    assert names(rnd.chord_for("I")) == ["G4", "A#4", "D#5"]
    assert rnd.chord_for("V") is None
    assert rnd.degrees == ["I", "IV"]
    assert rnd.is_correct("IV") and not rnd.is_correct("I")


def test_practice_round_target_comes_from_enabled_degrees():
    rng = random.Random(11)
    targets = {PracticeRound.start("A", ["root"], ["ii", "V"], rng=rng).target for _ in range(50)}
    assert targets == {"ii", "V"}


def test_practice_round_without_degrees_is_configuration_error():
    with pytest.raises(InvalidConfiguration, match="No recognised degrees"):
        PracticeRound.start("C", ["root"], ["bogus"], rng=random.Random(0))


def test_explore_session_key_is_sticky(scripted_rng):
    """The key is resolved at start while each play draws a new inversion."""

    rng = scripted_rng(["E", Inversion.ROOT, Inversion.FIRST])
    session = ExploreSession(RANDOM_KEY, ["root", "first"], rng=rng)
    assert session.key == "E"
    assert names(session.play("I")) == ["E4", "G#4", "B4"]
    assert names(session.play("I")) == ["G#4", "B4", "E5"]
    assert session.key == "E"


def test_explore_session_validates_configuration():
    with pytest.raises(InvalidKey):
        ExploreSession("H", ["root"])
    with pytest.raises(InvalidConfiguration):
        ExploreSession("C", [])
