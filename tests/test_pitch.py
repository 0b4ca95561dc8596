"""Unit tests for pitch parsing and transposition.

Transposition is the primitive every chord is built from, so these tests
pin the octave carry and borrow rules across a range of deltas in both
directions, not only the ``0-11`` and ``+12`` steps used by keys and
inversions.
"""

import pytest

from chord_sense.pitch import NOTES, Pitch, midi_to_pitch, parse_note, transpose


def test_octave_carry_and_borrow():
    """``C4 + 12`` is ``C5`` and ``C4 - 1`` is ``B3``."""
    c4 = parse_note("C4")
    assert str(transpose(c4, 12)) == "C5"
    assert str(transpose(c4, -1)) == "B3"
    assert str(transpose(parse_note("B3"), 1)) == "C4"


def test_zero_delta_returns_equal_pitch():
    pitch = Pitch(7, 4)
    assert transpose(pitch, 0) == pitch


def test_transpose_does_not_mutate_input():
    pitch = Pitch(0, 4)
    pitch.transpose(5)
    assert pitch == Pitch(0, 4)


@pytest.mark.parametrize("pitch_class", range(12))
def test_transpose_matches_absolute_semitones(pitch_class):
    """For every delta in ``-24..24`` the class and octave agree with plain arithmetic."""

    start = Pitch(pitch_class, 4)
    for delta in range(-24, 25):
        result = transpose(start, delta)
        assert result.pitch_class == (pitch_class + delta) % 12
        assert result.octave * 12 + result.pitch_class == 4 * 12 + pitch_class + delta


def test_multi_octave_delta():
    assert transpose(Pitch(0, 4), 24) == Pitch(0, 6)
    assert transpose(Pitch(0, 4), -13) == Pitch(11, 2)


def test_pitches_order_by_height():
    assert parse_note("B3") < parse_note("C4")
    assert parse_note("C5") > parse_note("B4")
    assert parse_note("Db4") <= parse_note("C#4")
    chord = (parse_note("E5"), parse_note("A4"), parse_note("C5"))
    assert min(chord) == parse_note("A4")
    assert [str(p) for p in sorted(chord)] == ["A4", "C5", "E5"]


def test_pitch_class_is_normalised():
    assert Pitch(13, 4).pitch_class == 1
    assert Pitch(-1, 4).pitch_class == 11


def test_str_uses_sharps():
    assert str(Pitch(8, 5)) == "G#5"
    assert [Pitch(i, 0).name for i in range(12)] == list(NOTES)


def test_parse_note_accepts_flats_and_lowercase():
    assert parse_note("Db4") == parse_note("C#4") == Pitch(1, 4)
    assert parse_note("eb3") == Pitch(3, 3)
    assert parse_note("C-1") == Pitch(0, -1)


def test_parse_note_crossing_octave_spellings():
    """``Cb4`` sounds as ``B3`` and ``B#3`` as ``C4``."""
    assert parse_note("Cb4") == Pitch(11, 3)
    assert parse_note("B#3") == Pitch(0, 4)


@pytest.mark.parametrize("bad", ["H4", "C", "4", "C#x", ""])
def test_parse_note_rejects_malformed_text(bad):
    with pytest.raises(ValueError, match="Invalid note format"):
        parse_note(bad)


def test_midi_conversion():
    assert parse_note("C4").midi == 60
    assert parse_note("G9").midi == 127
    assert Pitch(0, -1).midi == 0
    assert midi_to_pitch(61) == Pitch(1, 4)
    assert midi_to_pitch(127) == Pitch(7, 9)


def test_midi_range_validation():
    with pytest.raises(ValueError, match="out of range"):
        Pitch(0, -2).midi
    with pytest.raises(ValueError, match="out of range"):
        parse_note("C10").midi
    with pytest.raises(ValueError, match="out of range"):
        midi_to_pitch(128)
