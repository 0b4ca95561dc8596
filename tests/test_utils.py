"""Tests for the list and key parsing helpers used by the CLI."""

import pytest

from chord_sense.chords import InvalidConfiguration, InvalidDegree, Inversion
from chord_sense.keys import InvalidKey
from chord_sense.utils import parse_degree_list, parse_inversion_list, validate_key_choice


def test_parse_degree_list_strips_and_deduplicates():
    assert parse_degree_list("I, IV,V") == ["I", "IV", "V"]
    assert parse_degree_list("V,I,V") == ["V", "I"]
    assert parse_degree_list(["vi", " ii "]) == ["vi", "ii"]


def test_parse_degree_list_is_case_sensitive():
    with pytest.raises(InvalidDegree, match="iv"):
        parse_degree_list("I,iv")


def test_parse_degree_list_rejects_empty():
    with pytest.raises(InvalidConfiguration):
        parse_degree_list(" , ")


def test_parse_inversion_list():
    assert parse_inversion_list("root, First") == [Inversion.ROOT, Inversion.FIRST]
    assert parse_inversion_list(["second", "second"]) == [Inversion.SECOND]


@pytest.mark.parametrize("bad", ["", "third", "root,fourth"])
def test_parse_inversion_list_errors(bad):
    with pytest.raises(InvalidConfiguration):
        parse_inversion_list(bad)


def test_validate_key_choice():
    assert validate_key_choice("db") == "Db"
    assert validate_key_choice(" B ") == "B"
    assert validate_key_choice("random") == "Random"
    with pytest.raises(InvalidKey):
        validate_key_choice("H")


@pytest.mark.parametrize("bad", [5, True, None, ["I", 3]])
def test_list_parsers_reject_non_string_values(bad):
    with pytest.raises(InvalidConfiguration, match="Expected a list of names"):
        parse_degree_list(bad)
    with pytest.raises(InvalidConfiguration, match="Expected a list of names"):
        parse_inversion_list(bad)
