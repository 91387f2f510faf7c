"""Tests for explorers/types.py - type name mapping and enum resolution."""

from __future__ import annotations

from flask_apiparams.explorers.types import get_enum_type, get_enum_values, map_type_name
from tests._models import Color, Priority


class TestMapTypeName:
    def test_capitalized_name(self):
        assert map_type_name("String") == "string"
        assert map_type_name("Number") == "number"

    def test_already_lower_case(self):
        assert map_type_name("integer") == "integer"

    def test_only_first_character_changes(self):
        assert map_type_name("DateTime") == "dateTime"

    def test_empty_and_absent(self):
        assert map_type_name("") == ""
        assert map_type_name(None) == ""

    def test_non_string(self):
        assert map_type_name(42) == ""


class TestGetEnumValues:
    def test_list_unchanged(self):
        assert get_enum_values(["a", "b"]) == ["a", "b"]

    def test_tuple_to_list(self):
        assert get_enum_values((1, 2)) == [1, 2]

    def test_enum_class(self):
        assert get_enum_values(Color) == ["red", "green"]
        assert get_enum_values(Priority) == [1, 2]

    def test_bidirectional_mapping_keeps_one_value(self):
        assert get_enum_values({"A": 1, 1: "A"}) == [1]

    def test_numeric_enum_with_reverse_lookup(self):
        mapping = {"Red": 0, "Green": 1, "0": "Red", "1": "Green"}
        assert get_enum_values(mapping) == [0, 1]

    def test_swapped_aliases(self):
        assert get_enum_values({"A": "B", "B": "A"}) == ["B"]

    def test_string_mapping(self):
        assert get_enum_values({"A": "a", "B": "b"}) == ["a", "b"]

    def test_duplicate_values_once(self):
        assert get_enum_values({"A": "x", "B": "x"}) == ["x"]

    def test_unsupported_value(self):
        assert get_enum_values(42) == []
        assert get_enum_values(None) == []


class TestGetEnumType:
    def test_any_string_is_string(self):
        assert get_enum_type(["a", 1]) == "string"

    def test_numbers(self):
        assert get_enum_type([1, 2.5]) == "number"

    def test_empty(self):
        assert get_enum_type([]) == "number"
