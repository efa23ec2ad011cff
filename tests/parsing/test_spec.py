"""Tests for column type specifications."""

import pytest

from tidytab.core.models.base import ColumnType
from tidytab.parsing import (
    ABBREVIATIONS,
    ColumnSpec,
    ColumnSpecError,
    col_date,
    col_guess,
    col_integer,
    col_number,
    col_skip,
    from_abbreviation,
    resolve_col_types,
)


class TestAbbreviations:
    """Tests for one-letter type abbreviations."""

    def test_every_type_has_a_letter(self):
        for column_type in ColumnType:
            assert ABBREVIATIONS[column_type.abbreviation].type == column_type

    def test_special_letters(self):
        assert from_abbreviation("n") == col_number()
        assert from_abbreviation("?").is_guess
        assert from_abbreviation("_").skip
        assert from_abbreviation("-").skip

    def test_unknown_letter(self):
        with pytest.raises(ColumnSpecError, match="abbreviation"):
            from_abbreviation("x")


class TestColumnSpec:
    """Tests for ColumnSpec descriptions."""

    def test_describe(self):
        assert col_guess().describe() == "guess"
        assert col_skip().describe() == "skip"
        assert col_integer().describe() == "integer"
        assert col_number().describe() == "number"
        assert col_date("%d/%m/%Y").describe() == "date(%d/%m/%Y)"

    def test_skip_is_not_guess(self):
        assert not col_skip().is_guess


class TestResolveColTypes:
    """Tests for expanding col_types arguments."""

    def test_none_guesses_everything(self):
        assert resolve_col_types(None, ["a", "b"]) == [col_guess(), col_guess()]

    def test_compact_string(self):
        specs = resolve_col_types("ciD_", ["a", "b", "c", "d"])
        assert [s.type for s in specs[:3]] == [ColumnType.TEXT, ColumnType.INTEGER, ColumnType.DATE]
        assert specs[3].skip

    def test_compact_string_length_mismatch(self):
        with pytest.raises(ColumnSpecError, match="2 letters"):
            resolve_col_types("ci", ["a", "b", "c"])

    def test_mapping(self):
        specs = resolve_col_types(
            {"b": "i", "c": ColumnType.DOUBLE, "a": col_date("%Y")}, ["a", "b", "c", "d"]
        )
        assert specs == [
            col_date("%Y"),
            col_integer(),
            ColumnSpec(ColumnType.DOUBLE),
            col_guess(),
        ]

    def test_mapping_full_type_names(self):
        assert resolve_col_types({"a": "datetime"}, ["a"]) == [ColumnSpec(ColumnType.DATETIME)]

    def test_mapping_unknown_column(self):
        with pytest.raises(ColumnSpecError, match="unknown columns"):
            resolve_col_types({"z": "i"}, ["a"])

    def test_sequence(self):
        assert resolve_col_types([col_integer(), "c"], ["a", "b"])[1].type == ColumnType.TEXT

    def test_sequence_length_mismatch(self):
        with pytest.raises(ColumnSpecError):
            resolve_col_types([col_integer()], ["a", "b"])

    def test_invalid_value(self):
        with pytest.raises(ColumnSpecError):
            resolve_col_types({"a": "decimal"}, ["a"])
