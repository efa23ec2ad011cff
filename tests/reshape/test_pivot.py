"""Tests for gather and spread."""

from datetime import date

import pytest
from structlog.testing import capture_logs

from tidytab.core.models.base import ColumnType
from tidytab.reshape import (
    ColumnNameError,
    DuplicateIdentifierError,
    ReshapeError,
    common_type,
    gather,
    spread,
)
from tidytab.table import Column, ColumnNotFoundError, Table


class TestGather:
    """Tests for gather (wide to long)."""

    def test_table4a(self, table4a):
        long = gather(table4a, "year", "cases", ["1999", "2000"])

        assert long.column_names == ["country", "year", "cases"]
        assert long.n_rows == table4a.n_rows * 2
        # grouped by original row, then by gathered column order
        assert long["country"] == (
            "Afghanistan", "Afghanistan", "Brazil", "Brazil", "China", "China",
        )  # fmt: skip
        assert long["year"] == ("1999", "2000") * 3
        assert long["cases"] == (745, 2666, 37737, 80488, 212258, 213766)
        assert long.column_types["cases"] == ColumnType.INTEGER

    def test_exclude_selects_the_rest(self, table4a):
        by_columns = gather(table4a, "year", "cases", ["1999", "2000"])
        by_exclude = gather(table4a, "year", "cases", exclude=["country"])
        assert by_columns == by_exclude

    def test_convert_key(self, table4a):
        long = gather(table4a, "year", "cases", exclude=["country"], convert=True)
        assert long.column_types["year"] == ColumnType.INTEGER
        assert long["year"][:2] == (1999, 2000)

    def test_na_rm(self):
        table = Table.from_dict({"id": [1, 2], "a": [10, None], "b": [None, 20]})

        kept = gather(table, "k", "v", ["a", "b"])
        dropped = gather(table, "k", "v", ["a", "b"], na_rm=True)

        assert kept.n_rows == 4
        assert dropped.to_records() == [
            {"id": 1, "k": "a", "v": 10},
            {"id": 2, "k": "b", "v": 20},
        ]

    def test_integer_and_double_widen(self):
        table = Table.from_dict({"a": [1], "b": [2.5]})
        long = gather(table, columns=["a", "b"])
        assert long.column_types["value"] == ColumnType.DOUBLE
        assert long["value"] == (1.0, 2.5)

    def test_mixed_types_become_text(self):
        table = Table.from_dict({"n": [1], "when": [date(2015, 1, 2)], "ok": [True]})

        with capture_logs() as logs:
            long = gather(table, columns=["n", "when", "ok"])

        assert long.column_types["value"] == ColumnType.TEXT
        assert long["value"] == ("1", "2015-01-02", "TRUE")
        assert any(e["event"] == "gather_values_coerced_to_text" for e in logs)

    def test_all_missing_column_does_not_force_text(self):
        table = Table.from_dict({"a": [1, 2], "b": [None, None]})
        long = gather(table, columns=["a", "b"])
        assert long.column_types["value"] == ColumnType.INTEGER

    def test_unknown_column(self, table4a):
        with pytest.raises(ColumnNotFoundError):
            gather(table4a, "year", "cases", ["1999", "2001"])

    def test_key_collides_with_kept_column(self, table4a):
        with pytest.raises(ColumnNameError, match="overwrite"):
            gather(table4a, "country", "cases", ["1999", "2000"])

    def test_key_equals_value(self, table4a):
        with pytest.raises(ColumnNameError):
            gather(table4a, "x", "x", ["1999", "2000"])

    def test_empty_selection_returns_input(self, table4a):
        assert gather(table4a, "k", "v", []) is table4a

    def test_input_untouched(self, table4a):
        before = table4a.to_dict()
        gather(table4a, "year", "cases", ["1999", "2000"])
        assert table4a.to_dict() == before


class TestSpread:
    """Tests for spread (long to wide)."""

    def test_simple(self):
        table = Table.from_dict({"id": [1, 1], "k": ["a", "b"], "v": [10, 20]})

        wide = spread(table, "k", "v")

        assert wide.to_records() == [{"id": 1, "a": 10, "b": 20}]

    def test_table2(self, table1, table2):
        wide = spread(table2, "type", "count")
        assert wide == table1

    def test_first_appearance_order(self):
        table = Table.from_dict(
            {"id": [2, 1, 2, 1], "k": ["z", "a", "a", "z"], "v": [1, 2, 3, 4]}
        )

        wide = spread(table, "k", "v")

        assert wide.column_names == ["id", "z", "a"]
        assert wide.to_records() == [
            {"id": 2, "z": 1, "a": 3},
            {"id": 1, "z": 4, "a": 2},
        ]

    def test_fill(self):
        table = Table.from_dict({"id": [1, 2], "k": ["a", "b"], "v": [10, 20]})

        assert spread(table, "k", "v")["a"] == (10, None)
        assert spread(table, "k", "v", fill=0)["a"] == (10, 0)

    def test_duplicate_identifiers(self):
        table = Table.from_dict(
            {"id": [1, 1, 2], "k": ["a", "a", "a"], "v": [10, 11, 12]}
        )

        with pytest.raises(DuplicateIdentifierError) as exc_info:
            spread(table, "k", "v")

        error = exc_info.value
        assert isinstance(error, ReshapeError)
        assert error.rows == [0, 1]
        assert error.identifiers == {"id": 1}
        assert error.key_value == "a"
        assert "id=1, k=a" in str(error)

    def test_missing_key_becomes_na_column(self):
        table = Table.from_dict({"id": [1, 1], "k": ["a", None], "v": [1, 2]})
        assert spread(table, "k", "v").column_names == ["id", "a", "NA"]

    def test_nan_keys_share_one_column(self):
        table = Table.from_dict(
            {"id": [1, 2, 2], "k": [float("nan"), float("nan"), 1.5], "v": [10, 20, 30]}
        )

        wide = spread(table, "k", "v")

        assert wide.column_names == ["id", "NaN", "1.5"]
        assert wide["NaN"] == (10, 20)
        assert wide["1.5"] == (None, 30)

    def test_nan_identifiers_group_together(self):
        table = Table.from_dict({"x": [float("nan"), float("nan")], "k": ["a", "b"], "v": [1, 2]})

        wide = spread(table, "k", "v")

        assert wide.n_rows == 1
        assert wide.to_records()[0]["a"] == 1
        assert wide.to_records()[0]["b"] == 2

    def test_sep_prefixes_key_name(self):
        table = Table.from_dict({"id": [1, 1], "year": [1999, 2000], "n": [3, 4]})
        wide = spread(table, "year", "n", sep="_")
        assert wide.column_names == ["id", "year_1999", "year_2000"]

    def test_convert(self):
        table = Table.from_dict(
            {"id": [1, 1], "k": ["n", "when"], "v": ["12", "2015-01-02"]}
        )

        wide = spread(table, "k", "v", convert=True)

        assert wide.column_types == {
            "id": ColumnType.INTEGER,
            "n": ColumnType.INTEGER,
            "when": ColumnType.DATE,
        }

    def test_new_name_collides_with_identifier(self):
        table = Table.from_dict({"id": [1], "k": ["id"], "v": [1]})
        with pytest.raises(ColumnNameError):
            spread(table, "k", "v")

    def test_unknown_column(self, table2):
        with pytest.raises(ColumnNotFoundError):
            spread(table2, "kind", "count")


class TestRoundTrip:
    """gather and spread are inverses on the same key/value pair."""

    def test_spread_after_gather(self, table4a):
        long = gather(table4a, "year", "cases", ["1999", "2000"])
        assert spread(long, "year", "cases") == table4a

    def test_gather_after_spread(self, table2):
        wide = spread(table2, "type", "count")
        assert gather(wide, "type", "count", ["cases", "population"]) == table2


class TestCommonType:
    """Tests for common_type."""

    def test_rules(self):
        def col(column_type, *values):
            return Column("c", column_type, values)

        assert common_type([col(ColumnType.INTEGER, 1), col(ColumnType.INTEGER, 2)]) == (
            ColumnType.INTEGER
        )
        assert common_type([col(ColumnType.INTEGER, 1), col(ColumnType.DOUBLE, 2.0)]) == (
            ColumnType.DOUBLE
        )
        assert common_type([col(ColumnType.DATE, date(2015, 1, 1)), col(ColumnType.TEXT, "x")]) == (
            ColumnType.TEXT
        )
        assert common_type([col(ColumnType.LOGICAL, None)]) == ColumnType.LOGICAL
