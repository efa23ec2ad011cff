"""Tests for type inference, column parsing and the problems ledger."""

from datetime import UTC, date, datetime, time

import pytest
from structlog.testing import capture_logs

from tidytab.core.models.base import ColumnType
from tidytab.parsing import (
    ColumnSpecError,
    Problem,
    Problems,
    col_date,
    col_datetime,
    col_integer,
    col_number,
    col_skip,
    guess_type,
    infer_and_parse,
    parse_column,
    type_convert,
)
from tidytab.table import Table


class TestGuessType:
    """Tests for guess_type."""

    @pytest.mark.parametrize(
        "tokens,expected",
        [
            (["TRUE", "F", "true"], ColumnType.LOGICAL),
            (["1", "-2", "30"], ColumnType.INTEGER),
            (["1", "2.5", "1e3"], ColumnType.DOUBLE),
            (["1,234.5", "12"], ColumnType.DOUBLE),
            (["2015-01-02", "2015/1/3"], ColumnType.DATE),
            (["2015-01-02T10:00:00Z", "2015-01-02 11:00"], ColumnType.DATETIME),
            (["10:30", "1:15 pm"], ColumnType.TIME),
            (["1", "x"], ColumnType.TEXT),
            (["$1,000"], ColumnType.TEXT),
            (["2015-01-02T10:00+25"], ColumnType.TEXT),
        ],
    )
    def test_priority(self, tokens, expected, en_locale):
        assert guess_type(tokens, en_locale) == expected

    def test_all_missing_is_logical(self, en_locale):
        assert guess_type(["", "NA", None, "  "], en_locale) == ColumnType.LOGICAL

    def test_ones_and_zeros_are_integers(self, en_locale):
        assert guess_type(["1", "0", "1"], en_locale) == ColumnType.INTEGER

    def test_guess_integer_disabled(self, en_locale):
        assert guess_type(["1", "2"], en_locale, guess_integer=False) == ColumnType.DOUBLE

    def test_only_prefix_is_examined(self, en_locale):
        tokens = ["1"] * 5 + ["oops"]
        assert guess_type(tokens, en_locale, guess_max=5) == ColumnType.INTEGER
        assert guess_type(tokens, en_locale, guess_max=6) == ColumnType.TEXT

    def test_custom_na(self, en_locale):
        assert guess_type(["1", "-"], en_locale, na="-") == ColumnType.INTEGER

    def test_comma_locale(self, comma_locale):
        assert guess_type(["1,5", "2"], comma_locale) == ColumnType.DOUBLE

    def test_settings_guess_max(self, monkeypatch, en_locale):
        monkeypatch.setenv("TIDYTAB_GUESS_MAX", "2")
        assert guess_type(["1", "2", "x"], en_locale) == ColumnType.INTEGER


class TestInferAndParse:
    """Tests for infer_and_parse."""

    def test_valid_integers_have_no_problems(self, en_locale):
        parsed = infer_and_parse(["1", "2", "3"], en_locale, column_name="n")

        assert parsed.type == ColumnType.INTEGER
        assert parsed.values == (1, 2, 3)
        assert parsed.problems.count == 0

    def test_failures_beyond_guess_become_problems(self, en_locale):
        tokens = ["1", "2", "3", "abc"]
        parsed = infer_and_parse(tokens, en_locale, column_name="n", guess_max=3)

        assert parsed.type == ColumnType.INTEGER
        assert parsed.values == (1, 2, 3, None)
        assert list(parsed.problems) == [
            Problem(row=3, column="n", expected="an integer", actual="abc")
        ]

    def test_failures_are_logged(self, en_locale):
        with capture_logs() as logs:
            infer_and_parse(["1", "x"], en_locale, column_name="n", guess_max=1)

        warnings = [e for e in logs if e["event"] == "parsing_failures"]
        assert warnings == [
            {
                "event": "parsing_failures",
                "column": "n",
                "type": "integer",
                "count": 1,
                "log_level": "warning",
            }
        ]

    def test_missing_tokens(self, en_locale):
        parsed = infer_and_parse(["1.5", "NA", "", None, " 2 "], en_locale)
        assert parsed.type == ColumnType.DOUBLE
        assert parsed.values == (1.5, None, None, None, 2.0)
        assert not parsed.problems

    def test_text_is_kept_verbatim_without_trimming(self, en_locale):
        parsed = infer_and_parse([" a ", "b"], en_locale, trim_ws=False)
        assert parsed.type == ColumnType.TEXT
        assert parsed.values == (" a ", "b")

    def test_column_property(self, en_locale):
        column = infer_and_parse(["2015-01-02"], en_locale, column_name="day").column
        assert column.name == "day"
        assert column.values == (date(2015, 1, 2),)

    def test_datetime_values_are_aware(self, en_locale):
        parsed = infer_and_parse(["2015-01-02T10:00:00"], en_locale)
        assert parsed.values == (datetime(2015, 1, 2, 10, tzinfo=UTC),)

    def test_time_values(self, en_locale):
        assert infer_and_parse(["10:30"], en_locale).values == (time(10, 30),)


class TestParseColumn:
    """Tests for parsing under an explicit spec."""

    def test_explicit_date_format(self, en_locale):
        parsed = parse_column(
            ["01/02/15", "13/45/15"], col_date("%m/%d/%y"), en_locale, column_name="when"
        )

        assert parsed.values == (date(2015, 1, 2), None)
        assert parsed.problems.items[0].expected == "date like %m/%d/%y"
        assert parsed.problems.items[0].actual == "13/45/15"

    def test_loose_number(self, en_locale):
        parsed = parse_column(["$1,000,000", "12%", "none"], col_number(), en_locale)
        assert parsed.type == ColumnType.DOUBLE
        assert parsed.values == (1000000.0, 12.0, None)
        assert parsed.problems.count == 1

    def test_logical_accepts_digits(self, en_locale):
        parsed = parse_column(["1", "0", "T"], "l", en_locale)
        assert parsed.values == (True, False, True)

    def test_abbreviation_spec(self, en_locale):
        assert parse_column(["7"], "c", en_locale).values == ("7",)

    def test_skip_spec_rejected(self, en_locale):
        with pytest.raises(ColumnSpecError, match="skipped"):
            parse_column(["1"], col_skip(), en_locale, column_name="a")

    def test_problem_reports_raw_token(self, en_locale):
        parsed = parse_column([" x "], col_integer(), en_locale, column_name="n")
        assert parsed.problems.items[0].actual == " x "

    def test_bad_utc_offset_is_a_problem(self, en_locale):
        parsed = parse_column(
            ["2015-01-02T10:00+01", "2015-01-02T10:00+25"],
            col_datetime(),
            en_locale,
            column_name="at",
        )

        assert parsed.values == (datetime(2015, 1, 2, 9, tzinfo=UTC), None)
        assert parsed.problems.count == 1
        assert parsed.problems.items[0].row == 1


class TestProblems:
    """Tests for the problems ledger."""

    def test_merge_is_order_independent(self):
        a = Problems([Problem(row=2, column="a", expected="an integer", actual="x")])
        b = Problems(
            [
                Problem(row=0, column="b", expected="a double", actual="y"),
                Problem(row=2, column="A", expected="a double", actual="z"),
            ]
        )

        assert Problems.merge([a, b]).items == Problems.merge([b, a]).items
        assert [p.row for p in Problems.merge([a, b])] == [0, 2, 2]

    def test_summary(self):
        problems = Problems()
        assert not problems
        problems.add(Problem(row=0, column="a", expected="an integer", actual="x"))
        assert problems.summary() == "1 parsing failure"
        problems.add(Problem(row=1, column="b", expected="an integer", actual="y"))
        assert problems.summary() == "2 parsing failures"
        assert len(problems.for_column("a")) == 1

    def test_str(self):
        problem = Problem(row=3, column="n", expected="an integer", actual="abc")
        assert str(problem) == "row 3, column 'n': expected an integer, got 'abc'"


class TestTypeConvert:
    """Tests for re-parsing the text columns of a table."""

    def test_text_columns_are_parsed(self, en_locale):
        table = Table.from_dict(
            {
                "country": ["Brazil", "China"],
                "year": ["1999", "2000"],
                "rate": ["0.5", "0.25"],
                "flag": [True, False],
            }
        )

        result = type_convert(table, locale=en_locale)

        assert result.table.column_types == {
            "country": ColumnType.TEXT,
            "year": ColumnType.INTEGER,
            "rate": ColumnType.DOUBLE,
            "flag": ColumnType.LOGICAL,
        }
        assert not result.has_problems

    def test_col_types_and_skip(self, en_locale):
        table = Table.from_dict({"a": ["1", "x"], "b": ["keep", "me"], "c": ["2015-01-02", "NA"]})

        result = type_convert(table, {"a": "i", "b": "_"}, en_locale)

        assert result.table.column_names == ["a", "c"]
        assert result.table["a"] == (1, None)
        assert result.table["c"] == (date(2015, 1, 2), None)
        assert result.problems.count == 1
