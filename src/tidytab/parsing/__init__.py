"""Type inference and parsing module.

This module provides:
- Locale-aware scalar parsers (logical, integer, double, loose number)
- A date/time format language compiled to token matchers
- Column type specs with one-letter abbreviations
- Per-column type inference with a problems ledger for failed cells

Key principle: inference looks ONLY at the values (a bounded prefix of each
column), never at column names.

Usage:
    from tidytab.parsing import infer_and_parse, load_locale

    parsed = infer_and_parse(["1", "2", "x"], column_name="n")
    parsed.type       # ColumnType.INTEGER
    parsed.values     # (1, 2, None)
    parsed.problems   # one Problem for row 2
"""

from tidytab.parsing.datetime_format import (
    DateTimeFormat,
    compile_format,
    parse_date,
    parse_datetime,
    parse_time,
)
from tidytab.parsing.errors import ColumnSpecError, FormatError, ParseError
from tidytab.parsing.inference import (
    guess_type,
    infer_and_parse,
    parse_column,
    parse_columns,
    type_convert,
)
from tidytab.parsing.locale import DateNames, LocaleConfig, LocaleError, default_locale, load_locale
from tidytab.parsing.models import ParsedColumn, ParseResult, Problem, Problems
from tidytab.parsing.null_values import NullValueConfig, load_null_value_config
from tidytab.parsing.numbers import parse_double, parse_integer, parse_logical, parse_number
from tidytab.parsing.spec import (
    ABBREVIATIONS,
    ColumnSpec,
    col_character,
    col_date,
    col_datetime,
    col_double,
    col_guess,
    col_integer,
    col_logical,
    col_number,
    col_skip,
    col_time,
    from_abbreviation,
    resolve_col_types,
)

__all__ = [
    # Inference
    "guess_type",
    "infer_and_parse",
    "parse_column",
    "parse_columns",
    "type_convert",
    # Scalar parsers
    "parse_logical",
    "parse_integer",
    "parse_double",
    "parse_number",
    "parse_date",
    "parse_datetime",
    "parse_time",
    "compile_format",
    "DateTimeFormat",
    # Locale and missing values
    "DateNames",
    "LocaleConfig",
    "LocaleError",
    "default_locale",
    "load_locale",
    "NullValueConfig",
    "load_null_value_config",
    # Column specs
    "ABBREVIATIONS",
    "ColumnSpec",
    "col_character",
    "col_date",
    "col_datetime",
    "col_double",
    "col_guess",
    "col_integer",
    "col_logical",
    "col_number",
    "col_skip",
    "col_time",
    "from_abbreviation",
    "resolve_col_types",
    # Results and errors
    "ParsedColumn",
    "ParseResult",
    "Problem",
    "Problems",
    "ColumnSpecError",
    "FormatError",
    "ParseError",
]
