"""tidytab - typed tables from raw text, and tidy reshaping.

Example:
    from tidytab import read_csv, gather, separate

    parsed = read_csv("country,1999,2000\\nBrazil,37737,80488\\n").unwrap()
    long = gather(parsed.table, "year", "cases", exclude=["country"], convert=True)
"""

__version__ = "0.1.0"

from tidytab.core.models.base import ColumnType, Result
from tidytab.parsing import (
    LocaleConfig,
    ParseResult,
    Problem,
    Problems,
    infer_and_parse,
    load_locale,
    parse_number,
    type_convert,
)
from tidytab.reshape import extract, gather, separate, spread, unite
from tidytab.sources.delim import read_csv, read_csv2, read_delim, read_tsv
from tidytab.table import Column, Table

__all__ = [
    "Column",
    "ColumnType",
    "LocaleConfig",
    "ParseResult",
    "Problem",
    "Problems",
    "Result",
    "Table",
    "__version__",
    "extract",
    "gather",
    "infer_and_parse",
    "load_locale",
    "parse_number",
    "read_csv",
    "read_csv2",
    "read_delim",
    "read_tsv",
    "separate",
    "spread",
    "type_convert",
    "unite",
]
