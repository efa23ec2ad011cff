"""Delimited text source.

Usage:
    from tidytab.sources.delim import read_csv

    result = read_csv("country,year,cases\\nBrazil,1999,37737\\n")
    parsed = result.unwrap()
    parsed.table.column_types
    parsed.problems.count
"""

from tidytab.sources.delim.reader import (
    DelimReader,
    ReadOptions,
    read_csv,
    read_csv2,
    read_delim,
    read_table,
    read_tsv,
)

__all__ = [
    "DelimReader",
    "ReadOptions",
    "read_csv",
    "read_csv2",
    "read_delim",
    "read_table",
    "read_tsv",
]
