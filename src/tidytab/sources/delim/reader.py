"""Delimited text reader - raw text in, typed table out.

Delimited text is untyped: every field arrives as text. The reader tokenises
the input, repairs the header, then hands each column to the type inference
engine. Cell-level failures land in the problems ledger; only failures that
prevent building any table at all make the read fail.
"""

from __future__ import annotations

import csv
import time
from collections.abc import Callable, Iterable, Sequence
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field

from tidytab.core.config import get_settings
from tidytab.core.logging import get_logger, log_context
from tidytab.core.models.base import Result
from tidytab.parsing import (
    ColumnSpecError,
    FormatError,
    LocaleConfig,
    ParseResult,
    Problem,
    Problems,
    default_locale,
    load_locale,
    parse_columns,
    resolve_col_types,
)
from tidytab.parsing.null_values import resolve_na
from tidytab.table import Table

logger = get_logger(__name__)

Source = str | bytes | IO[str] | IO[bytes]
Decompressor = Callable[[bytes], bytes]


class ReadOptions(BaseModel):
    """Options controlling how delimited text is tokenised and parsed."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    delim: str = ","
    quote: str | None = '"'
    col_names: bool | list[str] = True
    col_types: Any = None
    locale: LocaleConfig | None = None
    na: list[str] | None = None
    na_extended: bool | None = None
    trim_ws: bool | None = None
    comment: str | None = None
    skip: int = Field(default=0, ge=0)
    n_max: int | None = Field(default=None, ge=0)
    guess_max: int | None = Field(default=None, ge=1)
    skip_empty_rows: bool = True


class DelimReader:
    """Reader for delimited text (CSV, TSV, semicolon-separated, ...)."""

    def __init__(self, options: ReadOptions | None = None):
        self.options = options or ReadOptions()

    @property
    def locale(self) -> LocaleConfig:
        return self.options.locale or default_locale()

    def read(self, source: Source, decompress: Decompressor | None = None) -> Result[ParseResult]:
        """Read delimited text into a table.

        Args:
            source: Literal text, encoded bytes or a file-like object
            decompress: Optional hook applied to bytes before decoding

        Returns:
            Result containing the ParseResult. A successful result with
            problems carries a warning summarising the failure count.
        """
        start_time = time.time()
        options = self.options

        if len(options.delim) != 1:
            return Result.fail(f"Delimiter must be a single character, got {options.delim!r}")

        try:
            text = self._to_text(source, decompress)
            rows = self._tokenize(text)
        except UnicodeDecodeError as e:
            return Result.fail(f"Cannot decode input as {self.locale.encoding}: {e}")
        except (OSError, csv.Error) as e:
            return Result.fail(f"Failed to read delimited text: {e}")

        if options.col_names is True:
            header, data = (rows[0], rows[1:]) if rows else ([], [])
        elif options.col_names is False:
            header, data = [f"X{i + 1}" for i in range(len(rows[0]) if rows else 0)], rows
        else:
            header, data = list(options.col_names), rows

        if options.n_max is not None:
            data = data[: options.n_max]

        names = self._repair_names(header)
        columns, shape_problems = self._columns(names, data)

        try:
            specs = resolve_col_types(options.col_types, names)
            with log_context(reader="delim"):
                parsed = parse_columns(
                    names,
                    columns,
                    specs,
                    self.locale,
                    na=self._na(),
                    trim_ws=options.trim_ws,
                    guess_max=options.guess_max,
                )
        except (ColumnSpecError, FormatError) as e:
            return Result.fail(f"Invalid column types: {e}")

        problems = Problems.merge([shape_problems, parsed.problems])
        result = ParseResult(parsed.table, problems)

        logger.info(
            "delim_read",
            rows=result.table.n_rows,
            columns=result.table.n_columns,
            problems=problems.count,
            duration_seconds=round(time.time() - start_time, 4),
        )

        warnings = [problems.summary()] if problems else []
        return Result.ok(result, warnings=warnings)

    def _na(self) -> list[str] | None:
        options = self.options
        if options.na is None and options.na_extended is not None:
            return sorted(resolve_na(None, extended=options.na_extended))
        return options.na

    def _to_text(self, source: Source, decompress: Decompressor | None) -> str:
        if hasattr(source, "read"):
            source = source.read()  # type: ignore[union-attr]
        if isinstance(source, (bytes, bytearray)):
            raw = bytes(source)
            if decompress is not None:
                raw = decompress(raw)
            source = raw.decode(self.locale.encoding)
        assert isinstance(source, str)
        return source.removeprefix("\ufeff")

    def _tokenize(self, text: str) -> list[list[str]]:
        options = self.options
        lines: Iterable[str] = text.splitlines(keepends=True)[options.skip :]
        if options.comment:
            lines = self._strip_comments(lines)

        if options.quote:
            reader = csv.reader(lines, delimiter=options.delim, quotechar=options.quote, doublequote=True)
        else:
            reader = csv.reader(lines, delimiter=options.delim, quoting=csv.QUOTE_NONE)

        rows = []
        for row in reader:
            if options.skip_empty_rows and self._is_blank(row):
                continue
            rows.append(row)
        return rows

    def _strip_comments(self, lines: Iterable[str]) -> list[str]:
        """Cut each line at the comment marker unless it sits inside quotes.

        The quote state carries over line breaks, so a marker on the
        continuation line of a multi-line quoted field is kept.
        """
        comment = self.options.comment
        quote = self.options.quote
        assert comment is not None
        in_quote = False
        stripped = []
        for line in lines:
            cut = len(line)
            for i, char in enumerate(line):
                if quote and char == quote:
                    in_quote = not in_quote
                elif not in_quote and line.startswith(comment, i):
                    cut = i
                    break
            if cut < len(line):
                line = line[:cut] + ("\n" if line.endswith("\n") else "")
            stripped.append(line)
        return stripped

    @staticmethod
    def _is_blank(row: Sequence[str]) -> bool:
        return not row or (len(row) == 1 and not row[0].strip())

    @staticmethod
    def _repair_names(header: Sequence[str]) -> list[str]:
        """Fill blank names and make duplicates unique."""
        names: list[str] = []
        seen: dict[str, int] = {}
        duplicates: list[str] = []
        for i, raw in enumerate(header):
            name = raw.strip() or f"X{i + 1}"
            if name in seen:
                duplicates.append(name)
                seen[name] += 1
                candidate = f"{name}_{seen[name]}"
                while candidate in seen:
                    seen[name] += 1
                    candidate = f"{name}_{seen[name]}"
                name = candidate
            seen.setdefault(name, 1)
            names.append(name)
        if duplicates:
            logger.warning("duplicate_column_names", names=sorted(set(duplicates)))
        return names

    @staticmethod
    def _columns(
        names: Sequence[str], rows: Sequence[Sequence[str]]
    ) -> tuple[list[list[str | None]], Problems]:
        """Transpose rows into columns, padding or truncating ragged rows.

        A kept blank line becomes a row of missing values without a problem.
        """
        width = len(names)
        columns: list[list[str | None]] = [[] for _ in range(width)]
        problems = Problems()
        for row_index, row in enumerate(rows):
            if row and len(row) != width:
                problems.add(
                    Problem(
                        row=row_index,
                        column="",
                        expected=f"{width} columns",
                        actual=f"{len(row)} columns",
                    )
                )
            for i in range(width):
                columns[i].append(row[i] if i < len(row) else None)
        return columns, problems


def read_delim(
    source: Source,
    delim: str = ",",
    *,
    quote: str | None = '"',
    col_names: bool | Sequence[str] = True,
    col_types: Any = None,
    locale: LocaleConfig | None = None,
    na: Iterable[str] | str | None = None,
    na_extended: bool | None = None,
    trim_ws: bool | None = None,
    comment: str | None = None,
    skip: int = 0,
    n_max: int | None = None,
    guess_max: int | None = None,
    skip_empty_rows: bool = True,
    decompress: Decompressor | None = None,
) -> Result[ParseResult]:
    """Read delimited text into a typed table.

    Args:
        source: Literal text, encoded bytes (decoded with locale.encoding) or a
            file-like object
        delim: Single-character field delimiter
        quote: Quote character, or None to disable quoting
        col_names: True to use the first row, False to generate X1..Xn, or names
        col_types: None (guess), compact string, mapping or sequence of specs
        locale: Parsing locale (default: settings' default locale)
        na: Missing-value tokens (default: configured null values)
        na_extended: Add the extended null tokens (N/A, NULL, ...) when na is
            not given (default: Settings.na_extended)
        trim_ws: Strip whitespace around fields before parsing
        comment: Marker starting a comment that runs to end of line
        skip: Lines to skip before reading anything
        n_max: Maximum number of data rows
        guess_max: Rows examined when guessing column types
        skip_empty_rows: Drop blank lines
        decompress: Hook applied to bytes input before decoding

    Returns:
        Result containing a ParseResult (table + problems ledger)
    """
    if isinstance(na, str):
        na = [na]
    options = ReadOptions(
        delim=delim,
        quote=quote or None,
        col_names=col_names if isinstance(col_names, bool) else list(col_names),
        col_types=col_types,
        locale=locale,
        na=list(na) if na is not None else None,
        na_extended=na_extended,
        trim_ws=trim_ws,
        comment=comment,
        skip=skip,
        n_max=n_max,
        guess_max=guess_max,
        skip_empty_rows=skip_empty_rows,
    )
    return DelimReader(options).read(source, decompress=decompress)


def read_csv(source: Source, **kwargs: Any) -> Result[ParseResult]:
    """Read comma-separated text."""
    return read_delim(source, ",", **kwargs)


def read_csv2(source: Source, **kwargs: Any) -> Result[ParseResult]:
    """Read semicolon-separated text that uses ',' as the decimal mark."""
    if kwargs.get("locale") is None:
        kwargs["locale"] = load_locale(get_settings().default_locale, decimal_mark=",")
    return read_delim(source, ";", **kwargs)


def read_tsv(source: Source, **kwargs: Any) -> Result[ParseResult]:
    """Read tab-separated text."""
    return read_delim(source, "\t", **kwargs)


def read_table(source: Source, delim: str = ",", **kwargs: Any) -> Table:
    """Read delimited text and return the table, raising on outright failure."""
    return read_delim(source, delim, **kwargs).unwrap().table
