"""Logical and numeric token parsers.

Strict parsers (logical, integer, double) require the whole token to be a
well-formed literal. The loose number parser pulls the first number out of
surrounding text such as currency symbols or percent signs.
"""

from __future__ import annotations

import math
import re
from functools import lru_cache

from tidytab.parsing.errors import ParseError
from tidytab.parsing.locale import LocaleConfig

TRUE_STRINGS = frozenset({"TRUE", "T", "true", "True"})
FALSE_STRINGS = frozenset({"FALSE", "F", "false", "False"})

_INTEGER_RE = re.compile(r"[+-]?\d+")
_SPECIAL_DOUBLES = {
    "inf": math.inf,
    "+inf": math.inf,
    "-inf": -math.inf,
    "infinity": math.inf,
    "-infinity": -math.inf,
    "nan": math.nan,
}


def parse_logical(token: str, *, guessing: bool = False) -> bool:
    """Parse TRUE/FALSE style tokens.

    ``1``/``0`` are accepted when parsing an explicitly logical column but
    never cause a column to be guessed as logical.
    """
    if token in TRUE_STRINGS or (not guessing and token == "1"):
        return True
    if token in FALSE_STRINGS or (not guessing and token == "0"):
        return False
    raise ParseError(token, "1/0/T/F/TRUE/FALSE")


def parse_integer(token: str) -> int:
    if _INTEGER_RE.fullmatch(token) is None:
        raise ParseError(token, "an integer")
    return int(token)


@lru_cache
def _double_regex(decimal_mark: str, grouping_mark: str) -> re.Pattern[str]:
    dm = re.escape(decimal_mark)
    gm = re.escape(grouping_mark)
    plain = rf"(?:\d+(?:{dm}\d*)?|{dm}\d+)(?:[eE][+-]?\d+)?"
    grouped = rf"\d{{1,3}}(?:{gm}\d{{3}})+(?:{dm}\d*)?"
    return re.compile(rf"[+-]?(?:{grouped}|{plain})")


def parse_double(token: str, locale: LocaleConfig) -> float:
    """Parse a strict decimal number using the locale's marks.

    Well-formed grouped numbers (three-digit groups) are accepted.
    """
    special = _SPECIAL_DOUBLES.get(token.lower())
    if special is not None:
        return special
    if _double_regex(locale.decimal_mark, locale.grouping_mark).fullmatch(token) is None:
        raise ParseError(token, "a double")
    return _to_float(token, locale)


@lru_cache
def _number_regex(decimal_mark: str, grouping_mark: str) -> re.Pattern[str]:
    dm = re.escape(decimal_mark)
    gm = re.escape(grouping_mark)
    return re.compile(rf"(?P<sign>[+-])?(?P<digits>(?:\d|{dm}\d)[\d{gm}{dm}]*)")


def parse_number(token: str, locale: LocaleConfig) -> float:
    """Parse the first number found in a token, ignoring its surroundings.

    Non-numeric prefixes and suffixes are dropped, grouping marks inside the
    number are ignored and the locale's decimal mark becomes the decimal point.
    A second decimal mark ends the number.

    Examples:
        "$1,000,000" -> 1000000.0
        "12.5%"      -> 12.5
        "123.456,789" with decimal_mark="," -> 123456.789
    """
    match = _number_regex(locale.decimal_mark, locale.grouping_mark).search(token)
    if match is None:
        raise ParseError(token, "a number")

    digits = match.group("digits")
    first = digits.find(locale.decimal_mark)
    if first >= 0:
        second = digits.find(locale.decimal_mark, first + 1)
        if second >= 0:
            digits = digits[:second]
    digits = digits.rstrip(locale.grouping_mark)
    return _to_float((match.group("sign") or "") + digits, locale)


def _to_float(text: str, locale: LocaleConfig) -> float:
    text = text.replace(locale.grouping_mark, "").replace(locale.decimal_mark, ".")
    try:
        return float(text)
    except ValueError as e:
        raise ParseError(text, "a number") from e
