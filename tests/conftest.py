"""Shared pytest fixtures for all tests.

The tuberculosis tables show the same data (cases and population for three
countries in 1999 and 2000) in several layouts.
"""

import pytest

from tidytab.core.config import get_settings
from tidytab.parsing import default_locale, load_locale
from tidytab.table import Table

COUNTRIES = ["Afghanistan", "Afghanistan", "Brazil", "Brazil", "China", "China"]
YEARS = [1999, 2000, 1999, 2000, 1999, 2000]
CASES = [745, 2666, 37737, 80488, 212258, 213766]
POPULATION = [19987071, 20595360, 172006362, 174504898, 1272915272, 1280428583]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; tests that set env vars need a fresh copy."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def en_locale():
    """Default English/UTC locale."""
    return default_locale()


@pytest.fixture
def comma_locale():
    """Locale using ',' as the decimal mark and '.' for grouping."""
    return load_locale("en", decimal_mark=",")


@pytest.fixture
def table1() -> Table:
    """Tidy layout: one row per country and year."""
    return Table.from_dict(
        {
            "country": COUNTRIES,
            "year": YEARS,
            "cases": CASES,
            "population": POPULATION,
        }
    )


@pytest.fixture
def table2() -> Table:
    """Long layout: cases and population stacked under type/count."""
    country, year, kind, count = [], [], [], []
    for i in range(len(COUNTRIES)):
        for name, values in (("cases", CASES), ("population", POPULATION)):
            country.append(COUNTRIES[i])
            year.append(YEARS[i])
            kind.append(name)
            count.append(values[i])
    return Table.from_dict({"country": country, "year": year, "type": kind, "count": count})


@pytest.fixture
def table3() -> Table:
    """Cases and population packed into one rate column."""
    return Table.from_dict(
        {
            "country": COUNTRIES,
            "year": YEARS,
            "rate": [f"{c}/{p}" for c, p in zip(CASES, POPULATION, strict=True)],
        }
    )


@pytest.fixture
def table4a() -> Table:
    """Wide layout: one column of cases per year."""
    return Table.from_dict(
        {
            "country": ["Afghanistan", "Brazil", "China"],
            "1999": [745, 37737, 212258],
            "2000": [2666, 80488, 213766],
        }
    )
