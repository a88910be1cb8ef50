"""Shared fixtures: the play-tennis table and the four-record toy table."""

from __future__ import annotations

import polars as pl
import pytest

_WEATHER_COLUMNS = ("outlook", "temperature", "humidity", "windy", "play")
_WEATHER_ROWS = (
    ("sunny", "hot", "high", "false", "no"),
    ("sunny", "hot", "high", "true", "no"),
    ("overcast", "hot", "high", "false", "yes"),
    ("rainy", "mild", "high", "false", "yes"),
    ("rainy", "cool", "normal", "false", "yes"),
    ("rainy", "cool", "normal", "true", "no"),
    ("overcast", "cool", "normal", "true", "yes"),
    ("sunny", "mild", "high", "false", "no"),
    ("sunny", "cool", "normal", "false", "yes"),
    ("rainy", "mild", "normal", "false", "yes"),
    ("sunny", "mild", "normal", "true", "yes"),
    ("overcast", "mild", "high", "true", "yes"),
    ("overcast", "hot", "normal", "false", "yes"),
    ("rainy", "mild", "high", "true", "no"),
)


@pytest.fixture
def weather_records() -> list[dict[str, str]]:
    """The 14-day play-tennis table as records; the class column is ``play``.

    Returns:
        list[dict[str, str]]: One record per day.
    """
    return [dict(zip(_WEATHER_COLUMNS, row, strict=True)) for row in _WEATHER_ROWS]


@pytest.fixture
def weather_dataset(weather_records: list[dict[str, str]]) -> pl.DataFrame:
    """The play-tennis table as a dataset.

    Args:
        weather_records (list[dict[str, str]]): Records fixture.

    Returns:
        pl.DataFrame: All-string dataset with ``play`` as the last column.
    """
    return pl.DataFrame(weather_records)


@pytest.fixture
def toy_dataset() -> pl.DataFrame:
    """Four records, one feature ``A`` and class column ``C``.

    Returns:
        pl.DataFrame: ``A=x`` is mixed (yes, no); ``A=y`` is pure no.
    """
    return pl.DataFrame({"A": ["x", "x", "y", "y"], "C": ["yes", "no", "no", "no"]})
