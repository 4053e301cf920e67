"""Shared fixtures: the classic 14-row play-tennis weather dataset."""

from __future__ import annotations

import polars as pl
import pytest

_WEATHER_ROWS: list[tuple[str, str, bool, str]] = [
    ("Sunny", "High", False, "No"),
    ("Sunny", "High", True, "No"),
    ("Overcast", "High", False, "Yes"),
    ("Rain", "High", False, "Yes"),
    ("Rain", "Normal", False, "Yes"),
    ("Rain", "Normal", True, "No"),
    ("Overcast", "Normal", True, "Yes"),
    ("Sunny", "High", False, "No"),
    ("Sunny", "Normal", False, "Yes"),
    ("Rain", "Normal", False, "Yes"),
    ("Sunny", "Normal", True, "Yes"),
    ("Overcast", "High", True, "Yes"),
    ("Overcast", "Normal", False, "Yes"),
    ("Rain", "High", True, "No"),
]


def make_weather_records() -> list[dict[str, str | bool]]:
    """Build the weather dataset as a list of record dicts.

    Returns:
        list[dict[str, str | bool]]: 14 records with outlook, humidity, windy and play.
    """
    return [
        {"outlook": outlook, "humidity": humidity, "windy": windy, "play": play}
        for outlook, humidity, windy, play in _WEATHER_ROWS
    ]


@pytest.fixture
def weather_records() -> list[dict[str, str | bool]]:
    """Fresh copy of the weather dataset as record dicts.

    Returns:
        list[dict[str, str | bool]]: 14 weather records.
    """
    return make_weather_records()


@pytest.fixture
def weather_frame() -> pl.DataFrame:
    """The weather dataset as a Polars DataFrame.

    Returns:
        pl.DataFrame: 14 rows, columns outlook, humidity, windy, play.
    """
    return pl.DataFrame(make_weather_records())


@pytest.fixture
def weather_features() -> list[str]:
    """Candidate features of the weather dataset, in tie-breaking order.

    Returns:
        list[str]: `["outlook", "humidity", "windy"]`.
    """
    return ["outlook", "humidity", "windy"]
