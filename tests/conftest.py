"""Shared fixtures: every test gets freshly created model classes."""

from __future__ import annotations

import datetime as dt

import pytest

from staticrecord import Record

COUNTRIES = [
    {"id": 1, "name": "United States", "code": "US", "continent": "North America", "active": True},
    {"id": 2, "name": "Canada", "code": "CA", "continent": "North America", "active": False},
    {"id": 3, "name": "France", "code": "FR", "continent": "Europe", "active": True},
    {
        "id": 4,
        "name": "Germany",
        "code": "DE",
        "continent": "Europe",
        "active": True,
        "updated_at": dt.datetime(2024, 5, 1, 12, 30, 0),
    },
]


@pytest.fixture
def rows():
    return [dict(r) for r in COUNTRIES]


@pytest.fixture
def Country(rows):
    class Country(Record):
        pass

    Country.load(rows)
    return Country


@pytest.fixture
def Empty():
    class Empty(Record):
        pass

    return Empty
