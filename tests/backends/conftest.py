"""Shared fixtures for backend tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def temp_dir():
    """Temporary directory for test data."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def clock():
    """Controllable clock handed to backends."""
    return FakeClock()


@pytest.fixture
def structured_value():
    """Nested value exercising every supported primitive."""
    return {
        "name": "Ünïcödé ключ 鍵",
        "count": -42,
        "ratio": -0.125,
        "flags": [True, False, None],
        "nested": {
            "list": [1, [2, [3, {"deep": "value"}]]],
            "empty_dict": {},
            "empty_list": [],
        },
        "blob": b"\x00\x01\xff",
        "special": "Line\nbreak and\ttab",
    }


@pytest.fixture
def sample_datetime():
    return datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)
