import logging

import pytest

from pomodoro_quest.catalog import builtin_catalog
from pomodoro_quest.storage import BlobStore


class FakeClock:
    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ScriptedRandom:
    """Returns queued values from ``random()``, then a fallback value."""

    def __init__(self, values=(), fallback: float = 0.99):
        self.values = list(values)
        self.fallback = fallback
        self.calls = 0

    def random(self) -> float:
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.fallback


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("PomodoroQuest.tests")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def catalog():
    return builtin_catalog()


@pytest.fixture
def store(tmp_path) -> BlobStore:
    return BlobStore(str(tmp_path / "store"))
