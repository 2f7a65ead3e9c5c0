# tests/conftest.py
from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from loguru import logger

from ibonarium.core.event_log import EventLog
from ibonarium.core.random_source import ConstantRandom, SeededRandom
from ibonarium.core.readings import GeoReading, SocialReading
from ibonarium.core.store import StateStore
from ibonarium.utils.errors import TransientSyncFailure


@pytest.fixture(autouse=True)
def disable_file_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def fixed_clock():
    """Deterministic clock: 12:00:00, then +1s per call."""
    state = {"now": datetime(2026, 1, 1, 12, 0, 0)}

    def _clock() -> datetime:
        current = state["now"]
        state["now"] = current + timedelta(seconds=1)
        return current

    return _clock


@pytest.fixture
def event_log(fixed_clock) -> EventLog:
    return EventLog(clock=fixed_clock)


@pytest.fixture
def zero_rng() -> ConstantRandom:
    return ConstantRandom(0.0)


@pytest.fixture
def seeded_rng() -> SeededRandom:
    return SeededRandom(1234)


# ============================================================
# Fake providers (external collaborators)
# ============================================================
class StaticProvider:
    def __init__(self, reading):
        self.reading = reading
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return self.reading


class FailingProvider:
    def __init__(self, category: str = "geo", exc: Exception | None = None):
        self.exc = exc or TransientSyncFailure(category, "connection refused")
        self.calls = 0

    def fetch(self):
        self.calls += 1
        raise self.exc


@pytest.fixture
def geo_ok() -> StaticProvider:
    return StaticProvider(GeoReading(temperature=4.5, wind_speed=20.0))


@pytest.fixture
def social_ok() -> StaticProvider:
    return StaticProvider(SocialReading(price_change_percent=-3.0))


@pytest.fixture
def make_static_provider():
    return StaticProvider


@pytest.fixture
def make_failing_provider():
    return FailingProvider
