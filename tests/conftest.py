"""Shared fixtures."""

import pytest

from helphive.ledger import UsageLedger
from helphive.storage import InMemoryUsageStore


START_TIME = 1_700_000_000.0


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryUsageStore()


@pytest.fixture
def ledger(store, clock):
    return UsageLedger(store, clock=clock)
