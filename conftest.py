"""Shared fixtures: a controllable clock and fresh stores."""

import pytest

from state_store import MemoryStore

# 2025-06-15 12:00:00 UTC; midday keeps "+1h" inside the same local day
START = 1_749_988_800.0


class FakeClock:
    """Callable stand-in for time.time that only moves when told to."""

    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds=0, minutes=0, hours=0):
        self.now += seconds + minutes * 60 + hours * 3600


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()
