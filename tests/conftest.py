import os

# Credential fields have no defaults (the service must fail without secrets).
# Provide a test value so Settings() can be constructed in tests.
os.environ.setdefault("MAPS_API_KEY", "test-maps-key")

import pytest

from shuttle_pricing.metrics import MetricsCollector


class ManualClock:
    """Deterministic clock for TTL, rate-limit and metrics window tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def metrics() -> MetricsCollector:
    """Isolated collector so tests never share the process-wide one."""
    return MetricsCollector()
