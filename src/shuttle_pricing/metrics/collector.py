"""Thread-safe provider metrics collector with rolling window tracking."""

import threading
import time
from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal


@dataclass
class LatencyStats:
    """Computed latency statistics."""

    avg_ms: float
    p95_ms: float
    p99_ms: float
    count: int


@dataclass
class ErrorStats:
    """Computed error statistics."""

    count: int
    per_second: float
    by_type: dict[str, int]


@dataclass
class MetricsSnapshot:
    """Point-in-time provider call metrics."""

    # Event counts in the last window, by type
    event_counts: dict[str, int] = field(default_factory=dict)

    # Latency stats by component
    latency: dict[str, LatencyStats] = field(default_factory=dict)

    # Error stats by component
    errors: dict[str, ErrorStats] = field(default_factory=dict)

    timestamp: float = field(default_factory=time.time)


EventType = Literal[
    "provider_call",
    "cache_hit",
    "cache_miss",
    "retry",
    "rate_limit_hit",
    "recalculation_applied",
    "recalculation_failed",
]

ComponentType = Literal["geocoding", "directions", "pricing"]


class MetricsCollector:
    """Thread-safe metrics collector with rolling window tracking.

    Collects:
    - Event counts per type (provider calls, cache hits, retries, rate-limit hits)
    - Latency samples for geocoding, directions and pricing calls
    - Errors per component and error type
    """

    def __init__(self, window_seconds: int = 60, clock: Callable[[], float] = time.time):
        self._window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()

        # Event tracking: list of (timestamp, event_type)
        self._events: list[tuple[float, str]] = []

        # Latency samples: component -> list of (timestamp, latency_ms)
        self._latency_samples: dict[str, list[tuple[float, float]]] = defaultdict(list)

        # Error tracking: component -> list of (timestamp, error_type)
        self._errors: dict[str, list[tuple[float, str]]] = defaultdict(list)

    def record_event(self, event_type: str) -> None:
        """Record an event occurrence."""
        now = self._clock()
        with self._lock:
            self._events.append((now, event_type))
            self._events = self._prune(self._events, now)

    def record_latency(self, component: str, latency_ms: float) -> None:
        """Record a latency sample for a component."""
        now = self._clock()
        with self._lock:
            self._latency_samples[component].append((now, latency_ms))
            self._latency_samples[component] = self._prune(self._latency_samples[component], now)

    def record_error(self, component: str, error_type: str) -> None:
        """Record an error occurrence for a component."""
        now = self._clock()
        with self._lock:
            self._errors[component].append((now, error_type))
            self._errors[component] = self._prune(self._errors[component], now)

    def _prune(self, samples: list[tuple[float, Any]], now: float) -> list[tuple[float, Any]]:
        """Drop samples outside the rolling window. Samples are in insertion order."""
        cutoff = now - self._window_seconds
        for i, (ts, _) in enumerate(samples):
            if ts >= cutoff:
                return samples[i:]
        return []

    def _compute_latency_stats(self, samples: list[tuple[float, float]]) -> LatencyStats:
        """Compute latency statistics from samples."""
        if not samples:
            return LatencyStats(avg_ms=0.0, p95_ms=0.0, p99_ms=0.0, count=0)

        latencies = sorted([lat for _, lat in samples])
        count = len(latencies)
        avg = sum(latencies) / count

        p95_idx = int(count * 0.95)
        p99_idx = int(count * 0.99)
        p95 = latencies[min(p95_idx, count - 1)]
        p99 = latencies[min(p99_idx, count - 1)]

        return LatencyStats(avg_ms=avg, p95_ms=p95, p99_ms=p99, count=count)

    def _compute_error_stats(self, samples: list[tuple[float, str]]) -> ErrorStats:
        by_type: dict[str, int] = defaultdict(int)
        for _, error_type in samples:
            by_type[error_type] += 1
        return ErrorStats(
            count=len(samples),
            per_second=len(samples) / self._window_seconds,
            by_type=dict(by_type),
        )

    def get_snapshot(self) -> MetricsSnapshot:
        """Compute current metrics over the rolling window."""
        now = self._clock()
        with self._lock:
            self._events = self._prune(self._events, now)
            event_counts: dict[str, int] = defaultdict(int)
            for _, event_type in self._events:
                event_counts[event_type] += 1

            latency = {
                component: self._compute_latency_stats(self._prune(samples, now))
                for component, samples in self._latency_samples.items()
            }
            errors = {
                component: self._compute_error_stats(self._prune(samples, now))
                for component, samples in self._errors.items()
            }

        return MetricsSnapshot(
            event_counts=dict(event_counts),
            latency=latency,
            errors=errors,
            timestamp=now,
        )

    def reset(self) -> None:
        with self._lock:
            self._events.clear()
            self._latency_samples.clear()
            self._errors.clear()


_collector: MetricsCollector | None = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    global _collector
    with _collector_lock:
        if _collector is None:
            _collector = MetricsCollector()
        return _collector
