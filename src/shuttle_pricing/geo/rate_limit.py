"""Per-API rate limiting and error cooldown for the mapping provider."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from shuttle_pricing.core.exceptions import ProviderCooldownError, RateLimitExceededError
from shuttle_pricing.metrics import MetricsCollector, get_metrics_collector

logger = logging.getLogger(__name__)

ApiType = Literal["route", "geocoding"]


class SlidingWindowRateLimiter:
    """Simple sliding-window rate limiter."""

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._calls: list[float] = []

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        self._calls = [t for t in self._calls if t > cutoff]

    def try_acquire(self) -> bool:
        now = self._clock()
        self._prune(now)
        if len(self._calls) >= self.limit:
            return False
        self._calls.append(now)
        return True

    def remaining(self) -> int:
        self._prune(self._clock())
        return max(0, self.limit - len(self._calls))

    def reset(self) -> None:
        self._calls.clear()


@dataclass
class ErrorTracker:
    consecutive_errors: int = 0
    last_error_time: float = 0.0
    in_cooldown: bool = False


class ProviderGuard:
    """Gatekeeper consulted before every provider call.

    Rejects calls once an API's per-minute quota is used, and puts an API in
    cooldown after ``max_consecutive_errors`` consecutive failures.
    """

    def __init__(
        self,
        limits: dict[ApiType, int],
        max_consecutive_errors: int = 5,
        cooldown_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._clock = clock
        self._limiters = {
            api: SlidingWindowRateLimiter(limit, 60.0, clock) for api, limit in limits.items()
        }
        self._trackers: dict[str, ErrorTracker] = {api: ErrorTracker() for api in limits}
        self.max_consecutive_errors = max_consecutive_errors
        self.cooldown_seconds = cooldown_seconds
        self._metrics = metrics or get_metrics_collector()

    def is_in_cooldown(self, api: ApiType) -> bool:
        tracker = self._trackers[api]
        if not tracker.in_cooldown:
            return False
        if self._clock() - tracker.last_error_time > self.cooldown_seconds:
            tracker.in_cooldown = False
            tracker.consecutive_errors = 0
            return False
        return True

    def check(self, api: ApiType) -> None:
        """Reserve one call for ``api`` or raise the matching ProviderFault."""
        if self.is_in_cooldown(api):
            raise ProviderCooldownError(
                f"{api} API is in cooldown due to consecutive errors", status="COOLDOWN"
            )
        if not self._limiters[api].try_acquire():
            self._metrics.record_event("rate_limit_hit")
            limiter = self._limiters[api]
            logger.warning("%s API rate limit reached: %d/%d", api, limiter.limit, limiter.limit)
            raise RateLimitExceededError(f"{api} API rate limit exceeded", status="RATE_LIMITED")

    def record_success(self, api: ApiType) -> None:
        self._trackers[api].consecutive_errors = 0

    def record_failure(self, api: ApiType) -> None:
        tracker = self._trackers[api]
        tracker.consecutive_errors += 1
        tracker.last_error_time = self._clock()
        if tracker.consecutive_errors >= self.max_consecutive_errors and not tracker.in_cooldown:
            tracker.in_cooldown = True
            logger.warning(
                "%s API entering cooldown due to %d consecutive errors",
                api,
                tracker.consecutive_errors,
            )

    def remaining_calls(self, api: ApiType) -> int:
        return self._limiters[api].remaining()

    def error_stats(self) -> dict[str, ErrorTracker]:
        return {api: ErrorTracker(**vars(tracker)) for api, tracker in self._trackers.items()}

    def reset(self) -> None:
        for api in self._trackers:
            self._trackers[api] = ErrorTracker()
        for limiter in self._limiters.values():
            limiter.reset()
