import pytest

from shuttle_pricing.core.exceptions import ProviderCooldownError, RateLimitExceededError
from shuttle_pricing.geo.rate_limit import ProviderGuard, SlidingWindowRateLimiter


@pytest.fixture
def guard(clock, metrics) -> ProviderGuard:
    return ProviderGuard(
        limits={"route": 5, "geocoding": 10},
        max_consecutive_errors=5,
        cooldown_seconds=30.0,
        clock=clock,
        metrics=metrics,
    )


@pytest.mark.unit
class TestSlidingWindowRateLimiter:
    def test_allows_up_to_limit(self, clock):
        limiter = SlidingWindowRateLimiter(limit=3, window_seconds=60, clock=clock)

        assert [limiter.try_acquire() for _ in range(4)] == [True, True, True, False]
        assert limiter.remaining() == 0

    def test_window_slides(self, clock):
        limiter = SlidingWindowRateLimiter(limit=2, window_seconds=60, clock=clock)
        limiter.try_acquire()
        clock.advance(30)
        limiter.try_acquire()

        clock.advance(31)

        assert limiter.remaining() == 1
        assert limiter.try_acquire() is True
        assert limiter.try_acquire() is False


@pytest.mark.unit
@pytest.mark.critical
class TestProviderGuard:
    def test_route_quota_is_five_per_minute(self, guard, metrics):
        for _ in range(5):
            guard.check("route")

        with pytest.raises(RateLimitExceededError):
            guard.check("route")

        assert metrics.get_snapshot().event_counts["rate_limit_hit"] == 1

    def test_quotas_are_per_api(self, guard):
        for _ in range(5):
            guard.check("route")

        guard.check("geocoding")
        assert guard.remaining_calls("geocoding") == 9

    def test_quota_recovers_after_window(self, guard, clock):
        for _ in range(5):
            guard.check("route")

        clock.advance(61)

        guard.check("route")

    def test_cooldown_after_consecutive_errors(self, guard):
        for _ in range(5):
            guard.record_failure("route")

        assert guard.is_in_cooldown("route")
        with pytest.raises(ProviderCooldownError):
            guard.check("route")
        assert not guard.is_in_cooldown("geocoding")

    def test_success_resets_error_streak(self, guard):
        for _ in range(4):
            guard.record_failure("route")
        guard.record_success("route")
        guard.record_failure("route")

        assert not guard.is_in_cooldown("route")
        assert guard.error_stats()["route"].consecutive_errors == 1

    def test_cooldown_expires(self, guard, clock):
        for _ in range(5):
            guard.record_failure("route")

        clock.advance(31)

        assert not guard.is_in_cooldown("route")
        guard.check("route")
        assert guard.error_stats()["route"].consecutive_errors == 0

    def test_reset(self, guard):
        for _ in range(5):
            guard.record_failure("route")
            guard.check("geocoding")

        guard.reset()

        assert not guard.is_in_cooldown("route")
        assert guard.remaining_calls("geocoding") == 10
