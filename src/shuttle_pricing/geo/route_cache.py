"""Route Resolution Cache: TTL caching and request coalescing in front of the maps provider."""

import asyncio
import logging

from shuttle_pricing.core.exceptions import (
    ProviderCooldownError,
    ProviderFault,
    RateLimitExceededError,
    TimeoutFault,
)
from shuttle_pricing.core.retry import RetryConfig, with_retry
from shuttle_pricing.geo.maps_client import MapsClient
from shuttle_pricing.geo.models import (
    Coordinates,
    DirectionsResponse,
    RouteQuery,
    RouteResult,
    normalize_address,
)
from shuttle_pricing.geo.rate_limit import ApiType, ProviderGuard
from shuttle_pricing.geo.ttl_cache import TTLCache
from shuttle_pricing.metrics import MetricsCollector, get_metrics_collector
from shuttle_pricing.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_ROUTE_TTL_SECONDS = 300.0
DEFAULT_COORDINATE_CACHE_SIZE = 200


class RouteResolutionCache:
    """Resolves RouteQuery values to RouteResult with at most one provider call per key.

    - Live cache entries are returned without touching the provider.
    - Concurrent requests for the same key share one in-flight task; late
      callers attach to it instead of issuing a second call.
    - Only successful resolutions are cached. Whole-route failures propagate as
      ProviderFault; a failed geocode of a single waypoint only drops that
      waypoint's coordinates.
    """

    def __init__(
        self,
        maps_client: MapsClient,
        route_cache: TTLCache[RouteResult] | None = None,
        coordinate_cache: TTLCache[Coordinates] | None = None,
        guard: ProviderGuard | None = None,
        retry_config: RetryConfig | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.maps_client = maps_client
        # Explicit None checks: an injected empty cache is falsy.
        if route_cache is None:
            route_cache = TTLCache(ttl_seconds=DEFAULT_ROUTE_TTL_SECONDS)
        if coordinate_cache is None:
            coordinate_cache = TTLCache(maxsize=DEFAULT_COORDINATE_CACHE_SIZE)
        self.route_cache: TTLCache[RouteResult] = route_cache
        self.coordinate_cache: TTLCache[Coordinates] = coordinate_cache
        self.guard = guard
        self.retry_config = retry_config or RetryConfig()
        self._metrics = metrics or get_metrics_collector()
        self._in_flight: dict[str, asyncio.Task[RouteResult]] = {}

    def peek(self, query: RouteQuery) -> RouteResult | None:
        """Return the live cached result for ``query`` without any provider call."""
        if not query.is_complete:
            return None
        return self.route_cache.get(query.cache_key)

    def is_in_flight(self, query: RouteQuery) -> bool:
        return query.cache_key in self._in_flight

    async def resolve(self, query: RouteQuery) -> RouteResult | None:
        if not query.is_complete:
            logger.debug("Missing pickup or dropoff, route not resolved")
            return None

        key = query.cache_key
        cached = self.route_cache.get(key)
        if cached is not None:
            self._metrics.record_event("cache_hit")
            logger.debug("Using cached route for %s", key)
            return cached

        task = self._in_flight.get(key)
        if task is None:
            self._metrics.record_event("cache_miss")
            task = asyncio.get_running_loop().create_task(self._resolve_uncached(query))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._on_resolution_done(key, done))
        else:
            logger.debug("Attaching to in-flight resolution for %s", key)

        # Shielded so a cancelled caller does not cancel the shared call.
        return await asyncio.shield(task)

    async def wait_for_in_flight(self, query: RouteQuery, timeout: float) -> RouteResult | None:
        """Wait up to ``timeout`` seconds for an in-flight resolution of ``query``.

        Returns the cached result when nothing is in flight.
        """
        task = self._in_flight.get(query.cache_key)
        if task is None:
            return self.peek(query)
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout)
        except TimeoutError as e:
            raise TimeoutFault(
                f"Route resolution still in flight after {timeout:.1f}s", status="TIMEOUT"
            ) from e

    def _on_resolution_done(self, key: str, task: asyncio.Task[RouteResult]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark the exception as retrieved; awaiting callers receive it.
            task.exception()

    async def _resolve_uncached(self, query: RouteQuery) -> RouteResult:
        key = query.cache_key
        valid_stops = query.valid_stops
        logger.info("Resolving route %s (%d stops)", key, len(valid_stops))

        try:
            directions = await self._fetch_directions(query)
        except ProviderFault as e:
            logger.error("Route resolution failed for %s: %s", key, e)
            raise

        pickup_coords = await self.get_coordinates(query.pickup)
        dropoff_coords = await self.get_coordinates(query.dropoff)
        stop_coords: tuple[Coordinates, ...] | None = None
        if valid_stops:
            resolved = [await self.get_coordinates(stop) for stop in valid_stops]
            stop_coords = tuple(coords for coords in resolved if coords is not None)

        result = RouteResult.from_directions(
            directions,
            valid_stop_count=len(valid_stops),
            pickup_coords=pickup_coords,
            dropoff_coords=dropoff_coords,
            stop_coords=stop_coords,
        )
        self.route_cache.set(key, result)
        logger.info(
            "Route resolved for %s: %s, %s", key, result.distance_text, result.duration_text
        )
        return result

    async def _fetch_directions(self, query: RouteQuery) -> DirectionsResponse:
        async def attempt() -> DirectionsResponse:
            self._check_guard("route")
            try:
                directions = await self.maps_client.route(
                    query.pickup, query.dropoff, query.valid_stops
                )
            except ProviderFault:
                self._record_failure("route")
                raise
            self._record_success("route")
            return directions

        return await with_retry(
            attempt,
            self.retry_config,
            operation_name=f"directions {query.cache_key}",
            on_retry=lambda _e, _attempt: self._metrics.record_event("retry"),
        )

    async def get_coordinates(self, address: str) -> Coordinates | None:
        """Coordinates for one address, cached by address. Failures yield None."""
        address = normalize_address(address)
        if not address:
            return None

        cached = self.coordinate_cache.get(address)
        if cached is not None:
            return cached

        try:
            self._check_guard("geocoding")
            coords = await self.maps_client.geocode(address)
        except (RateLimitExceededError, ProviderCooldownError) as e:
            logger.warning("Skipped coordinates for %r: %s", address, e)
            return None
        except ProviderFault as e:
            self._record_failure("geocoding")
            logger.warning("Failed to get coordinates for %r: %s", address, e)
            return None

        self._record_success("geocoding")
        self.coordinate_cache.set(address, coords)
        return coords

    def _check_guard(self, api: ApiType) -> None:
        if self.guard is not None:
            self.guard.check(api)

    def _record_success(self, api: ApiType) -> None:
        if self.guard is not None:
            self.guard.record_success(api)

    def _record_failure(self, api: ApiType) -> None:
        if self.guard is not None:
            self.guard.record_failure(api)

    def cache_stats(self) -> dict[str, object]:
        return {
            "routes": self.route_cache.stats(),
            "coordinates": self.coordinate_cache.stats(),
            "in_flight": len(self._in_flight),
        }

    def clear_cache(self) -> None:
        self.route_cache.clear()
        self.coordinate_cache.clear()


def create_route_resolution_cache(
    settings: Settings, metrics: MetricsCollector | None = None
) -> RouteResolutionCache:
    """Wire a RouteResolutionCache from settings."""
    metrics = metrics or get_metrics_collector()
    provider = settings.provider
    maps_client = MapsClient(
        base_url=settings.maps.base_url,
        api_key=settings.maps.api_key,
        timeout=settings.maps.timeout_seconds,
        metrics=metrics,
    )
    guard = ProviderGuard(
        limits={
            "route": provider.route_calls_per_minute,
            "geocoding": provider.geocoding_calls_per_minute,
        },
        max_consecutive_errors=provider.max_consecutive_errors,
        cooldown_seconds=provider.error_cooldown_seconds,
        metrics=metrics,
    )
    return RouteResolutionCache(
        maps_client=maps_client,
        route_cache=TTLCache(
            ttl_seconds=settings.route_cache.route_ttl_seconds,
            maxsize=settings.route_cache.route_cache_maxsize,
        ),
        coordinate_cache=TTLCache(maxsize=settings.route_cache.coordinate_cache_maxsize),
        guard=guard,
        retry_config=RetryConfig(
            max_attempts=provider.max_retries + 1,
            base_delay=provider.retry_base_delay,
            multiplier=provider.retry_multiplier,
        ),
        metrics=metrics,
    )
