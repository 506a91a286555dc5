from .debounce import DebounceScheduler
from .maps_client import (
    DirectionsError,
    GeocodingError,
    MapsClient,
    MapsServiceError,
    MapsTimeoutError,
)
from .models import Coordinates, DirectionsResponse, RouteLeg, RouteQuery, RouteResult
from .rate_limit import ProviderGuard, SlidingWindowRateLimiter
from .route_cache import RouteResolutionCache, create_route_resolution_cache
from .ttl_cache import TTLCache

__all__ = [
    "Coordinates",
    "DebounceScheduler",
    "DirectionsError",
    "DirectionsResponse",
    "GeocodingError",
    "MapsClient",
    "MapsServiceError",
    "MapsTimeoutError",
    "ProviderGuard",
    "RouteLeg",
    "RouteQuery",
    "RouteResolutionCache",
    "RouteResult",
    "SlidingWindowRateLimiter",
    "TTLCache",
    "create_route_resolution_cache",
]
