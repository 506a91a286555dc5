import time
from typing import Any

import httpx

from shuttle_pricing.core.exceptions import (
    NetworkError,
    ProviderFault,
    ServiceUnavailableError,
)
from shuttle_pricing.geo.models import Coordinates, DirectionsResponse, RouteLeg
from shuttle_pricing.metrics import MetricsCollector, get_metrics_collector

# Provider statuses that indicate a temporary condition rather than bad input.
RETRYABLE_STATUSES = frozenset({"OVER_QUERY_LIMIT", "UNKNOWN_ERROR"})


class GeocodingError(ProviderFault):
    """Address could not be geocoded (ZERO_RESULTS, INVALID_REQUEST, ...). Non-retryable."""

    pass


class DirectionsError(ProviderFault):
    """Directions request rejected (NOT_FOUND, ZERO_RESULTS, ...). Non-retryable."""

    pass


class MapsServiceError(ProviderFault, ServiceUnavailableError):
    """Provider error (5xx, OVER_QUERY_LIMIT, network failure). Retryable."""

    pass


class MapsTimeoutError(ProviderFault, NetworkError):
    """Provider request timeout. Retryable."""

    pass


class MapsClient:
    """Async adapter for the geocoding and directions web services."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        metrics: MetricsCollector | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._metrics = metrics or get_metrics_collector()

    async def _get_json(self, component: str, path: str, params: dict[str, str]) -> dict[str, Any]:
        url = f"{self.base_url}/{path}"
        start_time = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params={**params, "key": self.api_key})
        except httpx.TimeoutException as e:
            self._metrics.record_error(component, "timeout")
            raise MapsTimeoutError(
                f"{component} request timed out after {self.timeout}s", status="TIMEOUT"
            ) from e
        except httpx.HTTPError as e:
            self._metrics.record_error(component, "network_error")
            raise MapsServiceError(f"Network error: {e}", status="NETWORK_ERROR") from e

        if response.status_code >= 500:
            self._metrics.record_error(component, f"server_error_{response.status_code}")
            raise MapsServiceError(
                f"Maps server error: {response.status_code}", status=str(response.status_code)
            )

        try:
            data: dict[str, Any] = response.json()
        except ValueError as e:
            self._metrics.record_error(component, "malformed_response")
            raise MapsServiceError("Maps response is not valid JSON", status="MALFORMED") from e

        if not isinstance(data, dict):
            self._metrics.record_error(component, "malformed_response")
            raise MapsServiceError("Maps response is not a JSON object", status="MALFORMED")

        self._metrics.record_event("provider_call")
        self._metrics.record_latency(component, (time.perf_counter() - start_time) * 1000)
        return data

    async def geocode(self, address: str) -> Coordinates:
        """Resolve a single address to coordinates."""
        data = await self._get_json("geocoding", "geocode/json", {"address": address})
        status = data.get("status", "UNKNOWN_ERROR")

        if status in RETRYABLE_STATUSES:
            self._metrics.record_error("geocoding", status.lower())
            raise MapsServiceError(f"Geocoding failed: {status}", status=status)

        results = data.get("results") or []
        if status != "OK" or not results:
            self._metrics.record_error("geocoding", status.lower())
            raise GeocodingError(f"Geocoding failed: {status}", status=status)

        try:
            location = results[0]["geometry"]["location"]
            return Coordinates(lat=float(location["lat"]), lng=float(location["lng"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            self._metrics.record_error("geocoding", "malformed_response")
            raise GeocodingError(
                f"Geocoding result has no usable location: {e}", status="MALFORMED"
            ) from e

    async def route(
        self, origin: str, destination: str, waypoints: list[str] | tuple[str, ...] = ()
    ) -> DirectionsResponse:
        """Driving directions through the waypoints in the given order."""
        params = {"origin": origin, "destination": destination, "mode": "driving"}
        if waypoints:
            params["waypoints"] = "|".join(waypoints)

        data = await self._get_json("directions", "directions/json", params)
        status = data.get("status", "UNKNOWN_ERROR")

        if status in RETRYABLE_STATUSES:
            self._metrics.record_error("directions", status.lower())
            raise MapsServiceError(f"Directions API error: {status}", status=status)

        routes = data.get("routes") or []
        if status != "OK" or not routes:
            self._metrics.record_error("directions", status.lower())
            raise DirectionsError(f"Directions API error: {status}", status=status)

        try:
            legs = [
                RouteLeg(
                    distance_meters=float(leg["distance"]["value"]),
                    duration_seconds=float(leg["duration"]["value"]),
                )
                for leg in routes[0]["legs"]
            ]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            self._metrics.record_error("directions", "malformed_response")
            raise DirectionsError(
                f"Directions route has malformed legs: {e}", status="MALFORMED"
            ) from e
        return DirectionsResponse(legs=legs, status=status)
