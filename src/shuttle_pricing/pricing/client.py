import logging
import time
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from shuttle_pricing.core.exceptions import PricingServiceFault
from shuttle_pricing.metrics import MetricsCollector, get_metrics_collector
from shuttle_pricing.pricing.models import PricingRequest, PricingResponse

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Error recalculating price"


def _server_message(response: httpx.Response) -> str:
    """Best available error message from a failed pricing response."""
    try:
        body: Any = response.json()
    except ValueError:
        return response.text.strip() or FALLBACK_ERROR_MESSAGE
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if message:
            return str(message)
    return str(body) if body else FALLBACK_ERROR_MESSAGE


class PricingClient:
    """Async client for the remote pricing service."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        metrics: MetricsCollector | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._metrics = metrics or get_metrics_collector()

    async def calculate(self, request: PricingRequest) -> PricingResponse:
        url = f"{self.base_url}/pricing/calculate"
        payload = request.model_dump(mode="json", by_alias=True)
        start_time = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, json=payload)
        except httpx.TimeoutException as e:
            self._metrics.record_error("pricing", "timeout")
            raise PricingServiceFault(
                f"Pricing request timed out after {self.timeout}s",
                server_message="The pricing service timed out. Please try again.",
            ) from e
        except httpx.HTTPError as e:
            self._metrics.record_error("pricing", "network_error")
            raise PricingServiceFault(f"Network error: {e}") from e

        if not response.is_success:
            message = _server_message(response)
            self._metrics.record_error("pricing", f"status_{response.status_code}")
            logger.error("Pricing service error (status %d): %s", response.status_code, message)
            raise PricingServiceFault(
                f"Pricing service returned {response.status_code}",
                status_code=response.status_code,
                server_message=message,
            )

        try:
            result = PricingResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            self._metrics.record_error("pricing", "malformed_response")
            raise PricingServiceFault(
                "Malformed pricing response", status_code=response.status_code
            ) from e

        self._metrics.record_latency("pricing", (time.perf_counter() - start_time) * 1000)
        return result
