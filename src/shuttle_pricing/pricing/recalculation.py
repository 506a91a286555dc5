"""Recalculation flow: resolve the route, call the pricing service, merge the result."""

import logging
import math
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field

from shuttle_pricing.booking_logging import log_context, log_quote_context
from shuttle_pricing.core.exceptions import ProviderFault, ShuttlePricingError, ValidationFault
from shuttle_pricing.geo.debounce import DebounceScheduler
from shuttle_pricing.geo.models import Coordinates, RouteQuery, RouteResult
from shuttle_pricing.geo.route_cache import RouteResolutionCache, create_route_resolution_cache
from shuttle_pricing.metrics import MetricsCollector, get_metrics_collector
from shuttle_pricing.pricing.client import PricingClient
from shuttle_pricing.pricing.fare import FareBreakdown, PaymentMethod
from shuttle_pricing.pricing.models import LocationPayload, PricingRequest, PricingResponse
from shuttle_pricing.pricing.session import FareSession
from shuttle_pricing.settings import DebounceSettings, RecalculationSettings, Settings

logger = logging.getLogger(__name__)

MISSING_ADDRESS_MESSAGE = (
    "Cannot recalculate price: Please enter both pickup and dropoff addresses."
)
DISTANCE_UNAVAILABLE_MESSAGE = (
    "Cannot calculate distance between addresses. "
    "Please check that the pickup and dropoff addresses are valid."
)
RouteInputSurface = Literal["route", "places"]


class RecalculationState(StrEnum):
    IDLE = "idle"
    AWAITING_ROUTE = "awaiting_route"
    AWAITING_PRICING = "awaiting_pricing"
    APPLIED = "applied"
    FAILED = "failed"


class FailureStage(StrEnum):
    VALIDATION = "validation"
    ROUTE = "route"
    PRICING = "pricing"


class RecalculationRequest(BaseModel):
    query: RouteQuery
    child_seats_count: int = Field(default=0, ge=0)
    is_round_trip: bool = False
    vehicle_type_id: str = ""
    # None keeps the session's current payment method.
    payment_method: PaymentMethod | None = None


class RecalculationOutcome(BaseModel):
    state: RecalculationState
    stage: FailureStage | None = None
    message: str | None = None
    route: RouteResult | None = None
    response: PricingResponse | None = None
    breakdown: FareBreakdown | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == RecalculationState.APPLIED


def _location(address: str, coords: Coordinates | None) -> LocationPayload:
    if coords is None:
        return LocationPayload(address=address)
    return LocationPayload(address=address, lat=coords.lat, lng=coords.lng)


class RecalculationOrchestrator:
    """Drives one editing session's price recalculations.

    Each ``recalculate`` call walks IDLE -> AWAITING_ROUTE -> AWAITING_PRICING
    and ends in APPLIED or FAILED. Faults never escape: they are returned as a
    FAILED outcome naming the stage that failed.
    """

    def __init__(
        self,
        route_cache: RouteResolutionCache,
        pricing_client: PricingClient,
        debounce: DebounceScheduler | None = None,
        settings: RecalculationSettings | None = None,
        debounce_settings: DebounceSettings | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.route_cache = route_cache
        self.pricing_client = pricing_client
        self.debounce = debounce or DebounceScheduler()
        self.settings = settings or RecalculationSettings()
        self.debounce_settings = debounce_settings or DebounceSettings()
        self._metrics = metrics or get_metrics_collector()
        self.state = RecalculationState.IDLE
        self.last_route: RouteResult | None = None
        self.last_route_error: ProviderFault | None = None
        self.last_coordinates: Coordinates | None = None

    def _transition(self, state: RecalculationState) -> None:
        logger.debug("Recalculation %s -> %s", self.state, state)
        self.state = state

    async def recalculate(
        self, request: RecalculationRequest, session: FareSession
    ) -> RecalculationOutcome:
        self.state = RecalculationState.IDLE
        route: RouteResult | None = None

        with log_quote_context(request.query.cache_key):
            try:
                if not request.query.is_complete:
                    raise ValidationFault(MISSING_ADDRESS_MESSAGE)

                self._transition(RecalculationState.AWAITING_ROUTE)
                route = await self._await_route(request.query)
                miles = route.distance_miles if route is not None else 0.0
                if route is None or not math.isfinite(miles) or miles <= 0:
                    raise ValidationFault(DISTANCE_UNAVAILABLE_MESSAGE)

                if request.payment_method is not None:
                    session.set_payment_method(request.payment_method)

                self._transition(RecalculationState.AWAITING_PRICING)
                response = await self.pricing_client.calculate(
                    self._build_pricing_request(request, route, session)
                )
                breakdown = session.apply_pricing_response(response)
            except ShuttlePricingError as e:
                return self._fail(e, route)

            self._transition(RecalculationState.APPLIED)
            self._metrics.record_event("recalculation_applied")
            logger.info("Price recalculated: total %.2f", breakdown.total)
            return RecalculationOutcome(
                state=self.state, route=route, response=response, breakdown=breakdown
            )

    def _fail(self, error: ShuttlePricingError, route: RouteResult | None) -> RecalculationOutcome:
        stage = {
            RecalculationState.IDLE: FailureStage.VALIDATION,
            RecalculationState.AWAITING_ROUTE: FailureStage.ROUTE,
            RecalculationState.AWAITING_PRICING: FailureStage.PRICING,
        }.get(self.state, FailureStage.PRICING)
        self._transition(RecalculationState.FAILED)
        self._metrics.record_event("recalculation_failed")
        with log_context(stage=stage.value):
            logger.warning("Price recalculation failed at %s stage: %s", stage, error.message)
        return RecalculationOutcome(
            state=self.state, stage=stage, message=error.user_message, route=route
        )

    async def _await_route(self, query: RouteQuery) -> RouteResult | None:
        cached = self.route_cache.peek(query)
        if cached is not None:
            return cached

        if self.route_cache.is_in_flight(query):
            logger.info("Route calculation already in progress, waiting for completion")
            return await self.route_cache.wait_for_in_flight(
                query, self.settings.route_wait_timeout_seconds
            )

        return await self.route_cache.resolve(query)

    def _build_pricing_request(
        self, request: RecalculationRequest, route: RouteResult, session: FareSession
    ) -> PricingRequest:
        return PricingRequest(
            pickup=_location(request.query.pickup, route.pickup_coords),
            dropoff=_location(request.query.dropoff, route.dropoff_coords),
            miles=route.distance_miles,
            stops_count=route.valid_stop_count,
            child_seats_count=request.child_seats_count,
            is_round_trip=request.is_round_trip,
            vehicle_type_id=request.vehicle_type_id,
            payment_method=session.payment_method,
        )

    def on_route_input_changed(
        self, query: RouteQuery, surface: RouteInputSurface = "route"
    ) -> None:
        """Debounce route resolution for an input surface; only the last change runs.

        Typing in the route fields waits for the ``route`` quiet period; picking
        an autocomplete suggestion waits for the shorter ``places`` one.
        """
        self.debounce.schedule(
            surface,
            self.debounce_settings.quiet_period(surface),
            self._resolve_in_background,
            query,
        )

    def on_address_input_changed(self, address: str) -> None:
        """Debounce geocoding of a single edited address."""
        self.debounce.schedule(
            "geocoding",
            self.debounce_settings.quiet_period("geocoding"),
            self._geocode_in_background,
            address,
        )

    async def _resolve_in_background(self, query: RouteQuery) -> None:
        try:
            self.last_route = await self.route_cache.resolve(query)
            self.last_route_error = None
        except ProviderFault as e:
            self.last_route = None
            self.last_route_error = e
            logger.warning("Route resolution failed for %s: %s", query.cache_key, e.message)

    async def _geocode_in_background(self, address: str) -> None:
        # Geocode faults are already logged and absorbed by the cache.
        self.last_coordinates = await self.route_cache.get_coordinates(address)

    def close(self) -> None:
        self.debounce.cancel_all()


def create_orchestrator(
    settings: Settings, metrics: MetricsCollector | None = None
) -> RecalculationOrchestrator:
    """Wire an orchestrator, its route cache and pricing client from settings."""
    metrics = metrics or get_metrics_collector()
    return RecalculationOrchestrator(
        route_cache=create_route_resolution_cache(settings, metrics),
        pricing_client=PricingClient(
            base_url=settings.pricing.base_url,
            timeout=settings.pricing.timeout_seconds,
            metrics=metrics,
        ),
        settings=settings.recalculation,
        debounce_settings=settings.debounce,
        metrics=metrics,
    )
