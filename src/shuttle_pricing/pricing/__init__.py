from .client import PricingClient
from .fare import FareBreakdown, FareCalculator, FareComponents, PaymentMethod, surcharge_for
from .models import LocationPayload, PricingRequest, PricingResponse
from .recalculation import (
    FailureStage,
    RecalculationOrchestrator,
    RecalculationOutcome,
    RecalculationRequest,
    RecalculationState,
    create_orchestrator,
)
from .round_trip import RoundTripLegs, split_round_trip
from .session import FareSession

__all__ = [
    "FailureStage",
    "FareBreakdown",
    "FareCalculator",
    "FareComponents",
    "FareSession",
    "LocationPayload",
    "PaymentMethod",
    "PricingClient",
    "PricingRequest",
    "PricingResponse",
    "RecalculationOrchestrator",
    "RecalculationOutcome",
    "RecalculationRequest",
    "RecalculationState",
    "RoundTripLegs",
    "create_orchestrator",
    "split_round_trip",
    "surcharge_for",
]
