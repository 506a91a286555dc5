from pydantic import BaseModel, ConfigDict

from shuttle_pricing.pricing.models import PricingResponse

DEFAULT_ROUND_TRIP_DISCOUNT_PERCENT = 5.0


class RoundTripLegs(BaseModel):
    """Prices of the independently confirmed legs of a trip."""

    model_config = ConfigDict(frozen=True)

    outbound: float
    return_leg: float | None = None


def _to_cents(amount: float) -> float:
    return round(amount * 100) / 100


def return_leg_subtotal(response: PricingResponse) -> float:
    """Pre-discount return leg price.

    Falls back to the outbound price reduced by the round-trip discount rate
    when the service did not report a return price.
    """
    if response.return_trip_price > 0:
        return response.return_trip_price

    outbound = response.outbound_subtotal
    if response.round_trip_discount > 0 and outbound > 0:
        discount_percent = response.round_trip_discount / outbound * 100
    else:
        discount_percent = DEFAULT_ROUND_TRIP_DISCOUNT_PERCENT
    return outbound * (1 - discount_percent / 100)


def split_round_trip(response: PricingResponse, is_round_trip: bool = True) -> RoundTripLegs:
    """Split a priced trip into outbound and return legs.

    The payment-method discount is distributed pro rata by each leg's share
    of the combined pre-discount subtotal, so it is applied exactly once.
    """
    if not is_round_trip:
        return RoundTripLegs(outbound=_to_cents(response.final_total))

    outbound = response.outbound_subtotal
    return_leg = return_leg_subtotal(response)
    combined = outbound + return_leg

    if response.payment_discount and combined > 0:
        outbound -= response.payment_discount * (outbound / combined)
        return_leg -= response.payment_discount * (return_leg / combined)

    return RoundTripLegs(outbound=_to_cents(outbound), return_leg=_to_cents(return_leg))
