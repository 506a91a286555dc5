"""Request/response contract of the remote pricing service (POST /pricing/calculate)."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shuttle_pricing.pricing.fare import PaymentMethod


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LocationPayload(_CamelModel):
    address: str
    lat: float = 0.0
    lng: float = 0.0
    zipcode: str = ""
    city: str = ""


class PricingRequest(_CamelModel):
    pickup: LocationPayload
    dropoff: LocationPayload
    miles: float = Field(gt=0)
    stops_count: int = Field(ge=0)
    child_seats_count: int = Field(ge=0)
    is_round_trip: bool = False
    vehicle_type_id: str = ""
    payment_method: PaymentMethod = PaymentMethod.INVOICE


class PricingResponse(_CamelModel):
    """Authoritative breakdown returned by the pricing service."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", allow_inf_nan=False
    )

    base_price: float = Field(default=0.0, ge=0)
    distance_price: float = Field(default=0.0, ge=0)
    stops_charge: float = Field(default=0.0, ge=0)
    child_seats_charge: float = Field(default=0.0, ge=0)
    round_trip_discount: float = Field(default=0.0, ge=0)
    return_trip_price: float = Field(default=0.0, ge=0)
    subtotal: float = Field(default=0.0, ge=0)
    payment_discount: float = Field(default=0.0, ge=0)
    final_total: float = Field(ge=0)
    area_name: str | None = None
    pricing_method: str = "distance"
    distance: float = 0.0
    surge_multiplier: float = 1.0
    surge_name: str | None = None
    payment_discount_description: str = ""

    @property
    def outbound_subtotal(self) -> float:
        """Pre-discount price of the outbound leg."""
        return self.base_price + self.distance_price + self.stops_charge + self.child_seats_charge
