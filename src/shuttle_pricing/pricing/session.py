import logging
import math

from shuttle_pricing.core.exceptions import ValidationFault
from shuttle_pricing.pricing.fare import (
    FareBreakdown,
    FareCalculator,
    FareComponents,
    PaymentMethod,
)
from shuttle_pricing.pricing.models import PricingResponse

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(FareComponents.model_fields)


def parse_amount(raw_value: str | float | int | None) -> float:
    """Parse operator input; blank or unparsable input counts as zero."""
    if raw_value is None:
        return 0.0
    if isinstance(raw_value, str):
        raw_value = raw_value.strip()
        if not raw_value:
            return 0.0
        try:
            value = float(raw_value)
        except ValueError:
            return 0.0
    else:
        value = float(raw_value)
    return value if math.isfinite(value) else 0.0


class FareSession:
    """Editing session that owns one trip's fare components.

    The breakdown is never stored: every read recomputes it from the base
    price, the components and the payment method.
    """

    def __init__(
        self,
        base_price: float = 0.0,
        components: FareComponents | None = None,
        payment_method: PaymentMethod | str = PaymentMethod.INVOICE,
        calculator: FareCalculator | None = None,
    ):
        self.base_price = base_price
        self.components = components or FareComponents()
        self.payment_method = PaymentMethod(payment_method)
        self.calculator = calculator or FareCalculator()
        self.server_breakdown: PricingResponse | None = None

    @classmethod
    def from_server(
        cls,
        response: PricingResponse,
        payment_method: PaymentMethod | str = PaymentMethod.INVOICE,
        components: FareComponents | None = None,
    ) -> "FareSession":
        session = cls(components=components, payment_method=payment_method)
        session.apply_pricing_response(response)
        return session

    @property
    def breakdown(self) -> FareBreakdown:
        return self.calculator.calculate(self.base_price, self.components, self.payment_method)

    @property
    def total(self) -> float:
        return self.breakdown.total

    def update_component(self, field: str, raw_value: str | float | int | None) -> FareBreakdown:
        if field not in EDITABLE_FIELDS:
            raise ValidationFault(f"Unknown fare component: {field}")
        value = parse_amount(raw_value)
        if value < 0:
            raise ValidationFault(f"{field.replace('_', ' ').capitalize()} cannot be negative")
        setattr(self.components, field, value)
        return self.breakdown

    def set_base_price(self, raw_value: str | float | int | None) -> FareBreakdown:
        value = parse_amount(raw_value)
        if value < 0:
            raise ValidationFault("Base price cannot be negative")
        self.base_price = value
        return self.breakdown

    def set_payment_method(self, payment_method: PaymentMethod | str) -> FareBreakdown:
        self.payment_method = PaymentMethod(payment_method)
        return self.breakdown

    def apply_pricing_response(self, response: PricingResponse) -> FareBreakdown:
        """Merge an authoritative pricing response into the session.

        The service's final total already contains the child seat charge and
        the discounted return leg, so the base price is set to
        ``final_total - child_seats_charge + round_trip_discount``. With no
        operator adjustments the chain reproduces ``final_total`` exactly and the
        child seat charge is counted once. Operator-entered fees, discounts,
        gratuity and taxes are left untouched.

        Percentage discount, gratuity and taxes are taken on this derived base
        price, not on ``final_total``: with a 65.00 total that includes a 10.00
        child seat charge, a 10% gratuity adds 5.50, not 6.50.
        """
        self.components.child_seats_charge = response.child_seats_charge
        self.components.round_trip_discount = response.round_trip_discount
        self.base_price = max(
            0.0,
            response.final_total - response.child_seats_charge + response.round_trip_discount,
        )
        self.server_breakdown = response
        logger.info(
            "Applied pricing response: final total %.2f (%s, area %s)",
            response.final_total,
            response.pricing_method,
            response.area_name or "-",
        )
        return self.breakdown
