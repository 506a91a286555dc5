from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class PaymentMethod(StrEnum):
    CASH = "cash"
    INVOICE = "invoice"
    CREDIT_CARD = "credit_card"
    ZELLE = "zelle"


class FareComponents(BaseModel):
    """Operator-editable or server-seeded price adjustments.

    Discounts are magnitudes; the calculator subtracts them.
    """

    model_config = ConfigDict(validate_assignment=True)

    booking_fee: float = Field(default=0.0, ge=0)
    child_seats_charge: float = Field(default=0.0, ge=0)
    discount_percent: float = Field(default=0.0, ge=0)
    discount_fixed: float = Field(default=0.0, ge=0)
    round_trip_discount: float = Field(default=0.0, ge=0)
    gratuity_percent: float = Field(default=0.0, ge=0)
    gratuity_fixed: float = Field(default=0.0, ge=0)
    taxes_percent: float = Field(default=0.0, ge=0)
    taxes_fixed: float = Field(default=0.0, ge=0)
    credit_card_fee_percent: float = Field(default=0.0, ge=0)
    credit_card_fee_fixed: float = Field(default=0.0, ge=0)


class FareBreakdown(BaseModel):
    """Derived amounts for one (base price, components, payment method) triple."""

    model_config = ConfigDict(frozen=True)

    base_price: float
    payment_method: PaymentMethod
    discount_percent_amount: float
    gratuity_percent_amount: float
    taxes_percent_amount: float
    subtotal: float
    credit_card_fee_amount: float
    total: float = Field(ge=0)


def surcharge_for(
    payment_method: PaymentMethod, subtotal: float, components: FareComponents
) -> float:
    """Payment-method surcharge applied on top of the subtotal.

    This is the only step of the fare computation that depends on the payment
    method. Fee fields stay on the record for other methods; they are not applied.
    """
    match payment_method:
        case PaymentMethod.CREDIT_CARD:
            return (
                subtotal * components.credit_card_fee_percent / 100
                + components.credit_card_fee_fixed
            )
        case PaymentMethod.CASH | PaymentMethod.INVOICE | PaymentMethod.ZELLE:
            return 0.0


class FareCalculator:
    """Computes the final fare from a base price and the editable components."""

    def calculate(
        self,
        base_price: float,
        components: FareComponents,
        payment_method: PaymentMethod | str = PaymentMethod.INVOICE,
    ) -> FareBreakdown:
        """
        Calculate the fare breakdown.

        Percentage discount, gratuity and taxes are taken on the original base
        price, never on the running total. The credit card surcharge is taken
        on the subtotal. Every call recomputes from scratch.
        """
        if base_price < 0:
            raise ValueError("Base price must be non-negative")
        payment_method = PaymentMethod(payment_method)

        discount_percent_amount = base_price * components.discount_percent / 100
        gratuity_percent_amount = base_price * components.gratuity_percent / 100
        taxes_percent_amount = base_price * components.taxes_percent / 100

        adjusted = base_price
        adjusted += components.booking_fee
        adjusted += components.child_seats_charge
        adjusted -= discount_percent_amount
        adjusted -= components.discount_fixed
        adjusted -= components.round_trip_discount
        adjusted += gratuity_percent_amount
        adjusted += components.gratuity_fixed
        adjusted += taxes_percent_amount
        adjusted += components.taxes_fixed
        subtotal = adjusted

        credit_card_fee_amount = surcharge_for(payment_method, subtotal, components)
        adjusted += credit_card_fee_amount

        return FareBreakdown(
            base_price=base_price,
            payment_method=payment_method,
            discount_percent_amount=discount_percent_amount,
            gratuity_percent_amount=gratuity_percent_amount,
            taxes_percent_amount=taxes_percent_amount,
            subtotal=subtotal,
            credit_card_fee_amount=credit_card_fee_amount,
            total=max(0.0, adjusted),
        )
