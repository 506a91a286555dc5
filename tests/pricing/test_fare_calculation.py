"""Tests for the fare computation chain."""

import pytest

from shuttle_pricing.pricing.fare import (
    FareCalculator,
    FareComponents,
    PaymentMethod,
    surcharge_for,
)


@pytest.fixture
def calculator() -> FareCalculator:
    return FareCalculator()


@pytest.fixture
def card_fees() -> FareComponents:
    return FareComponents(
        child_seats_charge=10, credit_card_fee_percent=3, credit_card_fee_fixed=1
    )


@pytest.mark.unit
@pytest.mark.critical
class TestFareCalculation:
    def test_cash_total_with_child_seats(self, calculator):
        components = FareComponents(child_seats_charge=10)

        breakdown = calculator.calculate(55, components, PaymentMethod.CASH)

        assert breakdown.subtotal == pytest.approx(65)
        assert breakdown.total == pytest.approx(65)
        assert breakdown.credit_card_fee_amount == 0

    def test_credit_card_surcharge_on_subtotal(self, calculator, card_fees):
        breakdown = calculator.calculate(55, card_fees, PaymentMethod.CREDIT_CARD)

        assert breakdown.subtotal == pytest.approx(65)
        assert breakdown.credit_card_fee_amount == pytest.approx(2.95)
        assert breakdown.total == pytest.approx(67.95)

    @pytest.mark.parametrize(
        "method", [PaymentMethod.CASH, PaymentMethod.INVOICE, PaymentMethod.ZELLE]
    )
    def test_card_fees_ignored_for_other_methods(self, calculator, card_fees, method):
        breakdown = calculator.calculate(55, card_fees, method)

        assert breakdown.total == pytest.approx(65)

    def test_percentages_taken_on_base_price(self, calculator):
        components = FareComponents(
            booking_fee=20,
            discount_percent=10,
            gratuity_percent=15,
            taxes_percent=7,
        )

        breakdown = calculator.calculate(100, components)

        assert breakdown.discount_percent_amount == pytest.approx(10)
        assert breakdown.gratuity_percent_amount == pytest.approx(15)
        assert breakdown.taxes_percent_amount == pytest.approx(7)
        assert breakdown.total == pytest.approx(100 + 20 - 10 + 15 + 7)

    def test_full_chain(self, calculator):
        components = FareComponents(
            booking_fee=5,
            child_seats_charge=10,
            discount_percent=10,
            discount_fixed=3,
            round_trip_discount=4,
            gratuity_percent=20,
            gratuity_fixed=2,
            taxes_percent=5,
            taxes_fixed=1,
            credit_card_fee_percent=3,
            credit_card_fee_fixed=0.5,
        )

        breakdown = calculator.calculate(100, components, PaymentMethod.CREDIT_CARD)

        subtotal = 100 + 5 + 10 - 10 - 3 - 4 + 20 + 2 + 5 + 1
        assert breakdown.subtotal == pytest.approx(subtotal)
        assert breakdown.total == pytest.approx(subtotal * 1.03 + 0.5)

    def test_total_clamped_at_zero(self, calculator):
        components = FareComponents(discount_fixed=80)

        breakdown = calculator.calculate(50, components)

        assert breakdown.subtotal == pytest.approx(-30)
        assert breakdown.total == 0

    def test_zero_base_price(self, calculator):
        breakdown = calculator.calculate(0, FareComponents(booking_fee=5))

        assert breakdown.total == pytest.approx(5)

    def test_negative_base_price_rejected(self, calculator):
        with pytest.raises(ValueError):
            calculator.calculate(-1, FareComponents())

    def test_deterministic(self, calculator, card_fees):
        first = calculator.calculate(72.5, card_fees, PaymentMethod.CREDIT_CARD)
        second = calculator.calculate(72.5, card_fees, PaymentMethod.CREDIT_CARD)

        assert first == second

    @pytest.mark.parametrize("base_price", [0, 12.34, 55, 250])
    def test_credit_card_never_lowers_total(self, calculator, card_fees, base_price):
        cash = calculator.calculate(base_price, card_fees, PaymentMethod.CASH)
        card = calculator.calculate(base_price, card_fees, PaymentMethod.CREDIT_CARD)
        back = calculator.calculate(base_price, card_fees, PaymentMethod.CASH)

        assert card.total >= cash.total
        assert back.total == cash.total

    def test_payment_method_accepts_string(self, calculator):
        breakdown = calculator.calculate(10, FareComponents(), "zelle")

        assert breakdown.payment_method is PaymentMethod.ZELLE


@pytest.mark.unit
def test_surcharge_for_credit_card_only():
    components = FareComponents(credit_card_fee_percent=4, credit_card_fee_fixed=0.3)

    assert surcharge_for(PaymentMethod.CREDIT_CARD, 100, components) == pytest.approx(4.3)
    assert surcharge_for(PaymentMethod.INVOICE, 100, components) == 0


@pytest.mark.unit
def test_negative_component_rejected():
    components = FareComponents()

    with pytest.raises(ValueError):
        components.booking_fee = -5
