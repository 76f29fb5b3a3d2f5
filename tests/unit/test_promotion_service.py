"""
Unit tests for promotion evaluation.
"""

import pytest
from decimal import Decimal

from partstock.models import PaymentMethod
from partstock.services.cart_service import Cart, ProductSnapshot
from partstock.services.promotion_service import (
    PromotionOffer, calculate_discount, evaluate_best_promotion, is_eligible
)


def product(pid, price, stock=100):
    return ProductSnapshot(id=pid, name=f'Part {pid}', list_price=Decimal(price),
                           wholesale_price=Decimal(price), stock=stock)


def offer(pid, name, percentage, requirements, payment_methods=()):
    return PromotionOffer(
        promotion_id=pid,
        name=name,
        discount_percentage=Decimal(str(percentage)),
        requirements=requirements,
        payment_methods=frozenset(payment_methods)
    )


def cart_with(*lines, payment_method=None):
    cart = Cart(payment_method=payment_method)
    for snap, qty in lines:
        cart.add_item(snap, qty)
    return cart


class TestEligibility:

    def test_all_requirements_met(self):
        assert is_eligible({1: 2, 2: 1}, {1: 2, 2: 1}) is True

    def test_under_quantity(self):
        assert is_eligible({1: 1, 2: 1}, {1: 2, 2: 1}) is False

    def test_missing_product(self):
        assert is_eligible({1: 5}, {1: 1, 2: 1}) is False

    def test_empty_requirements_never_eligible(self):
        assert is_eligible({1: 5}, {}) is False


class TestDiscount:

    @pytest.mark.parametrize('price, qty, percentage, expected', [
        ('100.00', 3, 10, '30.00'),
        ('19.99', 2, 15, '6.00'),     # 39.98 * 0.15 = 5.997
        ('45.50', 1, 0, '0.00'),
        ('12.34', 4, 100, '49.36'),
        ('33.33', 3, 12.5, '12.50'),  # 99.99 * 0.125 = 12.49875
    ])
    def test_exact_bundle_discount(self, price, qty, percentage, expected):
        cart = cart_with((product(1, price), qty))
        promo = offer(1, 'Bundle', percentage, {1: qty})

        assert calculate_discount(cart, promo) == Decimal(expected)

    def test_surplus_units_are_not_discounted(self):
        promo = offer(1, 'Two pads', 20, {1: 2})
        exact = calculate_discount(cart_with((product(1, '50.00'), 2)), promo)
        surplus = calculate_discount(cart_with((product(1, '50.00'), 7)), promo)

        assert exact == Decimal('20.00')
        assert surplus == exact

    def test_discount_sums_every_bundled_product(self):
        cart = cart_with((product(1, '30.00'), 1), (product(2, '60.00'), 3), (product(3, '5.00'), 4))
        promo = offer(1, 'Brake kit', 10, {1: 1, 2: 2})

        # (30 * 1 + 60 * 2) * 10%; product 3 is not part of the bundle
        assert calculate_discount(cart, promo) == Decimal('15.00')


class TestBestPromotion:

    def test_larger_discount_wins_regardless_of_order(self):
        cart = cart_with((product(1, '100.00'), 1), (product(2, '150.00'), 1))
        fifty = offer(1, 'Fifty', 50, {1: 1})
        seventy_five = offer(2, 'Seventy five', 50, {2: 1})

        for offers in ([fifty, seventy_five], [seventy_five, fifty]):
            match = evaluate_best_promotion(cart, offers)
            assert match.offer is seventy_five
            assert match.discount == Decimal('75.00')

    def test_tie_keeps_first_in_input_order(self):
        cart = cart_with((product(1, '100.00'), 1), (product(2, '100.00'), 1))
        first = offer(1, 'First', 10, {1: 1})
        second = offer(2, 'Second', 10, {2: 1})

        assert evaluate_best_promotion(cart, [first, second]).offer is first
        assert evaluate_best_promotion(cart, [second, first]).offer is second

    def test_ineligible_offers_are_skipped(self):
        cart = cart_with((product(1, '100.00'), 1))
        big_but_ineligible = offer(1, 'Needs two', 90, {1: 2})
        small = offer(2, 'Single', 5, {1: 1})

        match = evaluate_best_promotion(cart, [big_but_ineligible, small])

        assert match.offer is small
        assert match.requirements == {1: 1}

    def test_no_eligible_offer(self):
        cart = cart_with((product(1, '100.00'), 1))
        assert evaluate_best_promotion(cart, [offer(1, 'Other', 10, {2: 1})]) is None

    def test_zero_discount_is_no_promotion(self):
        cart = cart_with((product(1, '100.00'), 1))
        assert evaluate_best_promotion(cart, [offer(1, 'Nothing', 0, {1: 1})]) is None

    def test_offer_without_requirements_is_ignored(self):
        cart = cart_with((product(1, '100.00'), 1))
        assert evaluate_best_promotion(cart, [offer(1, 'Misconfigured', 50, {})]) is None

    def test_empty_cart_and_no_offers(self):
        assert evaluate_best_promotion(Cart(), [offer(1, 'Any', 10, {1: 1})]) is None
        assert evaluate_best_promotion(cart_with((product(1, '1.00'), 1)), []) is None

    def test_idempotent(self):
        cart = cart_with((product(1, '100.00'), 2), (product(2, '40.00'), 1))
        offers = [offer(1, 'A', 10, {1: 2}), offer(2, 'B', 25, {1: 1, 2: 1})]

        first = evaluate_best_promotion(cart, offers)
        second = evaluate_best_promotion(cart, offers)

        assert first == second
        assert cart.quantities() == {1: 2, 2: 1}

    def test_accepts_generator_of_offers(self):
        cart = cart_with((product(1, '100.00'), 1))
        match = evaluate_best_promotion(cart, (o for o in [offer(1, 'Gen', 10, {1: 1})]))
        assert match.discount == Decimal('10.00')


class TestPaymentMethodRestriction:

    def test_restricted_offer_applies_only_to_listed_methods(self):
        promo = offer(1, 'Cash only', 10, {1: 1}, payment_methods=[PaymentMethod.CASH])

        cash_cart = cart_with((product(1, '100.00'), 1), payment_method='cash')
        card_cart = cart_with((product(1, '100.00'), 1), payment_method='credit_card')

        assert evaluate_best_promotion(cash_cart, [promo]).discount == Decimal('10.00')
        assert evaluate_best_promotion(card_cart, [promo]) is None

    def test_unrestricted_offer_applies_to_any_method(self):
        promo = offer(1, 'Everyone', 10, {1: 1})
        cart = cart_with((product(1, '100.00'), 1), payment_method=PaymentMethod.TRANSFER)

        assert evaluate_best_promotion(cart, [promo]) is not None
