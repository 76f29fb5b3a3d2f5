"""
Promotion evaluation.

Pure functions over an in-memory cart and a list of loaded promotion offers.
Nothing here touches the database; offers come from the promotion store.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from functools import reduce
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from partstock.models import PaymentMethod
from partstock.services.cart_service import Cart, to_money


@dataclass(frozen=True)
class PromotionOffer:
    """Promotion snapshot with its bundle requirements loaded."""
    promotion_id: int
    name: str
    discount_percentage: Decimal
    requirements: Mapping[int, int]  # product_id -> required_qty
    payment_methods: FrozenSet[PaymentMethod] = field(default_factory=frozenset)

    def accepts(self, payment_method: PaymentMethod) -> bool:
        """No restriction rows means the offer applies to every method."""
        return not self.payment_methods or payment_method in self.payment_methods


@dataclass(frozen=True)
class PromotionMatch:
    offer: PromotionOffer
    discount: Decimal
    requirements: Dict[int, int]


def is_eligible(quantities: Mapping[int, int], requirements: Mapping[int, int]) -> bool:
    """Every required product is in the cart with at least the required quantity."""
    if not requirements:
        return False
    return all(quantities.get(pid, 0) >= qty for pid, qty in requirements.items())


def calculate_discount(cart: Cart, offer: PromotionOffer) -> Decimal:
    """
    Discount an offer yields on the cart.

    Only the required quantity of each bundled product is discounted;
    surplus units keep their normal price.
    """
    bundle_amount = Decimal('0')
    for product_id, required_qty in offer.requirements.items():
        item = cart.get_item(product_id)
        if item is None:
            continue
        bundle_amount += item.unit_price * min(item.quantity, required_qty)
    return to_money(bundle_amount * Decimal(offer.discount_percentage) / Decimal('100'))


def _best_of(cart: Cart, quantities: Mapping[int, int]):
    def step(best: Optional[Tuple[PromotionOffer, Decimal]], offer: PromotionOffer):
        if not offer.accepts(cart.payment_method) or not is_eligible(quantities, offer.requirements):
            return best
        discount = calculate_discount(cart, offer)
        # Strictly greater: ties keep the earlier offer
        if discount > (best[1] if best else Decimal('0')):
            return offer, discount
        return best
    return step


def evaluate_best_promotion(cart: Cart, offers: Iterable[PromotionOffer]) -> Optional[PromotionMatch]:
    """
    Select the eligible offer with the largest discount.

    Returns None when no offer is eligible or every eligible discount is zero.
    Never raises for well-formed offers and calling it repeatedly with the
    same cart and offers gives the same result.
    """
    if cart.is_empty:
        return None

    best = reduce(_best_of(cart, cart.quantities()), offers, None)
    if best is None:
        return None

    offer, discount = best
    return PromotionMatch(offer=offer, discount=discount, requirements=dict(offer.requirements))
