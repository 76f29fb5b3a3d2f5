"""Promotion store: active promotions and their bundle requirements."""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from partstock.models import Promotion, PromotionRequirement
from partstock.services.promotion_service import PromotionOffer

logger = logging.getLogger(__name__)


class PromotionStore:
    """Promotion access over an injected session."""

    def __init__(self, session: Session):
        self.session = session

    def list_active_promotions(self, now: Optional[datetime] = None) -> List[Promotion]:
        """
        Promotions flagged active, not deleted and inside their validity window.

        Ordered by name then id, which is the evaluator's tie-break order.
        """
        now = now or datetime.now(timezone.utc)
        promotions = self.session.query(Promotion).options(
            selectinload(Promotion.requirements),
            selectinload(Promotion.payment_methods)
        ).filter(
            Promotion.active.is_(True),
            Promotion.deleted.is_(False)
        ).order_by(Promotion.name.asc(), Promotion.id.asc()).all()
        return [p for p in promotions if p.is_current(now)]

    def get_requirements(self, promotion_id: int) -> List[PromotionRequirement]:
        return self.session.query(PromotionRequirement).filter(
            PromotionRequirement.promotion_id == promotion_id
        ).order_by(PromotionRequirement.product_id.asc()).all()

    def list_active_offers(self, now: Optional[datetime] = None) -> List[PromotionOffer]:
        """Active promotions as immutable offers ready for evaluation."""
        offers = []
        for promotion in self.list_active_promotions(now):
            if not promotion.requirements:
                # Saved without linked products; it can never match a cart
                logger.debug(f"Promotion {promotion.id} ({promotion.name}) has no requirements")
            offers.append(to_offer(promotion))
        return offers


def to_offer(promotion: Promotion) -> PromotionOffer:
    return PromotionOffer(
        promotion_id=promotion.id,
        name=promotion.name,
        discount_percentage=Decimal(str(promotion.discount_percentage)),
        requirements={r.product_id: int(r.required_qty) for r in promotion.requirements},
        payment_methods=frozenset(pm.payment_method for pm in promotion.payment_methods),
    )
