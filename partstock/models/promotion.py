"""Promotion model."""
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, CheckConstraint, true, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from partstock.database import Base, Id, UTCDateTime, as_utc


class Promotion(Base):
    """
    Bundle promotion.

    A percentage discount applied to the required quantities of its bundled
    products when every requirement is met by the cart.
    """

    __tablename__ = 'promotion'
    __table_args__ = (
        CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_promotion_percentage_range'
        ),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    discount_percentage = Column(Numeric(5, 2), nullable=False)
    active = Column(Boolean, nullable=False, default=True, server_default=true())
    deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    # Optional validity window; open ends are unbounded
    starts_at = Column(UTCDateTime, nullable=True)
    ends_at = Column(UTCDateTime, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    requirements = relationship(
        'PromotionRequirement',
        back_populates='promotion',
        cascade='all, delete-orphan'
    )
    payment_methods = relationship(
        'PromotionPaymentMethod',
        back_populates='promotion',
        cascade='all, delete-orphan'
    )

    def __repr__(self):
        return f"<Promotion(id={self.id}, name='{self.name}', pct={self.discount_percentage})>"

    def is_current(self, now):
        """Active, not deleted and inside its validity window at ``now``."""
        if not self.active or self.deleted:
            return False
        now = as_utc(now)
        if self.starts_at is not None and now < as_utc(self.starts_at):
            return False
        if self.ends_at is not None and now > as_utc(self.ends_at):
            return False
        return True
