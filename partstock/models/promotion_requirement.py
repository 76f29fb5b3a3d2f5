"""Promotion requirement model (promotion <-> product bundle)."""
from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from partstock.database import Base, Id


class PromotionRequirement(Base):
    """Quantity of a product the cart must hold for a promotion to apply."""

    __tablename__ = 'promotion_requirement'
    __table_args__ = (
        CheckConstraint('required_qty >= 1', name='ck_requirement_qty_positive'),
    )

    promotion_id = Column(Id, ForeignKey('promotion.id', ondelete='CASCADE'), primary_key=True)
    product_id = Column(Id, ForeignKey('product.id', ondelete='CASCADE'), primary_key=True, index=True)
    required_qty = Column(Integer, nullable=False, default=1)

    # Relationships
    promotion = relationship('Promotion', back_populates='requirements')
    product = relationship('Product')

    def __repr__(self):
        return (
            f"<PromotionRequirement(promotion_id={self.promotion_id}, "
            f"product_id={self.product_id}, qty={self.required_qty})>"
        )
