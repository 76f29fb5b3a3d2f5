"""Payment methods a promotion is restricted to."""
from sqlalchemy import Column, Enum, ForeignKey
from sqlalchemy.orm import relationship
from partstock.database import Base, Id
from partstock.models.sale import PaymentMethod


class PromotionPaymentMethod(Base):
    """
    Restriction row. A promotion without rows applies to every payment method.
    """

    __tablename__ = 'promotion_payment_method'

    promotion_id = Column(Id, ForeignKey('promotion.id', ondelete='CASCADE'), primary_key=True)
    payment_method = Column(Enum(PaymentMethod, name='payment_method'), primary_key=True)

    promotion = relationship('Promotion', back_populates='payment_methods')

    def __repr__(self):
        return f"<PromotionPaymentMethod(promotion_id={self.promotion_id}, method={self.payment_method.value})>"
