"""Sale Line model."""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from partstock.database import Base, Id


class SaleLine(Base):
    """Sale Line: one product sold, unit price frozen at sale time."""

    __tablename__ = 'sale_line'
    __table_args__ = (
        CheckConstraint('qty >= 1', name='ck_sale_line_qty_positive'),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    sale_id = Column(Id, ForeignKey('sale.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Id, ForeignKey('product.id'), nullable=False)
    qty = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    line_total = Column(Numeric(10, 2), nullable=False)

    # Relationships
    sale = relationship('Sale', back_populates='lines')
    product = relationship('Product')

    def __repr__(self):
        return f"<SaleLine(id={self.id}, product_id={self.product_id}, qty={self.qty})>"
