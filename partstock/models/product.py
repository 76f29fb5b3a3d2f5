"""Product model."""
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, Integer, Numeric, DateTime, ForeignKey, CheckConstraint, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from partstock.database import Base, Id


class Product(Base):
    """Spare part held in inventory."""

    __tablename__ = 'product'
    __table_args__ = (
        CheckConstraint('stock_qty >= 0', name='ck_product_stock_non_negative'),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category_id = Column(Id, ForeignKey('category.id'), nullable=False)
    cost_price = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    list_price = Column(Numeric(10, 2), nullable=False)
    wholesale_price = Column(Numeric(10, 2), nullable=False)
    stock_qty = Column(Integer, nullable=False, default=0, server_default='0')
    min_stock_qty = Column(Integer, nullable=False, default=0, server_default='0')
    # Soft delete: products referenced by sale lines are never removed
    deleted = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    category = relationship('Category', back_populates='products')

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock_qty})>"

    @property
    def is_low_stock(self):
        """Stock at or below the configured minimum."""
        return self.stock_qty <= self.min_stock_qty

    @property
    def margin(self):
        return Decimal(self.list_price) - Decimal(self.cost_price)

    @property
    def margin_percent(self):
        cost = Decimal(self.cost_price)
        if cost == 0:
            return Decimal('0')
        return ((Decimal(self.list_price) - cost) / cost * 100).quantize(Decimal('0.01'))
