"""Category model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from partstock.database import Base, Id


class Category(Base):
    """Product Category."""

    __tablename__ = 'category'

    id = Column(Id, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    color = Column(String(9), nullable=True)  # Hex colour for display
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    products = relationship('Product', back_populates='category')

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
