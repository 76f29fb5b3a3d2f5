"""Sale model."""
from decimal import Decimal
from sqlalchemy import Column, String, Boolean, Numeric, DateTime, Enum, ForeignKey, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from partstock.database import Base, Id
import enum


class SaleStatus(enum.Enum):
    """Sale status enum."""
    CONFIRMED = "confirmed"
    VOIDED = "voided"


class CustomerType(str, enum.Enum):
    """Pricing tier selected for a checkout session."""
    RETAIL = 'retail'
    WHOLESALE = 'wholesale'


class PaymentMethod(str, enum.Enum):
    """Payment method used to settle a sale."""
    CASH = 'cash'
    DEBIT_CARD = 'debit_card'
    CREDIT_CARD = 'credit_card'
    TRANSFER = 'transfer'


def normalize_customer_type(value) -> CustomerType:
    """
    Normalize a customer type given as enum, value or name.

    Defaults to RETAIL when value is None.

    Raises:
        ValueError: If value is not a known customer type
    """
    if value is None:
        return CustomerType.RETAIL
    if isinstance(value, CustomerType):
        return value
    key = str(value).strip().lower()
    # Legacy labels used by the shop ("LISTA" / "MAYORISTA")
    aliases = {'list': 'retail', 'lista': 'retail', 'mayorista': 'wholesale'}
    try:
        return CustomerType(aliases.get(key, key))
    except ValueError:
        raise ValueError(f"Invalid customer type: {value}")


def normalize_payment_method(value) -> PaymentMethod:
    """
    Normalize a payment method given as enum, value or name.

    Defaults to CASH when value is None.

    Raises:
        ValueError: If value is not a known payment method
    """
    if value is None:
        return PaymentMethod.CASH
    if isinstance(value, PaymentMethod):
        return value
    try:
        return PaymentMethod(str(value).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid payment method: {value}")


class Sale(Base):
    """Confirmed sale. Only its status changes after creation."""

    __tablename__ = 'sale'

    id = Column(Id, primary_key=True, autoincrement=True)
    sale_number = Column(String(32), nullable=True, index=True)
    datetime = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0, server_default='0.00')
    total = Column(Numeric(10, 2), nullable=False)
    customer_type = Column(Enum(CustomerType, name='customer_type'), nullable=False, default=CustomerType.RETAIL)
    payment_method = Column(Enum(PaymentMethod, name='payment_method'), nullable=False, default=PaymentMethod.CASH)
    promotion_applied = Column(Boolean, nullable=False, default=False, server_default=false())
    promotion_id = Column(Id, ForeignKey('promotion.id', ondelete='SET NULL'), nullable=True)
    notes = Column(String, nullable=True)
    status = Column(Enum(SaleStatus, name='sale_status'), nullable=False, default=SaleStatus.CONFIRMED)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationships
    promotion = relationship('Promotion')
    lines = relationship('SaleLine', back_populates='sale', cascade='all, delete-orphan')

    def __repr__(self):
        status = self.status.value if self.status else None
        return f"<Sale(id={self.id}, total={self.total}, status={status})>"

    @property
    def lines_subtotal(self):
        """Sum of the frozen line amounts."""
        return sum((Decimal(line.qty) * Decimal(line.unit_price) for line in self.lines), Decimal('0'))
