"""Models package - exports all SQLAlchemy models."""
from partstock.models.sale import (
    Sale, SaleStatus, CustomerType, PaymentMethod,
    normalize_customer_type, normalize_payment_method
)
from partstock.models.sale_line import SaleLine
from partstock.models.category import Category
from partstock.models.product import Product
from partstock.models.promotion import Promotion
from partstock.models.promotion_requirement import PromotionRequirement
from partstock.models.promotion_payment_method import PromotionPaymentMethod

__all__ = [
    # Catalog
    'Category', 'Product',
    # Promotions
    'Promotion', 'PromotionRequirement', 'PromotionPaymentMethod',
    # Sales
    'Sale', 'SaleStatus', 'SaleLine', 'CustomerType', 'PaymentMethod',
    'normalize_customer_type', 'normalize_payment_method',
]
