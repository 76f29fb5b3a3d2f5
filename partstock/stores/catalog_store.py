"""Catalog store: products and categories."""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from partstock.exceptions import NotFoundError, InsufficientStockError
from partstock.models import Category, Product

logger = logging.getLogger(__name__)


class CatalogStore:
    """Product and category access over an injected session."""

    def __init__(self, session: Session):
        self.session = session

    def get_product(self, product_id: int, include_deleted: bool = False) -> Product:
        """
        Get product by ID.

        Raises:
            NotFoundError: unknown id, or soft-deleted unless include_deleted
        """
        product = self.session.get(Product, product_id)
        if product is None or (product.deleted and not include_deleted):
            raise NotFoundError(f'Product {product_id} not found')
        return product

    def list_products(self, category_id: Optional[int] = None, search: Optional[str] = None) -> List[Product]:
        """Non-deleted products, optionally filtered by category and name."""
        query = self.session.query(Product).filter(Product.deleted.is_(False))
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if search:
            query = query.filter(Product.name.ilike(f'%{search.strip()}%'))
        return query.order_by(Product.name.asc(), Product.id.asc()).all()

    def list_low_stock(self) -> List[Product]:
        """Products at or below their minimum stock."""
        return self.session.query(Product).filter(
            Product.deleted.is_(False),
            Product.stock_qty <= Product.min_stock_qty
        ).order_by(Product.stock_qty.asc(), Product.name.asc()).all()

    def list_categories(self) -> List[Category]:
        return self.session.query(Category).order_by(Category.name.asc()).all()

    def lock_products(self, product_ids: Iterable[int]) -> Dict[int, Product]:
        """
        Load products FOR UPDATE and return them keyed by id.

        Rows are refreshed so stock reflects the database, not the identity map.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        products = self.session.query(Product).filter(
            Product.id.in_(ids)
        ).with_for_update().populate_existing().all()
        return {p.id: p for p in products}

    def decrement_stock(self, product_id: int, amount: int) -> None:
        """
        Subtract ``amount`` from stock inside the caller's transaction.

        The guarded UPDATE never lets stock go negative.

        Raises:
            InsufficientStockError: stock is lower than amount
        """
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock_qty >= amount)
            .values(stock_qty=Product.stock_qty - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            product = self.session.get(Product, product_id, populate_existing=True)
            if product is None:
                raise NotFoundError(f'Product {product_id} not found')
            raise InsufficientStockError(product.id, product.name, amount, product.stock_qty)

    def restore_stock(self, product_id: int, amount: int) -> None:
        """Add ``amount`` back to stock (sale void)."""
        result = self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(stock_qty=Product.stock_qty + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise NotFoundError(f'Product {product_id} not found')
