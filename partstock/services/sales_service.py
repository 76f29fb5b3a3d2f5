"""
Sales service with transactional logic.
Turns a cart into a persisted sale, its lines and the matching stock decrements.
"""
import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from partstock.exceptions import (
    PartStockError, BusinessLogicError, NotFoundError, InsufficientStockError,
    EmptyCartError, PersistenceError
)
from partstock.models import Product, Sale, SaleLine, SaleStatus, normalize_customer_type
from partstock.services.cart_service import Cart
from partstock.services.promotion_service import PromotionMatch, evaluate_best_promotion
from partstock.stores.catalog_store import CatalogStore
from partstock.stores.promotion_store import PromotionStore
from partstock.stores.sales_store import SalesStore

logger = logging.getLogger(__name__)


class SaleCommitter:
    """
    Records completed sales atomically.

    Stores are built on the injected session unless given explicitly. Every
    public method either commits all of its writes or rolls back and raises.
    """

    def __init__(
        self,
        session: Session,
        catalog: Optional[CatalogStore] = None,
        promotions: Optional[PromotionStore] = None,
        sales: Optional[SalesStore] = None,
        warn_low_stock: bool = True
    ):
        self.session = session
        self.catalog = catalog if catalog is not None else CatalogStore(session)
        self.promotions = promotions if promotions is not None else PromotionStore(session)
        self.sales = sales if sales is not None else SalesStore(session)
        self.warn_low_stock = warn_low_stock

    def preview(self, cart: Cart, now: Optional[datetime] = None) -> Optional[PromotionMatch]:
        """Best promotion for the cart against the current active promotions."""
        if cart.is_empty:
            return None
        return evaluate_best_promotion(cart, self._load_offers(now))

    def commit_sale(self, cart: Cart, customer_type=None, now: Optional[datetime] = None) -> int:
        """
        Re-evaluate promotions against the latest promotion set and commit.

        A ``customer_type`` different from the cart's re-prices the cart first.
        """
        if cart.is_empty:
            raise EmptyCartError()

        if customer_type is not None:
            customer_type = normalize_customer_type(customer_type)
            if customer_type != cart.customer_type:
                cart.set_customer_type(customer_type)

        match = evaluate_best_promotion(cart, self._load_offers(now))
        return self.commit(cart, cart.customer_type, match)

    def commit(self, cart: Cart, customer_type, winning_promotion: Optional[PromotionMatch] = None) -> int:
        """
        Persist sale header, lines and stock decrements as one transaction.

        An empty cart is rejected before the store is touched. Then:
        1. Lock products
        2. Re-validate stock against current levels
        3. Create Sale with subtotal, discount and total
        4. Create one SaleLine per cart item with the cart unit price
        5. Decrement stock per item and commit

        Returns:
            The new sale id

        Raises:
            EmptyCartError: cart has no items
            NotFoundError: a product no longer exists or was deleted
            InsufficientStockError: one or more items exceed current stock
            PersistenceError: the store failed; nothing was written
        """
        if cart.is_empty:
            raise EmptyCartError()

        customer_type = normalize_customer_type(customer_type)
        if customer_type != cart.customer_type:
            raise BusinessLogicError(
                f'Cart is priced for {cart.customer_type.value} customers, not {customer_type.value}'
            )

        items = cart.items
        totals = cart.totals(winning_promotion)

        try:
            # 1. Lock stock levels
            products = self.catalog.lock_products(item.product_id for item in items)

            # 2. Validate every item before any write
            self._validate_stock(items, products)

            # 3. Create Sale
            now = datetime.now()
            promotion_id = winning_promotion.offer.promotion_id if winning_promotion else None
            sale = Sale(
                datetime=now,
                subtotal=totals.subtotal,
                discount_amount=totals.discount,
                total=totals.total,
                customer_type=customer_type,
                payment_method=cart.payment_method,
                promotion_applied=winning_promotion is not None,
                promotion_id=promotion_id,
                notes=cart.notes or None,
                status=SaleStatus.CONFIRMED
            )
            sale_id = self.sales.insert_sale(sale)
            sale.sale_number = f'{now:%Y%m%d}-{sale_id:06d}'

            # 4. Create SaleLines
            self.sales.insert_lines(
                SaleLine(
                    sale_id=sale_id,
                    product_id=item.product_id,
                    qty=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total
                )
                for item in items
            )

            # 5. Decrement stock
            for item in items:
                self.catalog.decrement_stock(item.product_id, item.quantity)

            self.session.commit()

        except PartStockError as e:
            self.session.rollback()
            logger.warning(f"Sale rejected: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Error committing sale")
            raise PersistenceError('The sale could not be saved', cause=e) from e
        except Exception:
            self.session.rollback()
            logger.exception("Unexpected error committing sale")
            raise

        logger.info(
            f"Sale #{sale_id} committed: {len(items)} lines, subtotal {totals.subtotal}, "
            f"discount {totals.discount}, total {totals.total}"
            + (f", promotion {promotion_id}" if promotion_id else "")
        )
        if self.warn_low_stock:
            self._report_low_stock(item.product_id for item in items)
        return sale_id

    def void_sale(self, sale_id: int, reason: Optional[str] = None) -> Dict[int, int]:
        """
        Void a confirmed sale and put its quantities back in stock.

        Returns:
            Map of product id -> quantity restored

        Raises:
            NotFoundError: sale does not exist
            BusinessLogicError: sale is already voided
            PersistenceError: the store failed; nothing was written
        """
        restored = {}
        try:
            sale = self.sales.get_sale(sale_id, for_update=True)
            if sale.status == SaleStatus.VOIDED:
                raise BusinessLogicError(f'Sale #{sale_id} is already voided')

            for line in sale.lines:
                self.catalog.restore_stock(line.product_id, line.qty)
                restored[line.product_id] = restored.get(line.product_id, 0) + line.qty

            sale.status = SaleStatus.VOIDED
            if reason:
                sale.notes = f'{sale.notes}\n{reason}' if sale.notes else reason

            self.session.commit()

        except PartStockError as e:
            self.session.rollback()
            logger.warning(f"Void rejected for sale #{sale_id}: {e.message}")
            raise
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(f"Error voiding sale #{sale_id}")
            raise PersistenceError(f'Sale #{sale_id} could not be voided', cause=e) from e
        except Exception:
            self.session.rollback()
            logger.exception(f"Unexpected error voiding sale #{sale_id}")
            raise

        logger.info(f"Sale #{sale_id} voided, stock restored for {len(restored)} products")
        return restored

    # =====================================================
    # PRIVATE HELPERS
    # =====================================================

    def _load_offers(self, now):
        try:
            return self.promotions.list_active_offers(now)
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception("Error loading promotions")
            raise PersistenceError('Promotions could not be loaded', cause=e) from e

    @staticmethod
    def _validate_stock(items, products: Dict[int, Product]) -> None:
        """Collect every shortage so the caller can fix the whole cart at once."""
        shortages = []
        for item in items:
            product = products.get(item.product_id)
            if product is None or product.deleted:
                raise NotFoundError(f'Product "{item.product.name}" is no longer available')
            if item.quantity > product.stock_qty:
                shortages.append((product.id, product.name, item.quantity, product.stock_qty))
        if shortages:
            raise InsufficientStockError.from_shortages(shortages)

    def _report_low_stock(self, product_ids) -> None:
        try:
            for product_id in product_ids:
                product = self.session.get(Product, product_id)
                if product is not None and product.is_low_stock:
                    logger.warning(
                        f"Low stock: {product.name} (#{product.id}) has {product.stock_qty}, "
                        f"minimum {product.min_stock_qty}"
                    )
        except SQLAlchemyError:
            # The sale is already committed; the warning is best effort
            logger.exception("Error checking low stock after commit")
