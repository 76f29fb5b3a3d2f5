"""In-memory cart for one checkout session."""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional, Union

from partstock.exceptions import BusinessLogicError, NotFoundError, InvalidQuantityError, InsufficientStockError
from partstock.models import CustomerType, PaymentMethod, normalize_customer_type, normalize_payment_method

CENT = Decimal('0.01')


def to_money(value) -> Decimal:
    """Quantize an amount to currency precision (half-up)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog attributes of a product captured when it enters the cart."""
    id: int
    name: str
    list_price: Decimal
    wholesale_price: Decimal
    stock: int
    deleted: bool = False

    @classmethod
    def from_product(cls, product) -> 'ProductSnapshot':
        if isinstance(product, cls):
            return product
        return cls(
            id=product.id,
            name=product.name,
            list_price=to_money(product.list_price),
            wholesale_price=to_money(product.wholesale_price),
            stock=int(product.stock_qty),
            deleted=bool(product.deleted),
        )

    def price_for(self, customer_type: CustomerType) -> Decimal:
        if customer_type == CustomerType.WHOLESALE:
            return self.wholesale_price
        return self.list_price


@dataclass
class CartItem:
    product: ProductSnapshot
    quantity: int
    unit_price: Decimal

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def line_total(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass
class CartTotals:
    subtotal: Decimal
    discount: Decimal
    total: Decimal
    promotion_id: Optional[int] = None
    promotion_name: Optional[str] = None


def _validate_quantity(quantity) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantityError(quantity)
    return quantity


@dataclass
class Cart:
    """
    Working set of line items for one checkout.

    Items are keyed by product id and keep insertion order. The cart only
    holds snapshots; it never writes to the catalog.
    """
    customer_type: CustomerType = CustomerType.RETAIL
    payment_method: PaymentMethod = PaymentMethod.CASH
    notes: Optional[str] = None
    _items: Dict[int, CartItem] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        self.customer_type = normalize_customer_type(self.customer_type)
        self.payment_method = normalize_payment_method(self.payment_method)

    @property
    def items(self) -> List[CartItem]:
        return list(self._items.values())

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self):
        return len(self._items)

    def get_item(self, product_id: int) -> Optional[CartItem]:
        return self._items.get(product_id)

    def quantities(self) -> Dict[int, int]:
        """Map of product id -> quantity in the cart."""
        return {pid: item.quantity for pid, item in self._items.items()}

    def add_item(self, product, quantity: int = 1) -> CartItem:
        """
        Add ``quantity`` units of ``product``, merging with an existing line.

        Raises:
            InvalidQuantityError: quantity is not a positive integer
            InsufficientStockError: resulting quantity exceeds the product stock
            BusinessLogicError: product is soft-deleted
        """
        quantity = _validate_quantity(quantity)
        snapshot = ProductSnapshot.from_product(product)
        if snapshot.deleted:
            raise BusinessLogicError(f'Product "{snapshot.name}" is no longer available')

        item = self._items.get(snapshot.id)
        new_qty = quantity + (item.quantity if item else 0)
        if new_qty > snapshot.stock:
            raise InsufficientStockError(snapshot.id, snapshot.name, new_qty, snapshot.stock)

        if item:
            # Refresh the snapshot so later checks use the latest stock read
            item.product = snapshot
            item.quantity = new_qty
            item.unit_price = snapshot.price_for(self.customer_type)
        else:
            item = CartItem(snapshot, new_qty, snapshot.price_for(self.customer_type))
            self._items[snapshot.id] = item
        return item

    def set_quantity(self, item: Union[CartItem, int], quantity: int) -> CartItem:
        """
        Replace the quantity of a line. Use ``remove_item`` to drop it.

        Raises:
            InvalidQuantityError: quantity is below 1 or not an integer
            InsufficientStockError: quantity exceeds the product stock
            NotFoundError: item is not in the cart
        """
        line = self._resolve(item)
        quantity = _validate_quantity(quantity)
        if quantity > line.product.stock:
            raise InsufficientStockError(line.product_id, line.product.name, quantity, line.product.stock)
        line.quantity = quantity
        return line

    def remove_item(self, item: Union[CartItem, int]) -> None:
        product_id = item.product_id if isinstance(item, CartItem) else item
        self._items.pop(product_id, None)

    def set_customer_type(self, customer_type) -> None:
        """Re-price every line in place for the new tier; quantities are kept."""
        self.customer_type = normalize_customer_type(customer_type)
        for line in self._items.values():
            line.unit_price = line.product.price_for(self.customer_type)

    def set_payment_method(self, payment_method) -> None:
        self.payment_method = normalize_payment_method(payment_method)

    def subtotal(self) -> Decimal:
        return to_money(sum((line.unit_price * line.quantity for line in self._items.values()), Decimal('0')))

    def totals(self, match=None) -> CartTotals:
        """Subtotal, discount and total for an optional promotion match."""
        subtotal = self.subtotal()
        discount = match.discount if match else Decimal('0.00')
        total = max(subtotal - discount, Decimal('0.00'))
        return CartTotals(
            subtotal=subtotal,
            discount=to_money(discount),
            total=to_money(total),
            promotion_id=match.offer.promotion_id if match else None,
            promotion_name=match.offer.name if match else None,
        )

    def clear(self) -> None:
        self._items.clear()
        self.notes = None

    def _resolve(self, item: Union[CartItem, int]) -> CartItem:
        product_id = item.product_id if isinstance(item, CartItem) else item
        line = self._items.get(product_id)
        if line is None:
            raise NotFoundError(f'Product {product_id} is not in the cart')
        return line
