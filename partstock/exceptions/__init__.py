"""Custom exceptions for the PartStock sale engine."""


class PartStockError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv


class BusinessLogicError(PartStockError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(PartStockError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class InvalidQuantityError(BusinessLogicError):
    """Raised for non-positive or non-integer quantities."""
    def __init__(self, quantity):
        self.quantity = quantity
        super().__init__(
            f"Quantity must be a positive integer, got {quantity!r}",
            payload={'quantity': repr(quantity)}
        )


def _fmt_qty(value):
    return f"{int(value)}" if value % 1 == 0 else f"{value:.2f}".rstrip('0').rstrip('.')


class InsufficientStockError(BusinessLogicError):
    """
    Raised when an operation fails due to lack of stock.

    ``shortages`` holds one ``(product_id, product_name, requested, available)``
    tuple per offending product; the single-product attributes mirror the first.
    """
    def __init__(self, product_id, product_name, requested, available, shortages=None):
        self.shortages = list(shortages or [(product_id, product_name, requested, available)])
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available

        message = "; ".join(
            f"Insufficient stock for {name}: requested {_fmt_qty(req)}, available {_fmt_qty(avail)}"
            for _, name, req, avail in self.shortages
        )
        payload = {
            'products': [
                {'product_id': pid, 'requested': req, 'available': avail}
                for pid, _, req, avail in self.shortages
            ]
        }
        super().__init__(message, status_code=409, payload=payload)

    @property
    def product_ids(self):
        return [pid for pid, _, _, _ in self.shortages]

    @classmethod
    def from_shortages(cls, shortages):
        """Build one error naming every oversold product."""
        first = shortages[0]
        return cls(*first, shortages=shortages)


class EmptyCartError(BusinessLogicError):
    """Raised when a sale is committed with no items."""
    def __init__(self, message="Cannot commit a sale with an empty cart"):
        super().__init__(message)


class PersistenceError(PartStockError):
    """Raised when the store cannot complete a write; the cause is attached."""
    def __init__(self, message="The sale could not be saved", cause=None):
        super().__init__(message, 500)
        self.cause = cause
