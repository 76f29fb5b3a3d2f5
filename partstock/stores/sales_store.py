"""Sales store: sale headers and lines (append-only)."""
from typing import Iterable

from sqlalchemy.orm import Session, selectinload

from partstock.exceptions import NotFoundError
from partstock.models import Sale, SaleLine


class SalesStore:
    """Sale persistence over an injected session."""

    def __init__(self, session: Session):
        self.session = session

    def insert_sale(self, sale: Sale) -> int:
        """Add the header and flush to obtain its id."""
        self.session.add(sale)
        self.session.flush()
        return sale.id

    def insert_lines(self, lines: Iterable[SaleLine]) -> None:
        self.session.add_all(list(lines))
        self.session.flush()

    def get_sale(self, sale_id: int, for_update: bool = False) -> Sale:
        query = self.session.query(Sale).options(selectinload(Sale.lines)).filter(Sale.id == sale_id)
        if for_update:
            query = query.with_for_update()
        sale = query.first()
        if sale is None:
            raise NotFoundError(f'Sale #{sale_id} not found')
        return sale
