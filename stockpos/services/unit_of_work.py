"""
Unit of work over a SQLAlchemy session.

The sale coordinator owns the transaction boundary: it opens a UnitOfWork,
hands it down to the line strategies, and commits or rolls back once.
Nothing below the coordinator commits.
"""
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import selectinload

from stockpos.models import Product, Combo, ComboLine, Sale, SaleLine

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Catalog/sale repository calls bound to a single transaction."""

    def __init__(self, session):
        self.session = session
        self._committed = False

    def __enter__(self) -> 'UnitOfWork':
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.rollback()
        elif not self._committed:
            # Leaving the block without commit() discards the work
            self.rollback()
        return False

    # ---------------------------------------------------------------
    # Catalog reads
    # ---------------------------------------------------------------

    def get_product(self, product_id: int, for_update: bool = False) -> Optional[Product]:
        """Get product by id, optionally locking its row (SELECT ... FOR UPDATE)."""
        query = self.session.query(Product).filter(Product.id == product_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def get_products_for_update(self, product_ids: Iterable[int]) -> List[Product]:
        """Lock several product rows, always in ascending id order."""
        ids = sorted(set(product_ids))
        if not ids:
            return []
        return (
            self.session.query(Product)
            .filter(Product.id.in_(ids))
            .order_by(Product.id)
            .with_for_update()
            .populate_existing()
            .all()
        )

    def get_combo(self, combo_id: int) -> Optional[Combo]:
        """Get combo with its lines and their products loaded."""
        return (
            self.session.query(Combo)
            .options(selectinload(Combo.lines).selectinload(ComboLine.product))
            .filter(Combo.id == combo_id)
            .first()
        )

    # ---------------------------------------------------------------
    # Writes
    # ---------------------------------------------------------------

    def save_product(self, product: Product) -> None:
        """Persist product changes now so later locked reads in this transaction see them."""
        self.session.add(product)
        self.session.flush()

    def add_sale(self, sale: Sale) -> Sale:
        """Insert the sale and flush so it gets an id."""
        self.session.add(sale)
        self.session.flush()
        return sale

    def add_sale_lines(self, lines: Iterable[SaleLine]) -> None:
        self.session.add_all(list(lines))

    def commit(self) -> None:
        self.session.commit()
        self._committed = True

    def rollback(self) -> None:
        self.session.rollback()
