"""
Line-item strategies for sale creation.

Each strategy validates stock, computes the subtotal and decrements stock
for one line request, inside the unit of work owned by the sale coordinator.
Strategies never commit.
"""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List

from stockpos.exceptions import (
    BusinessLogicError, NotFoundError, InvalidStateError, InvalidOperationError,
    InsufficientStockError, Shortage,
)
from stockpos.models import ComboLine, LineType, Product, Sale, SaleLine
from stockpos.services.line_requests import ComboLineRequest, LineRequest, ProductLineRequest
from stockpos.utils.number_format import fits_hundredths, money

logger = logging.getLogger(__name__)


class LineStrategy:
    """Contract shared by product and combo lines."""

    line_type: LineType

    def process_line(self, uow, sale: Sale, line_request: LineRequest) -> SaleLine:
        raise NotImplementedError


class ProductLineStrategy(LineStrategy):
    """Sell a quantity of a single product."""

    line_type = LineType.PRODUCT

    def process_line(self, uow, sale: Sale, line_request: ProductLineRequest) -> SaleLine:
        quantity = Decimal(line_request.quantity)

        product = uow.get_product(line_request.product_id, for_update=True)
        if not product:
            raise NotFoundError(f'Product {line_request.product_id} not found')
        if not product.active:
            raise InvalidStateError(f'Product "{product.name}" is not active')

        available = Decimal(product.quantity_on_hand)
        if available < quantity:
            raise InsufficientStockError([
                Shortage(product.id, product.name, quantity, available)
            ])

        product.quantity_on_hand = available - quantity
        uow.save_product(product)
        logger.debug(f"Stock of product {product.id} decremented by {quantity} lb")

        unit_price = Decimal(product.unit_price)
        return SaleLine(
            sale_id=sale.id,
            line_type=LineType.PRODUCT,
            product_id=product.id,
            quantity=quantity,
            unit_price=unit_price,
            subtotal=money(unit_price * quantity),
        )


def aggregate_requirements(combo_lines: Iterable[ComboLine], combo_qty: Decimal) -> Dict[int, Decimal]:
    """
    Pounds needed per product to sell combo_qty units of a combo.

    A combo may list the same product more than once; amounts are summed
    so stock is checked against the total, not line by line.
    """
    required: Dict[int, Decimal] = {}
    for line in combo_lines:
        amount = Decimal(line.quantity) * Decimal(combo_qty)
        required[line.product_id] = required.get(line.product_id, Decimal('0')) + amount
    return required


class ComboLineStrategy(LineStrategy):
    """Sell a quantity of a combo, fanning out into its products."""

    line_type = LineType.COMBO

    def process_line(self, uow, sale: Sale, line_request: ComboLineRequest) -> SaleLine:
        quantity = Decimal(line_request.quantity)

        combo = uow.get_combo(line_request.combo_id)
        if not combo or not combo.lines:
            raise NotFoundError(f'Combo {line_request.combo_id} not found')
        if not combo.active:
            raise InvalidStateError(f'Combo "{combo.name}" is not active')

        required = aggregate_requirements(combo.lines, quantity)
        if not all(fits_hundredths(amount) for amount in required.values()):
            raise BusinessLogicError(
                f'{quantity} units of combo "{combo.name}" need product amounts '
                f'finer than 0.01 lb'
            )
        products = uow.get_products_for_update(required.keys())
        products_by_id = {p.id: p for p in products}

        missing = [pid for pid in required if pid not in products_by_id]
        if missing:
            raise NotFoundError(
                f'Combo "{combo.name}" references missing products: '
                f'{", ".join(str(pid) for pid in missing)}'
            )

        self._check_products(combo.name, products, required)

        # Every check passed; only now touch stock
        for product in products:
            product.quantity_on_hand = Decimal(product.quantity_on_hand) - required[product.id]
            uow.save_product(product)
        logger.debug(f"Combo {combo.id} x{quantity} decremented products {sorted(required)}")

        price = Decimal(combo.price)
        return SaleLine(
            sale_id=sale.id,
            line_type=LineType.COMBO,
            combo_id=combo.id,
            quantity=quantity,
            unit_price=price,
            subtotal=money(price * quantity),
        )

    @staticmethod
    def _check_products(combo_name: str, products: List[Product], required: Dict[int, Decimal]) -> None:
        """Raise naming every inactive or under-stocked product of the combo."""
        inactive = [p.name for p in products if not p.active]
        if inactive:
            raise InvalidStateError(
                f'Combo "{combo_name}" contains inactive products: {", ".join(inactive)}'
            )

        shortages = [
            Shortage(p.id, p.name, required[p.id], Decimal(p.quantity_on_hand))
            for p in products
            if Decimal(p.quantity_on_hand) < required[p.id]
        ]
        if shortages:
            raise InsufficientStockError(shortages)


STRATEGIES: Dict[LineType, LineStrategy] = {
    LineType.PRODUCT: ProductLineStrategy(),
    LineType.COMBO: ComboLineStrategy(),
}


def get_strategy(line_request) -> LineStrategy:
    """Select the strategy for a line request by its type tag."""
    line_type = getattr(line_request, 'line_type', None)
    strategy = STRATEGIES.get(line_type)
    if strategy is None:
        raise InvalidOperationError(f'Unknown line type: {line_type!r}')
    return strategy


def process_line(uow, sale: Sale, line_request: LineRequest) -> SaleLine:
    """Dispatch one line request to its strategy."""
    return get_strategy(line_request).process_line(uow, sale, line_request)
