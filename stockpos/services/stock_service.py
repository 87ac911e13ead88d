"""Stock validation helpers (read-only)."""
from decimal import Decimal

from stockpos.exceptions import NotFoundError
from stockpos.models import Product


def has_stock(product: Product, requested_qty: Decimal) -> bool:
    """True when the product is active and has at least requested_qty pounds on hand."""
    if not product.active:
        return False
    return Decimal(product.quantity_on_hand) >= Decimal(requested_qty)


def validate_stock(uow, product_id: int, requested_qty: Decimal) -> bool:
    """
    Check whether a product can cover a requested quantity.

    Raises:
        NotFoundError: if the product does not exist.

    Returns False (not an error) for inactive or under-stocked products.
    """
    product = uow.get_product(product_id)
    if not product:
        raise NotFoundError(f'Product {product_id} not found')
    return has_stock(product, requested_qty)
