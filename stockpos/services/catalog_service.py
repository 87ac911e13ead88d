"""
Read-only catalog queries (products and combos).

Reads go through an injected CacheService when one is given; sale creation
invalidates the 'products' and 'combos' tags after it commits.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import selectinload

from stockpos.exceptions import NotFoundError
from stockpos.models import Product, Combo, ComboLine
from stockpos.services.stock_service import validate_stock
from stockpos.services.unit_of_work import UnitOfWork
from stockpos.utils.number_format import money

PRODUCTS_MODULE = 'products'
COMBOS_MODULE = 'combos'


def serialize_product(product: Product) -> Dict[str, Any]:
    return {
        'id': product.id,
        'name': product.name,
        'quantityOnHand': str(money(product.quantity_on_hand)),
        'unitPrice': str(money(product.unit_price)),
        'packageType': product.package_type,
        'active': bool(product.active),
        'updatedAt': product.updated_at.isoformat() if product.updated_at else None,
    }


def serialize_combo(combo: Combo) -> Dict[str, Any]:
    return {
        'id': combo.id,
        'name': combo.name,
        'description': combo.description,
        'price': str(money(combo.price)),
        'active': bool(combo.active),
        'updatedAt': combo.updated_at.isoformat() if combo.updated_at else None,
        'products': [
            {
                'productId': line.product_id,
                'productName': line.product.name if line.product else None,
                'quantity': str(money(line.quantity)),
            }
            for line in sorted(combo.lines, key=lambda l: l.id)
        ],
    }


def _cached(cache, module: str, key: str, loader, ttl: Optional[int] = None):
    if cache is None:
        return loader()
    return cache.memoize(module, key, loader, ttl)


def list_products(session, cache=None, active_only: bool = False, ttl: Optional[int] = None) -> List[Dict[str, Any]]:
    """All products ordered by name."""
    def load():
        query = session.query(Product)
        if active_only:
            query = query.filter(Product.active.is_(True))
        return [serialize_product(p) for p in query.order_by(Product.name, Product.id).all()]

    key = 'list:active' if active_only else 'list:all'
    return _cached(cache, PRODUCTS_MODULE, key, load, ttl)


def get_product(session, product_id: int, cache=None, ttl: Optional[int] = None) -> Dict[str, Any]:
    """One product, or NotFoundError. Misses are not cached."""
    def load():
        product = session.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError(f'Product {product_id} not found')
        return serialize_product(product)

    return _cached(cache, PRODUCTS_MODULE, f'id:{product_id}', load, ttl)


def list_combos(session, cache=None, active_only: bool = False, ttl: Optional[int] = None) -> List[Dict[str, Any]]:
    """All combos with their recipes, ordered by name."""
    def load():
        query = session.query(Combo).options(
            selectinload(Combo.lines).selectinload(ComboLine.product)
        )
        if active_only:
            query = query.filter(Combo.active.is_(True))
        return [serialize_combo(c) for c in query.order_by(Combo.name, Combo.id).all()]

    key = 'list:active' if active_only else 'list:all'
    return _cached(cache, COMBOS_MODULE, key, load, ttl)


def get_combo(session, combo_id: int, cache=None, ttl: Optional[int] = None) -> Dict[str, Any]:
    """One combo with its recipe, or NotFoundError."""
    def load():
        combo = UnitOfWork(session).get_combo(combo_id)
        if not combo:
            raise NotFoundError(f'Combo {combo_id} not found')
        return serialize_combo(combo)

    return _cached(cache, COMBOS_MODULE, f'id:{combo_id}', load, ttl)


def check_stock(session, product_id: int, quantity: Decimal) -> Dict[str, Any]:
    """Whether a product can currently cover `quantity` pounds (never cached)."""
    with UnitOfWork(session) as uow:
        available = validate_stock(uow, product_id, quantity)
    return {
        'productId': product_id,
        'quantity': str(quantity),
        'available': available,
    }
