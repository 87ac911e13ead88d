"""Catalog blueprint: read-only product and combo lookups (cached)."""
from flask import Blueprint, current_app, jsonify, request

from stockpos.database import get_session
from stockpos.exceptions import BusinessLogicError
from stockpos.services import catalog_service
from stockpos.services.cache_service import get_cache
from stockpos.utils.number_format import parse_positive_quantity

catalog_bp = Blueprint('catalog', __name__, url_prefix='/api')


def _active_only() -> bool:
    return request.args.get('active', '').lower() in ('1', 'true', 'yes')


@catalog_bp.route('/products', methods=['GET'])
def list_products():
    """List products. ?active=true hides inactive ones."""
    products = catalog_service.list_products(
        get_session(),
        cache=get_cache(),
        active_only=_active_only(),
        ttl=current_app.config.get('CACHE_PRODUCTS_TTL'),
    )
    return jsonify(products)


@catalog_bp.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id: int):
    product = catalog_service.get_product(
        get_session(),
        product_id,
        cache=get_cache(),
        ttl=current_app.config.get('CACHE_PRODUCTS_TTL'),
    )
    return jsonify(product)


@catalog_bp.route('/products/<int:product_id>/stock', methods=['GET'])
def check_product_stock(product_id: int):
    """Check whether a product can cover ?quantity=N pounds."""
    try:
        quantity = parse_positive_quantity(request.args.get('quantity'))
    except ValueError as e:
        raise BusinessLogicError(str(e))
    return jsonify(catalog_service.check_stock(get_session(), product_id, quantity))


@catalog_bp.route('/combos', methods=['GET'])
def list_combos():
    """List combos with their recipes. ?active=true hides inactive ones."""
    combos = catalog_service.list_combos(
        get_session(),
        cache=get_cache(),
        active_only=_active_only(),
        ttl=current_app.config.get('CACHE_COMBOS_TTL'),
    )
    return jsonify(combos)


@catalog_bp.route('/combos/<int:combo_id>', methods=['GET'])
def get_combo(combo_id: int):
    combo = catalog_service.get_combo(
        get_session(),
        combo_id,
        cache=get_cache(),
        ttl=current_app.config.get('CACHE_COMBOS_TTL'),
    )
    return jsonify(combo)
