"""Sales blueprint: JSON API for creating and reading sales."""
import logging
from datetime import date
from typing import Optional

from flask import Blueprint, jsonify, request

from stockpos.database import get_session
from stockpos.exceptions import PosError, BusinessLogicError
from stockpos.services import sales_service
from stockpos.services.cache_service import get_cache
from stockpos.services.line_requests import line_requests_from_payload
from stockpos.blueprints.metrics import sales_created_total, sales_rejected_total

logger = logging.getLogger(__name__)

sales_bp = Blueprint('sales', __name__, url_prefix='/api/sales')


def _parse_date_arg(name: str) -> Optional[date]:
    """Parse an optional YYYY-MM-DD query argument."""
    raw = request.args.get(name, '').strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        raise BusinessLogicError(f'Invalid {name} date: {raw}. Use YYYY-MM-DD')


@sales_bp.route('', methods=['POST'])
def create_sale():
    """
    Create a sale.

    Body: {client, notes?, saleType?, lines: [{type, productId?, comboId?, quantity}]}
    Returns 201 with the created sale.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise BusinessLogicError('Request body must be a JSON object')

    session = get_session()
    try:
        line_requests = line_requests_from_payload(payload.get('lines'))
        sale = sales_service.create_sale(
            session,
            client=payload.get('client'),
            notes=payload.get('notes'),
            sale_type=payload.get('saleType'),
            line_requests=line_requests,
            cache=get_cache(),
        )
    except PosError as e:
        sales_rejected_total.labels(reason=type(e).__name__).inc()
        raise

    sales_created_total.labels(sale_type=sale.sale_type.value).inc()
    return jsonify(sales_service.serialize_sale(sale)), 201


@sales_bp.route('', methods=['GET'])
def list_sales():
    """List sales, newest first. Optional ?start=YYYY-MM-DD&end=YYYY-MM-DD."""
    start = _parse_date_arg('start')
    end = _parse_date_arg('end')
    sales = sales_service.list_sales(get_session(), start=start, end=end)
    return jsonify([sales_service.serialize_sale(s) for s in sales])


@sales_bp.route('/<int:sale_id>', methods=['GET'])
def get_sale(sale_id: int):
    """Get one sale with its lines."""
    sale = sales_service.get_sale(get_session(), sale_id)
    return jsonify(sales_service.serialize_sale(sale))
