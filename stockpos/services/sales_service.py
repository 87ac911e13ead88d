"""
Sales service with transactional logic.
Handles sale creation (stock validation, stock decrement, totals) and sale lookups.
"""
import logging
from decimal import Decimal
from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import selectinload

from stockpos.exceptions import (
    PosError, BusinessLogicError, NotFoundError, InvalidStateError, UnexpectedError
)
from stockpos.models import Sale, SaleLine, SaleType, LineType
from stockpos.services.line_requests import LineRequest
from stockpos.services.line_strategies import process_line
from stockpos.services.unit_of_work import UnitOfWork
from stockpos.utils.number_format import money, parse_positive_quantity

logger = logging.getLogger(__name__)

MAX_CLIENT_LENGTH = 100
MAX_NOTES_LENGTH = 500


def parse_sale_type(value: Any) -> SaleType:
    """Map an incoming sale type to SaleType (INDIVIDUAL when omitted)."""
    if value is None or value == '':
        return SaleType.INDIVIDUAL
    if isinstance(value, SaleType):
        return value
    try:
        return SaleType(str(value).strip().upper())
    except ValueError:
        allowed = ', '.join(t.value for t in SaleType)
        raise BusinessLogicError(f'Invalid sale type: {value}. Allowed: {allowed}')


def create_sale(
    session,
    client: str,
    notes: Optional[str],
    sale_type: Any,
    line_requests: Iterable[LineRequest],
    cache=None,
) -> Sale:
    """
    Create a sale from heterogeneous line requests, all or nothing.

    The sale row is inserted first with a zero total so lines can reference
    it; each line is then validated and its stock decremented, in input
    order, within the same transaction. Any failure rolls back the sale,
    its lines and every stock decrement made by this call.

    Calling this twice with the same input creates two sales.

    Raises:
        BusinessLogicError: invalid client/notes/sale type, or a quantity
            that is not positive or has more than 2 decimal places.
        NotFoundError: a referenced product or combo does not exist.
        InvalidStateError: empty sale, inactive item or insufficient stock.
        InvalidOperationError: unknown line type.
        UnexpectedError: the database failed; nothing was persisted.
    """
    if client is not None and not isinstance(client, str):
        raise BusinessLogicError('Client must be text')
    client = (client or '').strip()
    if not client:
        raise BusinessLogicError('Client is required')
    if len(client) > MAX_CLIENT_LENGTH:
        raise BusinessLogicError(f'Client cannot exceed {MAX_CLIENT_LENGTH} characters')

    if notes is not None and not isinstance(notes, str):
        raise BusinessLogicError('Notes must be text')
    notes = notes.strip() if notes and notes.strip() else None
    if notes and len(notes) > MAX_NOTES_LENGTH:
        raise BusinessLogicError(f'Notes cannot exceed {MAX_NOTES_LENGTH} characters')

    sale_type = parse_sale_type(sale_type)
    line_requests = list(line_requests)
    if not line_requests:
        raise InvalidStateError('A sale must contain at least one line')
    for line_request in line_requests:
        _validate_quantity(line_request)

    with UnitOfWork(session) as uow:
        try:
            # 1. Sale row first, so lines can reference its id
            sale = uow.add_sale(Sale(
                client=client,
                notes=notes,
                sale_type=sale_type,
                created_at=datetime.now(timezone.utc),
                total=Decimal('0.00'),
            ))

            # 2. Lines in input order; each validates and decrements stock
            lines: List[SaleLine] = []
            total = Decimal('0.00')
            for line_request in line_requests:
                line = process_line(uow, sale, line_request)
                lines.append(line)
                total += line.subtotal

            # 3. Total and lines persisted together
            sale.total = money(total)
            uow.add_sale_lines(lines)
            uow.commit()

        except PosError as e:
            logger.warning(f"Sale rejected for client '{client}': {e.message}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Database error while creating sale: {str(e)}", exc_info=True)
            raise UnexpectedError('Unable to complete sale') from e

    _invalidate_catalog_cache(cache)
    logger.info(f"Sale {sale.id} created for '{client}': {len(lines)} lines, total {sale.total}")
    return sale


def get_sale(session, sale_id: int) -> Sale:
    """Get a sale with its lines, or raise NotFoundError."""
    sale = (
        session.query(Sale)
        .options(selectinload(Sale.lines))
        .filter(Sale.id == sale_id)
        .first()
    )
    if not sale:
        raise NotFoundError(f'Sale {sale_id} not found')
    return sale


def list_sales(session, start: Optional[date] = None, end: Optional[date] = None) -> List[Sale]:
    """
    List sales newest first, optionally within an inclusive date range.

    Bounds are whole UTC days: start at 00:00:00, end at 23:59:59.999999.
    """
    if start and end and start > end:
        raise BusinessLogicError('Start date must be before or equal to end date')

    query = session.query(Sale).options(selectinload(Sale.lines))
    if start:
        query = query.filter(Sale.created_at >= datetime.combine(start, time.min, tzinfo=timezone.utc))
    if end:
        query = query.filter(Sale.created_at <= datetime.combine(end, time.max, tzinfo=timezone.utc))

    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def serialize_sale(sale: Sale) -> Dict[str, Any]:
    """Sale as a JSON-ready dict (amounts as strings to keep precision)."""
    return {
        'id': sale.id,
        'client': sale.client,
        'notes': sale.notes,
        'saleType': sale.sale_type.value,
        'createdAt': sale.created_at.isoformat() if sale.created_at else None,
        'total': str(money(sale.total)),
        'lines': [serialize_sale_line(line) for line in sale.lines],
    }


def serialize_sale_line(line: SaleLine) -> Dict[str, Any]:
    return {
        'id': line.id,
        'type': line.line_type.value,
        'productId': line.product_id if line.line_type == LineType.PRODUCT else None,
        'comboId': line.combo_id if line.line_type == LineType.COMBO else None,
        'quantity': str(money(line.quantity)),
        'unitPrice': str(money(line.unit_price)),
        'subtotal': str(money(line.subtotal)),
    }


# =====================================================
# PRIVATE HELPERS
# =====================================================

def _validate_quantity(line_request) -> None:
    """Reject quantities the Numeric(10, 2) columns would round before anything is written."""
    try:
        parse_positive_quantity(getattr(line_request, 'quantity', None))
    except ValueError as e:
        raise BusinessLogicError(str(e))


def _invalidate_catalog_cache(cache) -> None:
    """Stock changed: drop cached product and combo reads."""
    if cache is None:
        return
    cache.invalidate('products')
    cache.invalidate('combos')
