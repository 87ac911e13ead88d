"""
Sale line requests.

A line request is a tagged union: either a ProductLineRequest or a
ComboLineRequest, each carrying its LineType tag. Strategies are chosen
by that tag, never by matching class or type names.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Union

from stockpos.exceptions import BusinessLogicError, InvalidOperationError
from stockpos.models import LineType
from stockpos.utils.number_format import parse_positive_quantity


@dataclass(frozen=True)
class ProductLineRequest:
    """Sell `quantity` pounds of one product."""
    product_id: int
    quantity: Decimal
    line_type: ClassVar[LineType] = LineType.PRODUCT

    @property
    def item_id(self) -> int:
        return self.product_id


@dataclass(frozen=True)
class ComboLineRequest:
    """Sell `quantity` units of one combo."""
    combo_id: int
    quantity: Decimal
    line_type: ClassVar[LineType] = LineType.COMBO

    @property
    def item_id(self) -> int:
        return self.combo_id


LineRequest = Union[ProductLineRequest, ComboLineRequest]

# Tags accepted on the wire, case-insensitive
LINE_TYPE_TAGS = {
    'product': LineType.PRODUCT,
    'producto': LineType.PRODUCT,
    'combo': LineType.COMBO,
}


def parse_line_type(raw: Any) -> LineType:
    """Map an incoming type tag to a LineType, or raise InvalidOperationError."""
    if isinstance(raw, LineType):
        return raw
    line_type = LINE_TYPE_TAGS.get(str(raw or '').strip().lower())
    if line_type is None:
        raise InvalidOperationError(f'Unknown line type: {raw!r}')
    return line_type


def _parse_id(value: Any, field: str) -> int:
    if value is None or isinstance(value, bool):
        raise BusinessLogicError(f'{field} is required')
    try:
        item_id = int(value)
    except (TypeError, ValueError):
        raise BusinessLogicError(f'{field} must be an integer')
    if item_id <= 0:
        raise BusinessLogicError(f'{field} must be a positive integer')
    return item_id


def line_request_from_dict(data: Dict[str, Any]) -> LineRequest:
    """
    Build a line request from a JSON object.

    Expected shape: {"type": "product"|"combo", "productId"|"comboId": int,
    "quantity": number}. "itemId" is accepted for either type.
    """
    if not isinstance(data, dict):
        raise BusinessLogicError('Each line must be an object')

    line_type = parse_line_type(data.get('type'))

    try:
        quantity = parse_positive_quantity(data.get('quantity'))
    except ValueError as e:
        raise BusinessLogicError(str(e))

    if line_type == LineType.PRODUCT:
        product_id = _parse_id(data.get('productId', data.get('itemId')), 'productId')
        return ProductLineRequest(product_id=product_id, quantity=quantity)

    combo_id = _parse_id(data.get('comboId', data.get('itemId')), 'comboId')
    return ComboLineRequest(combo_id=combo_id, quantity=quantity)


def line_requests_from_payload(lines: Any) -> List[LineRequest]:
    """Parse the `lines` array of a create-sale payload."""
    if not isinstance(lines, list) or not lines:
        raise BusinessLogicError('A sale must contain at least one line')
    return [line_request_from_dict(line) for line in lines]
