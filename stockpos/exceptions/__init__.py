"""Custom exceptions for the stockpos application."""
from decimal import Decimal
from typing import Iterable, List, NamedTuple


class PosError(Exception):
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


class BusinessLogicError(PosError):
    """Exception raised for business logic violations and invalid requests."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(PosError):
    """Exception raised when a referenced product, combo or sale does not exist."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class InvalidStateError(BusinessLogicError):
    """Raised when an item cannot be sold in its current state (inactive, out of stock)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class InvalidOperationError(BusinessLogicError):
    """Raised for operations the system does not know how to perform (unknown line type)."""
    def __init__(self, message, payload=None):
        super().__init__(message, 400, payload)


class UnexpectedError(PosError):
    """Raised when persistence fails; the caller may retry."""
    def __init__(self, message="Unable to complete the operation", payload=None):
        super().__init__(message, 500, payload)


class Shortage(NamedTuple):
    """One under-stocked product: what was required and what is on hand."""
    product_id: int
    product_name: str
    required: Decimal
    available: Decimal


def _fmt_qty(value) -> str:
    value = Decimal(value)
    if value % 1 == 0:
        return f"{int(value)}"
    return f"{value:.2f}".rstrip('0').rstrip('.')


class InsufficientStockError(InvalidStateError):
    """Raised when one or more products lack the stock a sale line needs."""
    def __init__(self, shortages: Iterable[Shortage]):
        self.shortages: List[Shortage] = list(shortages)
        details = '; '.join(
            f"{s.product_name}: requires {_fmt_qty(s.required)} lb, available {_fmt_qty(s.available)} lb"
            for s in self.shortages
        )
        payload = {
            'shortages': [
                {
                    'productId': s.product_id,
                    'productName': s.product_name,
                    'required': str(s.required),
                    'available': str(s.available),
                }
                for s in self.shortages
            ]
        }
        super().__init__(f"Insufficient stock for {details}", payload=payload)

    @property
    def product_names(self) -> List[str]:
        return [s.product_name for s in self.shortages]
