"""Number parsing utilities for request payloads."""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

CENTS = Decimal('0.01')

# 1234.5 or 1234,5
NUMBER_PATTERN = re.compile(r"^\d+(?:[.,]\d+)?$")


def parse_decimal(value: Union[str, int, float, Decimal, None]) -> Decimal:
    """
    Parse a non-negative number coming from JSON or a query string.

    Accepts ints, floats, Decimals and strings such as "4", "4.5" or "4,5".
    Floats go through str() so 0.1 stays 0.1.

    Raises:
        ValueError: if the value is missing, malformed or negative.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('A numeric value is required')

    if isinstance(value, Decimal):
        decimal_value = value
    elif isinstance(value, (int, float)):
        decimal_value = Decimal(str(value))
    else:
        cleaned = str(value).strip()
        if not cleaned:
            raise ValueError('A numeric value is required')
        if not NUMBER_PATTERN.match(cleaned):
            raise ValueError(f'Invalid number: {cleaned}')
        normalized = cleaned.replace(',', '.')
        try:
            decimal_value = Decimal(normalized)
        except (InvalidOperation, ValueError):
            raise ValueError(f'Invalid number: {cleaned}')

    if not decimal_value.is_finite():
        raise ValueError('Invalid number')
    if decimal_value < 0:
        raise ValueError('The value cannot be negative')

    return decimal_value


def fits_hundredths(value) -> bool:
    """True when value has no digits beyond the second decimal place (quantities are stored as Numeric(10, 2))."""
    value = Decimal(value)
    return value == value.quantize(CENTS)


def parse_positive_quantity(value) -> Decimal:
    """Parse a quantity in pounds; must be greater than zero, at most 2 decimals."""
    quantity = parse_decimal(value)
    if quantity <= 0:
        raise ValueError('Quantity must be greater than 0')
    if not fits_hundredths(quantity):
        raise ValueError('Quantity cannot have more than 2 decimal places')
    return quantity


def money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)
