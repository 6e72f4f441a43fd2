"""
Money Helpers Module

Decimal conversion, precision checks and rounding for monetary values.
NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation, getcontext
from typing import Union

# Set global decimal context for financial precision
getcontext().prec = 28

ZERO = Decimal('0')

# Amounts and interest carry at most two fractional digits
AMOUNT_PLACES = 2

Number = Union[Decimal, int, str]


def to_decimal(value: Number) -> Decimal:
    """
    Convert a value to Decimal without passing through float.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, float):
        raise ValueError("Monetary values must not be floats")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid decimal value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Invalid decimal value: {value!r}")
    return result


def has_at_most_places(amount: Decimal, places: int = AMOUNT_PLACES) -> bool:
    """Check that an amount carries no more than `places` fractional digits"""
    return amount.normalize().as_tuple().exponent >= -places


def round_money(amount: Decimal, places: int = AMOUNT_PLACES) -> Decimal:
    """Round half-up to `places` fractional digits"""
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Format for display with two fractional digits"""
    return f"{round_money(amount):.2f}"
