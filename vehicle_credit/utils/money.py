"""Money helpers: Decimal coercion and currency rounding"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Coerce through str so floats keep their printed value (0.1 -> 0.1, not 0.1000000000000000055)"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Decimal) -> Decimal:
    """Round to the smallest currency unit, half-up"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
