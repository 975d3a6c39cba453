"""Fixed-point money helpers"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

CENT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Round to 2 fraction digits, half-up"""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Full-precision sum; round with to_money() at output"""
    return sum(amounts, Decimal("0"))
