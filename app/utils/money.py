"""
Decimal helpers for prices and totals.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_CENT = Decimal("0.01")


def to_decimal(value: Any) -> Decimal:
    """Convert a column value or JSON number to ``Decimal`` without float noise."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Decimal) -> Decimal:
    """Round to cents, ties away from zero (``62.505`` → ``62.51``)."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def apply_margin(cost: Decimal, margin: Any) -> Decimal:
    """Return ``cost * (1 + margin/100)`` rounded to cents."""
    return round2(cost * (Decimal("1") + to_decimal(margin) / Decimal("100")))


_SCALE4 = Decimal("0.0001")


def round4(value: Any) -> Decimal:
    """Round to the 4-decimal scale of quantity and unit price columns."""
    return to_decimal(value).quantize(_SCALE4, rounding=ROUND_HALF_UP)
