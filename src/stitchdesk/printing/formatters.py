"""en-IN currency and date formatting."""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from ..domain import to_datetime, to_money

CURRENCY_SYMBOL = "₹"
MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_PAISE = Decimal("0.01")
_RUPEE = Decimal(1)


def _group_indian(digits: str) -> str:
    # 1234567 -> 12,34,567
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_currency(amount: Any, whole: bool = False) -> str:
    value = to_money(amount)
    sign = "-" if value < 0 else ""
    value = abs(value).quantize(_RUPEE if whole else _PAISE, rounding=ROUND_HALF_UP)
    integer, _, fraction = f"{value:f}".partition(".")
    text = f"{sign}{CURRENCY_SYMBOL}{_group_indian(integer)}"
    return f"{text}.{fraction}" if fraction else text


def format_quantity(quantity: Any) -> str:
    value = to_money(quantity)
    if value == value.to_integral_value():
        return str(value.quantize(_RUPEE))
    return f"{value.normalize():f}"


def format_date(value: Any, default: str = "N/A") -> str:
    """``17 Oct 2026``; epoch seconds are converted first."""
    dt: Optional[datetime] = to_datetime(value)
    if dt is None:
        return default
    return f"{dt.day:02d} {MONTHS[dt.month - 1]} {dt.year}"


def format_day_month(value: Any, default: str = "N/A") -> str:
    dt = to_datetime(value)
    if dt is None:
        return default
    return f"{dt.day:02d} {MONTHS[dt.month - 1]}"
