from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping

from .domain import Order, order_from_row, to_money
from .printing.formatters import MONTHS


@dataclass(frozen=True)
class FinancialSummary:
    total_sales: Decimal
    total_purchases: Decimal
    total_profit: Decimal
    new_orders: int


@dataclass(frozen=True)
class OrderRow:
    order: Order
    customer_name: str
    customer_phone: str


def month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def financial_summary(
    totals: Mapping, readymade_value: Decimal | float | str, fabric_value: Decimal | float | str
) -> FinancialSummary:
    """Combine ``OrderRepository.sales_totals`` with the stock valuations into the dashboard cards."""
    total_sales = to_money(totals.get("total_sales"))
    purchases = to_money(readymade_value) + to_money(fabric_value)
    return FinancialSummary(
        total_sales=total_sales,
        total_purchases=purchases,
        total_profit=total_sales - purchases,
        new_orders=int(totals.get("new_orders") or 0),
    )


def monthly_sales(rows: Iterable[Mapping]) -> list[dict]:
    """Jan..Dec buckets from ``(month, sales)`` rows, all years folded together; missing months are zero."""
    buckets = {m: Decimal(0) for m in MONTHS}
    for r in rows:
        buckets[MONTHS[int(r["month"]) - 1]] += to_money(r["sales"])
    return [{"month": m, "sales": v} for m, v in buckets.items()]


def order_rows(rows: Iterable[Mapping], unknown: str = "Unknown Customer") -> list[OrderRow]:
    """Parse ``list_with_customers`` rows, keeping their order."""
    return [
        OrderRow(
            order=order_from_row(r),
            customer_name=r.get("customer_name") or unknown,
            customer_phone=r.get("customer_phone") or "",
        )
        for r in rows
    ]


def search_orders(rows: Iterable[OrderRow], query: str | None) -> list[OrderRow]:
    """Match customer name (case-insensitive), order number or phone substring."""
    rows = list(rows)
    q = (query or "").strip().lower()
    if not q:
        return rows
    return [
        r
        for r in rows
        if q in r.customer_name.lower() or q in str(r.order.order_number) or q in r.customer_phone
    ]


def outstanding(rows: Iterable[OrderRow], query: str | None = None) -> tuple[list[OrderRow], Decimal]:
    due = [r for r in rows if r.order.balance > 0]
    due.sort(key=lambda r: r.order.order_number, reverse=True)
    due = search_orders(due, query)
    return due, sum((r.order.balance for r in due), Decimal(0))


def recent_orders(rows: Iterable[OrderRow], limit: int = 5) -> list[OrderRow]:
    return sorted(rows, key=lambda r: r.order.created_at, reverse=True)[:limit]
