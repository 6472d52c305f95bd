from datetime import datetime, timezone
from decimal import Decimal

from conftest import accessory

from stitchdesk.domain import item_to_dict
from stitchdesk.reports import (
    financial_summary,
    month_start,
    monthly_sales,
    order_rows,
    outstanding,
    recent_orders,
    search_orders,
)


def row(order_number, balance, name="Asha", phone="9876543210", created=None):
    return {
        "id": order_number,
        "order_number": order_number,
        "customer_id": 1,
        "items": [item_to_dict(accessory(price="1000"))],
        "subtotal": "1000",
        "advance": str(1000 - balance),
        "balance": str(balance),
        "status": "In Progress",
        "created_at": created or datetime(2026, 10, 1, tzinfo=timezone.utc),
        "customer_name": name,
        "customer_phone": phone,
    }


def test_order_rows_fall_back_to_unknown_customer():
    rows = order_rows([row(1001, 0, name=None, phone=None)])
    assert rows[0].customer_name == "Unknown Customer"
    assert rows[0].customer_phone == ""


def test_search_by_name_number_or_phone():
    rows = order_rows([row(1001, 0, name="Asha"), row(1002, 0, name="Vikram", phone="9123456789")])
    assert [r.order.order_number for r in search_orders(rows, "asha")] == [1001]
    assert [r.order.order_number for r in search_orders(rows, "1002")] == [1002]
    assert [r.order.order_number for r in search_orders(rows, "91234")] == [1002]
    assert len(search_orders(rows, "  ")) == 2


def test_outstanding_sorted_and_totalled():
    rows = order_rows([row(1001, 200), row(1003, 0), row(1002, 500)])
    due, total = outstanding(rows)
    assert [r.order.order_number for r in due] == [1002, 1001]
    assert total == Decimal(700)


def test_financial_summary_from_aggregates():
    s = financial_summary({"total_sales": Decimal(1500), "new_orders": 2}, Decimal(600), "250")
    assert s.total_sales == Decimal(1500)
    assert s.total_purchases == Decimal(850)
    assert s.total_profit == Decimal(650)
    assert s.new_orders == 2

    empty = financial_summary({"total_sales": 0, "new_orders": 0}, 0, 0)
    assert empty.total_profit == Decimal(0)


def test_monthly_sales_fills_every_month():
    sales = monthly_sales([{"month": 10, "sales": Decimal(1500)}, {"month": 1, "sales": "200.50"}])
    assert [m["month"] for m in sales][:3] == ["Jan", "Feb", "Mar"]
    assert len(sales) == 12
    assert sales[9] == {"month": "Oct", "sales": Decimal(1500)}
    assert sales[0]["sales"] == Decimal("200.50")
    assert sales[1]["sales"] == Decimal(0)


def test_month_start():
    now = datetime(2026, 10, 17, 15, 45, 12, tzinfo=timezone.utc)
    assert month_start(now) == datetime(2026, 10, 1, tzinfo=timezone.utc)


def test_recent_orders_newest_first():
    rows = order_rows(
        [
            row(1001, 0, created=datetime(2026, 9, 1, tzinfo=timezone.utc)),
            row(1002, 0, created=datetime(2026, 10, 1, tzinfo=timezone.utc)),
        ]
    )
    assert [r.order.order_number for r in recent_orders(rows, limit=1)] == [1002]
