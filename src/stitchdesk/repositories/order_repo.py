from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from psycopg import Connection
from psycopg.types.json import Jsonb

FIRST_ORDER_NUMBER = 1001

_ORDER_COLUMNS = """
    o.id, o.order_number, o.customer_id, o.items, o.subtotal, o.advance, o.balance,
    o.status, o.delivery_date, o.created_at
"""


class OrderRepository:
    def next_order_number(self, conn: Connection) -> int:
        cur = conn.execute(
            """
            INSERT INTO counter(name, last_value) VALUES ('orders', %s)
            ON CONFLICT (name) DO UPDATE SET last_value = counter.last_value + 1
            RETURNING last_value;
            """,
            (FIRST_ORDER_NUMBER,),
        )
        return int(cur.fetchone()[0])

    def create(
        self,
        conn: Connection,
        *,
        order_number: int,
        customer_id: int,
        items: list[dict],
        subtotal: Decimal,
        advance: Decimal,
        balance: Decimal,
        delivery_date: datetime | None,
        status: str = "In Progress",
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO orders(order_number, customer_id, items, subtotal, advance, balance, status, delivery_date)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (order_number, customer_id, Jsonb(items), subtotal, advance, balance, status, delivery_date),
        )
        return int(cur.fetchone()[0])

    def set_status(self, conn: Connection, *, order_id: int, status: str) -> None:
        conn.execute(
            "UPDATE orders SET status = %s WHERE id = %s;",
            (status, order_id),
        )

    def set_payment(self, conn: Connection, *, order_id: int, advance: Decimal, balance: Decimal) -> None:
        conn.execute(
            "UPDATE orders SET advance = %s, balance = %s WHERE id = %s;",
            (advance, balance, order_id),
        )

    def get(self, conn: Connection, order_id: int) -> dict | None:
        cur = conn.execute(f"SELECT {_ORDER_COLUMNS} FROM orders o WHERE o.id = %s;", (order_id,))
        row = cur.fetchone()
        if not row:
            return None
        cols = [d.name for d in cur.description]
        return dict(zip(cols, row))

    def list_with_customers(
        self,
        conn: Connection,
        *,
        limit: int = 100,
        outstanding_only: bool = False,
        status: str | None = None,
    ) -> list[dict]:
        where = ["TRUE"]
        params: list = []
        if outstanding_only:
            where.append("o.balance > 0")
        if status:
            where.append("o.status = %s")
            params.append(status)
        params.append(limit)
        cur = conn.execute(
            f"""
            SELECT {_ORDER_COLUMNS}, c.name AS customer_name, c.phone AS customer_phone
            FROM orders o
            LEFT JOIN customer c ON c.id = o.customer_id
            WHERE {" AND ".join(where)}
            ORDER BY o.order_number DESC
            LIMIT %s;
            """,
            params,
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def list_for_customer(self, conn: Connection, customer_id: int) -> list[dict]:
        cur = conn.execute(
            f"""
            SELECT {_ORDER_COLUMNS}
            FROM orders o
            WHERE o.customer_id = %s
            ORDER BY o.created_at DESC;
            """,
            (customer_id,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def sales_totals(self, conn: Connection, *, month_start: datetime) -> dict:
        """Sum of subtotals over every order, and how many were created since ``month_start``."""
        cur = conn.execute(
            """
            SELECT
              COALESCE(SUM(subtotal), 0) AS total_sales,
              COUNT(*) FILTER (WHERE created_at >= %s) AS new_orders
            FROM orders;
            """,
            (month_start,),
        )
        row = cur.fetchone()
        cols = [d.name for d in cur.description]
        return dict(zip(cols, row))

    def monthly_sales(self, conn: Connection) -> list[dict]:
        cur = conn.execute(
            """
            SELECT EXTRACT(MONTH FROM created_at)::int AS month, SUM(subtotal) AS sales
            FROM orders
            GROUP BY 1
            ORDER BY 1;
            """
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
