from __future__ import annotations

from decimal import Decimal

from psycopg import Connection


class ReadyMadeRepository:
    def create(
        self,
        conn: Connection,
        *,
        item: str,
        size: str,
        quantity: int,
        cost: Decimal,
        supplier: str,
        supplier_phone: str,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO readymade_stock(item, size, quantity, cost, supplier, supplier_phone)
            VALUES (%s, %s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (item, size, quantity, cost, supplier, supplier_phone),
        )
        return int(cur.fetchone()[0])

    def get(self, conn: Connection, stock_id: int) -> dict | None:
        cur = conn.execute(
            """
            SELECT id, item, size, quantity, cost, supplier, supplier_phone
            FROM readymade_stock WHERE id = %s;
            """,
            (stock_id,),
        )
        row = cur.fetchone()
        if not row:
            return None
        cols = [d.name for d in cur.description]
        return dict(zip(cols, row))

    def list(self, conn: Connection, limit: int = 100) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, item, size, quantity, cost, supplier, supplier_phone
            FROM readymade_stock
            ORDER BY id DESC
            LIMIT %s;
            """,
            (limit,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def delete(self, conn: Connection, stock_id: int) -> None:
        conn.execute("DELETE FROM readymade_stock WHERE id = %s;", (stock_id,))

    def decrease_stock(self, conn: Connection, *, stock_id: int, qty: int) -> None:
        cur = conn.execute(
            """
            UPDATE readymade_stock
            SET quantity = quantity - %s
            WHERE id = %s AND quantity >= %s;
            """,
            (qty, stock_id, qty),
        )
        if cur.rowcount != 1:
            raise ValueError("Not enough ready-made stock for stock_id=%s" % stock_id)

    def stock_value(self, conn: Connection) -> Decimal:
        cur = conn.execute("SELECT COALESCE(SUM(cost * quantity), 0) FROM readymade_stock;")
        return cur.fetchone()[0]
