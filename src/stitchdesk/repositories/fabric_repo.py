from __future__ import annotations

from decimal import Decimal

from psycopg import Connection


class FabricRepository:
    def create(
        self,
        conn: Connection,
        *,
        fabric_type: str,
        length: Decimal,
        cost_per_mtr: Decimal,
        supplier: str,
        supplier_phone: str,
    ) -> int:
        cur = conn.execute(
            """
            INSERT INTO fabric_stock(fabric_type, length, cost_per_mtr, supplier, supplier_phone)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING id;
            """,
            (fabric_type, length, cost_per_mtr, supplier, supplier_phone),
        )
        return int(cur.fetchone()[0])

    def get(self, conn: Connection, stock_id: int) -> dict | None:
        cur = conn.execute(
            """
            SELECT id, fabric_type, length, cost_per_mtr, supplier, supplier_phone
            FROM fabric_stock WHERE id = %s;
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
            SELECT id, fabric_type, length, cost_per_mtr, supplier, supplier_phone
            FROM fabric_stock
            ORDER BY id DESC
            LIMIT %s;
            """,
            (limit,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]

    def delete(self, conn: Connection, stock_id: int) -> None:
        conn.execute("DELETE FROM fabric_stock WHERE id = %s;", (stock_id,))

    def decrease_length(self, conn: Connection, *, stock_id: int, length: Decimal) -> None:
        cur = conn.execute(
            """
            UPDATE fabric_stock
            SET length = length - %s
            WHERE id = %s AND length >= %s;
            """,
            (length, stock_id, length),
        )
        if cur.rowcount != 1:
            raise ValueError("Not enough fabric for stock_id=%s" % stock_id)

    def stock_value(self, conn: Connection) -> Decimal:
        cur = conn.execute("SELECT COALESCE(SUM(cost_per_mtr * length), 0) FROM fabric_stock;")
        return cur.fetchone()[0]
