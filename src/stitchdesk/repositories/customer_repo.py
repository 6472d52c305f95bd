from __future__ import annotations

from psycopg import Connection
from psycopg.types.json import Jsonb


class CustomerRepository:
    def create(self, conn: Connection, *, name: str, phone: str, email: str | None, measurements: dict | None = None) -> int:
        cur = conn.execute(
            """
            INSERT INTO customer(name, phone, email, measurements)
            VALUES (%s, %s, %s, %s)
            RETURNING id;
            """,
            (name, phone, email, Jsonb(measurements or {})),
        )
        return int(cur.fetchone()[0])

    def update(self, conn: Connection, *, customer_id: int, name: str, phone: str, email: str | None) -> None:
        conn.execute(
            "UPDATE customer SET name = %s, phone = %s, email = %s WHERE id = %s;",
            (name, phone, email, customer_id),
        )

    def set_measurements(self, conn: Connection, *, customer_id: int, measurements: dict) -> None:
        conn.execute(
            "UPDATE customer SET measurements = %s WHERE id = %s;",
            (Jsonb(measurements), customer_id),
        )

    def delete(self, conn: Connection, customer_id: int) -> None:
        conn.execute("DELETE FROM customer WHERE id = %s;", (customer_id,))

    def get(self, conn: Connection, customer_id: int) -> dict | None:
        cur = conn.execute(
            """
            SELECT id, name, phone, email, measurements, created_at
            FROM customer WHERE id = %s;
            """,
            (customer_id,),
        )
        row = cur.fetchone()
        if not row:
            return None
        cols = [d.name for d in cur.description]
        return dict(zip(cols, row))

    def list(self, conn: Connection, limit: int = 50, search: str | None = None) -> list[dict]:
        pattern = f"%{search.strip().lower()}%" if search and search.strip() else "%"
        cur = conn.execute(
            """
            SELECT id, name, phone, email, measurements, created_at
            FROM customer
            WHERE lower(name) LIKE %s OR phone LIKE %s
            ORDER BY id DESC
            LIMIT %s;
            """,
            (pattern, pattern, limit),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
