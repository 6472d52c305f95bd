from __future__ import annotations

from decimal import Decimal

from psycopg import Connection


class EmployeeRepository:
    def create(self, conn: Connection, *, name: str, role: str, salary: Decimal) -> int:
        cur = conn.execute(
            """
            INSERT INTO employee(name, role, salary, balance, leaves)
            VALUES (%s, %s, %s, 0, 0)
            RETURNING id;
            """,
            (name, role, salary),
        )
        return int(cur.fetchone()[0])

    def update(self, conn: Connection, *, employee_id: int, name: str, role: str, salary: Decimal) -> None:
        conn.execute(
            "UPDATE employee SET name = %s, role = %s, salary = %s WHERE id = %s;",
            (name, role, salary, employee_id),
        )

    def set_balance(self, conn: Connection, *, employee_id: int, balance: Decimal) -> None:
        conn.execute("UPDATE employee SET balance = %s WHERE id = %s;", (balance, employee_id))

    def set_leaves(self, conn: Connection, *, employee_id: int, leaves: int) -> None:
        conn.execute("UPDATE employee SET leaves = %s WHERE id = %s;", (leaves, employee_id))

    def delete(self, conn: Connection, employee_id: int) -> None:
        conn.execute("DELETE FROM employee WHERE id = %s;", (employee_id,))

    def get(self, conn: Connection, employee_id: int) -> dict | None:
        cur = conn.execute(
            "SELECT id, name, role, salary, balance, leaves FROM employee WHERE id = %s;",
            (employee_id,),
        )
        row = cur.fetchone()
        if not row:
            return None
        cols = [d.name for d in cur.description]
        return dict(zip(cols, row))

    def list(self, conn: Connection, limit: int = 100) -> list[dict]:
        cur = conn.execute(
            """
            SELECT id, name, role, salary, balance, leaves
            FROM employee
            ORDER BY name
            LIMIT %s;
            """,
            (limit,),
        )
        cols = [d.name for d in cur.description]
        return [dict(zip(cols, row)) for row in cur.fetchall()]
