from __future__ import annotations

import logging
from decimal import Decimal

from psycopg import Connection

from ..db import NotFound
from ..domain import employee_from_row, to_money
from ..repositories.employee_repo import EmployeeRepository
from .validation import ValidationError, require_text

log = logging.getLogger(__name__)


class PayrollService:
    def __init__(self, *, employee_repo: EmployeeRepository) -> None:
        self.employee_repo = employee_repo

    def _salary(self, value: Decimal | float | str) -> Decimal:
        salary = to_money(value)
        if salary <= 0:
            raise ValidationError("Salary must be greater than 0.")
        return salary

    def _require(self, conn: Connection, employee_id: int) -> dict:
        row = self.employee_repo.get(conn, employee_id)
        if row is None:
            raise NotFound("Employee", employee_id)
        return row

    def add_employee(self, conn: Connection, *, name: str, role: str, salary: Decimal | float | str) -> int:
        return self.employee_repo.create(
            conn,
            name=require_text(name, "Employee name is required."),
            role=require_text(role, "Role is required."),
            salary=self._salary(salary),
        )

    def update_employee(
        self, conn: Connection, *, employee_id: int, name: str, role: str, salary: Decimal | float | str
    ) -> None:
        name = require_text(name, "Employee name is required.")
        role = require_text(role, "Role is required.")
        salary = self._salary(salary)
        self._require(conn, employee_id)
        self.employee_repo.update(conn, employee_id=employee_id, name=name, role=role, salary=salary)

    def pay_salary(self, conn: Connection, employee_id: int) -> Decimal:
        """Settle the outstanding balance; returns the amount that was owed."""
        employee = employee_from_row(self._require(conn, employee_id))
        self.employee_repo.set_balance(conn, employee_id=employee_id, balance=Decimal(0))
        log.info("salary paid to %s (cleared %s)", employee.name, employee.balance)
        return employee.balance

    def set_leaves(self, conn: Connection, *, employee_id: int, leaves: int | str) -> None:
        try:
            count = int(leaves)
        except (TypeError, ValueError) as e:
            raise ValidationError("Leaves must be a whole number.") from e
        if count < 0:
            raise ValidationError("Leaves cannot be negative.")
        self._require(conn, employee_id)
        self.employee_repo.set_leaves(conn, employee_id=employee_id, leaves=count)

    def remove_employee(self, conn: Connection, employee_id: int) -> None:
        self._require(conn, employee_id)
        self.employee_repo.delete(conn, employee_id)
        log.info("employee %s removed", employee_id)
