from __future__ import annotations

import logging

from psycopg import Connection

from ..db import NotFound
from ..domain import customer_from_row
from ..measurements import APPAREL_MEASUREMENTS, fields_for
from ..repositories.customer_repo import CustomerRepository
from .validation import ValidationError, optional_email, require_phone, require_text

log = logging.getLogger(__name__)


class CustomerService:
    def __init__(self, *, customer_repo: CustomerRepository) -> None:
        self.customer_repo = customer_repo

    def create_customer(self, conn: Connection, *, name: str, phone: str, email: str | None) -> int:
        customer_id = self.customer_repo.create(
            conn,
            name=require_text(name, "Customer name is required."),
            phone=require_phone(phone),
            email=optional_email(email),
        )
        log.info("customer %s created", customer_id)
        return customer_id

    def update_customer(self, conn: Connection, *, customer_id: int, name: str, phone: str, email: str | None) -> None:
        name = require_text(name, "Customer name is required.")
        phone = require_phone(phone)
        email = optional_email(email)
        if self.customer_repo.get(conn, customer_id) is None:
            raise NotFound("Customer", customer_id)
        self.customer_repo.update(conn, customer_id=customer_id, name=name, phone=phone, email=email)

    def update_measurements(self, conn: Connection, *, customer_id: int, apparel: str, fields: dict[str, str]) -> dict:
        """Replace one apparel's measurements in the profile; other apparel entries are kept."""
        if apparel not in APPAREL_MEASUREMENTS:
            raise ValidationError(f"Unknown apparel: {apparel!r}")
        allowed = set(fields_for(apparel))
        unknown = sorted(k for k in fields if k not in allowed)
        if unknown:
            raise ValidationError(f"Unknown measurement fields for {apparel}: {', '.join(unknown)}")

        row = self.customer_repo.get(conn, customer_id)
        if row is None:
            raise NotFound("Customer", customer_id)
        profile = {k: dict(v) for k, v in customer_from_row(row).measurements.items()}
        cleaned = {k: str(v).strip() for k, v in fields.items() if str(v).strip()}
        if cleaned:
            profile[apparel] = cleaned
        else:
            profile.pop(apparel, None)
        self.customer_repo.set_measurements(conn, customer_id=customer_id, measurements=profile)
        return profile

    def delete_customer(self, conn: Connection, customer_id: int) -> None:
        if self.customer_repo.get(conn, customer_id) is None:
            raise NotFound("Customer", customer_id)
        self.customer_repo.delete(conn, customer_id)
        log.info("customer %s deleted", customer_id)
