from __future__ import annotations

from decimal import Decimal

from psycopg import Connection

from ..domain import to_money
from ..repositories.fabric_repo import FabricRepository
from ..repositories.readymade_repo import ReadyMadeRepository
from .validation import ValidationError, require_phone, require_text

CUSTOM_ITEM = "Custom"


class StockService:
    def __init__(self, *, readymade_repo: ReadyMadeRepository, fabric_repo: FabricRepository) -> None:
        self.readymade_repo = readymade_repo
        self.fabric_repo = fabric_repo

    def add_readymade(
        self,
        conn: Connection,
        *,
        item: str,
        size: str,
        quantity: int | str,
        cost: Decimal | float | str,
        supplier: str,
        supplier_phone: str,
        custom_item: str | None = None,
    ) -> int:
        item = require_text(item, "Item name is required.")
        if item == CUSTOM_ITEM:
            item = require_text(custom_item, "Custom item name is required.")
        try:
            qty = int(quantity)
        except (TypeError, ValueError) as e:
            raise ValidationError("Quantity must be a whole number.") from e
        if qty < 1:
            raise ValidationError("Quantity must be at least 1.")
        cost = to_money(cost)
        if cost < 1:
            raise ValidationError("Cost is required.")

        return self.readymade_repo.create(
            conn,
            item=item,
            size=require_text(size, "Size is required."),
            quantity=qty,
            cost=cost,
            supplier=require_text(supplier, "Supplier name is required."),
            supplier_phone=require_phone(supplier_phone, "Supplier phone"),
        )

    def add_fabric(
        self,
        conn: Connection,
        *,
        fabric_type: str,
        length: Decimal | float | str,
        cost_per_mtr: Decimal | float | str,
        supplier: str,
        supplier_phone: str,
    ) -> int:
        length = to_money(length)
        if length < 1:
            raise ValidationError("Length must be at least 1.")
        cost_per_mtr = to_money(cost_per_mtr)
        if cost_per_mtr < 1:
            raise ValidationError("Cost is required.")

        return self.fabric_repo.create(
            conn,
            fabric_type=require_text(fabric_type, "Fabric type is required."),
            length=length,
            cost_per_mtr=cost_per_mtr,
            supplier=require_text(supplier, "Supplier name is required."),
            supplier_phone=require_phone(supplier_phone, "Supplier phone"),
        )
