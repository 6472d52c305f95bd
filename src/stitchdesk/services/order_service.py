from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from psycopg import Connection

from ..db import NotFound
from ..domain import (
    ORDER_STATUSES,
    OrderItem,
    StitchingDetail,
    StockDetail,
    customer_from_row,
    item_from_dict,
    item_to_dict,
    order_from_row,
    to_money,
)
from ..measurements import APPAREL_MEASUREMENTS, fields_for
from ..repositories.customer_repo import CustomerRepository
from ..repositories.fabric_repo import FabricRepository
from ..repositories.order_repo import OrderRepository
from ..repositories.readymade_repo import ReadyMadeRepository
from .validation import ValidationError, require_phone

log = logging.getLogger(__name__)


@dataclass
class CreateOrderItemInput:
    type: str
    price: Decimal
    quantity: Decimal
    name: str = ""
    apparel: str | None = None
    measurements: dict[str, str] = field(default_factory=dict)
    is_own_fabric: bool = False
    remarks: str = ""
    fabric_price: Decimal | None = None
    stock_id: int | None = None


@dataclass(frozen=True)
class CreatedOrder:
    order_id: int
    order_number: int
    customer_id: int


class OrderService:
    def __init__(
        self,
        *,
        customer_repo: CustomerRepository,
        order_repo: OrderRepository,
        readymade_repo: ReadyMadeRepository,
        fabric_repo: FabricRepository,
    ) -> None:
        self.customer_repo = customer_repo
        self.order_repo = order_repo
        self.readymade_repo = readymade_repo
        self.fabric_repo = fabric_repo

    def _build_item(self, conn: Connection, it: CreateOrderItemInput) -> OrderItem:
        price = to_money(it.price)
        quantity = to_money(it.quantity)
        if price <= 0:
            raise ValidationError("Price must be positive.")
        if quantity <= 0:
            raise ValidationError("Quantity must be positive.")

        if it.type == "stitching":
            apparel = (it.apparel or "").strip()
            if apparel not in APPAREL_MEASUREMENTS:
                raise ValidationError(f"Unknown apparel: {it.apparel!r}")
            allowed = set(fields_for(apparel))
            unknown = sorted(k for k in it.measurements if k not in allowed)
            if unknown:
                raise ValidationError(f"Unknown measurement fields for {apparel}: {', '.join(unknown)}")
            fabric_price = to_money(it.fabric_price) if it.fabric_price else None
            if fabric_price is not None and fabric_price < 0:
                raise ValidationError("Fabric price cannot be negative.")
            measurements = {k: str(v).strip() for k, v in it.measurements.items() if str(v).strip()}
            return OrderItem(
                type="stitching",
                name=it.name.strip() or f"{apparel} Stitching",
                price=price + (fabric_price or 0),
                quantity=quantity,
                details=StitchingDetail(
                    apparel=apparel,
                    measurements=measurements,
                    is_own_fabric=bool(it.is_own_fabric),
                    remarks=it.remarks.strip(),
                    stitching_price=(price if fabric_price else None),
                    fabric_price=fabric_price,
                ),
            )

        if it.type == "readymade":
            if it.stock_id is None:
                raise ValidationError("Ready-made items must reference a stock entry.")
            stock = self.readymade_repo.get(conn, it.stock_id)
            if stock is None:
                raise ValidationError(f"Unknown ready-made stock id: {it.stock_id}")
            if quantity != quantity.to_integral_value():
                raise ValidationError("Ready-made quantity must be a whole number.")
            return OrderItem(
                type="readymade",
                name=it.name.strip() or f'{stock["item"]} ({stock["size"]})',
                price=price,
                quantity=quantity,
                details=StockDetail(stock_id=int(it.stock_id)),
            )

        if it.type == "fabric":
            if it.stock_id is None:
                raise ValidationError("Fabric items must reference a stock entry.")
            stock = self.fabric_repo.get(conn, it.stock_id)
            if stock is None:
                raise ValidationError(f"Unknown fabric stock id: {it.stock_id}")
            return OrderItem(
                type="fabric",
                name=it.name.strip() or f'{stock["fabric_type"]} Fabric',
                price=price,
                quantity=quantity,
                details=StockDetail(stock_id=int(it.stock_id)),
            )

        if it.type == "accessory":
            if not it.name.strip():
                raise ValidationError("Accessory name cannot be empty.")
            return OrderItem(type="accessory", name=it.name.strip(), price=price, quantity=quantity)

        raise ValidationError(f"Unknown item type: {it.type!r}")

    def create_order(
        self,
        conn: Connection,
        *,
        customer_id: int | None,
        new_customer_name: str | None,
        new_customer_phone: str | None,
        delivery_date: datetime | None,
        items: list[CreateOrderItemInput],
        advance: Decimal | float = 0,
    ) -> CreatedOrder:
        if not items:
            raise ValidationError("Order must have at least one item.")
        advance = to_money(advance)
        if advance < 0:
            raise ValidationError("Advance cannot be negative.")

        if customer_id is None:
            if not (new_customer_name and new_customer_name.strip() and new_customer_phone):
                raise ValidationError("New customer name and phone are required.")
            require_phone(new_customer_phone)
        elif self.customer_repo.get(conn, customer_id) is None:
            raise ValidationError(f"Unknown customer id: {customer_id}")

        built = [self._build_item(conn, it) for it in items]
        subtotal = sum((i.amount for i in built), Decimal(0))
        balance = subtotal - advance

        if customer_id is None:
            customer_id = self.customer_repo.create(
                conn,
                name=new_customer_name.strip(),
                phone=new_customer_phone.strip(),
                email=None,
            )

        order_number = self.order_repo.next_order_number(conn)
        order_id = self.order_repo.create(
            conn,
            order_number=order_number,
            customer_id=customer_id,
            items=[item_to_dict(i) for i in built],
            subtotal=subtotal,
            advance=advance,
            balance=balance,
            delivery_date=delivery_date,
        )

        for item in built:
            if item.type == "readymade":
                self.readymade_repo.decrease_stock(conn, stock_id=item.details.stock_id, qty=int(item.quantity))
            elif item.type == "fabric":
                self.fabric_repo.decrease_length(conn, stock_id=item.details.stock_id, length=item.quantity)

        self._save_measurements(conn, customer_id, built)
        log.info("order #%s created for customer %s (subtotal=%s)", order_number, customer_id, subtotal)
        return CreatedOrder(order_id=order_id, order_number=order_number, customer_id=customer_id)

    def _save_measurements(self, conn: Connection, customer_id: int, items: list[OrderItem]) -> None:
        updates = {
            i.details.apparel: dict(i.details.measurements)
            for i in items
            if isinstance(i.details, StitchingDetail) and i.details.measurements
        }
        if not updates:
            return
        row = self.customer_repo.get(conn, customer_id)
        if row is None:
            return
        profile = {k: dict(v) for k, v in customer_from_row(row).measurements.items()}
        profile.update(updates)
        self.customer_repo.set_measurements(conn, customer_id=customer_id, measurements=profile)

    def previous_measurements(self, conn: Connection, *, customer_id: int, apparel: str) -> dict[str, str] | None:
        """Latest measurements recorded for this customer and apparel, newest order first."""
        for row in self.order_repo.list_for_customer(conn, customer_id):
            for raw in row.get("items") or []:
                item = item_from_dict(raw)
                det = item.details
                if isinstance(det, StitchingDetail) and det.apparel == apparel and det.measurements:
                    return dict(det.measurements)
        crow = self.customer_repo.get(conn, customer_id)
        if crow is not None:
            saved = customer_from_row(crow).measurements.get(apparel)
            if saved:
                return dict(saved)
        return None

    def update_status(self, conn: Connection, *, order_id: int, status: str) -> None:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"Unknown status: {status!r}")
        if self.order_repo.get(conn, order_id) is None:
            raise NotFound("Order", order_id)
        self.order_repo.set_status(conn, order_id=order_id, status=status)
        log.info("order %s status -> %s", order_id, status)

    def record_payment(self, conn: Connection, *, order_id: int, amount: Decimal | float) -> Decimal:
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be positive.")
        row = self.order_repo.get(conn, order_id)
        if row is None:
            raise NotFound("Order", order_id)
        order = order_from_row(row)
        if amount > order.balance_due:
            raise ValidationError(f"Payment exceeds balance due ({order.balance_due}).")

        advance = order.advance + amount
        balance = order.subtotal - advance
        self.order_repo.set_payment(conn, order_id=order_id, advance=advance, balance=balance)
        log.info("order #%s payment %s, balance now %s", order.order_number, amount, balance)
        return balance
