from __future__ import annotations

from datetime import datetime, timezone

from .config import AppConfig
from .db import Db, NotFound, PermissionDenied
from .domain import (
    InvalidArgument,
    customer_from_row,
    employee_from_row,
    fabric_from_row,
    readymade_from_row,
    to_datetime,
)
from .measurements import APPAREL_MEASUREMENTS, default_charge, fields_for, summarize
from .printing.compose import compose_invoice, compose_receipt
from .printing.deferred import DeferredPrint, send_to_printer
from .printing.formatters import format_currency, format_date
from .printing.loader import DocumentLoader
from .printing.text import render_invoice_text, render_receipt_text
from .reports import financial_summary, month_start, order_rows, outstanding
from .repositories.customer_repo import CustomerRepository
from .repositories.employee_repo import EmployeeRepository
from .repositories.fabric_repo import FabricRepository
from .repositories.order_repo import OrderRepository
from .repositories.readymade_repo import ReadyMadeRepository
from .services.order_service import CreateOrderItemInput, OrderService
from .services.validation import ValidationError


def _prompt(msg: str) -> str:
    return input(msg).strip()


def _print_document(text: str, delay_ms: int, pending: list[DeferredPrint]) -> None:
    print(text)
    if _prompt("Send to printer? (y/n): ").lower() != "y":
        return
    job = DeferredPrint(lambda: send_to_printer(text), delay_ms=delay_ms)
    job.arm()
    pending.append(job)
    print(f"Printing in {delay_ms}ms...")


def _read_item() -> CreateOrderItemInput:
    item_type = _prompt("  type (stitching/readymade/fabric/accessory): ").lower()
    if item_type == "stitching":
        apparel = _prompt(f"  apparel ({', '.join(APPAREL_MEASUREMENTS)}): ")
        if apparel not in APPAREL_MEASUREMENTS:
            raise ValidationError(f"Unknown apparel: {apparel!r}")
        charge = default_charge(apparel)
        price_in = _prompt(f"  stitching price (default {charge}): ")
        measurements = {}
        for f in fields_for(apparel):
            value = _prompt(f"    {f}: ")
            if value:
                measurements[f] = value
        return CreateOrderItemInput(
            type="stitching",
            apparel=apparel,
            price=price_in or charge or "0",
            quantity=_prompt("  quantity (default 1): ") or "1",
            measurements=measurements,
            is_own_fabric=_prompt("  customer's own fabric? (y/n): ").lower() == "y",
            remarks=_prompt("  remarks (optional): "),
            fabric_price=_prompt("  fabric price (optional): ") or None,
        )
    if item_type in {"readymade", "fabric"}:
        return CreateOrderItemInput(
            type=item_type,
            stock_id=int(_prompt("  stock id: ")),
            price=_prompt("  price: "),
            quantity=_prompt("  quantity / metres: "),
        )
    return CreateOrderItemInput(
        type=item_type,
        name=_prompt("  name: "),
        price=_prompt("  price: "),
        quantity=_prompt("  quantity (default 1): ") or "1",
    )


def run_cli(db: Db, cfg: AppConfig) -> None:
    customer_repo = CustomerRepository()
    employee_repo = EmployeeRepository()
    readymade_repo = ReadyMadeRepository()
    fabric_repo = FabricRepository()
    order_repo = OrderRepository()

    service = OrderService(
        customer_repo=customer_repo,
        order_repo=order_repo,
        readymade_repo=readymade_repo,
        fabric_repo=fabric_repo,
    )
    loader = DocumentLoader(order_repo=order_repo, customer_repo=customer_repo)
    pending: list[DeferredPrint] = []

    try:
        while True:
            print(f"\n=== {cfg.name} ===")
            print("1) List customers")
            print("2) List employees")
            print("3) List stock")
            print("4) Create order")
            print("5) Update order status")
            print("6) Record payment")
            print("7) Outstanding payments")
            print("8) Print invoice")
            print("9) Print measurement slip")
            print("10) Financial summary")
            print("0) Exit")

            choice = _prompt("> ")
            try:
                if choice == "0":
                    return

                elif choice == "1":
                    q = _prompt("search (optional): ") or None
                    with db.session() as conn:
                        rows = [customer_from_row(r) for r in customer_repo.list(conn, limit=50, search=q)]
                    for c in rows:
                        print(f"#{c.id} {c.name} phone={c.phone} {summarize(c.measurements)}")

                elif choice == "2":
                    with db.session() as conn:
                        rows = [employee_from_row(r) for r in employee_repo.list(conn)]
                    for e in rows:
                        print(
                            f"#{e.id} {e.name} ({e.role}) salary={format_currency(e.salary)} "
                            f"balance={format_currency(e.balance)} leaves={e.leaves}"
                        )

                elif choice == "3":
                    with db.session() as conn:
                        readymade = [readymade_from_row(r) for r in readymade_repo.list(conn)]
                        fabric = [fabric_from_row(r) for r in fabric_repo.list(conn)]
                    print("Ready-made:")
                    for s in readymade:
                        print(f"  #{s.id} {s.item} size={s.size} qty={s.quantity} cost={format_currency(s.cost)}")
                    print("Fabric:")
                    for f in fabric:
                        print(f"  #{f.id} {f.fabric_type} {f.length}m @ {format_currency(f.cost_per_mtr)}/m")

                elif choice == "4":
                    print("\nCreate order - choose customer:")
                    print("A) Existing customer_id")
                    print("B) New customer")
                    mode = _prompt("A/B: ").upper()

                    customer_id = None
                    name = phone = None
                    if mode == "A":
                        customer_id = int(_prompt("customer_id: "))
                    else:
                        name = _prompt("name: ")
                        phone = _prompt("phone: ")

                    delivery = to_datetime(_prompt("delivery date YYYY-MM-DD (optional): ") or None)
                    items: list[CreateOrderItemInput] = []
                    while True:
                        if _prompt("Add item? (y/n): ").lower() != "y":
                            break
                        items.append(_read_item())
                    advance = _prompt("advance (default 0): ") or "0"

                    with db.transaction() as conn:
                        created = service.create_order(
                            conn,
                            customer_id=customer_id,
                            new_customer_name=name,
                            new_customer_phone=phone,
                            delivery_date=delivery,
                            items=items,
                            advance=advance,
                        )
                    print(f"Created order #{created.order_number} (id={created.order_id})")

                elif choice == "5":
                    order_id = int(_prompt("order_id: "))
                    status = _prompt("status (In Progress/Ready/Delivered/Cancelled): ")
                    with db.transaction() as conn:
                        service.update_status(conn, order_id=order_id, status=status)
                    print(f"Order {order_id} is now {status}.")

                elif choice == "6":
                    order_id = int(_prompt("order_id: "))
                    amount = _prompt("payment amount: ")
                    with db.transaction() as conn:
                        balance = service.record_payment(conn, order_id=order_id, amount=amount)
                    print(f"Payment recorded. Balance due {format_currency(balance)}")

                elif choice == "7":
                    q = _prompt("search (optional): ") or None
                    with db.session() as conn:
                        rows = order_rows(order_repo.list_with_customers(conn, limit=1000, outstanding_only=True))
                    due, total = outstanding(rows, q)
                    for r in due:
                        print(
                            f"#{r.order.order_number} {r.customer_name} {r.customer_phone} "
                            f"{format_date(r.order.created_at)} due={format_currency(r.order.balance)}"
                        )
                    print(f"Total outstanding: {format_currency(total)}")

                elif choice in {"8", "9"}:
                    order_id = int(_prompt("order_id: "))
                    try:
                        with db.session() as conn:
                            loaded = loader.load(conn, order_id)
                        order, customer = loaded.order, loaded.customer
                    except NotFound:
                        order = customer = None
                    if choice == "8":
                        doc = compose_invoice(
                            order,
                            customer,
                            shop=cfg.shop,
                            page_size=cfg.print.invoice_page_size,
                            print_delay_ms=cfg.print.print_delay_ms,
                        )
                        text = render_invoice_text(doc)
                    else:
                        doc = compose_receipt(
                            order,
                            customer,
                            shop=cfg.shop,
                            page_size=cfg.print.slip_page_size,
                            print_delay_ms=cfg.print.print_delay_ms,
                        )
                        text = render_receipt_text(doc)
                    if doc.print_directive is None:
                        print(text)
                    else:
                        _print_document(text, doc.print_directive.delay_ms, pending)

                elif choice == "10":
                    with db.session() as conn:
                        totals = order_repo.sales_totals(conn, month_start=month_start(datetime.now(timezone.utc)))
                        s = financial_summary(totals, readymade_repo.stock_value(conn), fabric_repo.stock_value(conn))
                    print(f"Total sales:     {format_currency(s.total_sales)}")
                    print(f"Total purchases: {format_currency(s.total_purchases)}")
                    print(f"Total profit:    {format_currency(s.total_profit)}")
                    print(f"New orders this month: {s.new_orders}")

                else:
                    print("Unknown choice.")

            except (ValidationError, InvalidArgument) as e:
                print(f"[INPUT ERROR] {e}")
            except NotFound as e:
                print(f"[NOT FOUND] {e}")
            except PermissionDenied as e:
                print(f"[DENIED] {e}")
            except ValueError as e:
                print(f"[VALUE ERROR] {e}")
            except Exception as e:
                print(f"[ERROR] {type(e).__name__}: {e}")
    finally:
        for job in pending:
            job.cancel()
