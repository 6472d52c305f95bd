from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from stitchdesk.config import AppConfig, DbConfig, PrintConfig, ShopConfig
from stitchdesk.domain import Customer, Order, OrderItem, StitchingDetail, StockDetail, item_to_dict

CREATED = datetime(2026, 10, 17, 10, 30, tzinfo=timezone.utc)


class FakeCustomerRepo:
    def __init__(self):
        self.rows: dict[int, dict] = {}

    def create(self, conn, *, name, phone, email, measurements=None):
        cid = len(self.rows) + 1
        self.rows[cid] = {
            "id": cid,
            "name": name,
            "phone": phone,
            "email": email,
            "measurements": dict(measurements or {}),
            "created_at": CREATED,
        }
        return cid

    def update(self, conn, *, customer_id, name, phone, email):
        self.rows[customer_id].update(name=name, phone=phone, email=email)

    def set_measurements(self, conn, *, customer_id, measurements):
        self.rows[customer_id]["measurements"] = measurements

    def delete(self, conn, customer_id):
        self.rows.pop(customer_id, None)

    def get(self, conn, customer_id):
        return self.rows.get(customer_id)

    def list(self, conn, limit=50, search=None):
        rows = list(self.rows.values())
        if search:
            rows = [r for r in rows if search.lower() in r["name"].lower() or search in r["phone"]]
        return rows[:limit]


class FakeOrderRepo:
    def __init__(self, customers: FakeCustomerRepo | None = None):
        self.rows: dict[int, dict] = {}
        self.counter = 1000
        self.customers = customers

    def next_order_number(self, conn):
        self.counter += 1
        return self.counter

    def create(self, conn, *, order_number, customer_id, items, subtotal, advance, balance, delivery_date, status="In Progress"):
        oid = len(self.rows) + 1
        self.rows[oid] = {
            "id": oid,
            "order_number": order_number,
            "customer_id": customer_id,
            "items": items,
            "subtotal": subtotal,
            "advance": advance,
            "balance": balance,
            "status": status,
            "delivery_date": delivery_date,
            "created_at": CREATED,
        }
        return oid

    def set_status(self, conn, *, order_id, status):
        self.rows[order_id]["status"] = status

    def set_payment(self, conn, *, order_id, advance, balance):
        self.rows[order_id].update(advance=advance, balance=balance)

    def get(self, conn, order_id):
        return self.rows.get(order_id)

    def list_with_customers(self, conn, limit=100, outstanding_only=False, status=None):
        out = []
        for r in sorted(self.rows.values(), key=lambda r: r["order_number"], reverse=True):
            if outstanding_only and not r["balance"] > 0:
                continue
            if status and r["status"] != status:
                continue
            c = self.customers.get(conn, r["customer_id"]) if self.customers else None
            out.append({**r, "customer_name": c and c["name"], "customer_phone": c and c["phone"]})
        return out[:limit]

    def list_for_customer(self, conn, customer_id):
        rows = [r for r in self.rows.values() if r["customer_id"] == customer_id]
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def sales_totals(self, conn, *, month_start):
        rows = list(self.rows.values())
        return {
            "total_sales": sum((Decimal(str(r["subtotal"])) for r in rows), Decimal(0)),
            "new_orders": sum(1 for r in rows if r["created_at"] >= month_start),
        }

    def monthly_sales(self, conn):
        months: dict[int, Decimal] = {}
        for r in self.rows.values():
            m = r["created_at"].month
            months[m] = months.get(m, Decimal(0)) + Decimal(str(r["subtotal"]))
        return [{"month": m, "sales": v} for m, v in sorted(months.items())]


class FakeReadyMadeRepo:
    def __init__(self):
        self.rows: dict[int, dict] = {}

    def create(self, conn, *, item, size, quantity, cost, supplier, supplier_phone):
        sid = len(self.rows) + 1
        self.rows[sid] = {
            "id": sid,
            "item": item,
            "size": size,
            "quantity": quantity,
            "cost": cost,
            "supplier": supplier,
            "supplier_phone": supplier_phone,
        }
        return sid

    def get(self, conn, stock_id):
        return self.rows.get(stock_id)

    def list(self, conn, limit=100):
        return list(self.rows.values())[:limit]

    def delete(self, conn, stock_id):
        self.rows.pop(stock_id, None)

    def decrease_stock(self, conn, *, stock_id, qty):
        row = self.rows[stock_id]
        if row["quantity"] < qty:
            raise ValueError(f"Not enough stock for {row['item']}")
        row["quantity"] -= qty

    def stock_value(self, conn):
        return sum((Decimal(r["cost"]) * r["quantity"] for r in self.rows.values()), Decimal(0))


class FakeFabricRepo:
    def __init__(self):
        self.rows: dict[int, dict] = {}

    def create(self, conn, *, fabric_type, length, cost_per_mtr, supplier, supplier_phone):
        sid = len(self.rows) + 1
        self.rows[sid] = {
            "id": sid,
            "fabric_type": fabric_type,
            "length": length,
            "cost_per_mtr": cost_per_mtr,
            "supplier": supplier,
            "supplier_phone": supplier_phone,
        }
        return sid

    def get(self, conn, stock_id):
        return self.rows.get(stock_id)

    def list(self, conn, limit=100):
        return list(self.rows.values())[:limit]

    def delete(self, conn, stock_id):
        self.rows.pop(stock_id, None)

    def decrease_length(self, conn, *, stock_id, length):
        row = self.rows[stock_id]
        if row["length"] < length:
            raise ValueError(f"Not enough {row['fabric_type']} fabric")
        row["length"] -= length

    def stock_value(self, conn):
        return sum((Decimal(r["cost_per_mtr"]) * Decimal(r["length"]) for r in self.rows.values()), Decimal(0))


class FakeEmployeeRepo:
    def __init__(self):
        self.rows: dict[int, dict] = {}

    def create(self, conn, *, name, role, salary):
        eid = len(self.rows) + 1
        self.rows[eid] = {"id": eid, "name": name, "role": role, "salary": salary, "balance": Decimal(0), "leaves": 0}
        return eid

    def update(self, conn, *, employee_id, name, role, salary):
        self.rows[employee_id].update(name=name, role=role, salary=salary)

    def set_balance(self, conn, *, employee_id, balance):
        self.rows[employee_id]["balance"] = balance

    def set_leaves(self, conn, *, employee_id, leaves):
        self.rows[employee_id]["leaves"] = leaves

    def delete(self, conn, employee_id):
        self.rows.pop(employee_id, None)

    def get(self, conn, employee_id):
        return self.rows.get(employee_id)

    def list(self, conn, limit=100):
        return list(self.rows.values())[:limit]


class FakeDb:
    @contextmanager
    def session(self):
        yield None

    @contextmanager
    def transaction(self):
        yield None


class FailingDb:
    """Every session or transaction fails on entry with ``error``."""

    def __init__(self, error):
        self.error = error

    @contextmanager
    def session(self):
        raise self.error
        yield

    @contextmanager
    def transaction(self):
        raise self.error
        yield


def stitching(apparel="Shirt", measurements=None, price="500", quantity="1", **kw) -> OrderItem:
    return OrderItem(
        type="stitching",
        name=kw.pop("name", f"{apparel} Stitching"),
        price=Decimal(price),
        quantity=Decimal(quantity),
        details=StitchingDetail(apparel=apparel, measurements=measurements or {}, **kw),
    )


def accessory(name="Buttons", price="50", quantity="1") -> OrderItem:
    return OrderItem(type="accessory", name=name, price=Decimal(price), quantity=Decimal(quantity))


def readymade(stock_id=1, price="1200") -> OrderItem:
    return OrderItem(
        type="readymade", name="Shirt (M)", price=Decimal(price), quantity=Decimal(1), details=StockDetail(stock_id)
    )


@pytest.fixture
def shop():
    return ShopConfig(
        name="Raghav Tailor & Fabric",
        address="123 Fashion Street, New Delhi, 110001",
        phone="+91 98765 43210",
        email="shop@example.com",
    )


@pytest.fixture
def app_config(shop):
    return AppConfig(
        name="StitchDesk",
        log_level="INFO",
        secret_key="test",
        log_dir="logs",
        db=DbConfig(host="localhost", port=5432, name="stitchdesk", user="u", password="p"),
        shop=shop,
        print=PrintConfig(),
    )


@pytest.fixture
def customers():
    return FakeCustomerRepo()


@pytest.fixture
def orders(customers):
    return FakeOrderRepo(customers)


@pytest.fixture
def readymade_stock():
    return FakeReadyMadeRepo()


@pytest.fixture
def fabric_stock():
    return FakeFabricRepo()


@pytest.fixture
def employees():
    return FakeEmployeeRepo()


CUSTOMER = Customer(id=1, name="Asha Verma", phone="9876543210", email="asha@example.com")


def make_order(items, subtotal=None, advance="0", delivery=None, order_number=1042) -> Order:
    items = tuple(items)
    subtotal = Decimal(subtotal) if subtotal is not None else sum((i.amount for i in items), Decimal(0))
    return Order(
        id=1,
        order_number=order_number,
        customer_id=1,
        items=items,
        subtotal=subtotal,
        advance=Decimal(advance),
        balance=subtotal - Decimal(advance),
        status="In Progress",
        created_at=CREATED,
        delivery_date=delivery,
    )


@pytest.fixture
def client(monkeypatch, app_config, customers, orders, readymade_stock, fabric_stock, employees):
    from stitchdesk import web_app

    monkeypatch.setattr(web_app, "customer_repo", customers)
    monkeypatch.setattr(web_app, "order_repo", orders)
    monkeypatch.setattr(web_app, "readymade_repo", readymade_stock)
    monkeypatch.setattr(web_app, "fabric_repo", fabric_stock)
    monkeypatch.setattr(web_app, "employee_repo", employees)
    app = web_app.configure(app_config, FakeDb())
    app.config["TESTING"] = True
    return app.test_client()


def add_order(customers, orders, items, advance="0", order_number=1001):
    cid = customers.create(None, name="Asha Verma", phone="9876543210", email=None)
    subtotal = sum((i.amount for i in items), Decimal(0))
    return orders.create(
        None, order_number=order_number, customer_id=cid, items=[item_to_dict(i) for i in items],
        subtotal=subtotal, advance=Decimal(advance), balance=subtotal - Decimal(advance), delivery_date=None,
    )
