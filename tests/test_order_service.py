from datetime import datetime
from decimal import Decimal

import pytest

from stitchdesk.db import NotFound
from stitchdesk.domain import StitchingDetail, order_from_row
from stitchdesk.services.order_service import CreateOrderItemInput, OrderService
from stitchdesk.services.validation import ValidationError


@pytest.fixture
def service(customers, orders, readymade_stock, fabric_stock):
    return OrderService(
        customer_repo=customers,
        order_repo=orders,
        readymade_repo=readymade_stock,
        fabric_repo=fabric_stock,
    )


def shirt(**kw):
    defaults = dict(type="stitching", apparel="Shirt", price=Decimal(500), quantity=Decimal(1), measurements={"chest": "40"})
    defaults.update(kw)
    return CreateOrderItemInput(**defaults)


def test_create_order_for_new_customer(service, customers, orders):
    created = service.create_order(
        None,
        customer_id=None,
        new_customer_name="Asha Verma",
        new_customer_phone="98765 43210",
        delivery_date=datetime(2026, 10, 30),
        items=[shirt(fabric_price=Decimal(800), is_own_fabric=False)],
        advance=Decimal(300),
    )
    assert created.order_number == 1001
    assert customers.get(None, created.customer_id)["name"] == "Asha Verma"

    order = order_from_row(orders.get(None, created.order_id))
    assert order.subtotal == Decimal(1300)
    assert order.balance == Decimal(1000)
    item = order.items[0]
    assert item.name == "Shirt Stitching"
    assert item.details.stitching_price == Decimal(500)
    assert item.details.fabric_price == Decimal(800)


def test_measurements_saved_to_customer_profile(service, customers):
    cid = customers.create(None, name="A", phone="9876543210", email=None, measurements={"Pant": {"waist": "34"}})
    service.create_order(
        None,
        customer_id=cid,
        new_customer_name=None,
        new_customer_phone=None,
        delivery_date=None,
        items=[shirt(measurements={"chest": "40", "waist": ""})],
    )
    assert customers.get(None, cid)["measurements"] == {"Pant": {"waist": "34"}, "Shirt": {"chest": "40"}}


def test_stock_is_decremented(service, readymade_stock, fabric_stock, customers):
    cid = customers.create(None, name="A", phone="9876543210", email=None)
    rid = readymade_stock.create(None, item="Shirt", size="M", quantity=3, cost=Decimal(600), supplier="S", supplier_phone="1")
    fid = fabric_stock.create(None, fabric_type="Linen", length=Decimal(10), cost_per_mtr=Decimal(300), supplier="S", supplier_phone="1")
    service.create_order(
        None,
        customer_id=cid,
        new_customer_name=None,
        new_customer_phone=None,
        delivery_date=None,
        items=[
            CreateOrderItemInput(type="readymade", price=Decimal(1200), quantity=Decimal(2), stock_id=rid),
            CreateOrderItemInput(type="fabric", price=Decimal(450), quantity=Decimal("2.5"), stock_id=fid),
        ],
    )
    assert readymade_stock.get(None, rid)["quantity"] == 1
    assert fabric_stock.get(None, fid)["length"] == Decimal("7.5")


@pytest.mark.parametrize(
    "item, message",
    [
        (shirt(apparel="Cape"), "Unknown apparel"),
        (shirt(measurements={"collarBone": "1"}), "Unknown measurement fields"),
        (shirt(price=Decimal(0)), "Price must be positive"),
        (CreateOrderItemInput(type="accessory", price=Decimal(10), quantity=Decimal(1)), "Accessory name"),
        (CreateOrderItemInput(type="readymade", price=Decimal(10), quantity=Decimal(1)), "stock entry"),
        (CreateOrderItemInput(type="gift", price=Decimal(10), quantity=Decimal(1)), "Unknown item type"),
    ],
)
def test_invalid_items(service, customers, item, message):
    cid = customers.create(None, name="A", phone="9876543210", email=None)
    with pytest.raises(ValidationError, match=message):
        service.create_order(
            None, customer_id=cid, new_customer_name=None, new_customer_phone=None, delivery_date=None, items=[item]
        )


def test_order_requires_items_and_customer(service):
    with pytest.raises(ValidationError):
        service.create_order(None, customer_id=None, new_customer_name="A", new_customer_phone="9876543210", delivery_date=None, items=[])
    with pytest.raises(ValidationError):
        service.create_order(None, customer_id=None, new_customer_name="", new_customer_phone="", delivery_date=None, items=[shirt()])
    with pytest.raises(ValidationError):
        service.create_order(None, customer_id=99, new_customer_name=None, new_customer_phone=None, delivery_date=None, items=[shirt()])


def test_record_payment(service, customers):
    created = service.create_order(
        None,
        customer_id=None,
        new_customer_name="A",
        new_customer_phone="9876543210",
        delivery_date=None,
        items=[shirt(price=Decimal(8500))],
        advance=Decimal(5000),
    )
    assert service.record_payment(None, order_id=created.order_id, amount="1500") == Decimal(2000)
    with pytest.raises(ValidationError, match="exceeds"):
        service.record_payment(None, order_id=created.order_id, amount="2500")
    with pytest.raises(ValidationError):
        service.record_payment(None, order_id=created.order_id, amount="0")
    with pytest.raises(NotFound):
        service.record_payment(None, order_id=404, amount="10")


def test_update_status(service, orders):
    created = service.create_order(
        None, customer_id=None, new_customer_name="A", new_customer_phone="9876543210", delivery_date=None, items=[shirt()]
    )
    service.update_status(None, order_id=created.order_id, status="Ready")
    assert orders.get(None, created.order_id)["status"] == "Ready"
    with pytest.raises(ValidationError):
        service.update_status(None, order_id=created.order_id, status="Lost")
    with pytest.raises(NotFound):
        service.update_status(None, order_id=404, status="Ready")


def test_previous_measurements_prefers_latest_order(service, customers):
    cid = customers.create(None, name="A", phone="9876543210", email=None)
    service.create_order(
        None, customer_id=cid, new_customer_name=None, new_customer_phone=None, delivery_date=None,
        items=[shirt(measurements={"chest": "40"})],
    )
    found = service.previous_measurements(None, customer_id=cid, apparel="Shirt")
    assert found == {"chest": "40"}
    assert service.previous_measurements(None, customer_id=cid, apparel="Pant") is None
