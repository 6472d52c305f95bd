import pytest

from conftest import CREATED, accessory

from stitchdesk.db import NotFound
from stitchdesk.domain import item_to_dict
from stitchdesk.printing.loader import DocumentLoader


def test_load_order_with_customer(customers, orders):
    cid = customers.create(None, name="Asha", phone="9876543210", email=None)
    oid = orders.create(
        None, order_number=1001, customer_id=cid, items=[item_to_dict(accessory())],
        subtotal="50", advance="0", balance="50", delivery_date=None,
    )
    loaded = DocumentLoader(order_repo=orders, customer_repo=customers).load(None, oid)
    assert loaded.order.order_number == 1001
    assert loaded.order.created_at == CREATED
    assert loaded.customer.name == "Asha"


def test_missing_customer_is_tolerated(customers, orders):
    oid = orders.create(
        None, order_number=1001, customer_id=77, items=[], subtotal="0", advance="0", balance="0", delivery_date=None
    )
    loaded = DocumentLoader(order_repo=orders, customer_repo=customers).load(None, oid)
    assert loaded.customer is None


def test_missing_order(customers, orders):
    with pytest.raises(NotFound):
        DocumentLoader(order_repo=orders, customer_repo=customers).load(None, 1)
