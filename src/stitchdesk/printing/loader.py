from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from psycopg import Connection

from ..db import NotFound
from ..domain import Customer, Order, customer_from_row, order_from_row
from ..repositories.customer_repo import CustomerRepository
from ..repositories.order_repo import OrderRepository

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedOrder:
    order: Order
    customer: Optional[Customer]


class DocumentLoader:
    def __init__(self, *, order_repo: OrderRepository, customer_repo: CustomerRepository) -> None:
        self.order_repo = order_repo
        self.customer_repo = customer_repo

    def load(self, conn: Connection, order_id: int) -> LoadedOrder:
        row = self.order_repo.get(conn, order_id)
        if row is None:
            raise NotFound("Order", order_id)
        order = order_from_row(row)

        customer = None
        if order.customer_id is not None:
            crow = self.customer_repo.get(conn, order.customer_id)
            if crow is None:
                log.info("order %s references missing customer %s", order.order_number, order.customer_id)
            else:
                customer = customer_from_row(crow)
        return LoadedOrder(order=order, customer=customer)
