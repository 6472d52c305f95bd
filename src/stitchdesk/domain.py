from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Mapping, Optional, Union

OrderStatus = Literal["In Progress", "Ready", "Delivered", "Cancelled"]
ItemType = Literal["stitching", "readymade", "fabric", "accessory"]

ORDER_STATUSES: tuple[str, ...] = ("In Progress", "Ready", "Delivered", "Cancelled")
ITEM_TYPES: tuple[str, ...] = ("stitching", "readymade", "fabric", "accessory")


class InvalidArgument(ValueError):
    pass


@dataclass(frozen=True)
class StitchingDetail:
    apparel: str
    measurements: Mapping[str, str] = field(default_factory=dict)
    is_own_fabric: bool = False
    remarks: str = ""
    stitching_price: Optional[Decimal] = None
    fabric_price: Optional[Decimal] = None


@dataclass(frozen=True)
class StockDetail:
    stock_id: int


ItemDetail = Union[StitchingDetail, StockDetail, None]


@dataclass(frozen=True)
class OrderItem:
    type: ItemType
    name: str
    price: Decimal
    quantity: Decimal
    details: ItemDetail = None

    def __post_init__(self) -> None:
        if self.type not in ITEM_TYPES:
            raise InvalidArgument(f"Unknown item type: {self.type!r}")
        if (self.type == "stitching") != isinstance(self.details, StitchingDetail):
            raise InvalidArgument(f"{self.type} item {self.name!r} has mismatched details")

    @property
    def amount(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class Customer:
    id: int
    name: str
    phone: str
    email: Optional[str]
    measurements: Mapping[str, Mapping[str, str]] = field(default_factory=dict)
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Order:
    id: int
    order_number: int
    customer_id: Optional[int]
    items: tuple[OrderItem, ...]
    subtotal: Decimal
    advance: Decimal
    balance: Decimal
    status: OrderStatus
    created_at: datetime
    delivery_date: Optional[datetime] = None

    @property
    def balance_due(self) -> Decimal:
        return self.subtotal - self.advance


@dataclass(frozen=True)
class Employee:
    id: int
    name: str
    role: str
    salary: Decimal
    balance: Decimal
    leaves: int


@dataclass(frozen=True)
class ReadyMadeStockItem:
    id: int
    item: str
    size: str
    quantity: int
    cost: Decimal
    supplier: str
    supplier_phone: str


@dataclass(frozen=True)
class FabricStockItem:
    id: int
    fabric_type: str
    length: Decimal
    cost_per_mtr: Decimal
    supplier: str
    supplier_phone: str


# --- row / document parsing ---


def to_money(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidArgument(f"Not a number: {value!r}") from e


def to_datetime(value: Any) -> Optional[datetime]:
    """Accept datetimes, dates, epoch seconds or ``{"seconds": n}`` timestamps."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, Mapping) and "seconds" in value:
        value = value["seconds"]
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError as e:
            raise InvalidArgument(f"Not a timestamp: {value!r}") from e
    raise InvalidArgument(f"Not a timestamp: {value!r}")


def _measurements(raw: Any) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise InvalidArgument(f"Measurements must be a mapping, got {type(raw).__name__}")
    out: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise InvalidArgument(f"Measurement field must be a string, got {key!r}")
        if isinstance(value, (dict, list)):
            raise InvalidArgument(f"Measurement {key!r} must be a scalar value")
        out[key] = "" if value is None else str(value)
    return out


def item_from_dict(d: Mapping[str, Any]) -> OrderItem:
    item_type = str(d.get("type", ""))
    raw = d.get("details") or {}
    if not isinstance(raw, Mapping):
        raise InvalidArgument(f"Item details must be a mapping, got {type(raw).__name__}")
    details: ItemDetail = None

    if item_type == "stitching":
        stitching_price = raw.get("stitchingPrice", raw.get("stitching_price"))
        fabric_price = raw.get("fabricPrice", raw.get("fabric_price"))
        details = StitchingDetail(
            apparel=str(raw.get("apparel", "")),
            measurements=_measurements(raw.get("measurements")),
            is_own_fabric=bool(raw.get("isOwnFabric", raw.get("is_own_fabric", False))),
            remarks=str(raw.get("remarks") or ""),
            stitching_price=None if stitching_price is None else to_money(stitching_price),
            fabric_price=None if fabric_price is None else to_money(fabric_price),
        )
    elif raw.get("stockId", raw.get("stock_id")) is not None:
        details = StockDetail(stock_id=int(raw.get("stockId", raw.get("stock_id"))))

    return OrderItem(
        type=item_type,
        name=str(d.get("name", "")),
        price=to_money(d.get("price")),
        quantity=to_money(d.get("quantity")),
        details=details,
    )


def item_to_dict(item: OrderItem) -> dict[str, Any]:
    d: dict[str, Any] = {
        "type": item.type,
        "name": item.name,
        "price": str(item.price),
        "quantity": str(item.quantity),
    }
    if isinstance(item.details, StitchingDetail):
        det = item.details
        d["details"] = {
            "apparel": det.apparel,
            "measurements": dict(det.measurements),
            "isOwnFabric": det.is_own_fabric,
            "remarks": det.remarks,
        }
        if det.stitching_price is not None:
            d["details"]["stitchingPrice"] = str(det.stitching_price)
        if det.fabric_price is not None:
            d["details"]["fabricPrice"] = str(det.fabric_price)
    elif isinstance(item.details, StockDetail):
        d["details"] = {"stockId": item.details.stock_id}
    return d


def order_from_row(row: Mapping[str, Any]) -> Order:
    return Order(
        id=int(row["id"]),
        order_number=int(row["order_number"]),
        customer_id=(int(row["customer_id"]) if row.get("customer_id") is not None else None),
        items=tuple(item_from_dict(i) for i in (row.get("items") or [])),
        subtotal=to_money(row.get("subtotal")),
        advance=to_money(row.get("advance")),
        balance=to_money(row.get("balance")),
        status=row.get("status") or "In Progress",
        created_at=to_datetime(row["created_at"]),
        delivery_date=to_datetime(row.get("delivery_date")),
    )


def customer_from_row(row: Mapping[str, Any]) -> Customer:
    raw = row.get("measurements") or {}
    if not isinstance(raw, Mapping):
        raise InvalidArgument("Customer measurements must be a mapping of apparel to fields")
    return Customer(
        id=int(row["id"]),
        name=str(row.get("name") or ""),
        phone=str(row.get("phone") or ""),
        email=row.get("email") or None,
        measurements={str(k): _measurements(v) for k, v in raw.items()},
        created_at=to_datetime(row.get("created_at")),
    )


def employee_from_row(row: Mapping[str, Any]) -> Employee:
    return Employee(
        id=int(row["id"]),
        name=str(row["name"]),
        role=str(row["role"]),
        salary=to_money(row.get("salary")),
        balance=to_money(row.get("balance")),
        leaves=int(row.get("leaves") or 0),
    )


def readymade_from_row(row: Mapping[str, Any]) -> ReadyMadeStockItem:
    return ReadyMadeStockItem(
        id=int(row["id"]),
        item=str(row["item"]),
        size=str(row["size"]),
        quantity=int(row["quantity"]),
        cost=to_money(row.get("cost")),
        supplier=str(row.get("supplier") or ""),
        supplier_phone=str(row.get("supplier_phone") or ""),
    )


def fabric_from_row(row: Mapping[str, Any]) -> FabricStockItem:
    return FabricStockItem(
        id=int(row["id"]),
        fabric_type=str(row["fabric_type"]),
        length=to_money(row.get("length")),
        cost_per_mtr=to_money(row.get("cost_per_mtr")),
        supplier=str(row.get("supplier") or ""),
        supplier_phone=str(row.get("supplier_phone") or ""),
    )
