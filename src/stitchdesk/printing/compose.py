"""
Invoice and measurement-slip composition.

Both composers are pure functions of an already-loaded order (and optional
customer) into an immutable document: a render state, header data shared by
every page, the paginated pages themselves, and at most one print directive.
Totals and terms sit on the last invoice page only; slip footers repeat.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal, Optional

from ..config import ShopConfig
from ..domain import Customer, Order, OrderItem, StitchingDetail
from ..measurements import slip_sections
from .classify import is_stitching_with_fabric_split, is_stitching_with_measurements
from .formatters import format_currency, format_date, format_day_month, format_quantity
from .paginate import INVOICE_PAGE_SIZE, SLIP_PAGE_SIZE, paginate

DocumentState = Literal["loading", "not_found", "no_measurements", "ready"]

NOT_AVAILABLE = "N/A"
PRINT_DELAY_MS = 500


@dataclass(frozen=True)
class PageGeometry:
    width_in: float
    height_in: float
    margin_in: float

    @property
    def page_size_css(self) -> str:
        return f"{self.width_in:g}in {self.height_in:g}in"


INVOICE_GEOMETRY = PageGeometry(width_in=5, height_in=8, margin_in=0.25)
SLIP_GEOMETRY = PageGeometry(width_in=5, height_in=5, margin_in=0.25)


@dataclass(frozen=True)
class PrintDirective:
    delay_ms: int = PRINT_DELAY_MS


# --- invoice ---


@dataclass(frozen=True)
class BillTo:
    name: str
    phone: str
    email: str


@dataclass(frozen=True)
class FabricSplit:
    stitching_price: Decimal
    fabric_price: Decimal

    def describe(self) -> str:
        return f"Stitching: {format_currency(self.stitching_price)} / Fabric: {format_currency(self.fabric_price)}"


@dataclass(frozen=True)
class InvoiceLine:
    name: str
    price: Decimal
    quantity: Decimal
    amount: Decimal
    split: Optional[FabricSplit] = None


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    advance: Decimal
    balance_due: Decimal


@dataclass(frozen=True)
class InvoicePage:
    index: int
    count: int
    lines: tuple[InvoiceLine, ...]
    totals: Optional[InvoiceTotals] = None
    terms: tuple[str, ...] = ()

    @property
    def is_last(self) -> bool:
        return self.index == self.count - 1

    @property
    def continuation(self) -> Optional[str]:
        if self.is_last:
            return None
        return f"Continued on next page (Page {self.index + 1} of {self.count})"


@dataclass(frozen=True)
class InvoiceDocument:
    state: DocumentState
    shop: ShopConfig
    order_number: Optional[int] = None
    created: str = ""
    bill_to: Optional[BillTo] = None
    pages: tuple[InvoicePage, ...] = ()
    print_directive: Optional[PrintDirective] = None
    geometry: PageGeometry = INVOICE_GEOMETRY

    @property
    def message(self) -> Optional[str]:
        if self.state == "loading":
            return "Loading invoice..."
        if self.state == "not_found":
            return "Order not found."
        return None


def _invoice_line(item: OrderItem) -> InvoiceLine:
    split = None
    if is_stitching_with_fabric_split(item):
        det = item.details
        split = FabricSplit(
            stitching_price=det.stitching_price if det.stitching_price is not None else item.price - det.fabric_price,
            fabric_price=det.fabric_price,
        )
    return InvoiceLine(name=item.name, price=item.price, quantity=item.quantity, amount=item.amount, split=split)


def invoice_terms(order: Order) -> tuple[str, ...]:
    terms = ["Goods once sold will not be taken back."]
    if order.delivery_date is not None:
        terms.append(f"Expected Delivery: {format_date(order.delivery_date)}")
    terms.append("Alterations will be charged extra.")
    return tuple(terms)


def compose_invoice(
    order: Optional[Order],
    customer: Optional[Customer],
    *,
    shop: ShopConfig,
    page_size: int = INVOICE_PAGE_SIZE,
    print_delay_ms: int = PRINT_DELAY_MS,
    loading: bool = False,
) -> InvoiceDocument:
    if loading:
        return InvoiceDocument(state="loading", shop=shop)
    if order is None:
        return InvoiceDocument(state="not_found", shop=shop)

    chunks = paginate(order.items, page_size)
    if not chunks:
        # totals still need a page to land on
        chunks = [[]]

    count = len(chunks)
    pages = []
    for index, chunk in enumerate(chunks):
        lines = tuple(_invoice_line(i) for i in chunk)
        if index == count - 1:
            totals = InvoiceTotals(
                subtotal=order.subtotal,
                advance=order.advance,
                balance_due=order.balance_due,
            )
            pages.append(InvoicePage(index, count, lines, totals=totals, terms=invoice_terms(order)))
        else:
            pages.append(InvoicePage(index, count, lines))

    bill_to = BillTo(
        name=(customer.name if customer and customer.name else NOT_AVAILABLE),
        phone=(customer.phone if customer else ""),
        email=((customer.email or "") if customer else ""),
    )
    return InvoiceDocument(
        state="ready",
        shop=shop,
        order_number=order.order_number,
        created=format_date(order.created_at),
        bill_to=bill_to,
        pages=tuple(pages),
        print_directive=PrintDirective(delay_ms=print_delay_ms),
    )


# --- measurement slip ---


@dataclass(frozen=True)
class SlipCustomer:
    name: str
    delivery: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class MeasurementSection:
    title: Optional[str]
    entries: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class SlipItem:
    apparel: str
    quantity: str
    sections: tuple[MeasurementSection, ...]
    remarks: str = ""
    own_fabric: bool = False

    @property
    def measurements(self) -> tuple[tuple[str, str], ...]:
        return tuple(e for s in self.sections for e in s.entries)


@dataclass(frozen=True)
class Slip:
    index: int
    count: int
    items: tuple[SlipItem, ...]

    @property
    def continuation(self) -> Optional[str]:
        if self.index < self.count - 1:
            return f"Slip {self.index + 1} of {self.count}"
        return None


@dataclass(frozen=True)
class ReceiptDocument:
    state: DocumentState
    shop: ShopConfig
    order_number: Optional[int] = None
    created: str = ""
    customer: Optional[SlipCustomer] = None
    slips: tuple[Slip, ...] = ()
    print_directive: Optional[PrintDirective] = None
    geometry: PageGeometry = SLIP_GEOMETRY

    @property
    def message(self) -> Optional[str]:
        if self.state == "loading":
            return "Loading measurement slip..."
        if self.state == "not_found":
            return "Order not found."
        if self.state == "no_measurements":
            return f"There are no stitching items with measurements recorded for order #{self.order_number}."
        return None

    @property
    def footer(self) -> tuple[str, ...]:
        contact = " | ".join(p for p in (self.shop.phone, self.shop.email) if p)
        return tuple(line for line in (self.shop.name, self.shop.address, contact) if line)


def _slip_item(item: OrderItem) -> SlipItem:
    det: StitchingDetail = item.details
    return SlipItem(
        apparel=det.apparel or item.name,
        quantity=format_quantity(item.quantity),
        sections=tuple(
            MeasurementSection(title, tuple(entries)) for title, entries in slip_sections(det.apparel, det.measurements)
        ),
        remarks=det.remarks,
        own_fabric=det.is_own_fabric,
    )


def compose_receipt(
    order: Optional[Order],
    customer: Optional[Customer],
    *,
    shop: ShopConfig,
    page_size: int = SLIP_PAGE_SIZE,
    print_delay_ms: int = PRINT_DELAY_MS,
    loading: bool = False,
) -> ReceiptDocument:
    if loading:
        return ReceiptDocument(state="loading", shop=shop)
    if order is None:
        return ReceiptDocument(state="not_found", shop=shop)

    stitched = [i for i in order.items if is_stitching_with_measurements(i)]
    if not stitched:
        return ReceiptDocument(state="no_measurements", shop=shop, order_number=order.order_number)

    chunks = paginate(stitched, page_size)
    count = len(chunks)
    slips = tuple(Slip(index, count, tuple(_slip_item(i) for i in chunk)) for index, chunk in enumerate(chunks))

    return ReceiptDocument(
        state="ready",
        shop=shop,
        order_number=order.order_number,
        created=format_date(order.created_at),
        customer=SlipCustomer(
            name=(customer.name if customer and customer.name else NOT_AVAILABLE),
            delivery=format_day_month(order.delivery_date),
            phone=(customer.phone if customer and customer.phone else None),
        ),
        slips=slips,
        print_directive=PrintDirective(delay_ms=print_delay_ms),
    )
