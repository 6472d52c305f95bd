"""Plain-text rendering of composed documents for the terminal and ``lp``."""

from __future__ import annotations

from .compose import InvoiceDocument, ReceiptDocument
from .formatters import format_currency, format_quantity

WIDTH = 48
PAGE_BREAK = "\f"


def _row(left: str, right: str) -> str:
    gap = max(1, WIDTH - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


def render_invoice_text(doc: InvoiceDocument) -> str:
    if doc.state != "ready":
        return doc.message or ""

    pages = []
    for page in doc.pages:
        out = [
            doc.shop.name,
            doc.shop.address,
            _row("INVOICE", f"#{doc.order_number}"),
            _row("", f"Date: {doc.created}"),
            "-" * WIDTH,
            "Bill To:",
            f"  {doc.bill_to.name}",
        ]
        out += [f"  {v}" for v in (doc.bill_to.phone, doc.bill_to.email) if v]
        out.append("-" * WIDTH)
        for line in page.lines:
            out.append(line.name)
            if line.split is not None:
                out.append(f"  {line.split.describe()}")
            out.append(
                _row(f"  {format_currency(line.price)} x {format_quantity(line.quantity)}", format_currency(line.amount))
            )
        out.append("-" * WIDTH)
        if page.totals is not None:
            out.append(_row("Subtotal", format_currency(page.totals.subtotal)))
            out.append(_row("Advance Paid", f"- {format_currency(page.totals.advance)}"))
            out.append(_row("Balance Due", format_currency(page.totals.balance_due)))
            out.append("")
            out.append("Terms & Conditions")
            out += [f"  * {t}" for t in page.terms]
        else:
            out.append(page.continuation)
        pages.append("\n".join(out))
    return PAGE_BREAK.join(pages) + "\n"


def render_receipt_text(doc: ReceiptDocument) -> str:
    if doc.state != "ready":
        title = "No Measurements\n" if doc.state == "no_measurements" else ""
        return title + (doc.message or "")

    slips = []
    for slip in doc.slips:
        out = [
            "MEASUREMENT SLIP".center(WIDTH),
            f"Order #{doc.order_number}".center(WIDTH),
            doc.created.center(WIDTH),
            "=" * WIDTH,
            _row(f"Customer: {doc.customer.name}", f"Delivery: {doc.customer.delivery}"),
        ]
        if doc.customer.phone:
            out.append(f"Phone: {doc.customer.phone}")
        for item in slip.items:
            out.append("-" * WIDTH)
            out.append(f"{item.apparel.upper()} (Qty: {item.quantity})")
            for section in item.sections:
                if section.title:
                    out.append(f"  [{section.title.upper()}]")
                out += [_row(f"  {label}:", value) for label, value in section.entries]
            if item.remarks:
                out.append(f"  Remarks: {item.remarks}")
            if item.own_fabric:
                out.append("  !! Customer's Own Fabric !!")
        if slip.continuation:
            out.append(slip.continuation.center(WIDTH))
        out.append("=" * WIDTH)
        out += [line.center(WIDTH) for line in doc.footer]
        slips.append("\n".join(out))
    return PAGE_BREAK.join(slips) + "\n"
