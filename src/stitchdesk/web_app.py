from __future__ import annotations

import logging
from datetime import datetime, timezone

from flask import Flask, abort, flash, jsonify, redirect, render_template, request, url_for

from stitchdesk.config import AppConfig, ConfigError, load_config
from stitchdesk.db import Db, DbError, NotFound, PermissionDenied
from stitchdesk.domain import (
    ORDER_STATUSES,
    InvalidArgument,
    customer_from_row,
    employee_from_row,
    fabric_from_row,
    readymade_from_row,
    to_datetime,
)
from stitchdesk.logger import setup_logger
from stitchdesk.measurements import APPAREL_MEASUREMENTS, SERVICE_CHARGES, fields_for, humanize_key, summarize
from stitchdesk.printing.compose import compose_invoice, compose_receipt
from stitchdesk.printing.formatters import format_currency, format_date, format_quantity
from stitchdesk.printing.loader import DocumentLoader
from stitchdesk.reports import (
    financial_summary,
    month_start,
    monthly_sales,
    order_rows,
    outstanding,
    recent_orders,
    search_orders,
)
from stitchdesk.repositories.customer_repo import CustomerRepository
from stitchdesk.repositories.employee_repo import EmployeeRepository
from stitchdesk.repositories.fabric_repo import FabricRepository
from stitchdesk.repositories.order_repo import OrderRepository
from stitchdesk.repositories.readymade_repo import ReadyMadeRepository
from stitchdesk.services.customer_service import CustomerService
from stitchdesk.services.order_service import CreateOrderItemInput, OrderService
from stitchdesk.services.payroll_service import PayrollService
from stitchdesk.services.stock_service import StockService
from stitchdesk.services.validation import ValidationError

app = Flask(__name__, template_folder="templates")
app.secret_key = "change-this-secret-key-in-production"

log = logging.getLogger(__name__)

db: Db = None
cfg: AppConfig = None
customer_repo = CustomerRepository()
employee_repo = EmployeeRepository()
readymade_repo = ReadyMadeRepository()
fabric_repo = FabricRepository()
order_repo = OrderRepository()


def customer_service() -> CustomerService:
    return CustomerService(customer_repo=customer_repo)


def payroll_service() -> PayrollService:
    return PayrollService(employee_repo=employee_repo)


def stock_service() -> StockService:
    return StockService(readymade_repo=readymade_repo, fabric_repo=fabric_repo)


def order_service() -> OrderService:
    return OrderService(
        customer_repo=customer_repo,
        order_repo=order_repo,
        readymade_repo=readymade_repo,
        fabric_repo=fabric_repo,
    )


def document_loader() -> DocumentLoader:
    return DocumentLoader(order_repo=order_repo, customer_repo=customer_repo)


def configure(config: AppConfig, database: Db) -> Flask:
    global cfg, db
    cfg = config
    db = database
    app.secret_key = config.secret_key
    return app


app.add_template_filter(format_currency, "currency")
app.add_template_filter(lambda v: format_currency(v, whole=True), "rupees")
app.add_template_filter(format_date, "date")
app.add_template_filter(format_quantity, "qty")
app.add_template_filter(humanize_key, "humanize")


@app.context_processor
def inject_shop():
    return {"shop": cfg.shop if cfg else None, "statuses": ORDER_STATUSES}


@app.errorhandler(PermissionDenied)
def permission_denied(e: PermissionDenied):
    flash(str(e), "warning")
    return redirect(url_for("index"))


@app.route("/")
def index():
    try:
        with db.session() as conn:
            totals = order_repo.sales_totals(conn, month_start=month_start(datetime.now(timezone.utc)))
            summary = financial_summary(totals, readymade_repo.stock_value(conn), fabric_repo.stock_value(conn))
            sales = monthly_sales(order_repo.monthly_sales(conn))
            rows = order_rows(order_repo.list_with_customers(conn, limit=5), unknown="Unknown")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return render_template("dashboard.html", summary=None, sales=[], recent=[])
    except PermissionDenied as e:
        flash(str(e), "warning")
        return render_template("dashboard.html", summary=None, sales=[], recent=[])

    return render_template("dashboard.html", summary=summary, sales=sales, recent=recent_orders(rows))


# --- customers ---


@app.route("/customers")
def customers_list():
    q = request.args.get("q", "").strip()
    try:
        with db.session() as conn:
            rows = [customer_from_row(r) for r in customer_repo.list(conn, limit=200, search=q or None)]
        return render_template("customers_list.html", customers=rows, q=q, summarize=summarize)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


@app.route("/customers/new", methods=["GET", "POST"])
def customers_new():
    if request.method == "POST":
        try:
            with db.transaction() as conn:
                customer_service().create_customer(
                    conn,
                    name=request.form.get("name", ""),
                    phone=request.form.get("phone", ""),
                    email=request.form.get("email", ""),
                )
            flash("Customer created", "success")
            return redirect(url_for("customers_list"))
        except ValidationError as e:
            flash(f"Validation error: {e}", "warning")
        except PermissionDenied as e:
            flash(str(e), "warning")
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    return render_template("customers_form.html", customer=None, form=request.form)


@app.route("/customers/<int:customer_id>/edit", methods=["GET", "POST"])
def customers_edit(customer_id):
    if request.method == "POST":
        try:
            with db.transaction() as conn:
                customer_service().update_customer(
                    conn,
                    customer_id=customer_id,
                    name=request.form.get("name", ""),
                    phone=request.form.get("phone", ""),
                    email=request.form.get("email", ""),
                )
            flash("Customer updated", "success")
            return redirect(url_for("customers_list"))
        except ValidationError as e:
            flash(f"Validation error: {e}", "warning")
        except NotFound:
            flash("Customer not found", "warning")
            return redirect(url_for("customers_list"))
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    try:
        with db.session() as conn:
            row = customer_repo.get(conn, customer_id)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("customers_list"))
    if row is None:
        flash("Customer not found", "warning")
        return redirect(url_for("customers_list"))
    return render_template("customers_form.html", customer=customer_from_row(row), form=request.form)


@app.route("/customers/<int:customer_id>/measurements", methods=["GET", "POST"])
def customers_measurements(customer_id):
    apparel = request.values.get("apparel") or next(iter(APPAREL_MEASUREMENTS))
    if apparel not in APPAREL_MEASUREMENTS:
        abort(400)

    if request.method == "POST":
        fields = {f: request.form.get(f"m_{f}", "") for f in fields_for(apparel)}
        try:
            with db.transaction() as conn:
                customer_service().update_measurements(conn, customer_id=customer_id, apparel=apparel, fields=fields)
            flash(f"Measurements for {apparel} updated", "success")
            return redirect(url_for("customers_list"))
        except ValidationError as e:
            flash(f"Validation error: {e}", "warning")
        except NotFound:
            flash("Customer not found", "warning")
            return redirect(url_for("customers_list"))
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    try:
        with db.session() as conn:
            row = customer_repo.get(conn, customer_id)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("customers_list"))
    if row is None:
        flash("Customer not found", "warning")
        return redirect(url_for("customers_list"))
    customer = customer_from_row(row)
    return render_template(
        "customer_measurements.html",
        customer=customer,
        apparel=apparel,
        apparels=list(APPAREL_MEASUREMENTS),
        fields=fields_for(apparel),
        values=customer.measurements.get(apparel, {}),
    )


@app.route("/customers/<int:customer_id>/measurements/previous")
def customers_previous_measurements(customer_id):
    apparel = request.args.get("apparel", "")
    try:
        with db.session() as conn:
            found = order_service().previous_measurements(conn, customer_id=customer_id, apparel=apparel)
    except DbError as e:
        return jsonify({"error": str(e)}), 503
    if found is None:
        return jsonify({"apparel": apparel, "measurements": None}), 404
    return jsonify({"apparel": apparel, "measurements": found})


@app.route("/customers/<int:customer_id>/delete", methods=["POST"])
def customers_delete(customer_id):
    try:
        with db.transaction() as conn:
            customer_service().delete_customer(conn, customer_id)
        flash("Customer removed", "success")
    except NotFound:
        flash("Customer not found", "warning")
    except PermissionDenied as e:
        flash(str(e), "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("customers_list"))


# --- employees ---


@app.route("/employees")
def employees_list():
    try:
        with db.session() as conn:
            rows = [employee_from_row(r) for r in employee_repo.list(conn)]
        return render_template("employees_list.html", employees=rows)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


@app.route("/employees/new", methods=["GET", "POST"])
@app.route("/employees/<int:employee_id>/edit", methods=["GET", "POST"])
def employees_form(employee_id=None):
    if request.method == "POST":
        values = dict(
            name=request.form.get("name", ""),
            role=request.form.get("role", ""),
            salary=request.form.get("salary", "0") or "0",
        )
        try:
            with db.transaction() as conn:
                if employee_id is None:
                    payroll_service().add_employee(conn, **values)
                else:
                    payroll_service().update_employee(conn, employee_id=employee_id, **values)
            flash(f"Employee {'added' if employee_id is None else 'updated'}", "success")
            return redirect(url_for("employees_list"))
        except (ValidationError, InvalidArgument) as e:
            flash(f"Validation error: {e}", "warning")
        except NotFound:
            flash("Employee not found", "warning")
            return redirect(url_for("employees_list"))
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    employee = None
    if employee_id is not None:
        try:
            with db.session() as conn:
                row = employee_repo.get(conn, employee_id)
        except DbError as e:
            flash(f"DB error: {e}", "danger")
            return redirect(url_for("employees_list"))
        if row is None:
            flash("Employee not found", "warning")
            return redirect(url_for("employees_list"))
        employee = employee_from_row(row)
    return render_template("employees_form.html", employee=employee, form=request.form)


@app.route("/employees/<int:employee_id>/pay", methods=["POST"])
def employees_pay(employee_id):
    try:
        with db.transaction() as conn:
            cleared = payroll_service().pay_salary(conn, employee_id)
        flash(f"Salary paid, cleared {format_currency(cleared)}. Balance is now zero.", "success")
    except NotFound:
        flash("Employee not found", "warning")
    except PermissionDenied as e:
        flash(str(e), "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("employees_list"))


@app.route("/employees/<int:employee_id>/leaves", methods=["POST"])
def employees_leaves(employee_id):
    try:
        with db.transaction() as conn:
            payroll_service().set_leaves(conn, employee_id=employee_id, leaves=request.form.get("leaves", ""))
        flash("Leave balance updated", "success")
    except ValidationError as e:
        flash(f"Validation error: {e}", "warning")
    except NotFound:
        flash("Employee not found", "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("employees_list"))


@app.route("/employees/<int:employee_id>/delete", methods=["POST"])
def employees_delete(employee_id):
    try:
        with db.transaction() as conn:
            payroll_service().remove_employee(conn, employee_id)
        flash("Employee removed", "success")
    except NotFound:
        flash("Employee not found", "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("employees_list"))


# --- stock ---


@app.route("/stock/readymade", methods=["GET", "POST"])
def stock_readymade():
    if request.method == "POST":
        try:
            with db.transaction() as conn:
                stock_service().add_readymade(
                    conn,
                    item=request.form.get("item", ""),
                    custom_item=request.form.get("custom_item", ""),
                    size=request.form.get("size", ""),
                    quantity=request.form.get("quantity", "0") or "0",
                    cost=request.form.get("cost", "0") or "0",
                    supplier=request.form.get("supplier", ""),
                    supplier_phone=request.form.get("supplier_phone", ""),
                )
            flash("Stock added", "success")
            return redirect(url_for("stock_readymade"))
        except (ValidationError, InvalidArgument) as e:
            flash(f"Validation error: {e}", "warning")
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    try:
        with db.session() as conn:
            rows = [readymade_from_row(r) for r in readymade_repo.list(conn, limit=500)]
        return render_template("stock_readymade.html", stock=rows, form=request.form)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


@app.route("/stock/readymade/<int:stock_id>/delete", methods=["POST"])
def stock_readymade_delete(stock_id):
    try:
        with db.transaction() as conn:
            readymade_repo.delete(conn, stock_id)
        flash("Stock item removed", "success")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("stock_readymade"))


@app.route("/stock/fabric", methods=["GET", "POST"])
def stock_fabric():
    if request.method == "POST":
        try:
            with db.transaction() as conn:
                stock_service().add_fabric(
                    conn,
                    fabric_type=request.form.get("fabric_type", ""),
                    length=request.form.get("length", "0") or "0",
                    cost_per_mtr=request.form.get("cost_per_mtr", "0") or "0",
                    supplier=request.form.get("supplier", ""),
                    supplier_phone=request.form.get("supplier_phone", ""),
                )
            flash("Fabric added", "success")
            return redirect(url_for("stock_fabric"))
        except (ValidationError, InvalidArgument) as e:
            flash(f"Validation error: {e}", "warning")
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    try:
        with db.session() as conn:
            rows = [fabric_from_row(r) for r in fabric_repo.list(conn, limit=500)]
        return render_template("stock_fabric.html", stock=rows, form=request.form)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


@app.route("/stock/fabric/<int:stock_id>/delete", methods=["POST"])
def stock_fabric_delete(stock_id):
    try:
        with db.transaction() as conn:
            fabric_repo.delete(conn, stock_id)
        flash("Fabric removed", "success")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(url_for("stock_fabric"))


# --- orders ---


@app.route("/orders")
def orders_list():
    q = request.args.get("q", "").strip()
    status = request.args.get("status", "").strip() or None
    try:
        with db.session() as conn:
            rows = order_rows(order_repo.list_with_customers(conn, limit=500, status=status))
        return render_template("orders_list.html", orders=search_orders(rows, q), q=q, status=status)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


def _parse_items(form) -> list[CreateOrderItemInput]:
    items = []
    i = 0
    while True:
        item_type = form.get(f"item_type_{i}", "").strip()
        if not item_type:
            break
        apparel = form.get(f"item_apparel_{i}", "").strip() or None
        measurements = {}
        if apparel:
            measurements = {f: form.get(f"m_{i}_{f}", "") for f in fields_for(apparel) if form.get(f"m_{i}_{f}")}
        stock = form.get(f"item_stock_{i}", "").strip()
        fabric_price = form.get(f"item_fabric_price_{i}", "").strip()
        items.append(
            CreateOrderItemInput(
                type=item_type,
                name=form.get(f"item_name_{i}", ""),
                price=form.get(f"item_price_{i}", "0") or "0",
                quantity=form.get(f"item_qty_{i}", "1") or "1",
                apparel=apparel,
                measurements=measurements,
                is_own_fabric=form.get(f"item_own_fabric_{i}") == "on",
                remarks=form.get(f"item_remarks_{i}", ""),
                fabric_price=fabric_price or None,
                stock_id=int(stock) if stock else None,
            )
        )
        i += 1
    return items


@app.route("/orders/new", methods=["GET", "POST"])
def orders_new():
    if request.method == "POST":
        customer_mode = request.form.get("customer_mode")  # existing / new
        customer_id = None
        name = phone = None
        if customer_mode == "existing":
            try:
                customer_id = int(request.form.get("customer_id") or 0) or None
            except ValueError:
                customer_id = None
            if customer_id is None:
                flash("Please select an existing customer.", "warning")
                return redirect(url_for("orders_new"))
        else:
            name = request.form.get("new_customer_name", "").strip()
            phone = request.form.get("new_customer_phone", "").strip()

        try:
            delivery = to_datetime(request.form.get("delivery_date", "").strip())
            items = _parse_items(request.form)
            with db.transaction() as conn:
                created = order_service().create_order(
                    conn,
                    customer_id=customer_id,
                    new_customer_name=name,
                    new_customer_phone=phone,
                    delivery_date=delivery,
                    items=items,
                    advance=request.form.get("advance", "0") or "0",
                )
            flash(f"Order #{created.order_number} created", "success")
            return redirect(url_for("orders_list", created=created.order_id))
        except (ValidationError, InvalidArgument) as e:
            flash(f"Validation error: {e}", "warning")
        except ValueError as e:
            flash(f"Stock error: {e}", "danger")
        except PermissionDenied as e:
            flash(str(e), "warning")
        except DbError as e:
            flash(f"DB error: {e}", "danger")

    try:
        with db.session() as conn:
            customers = [customer_from_row(r) for r in customer_repo.list(conn, limit=500)]
            readymade = [readymade_from_row(r) for r in readymade_repo.list(conn, limit=500)]
            fabric = [fabric_from_row(r) for r in fabric_repo.list(conn, limit=500)]
        return render_template(
            "orders_new.html",
            customers=customers,
            readymade=readymade,
            fabric=fabric,
            apparels=APPAREL_MEASUREMENTS,
            measurement_fields=list(dict.fromkeys(f for fs in APPAREL_MEASUREMENTS.values() for f in fs)),
            charges=SERVICE_CHARGES,
        )
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


@app.route("/orders/<int:order_id>/status", methods=["POST"])
def orders_status(order_id):
    status = request.form.get("status", "")
    try:
        with db.transaction() as conn:
            order_service().update_status(conn, order_id=order_id, status=status)
        flash(f"Status updated to {status}", "success")
    except ValidationError as e:
        flash(f"Validation error: {e}", "warning")
    except NotFound:
        flash("Order not found", "warning")
    except PermissionDenied as e:
        flash(str(e), "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(request.referrer or url_for("orders_list"))


@app.route("/orders/<int:order_id>/payment", methods=["POST"])
def orders_payment(order_id):
    try:
        with db.transaction() as conn:
            balance = order_service().record_payment(conn, order_id=order_id, amount=request.form.get("amount", "0") or "0")
        flash(f"Payment recorded, balance due {format_currency(balance)}", "success")
    except (ValidationError, InvalidArgument) as e:
        flash(f"Validation error: {e}", "warning")
    except NotFound:
        flash("Order not found", "warning")
    except PermissionDenied as e:
        flash(str(e), "warning")
    except DbError as e:
        flash(f"DB error: {e}", "danger")
    return redirect(request.referrer or url_for("outstanding_payments"))


@app.route("/outstanding-payments")
def outstanding_payments():
    q = request.args.get("q", "").strip()
    try:
        with db.session() as conn:
            rows = order_rows(order_repo.list_with_customers(conn, limit=1000, outstanding_only=True))
        due, total = outstanding(rows, q)
        return render_template("outstanding.html", orders=due, total=total, q=q)
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return redirect(url_for("index"))


# --- print views ---


def _load_for_print(order_id: int):
    """Order, customer and the HTTP status for the print views; failures fall back to the not-found state."""
    try:
        with db.session() as conn:
            loaded = document_loader().load(conn, order_id)
        return loaded.order, loaded.customer, 200
    except NotFound:
        log.info("print requested for missing order %s", order_id)
        return None, None, 404
    except InvalidArgument as e:
        log.warning("order %s has malformed data: %s", order_id, e)
        flash(f"Order {order_id} could not be read: {e}", "warning")
        return None, None, 422
    except PermissionDenied as e:
        flash(str(e), "warning")
        return None, None, 403
    except DbError as e:
        flash(f"DB error: {e}", "danger")
        return None, None, 503


@app.route("/print/invoice/<int:order_id>")
def print_invoice(order_id):
    order, customer, status = _load_for_print(order_id)
    doc = compose_invoice(
        order,
        customer,
        shop=cfg.shop,
        page_size=cfg.print.invoice_page_size,
        print_delay_ms=cfg.print.print_delay_ms,
    )
    return render_template("print/invoice.html", doc=doc), status


@app.route("/print/receipt/<int:order_id>")
def print_receipt(order_id):
    order, customer, status = _load_for_print(order_id)
    doc = compose_receipt(
        order,
        customer,
        shop=cfg.shop,
        page_size=cfg.print.slip_page_size,
        print_delay_ms=cfg.print.print_delay_ms,
    )
    return render_template("print/receipt.html", doc=doc), status


if __name__ == "__main__":
    try:
        config = load_config("config.toml")
        setup_logger(config.log_level, config.log_dir)
        configure(config, Db(config.db))
        app.run(debug=True, host="127.0.0.1", port=5000)
    except ConfigError as e:
        print(f"[CONFIG ERROR] {e}")
        raise SystemExit(2)
