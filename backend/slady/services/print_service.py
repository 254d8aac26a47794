# Overview: Service-layer operations for printing; renders documents and queues print jobs.

"""
Print Service

The backend never talks to a printer. Every document (receipt, reprint,
price label, daily report, drawer kick) is rendered to plain text for a
42-column thermal printer and stored as a QUEUED PrintJob; the store's
printer agent drains the queue.

enqueue() only adds and flushes. Callers own the commit so a failed
operation never leaves a job behind.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable

from ..engine.draft import STORES, validate_store
from ..engine.pricing import format_money, from_cents, to_money
from ..errors import ValidationError
from ..extensions import db
from ..models import PrintJob, Receipt
from ..models.printing import JOB_DAILY_REPORT, JOB_DRAWER_KICK, JOB_LABEL, JOB_RECEIPT, JOB_REPRINT
from ..time_utils import utcnow

WIDTH = 42
DRAWER_KICK = "\x1bp\x00\x19\xfa"


def _center(text: str) -> str:
    return text.center(WIDTH).rstrip()


def _pair(left: str, right: str) -> str:
    space = max(1, WIDTH - len(left) - len(right))
    return f"{left}{' ' * space}{right}"


def _rule(char: str = "-") -> str:
    return char * WIDTH


def _header(store: int) -> list[str]:
    info = STORES[store]
    return [_center(info["shop"]), _center(info["address"]), _rule("=")]


def enqueue(*, store: int, kind: str, content: str, receipt_id: int | None = None) -> PrintJob:
    job = PrintJob(store=store, kind=kind, content=content, receipt_id=receipt_id)
    db.session.add(job)
    db.session.flush()
    return job


def render_receipt(receipt: Receipt, *, reprint: bool = False) -> str:
    lines = _header(receipt.store)
    if reprint:
        lines.append(_center("*** REPRINT ***"))
    if receipt.voided:
        lines.append(_center("*** VOID ***"))
    created = receipt.created_at or utcnow()
    lines += [
        _pair("Ref", receipt.ref_no),
        _pair("Date", created.strftime("%Y-%m-%d %H:%M")),
        _pair("Cashier", receipt.cashier),
        _rule(),
    ]
    for line in receipt.lines:
        lines.append(line.code)
        detail = f"  {line.qty} x {format_money(from_cents(line.unit_price_cents))}"
        if line.discount_percent_bps:
            detail += f" -{line.discount_percent_bps / 100:g}%"
        if line.discount_cents:
            detail += f" -{format_money(from_cents(line.discount_cents))}"
        lines.append(_pair(detail, format_money(from_cents(line.final_price_cents))))
    lines.append(_rule())
    lines.append(_pair("TOTAL", format_money(from_cents(receipt.total_cents))))
    lines.append(_pair("GST", format_money(from_cents(receipt.gst_cents))))
    lines.append(_rule())
    for payment in receipt.payments:
        lines.append(_pair(payment.method, format_money(from_cents(payment.amount_cents))))
    lines += [_rule("="), _center("Thank you for shopping with us!"), ""]
    return "\n".join(lines)


def queue_receipt(receipt: Receipt, *, reprint: bool = False) -> PrintJob:
    return enqueue(
        store=receipt.store,
        kind=JOB_REPRINT if reprint else JOB_RECEIPT,
        content=render_receipt(receipt, reprint=reprint),
        receipt_id=receipt.id,
    )


def print_label(*, store: Any, code: str, color: str, size: str, sale_price: Any) -> PrintJob:
    """Queue a price label; all four fields are required."""
    store = validate_store(store)
    for name, value in (("code", code), ("color", color), ("size", size)):
        if not str(value or "").strip():
            raise ValidationError(f"{name} is required", field=name)
    if sale_price in (None, ""):
        raise ValidationError("sale_price is required", field="sale_price")
    price = to_money(sale_price)
    if price < 0:
        raise ValidationError("sale_price must be >= 0", field="sale_price")

    content = "\n".join([
        _center(STORES[store]["shop"]),
        _center(str(code).strip()),
        _center(f"{str(color).strip()} / {str(size).strip()}"),
        _center(f"S$ {format_money(price)}"),
        "",
    ])
    job = enqueue(store=store, kind=JOB_LABEL, content=content)
    db.session.commit()
    return job


def render_daily_report(
    *,
    store: int,
    cashier: str,
    business_date: date,
    sales: dict,
    methods: dict,
    drawer: dict,
    entries: Iterable[Any],
) -> str:
    lines = _header(store)
    lines += [
        _center("DAILY REPORT"),
        _pair("Date", business_date.isoformat()),
        _pair("Printed by", cashier),
        _rule(),
        "SALES BY CASHIER",
    ]
    for row in sales["rows"]:
        lines.append(_pair(f"  {row['cashier']}", row["total"]))
    lines.append(_pair("Total sales", sales["total"]))
    lines += [_rule(), "PAYMENT METHODS"]
    for method in methods["methods"]:
        amount = methods["totals"].get(method, "0.00")
        lines.append(_pair(f"  {method}", amount))
    lines += [_rule(), "CASH IN / OUT"]
    for entry in entries:
        lines.append(_pair(f"  {entry.remark or ('IN' if entry.signed_amount_cents > 0 else 'OUT')}",
                           format_money(from_cents(entry.signed_amount_cents))))
    lines += [
        _rule(),
        _pair("Opening balance", drawer["opening"]),
        _pair("Cash sales", drawer["cash_sales"]),
        _pair("Cash in", drawer["cash_in"]),
        _pair("Cash out", drawer["cash_out"]),
        _pair("Expected closing", drawer["expected_closing"]),
        _pair("Recorded closing", drawer["closing"] if drawer["closing"] is not None else "-"),
        _rule("="),
        "",
    ]
    return "\n".join(lines)


def print_daily_report(*, store: Any, cashier: str, business_date: Any) -> PrintJob:
    """Queue the end-of-day report for one store."""
    from . import cash_service, reporting_service

    store = validate_store(store)
    cashier = (cashier or "").strip()
    if not cashier:
        raise ValidationError("cashier is required", field="cashier")
    day = reporting_service.parse_report_date(business_date, "date", required=True)

    content = render_daily_report(
        store=store,
        cashier=cashier,
        business_date=day,
        sales=reporting_service.daily_sales(store=store, start=day, end=day),
        methods=reporting_service.payment_method_sales(store=store, start=day, end=day),
        drawer=reporting_service.drawer_summary(store=store, business_date=day),
        entries=cash_service.list_entries(store=store, start=day, end=day),
    )
    job = enqueue(store=store, kind=JOB_DAILY_REPORT, content=content)
    db.session.commit()
    return job


def queue_drawer_kick(store: int) -> PrintJob:
    return enqueue(store=store, kind=JOB_DRAWER_KICK, content=DRAWER_KICK)
