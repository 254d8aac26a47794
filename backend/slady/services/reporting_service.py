# Overview: Service-layer operations for reporting; encapsulates business logic and database work.

"""
Sales rollups. Voided receipts never count; deleted receipts no longer exist.
Dates are business dates; a range is inclusive on both ends.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy import func

from ..engine.draft import validate_store
from ..engine.pricing import format_money, from_cents
from ..engine.reconcile import CASH_METHOD, PAYMENT_METHODS
from ..errors import ValidationError
from ..extensions import db
from ..models import CashDrawerBalance, CashEntry, Receipt, ReceiptPayment
from ..models.cash import CASH_IN, CASH_OUT, CLOSING_BALANCE, OPENING_BALANCE
from ..time_utils import day_bounds, parse_business_date


def parse_report_date(value: Any, field: str, *, required: bool = False) -> date | None:
    try:
        parsed = parse_business_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD", field=field)
    if parsed is None and required:
        raise ValidationError(f"{field} is required", field=field)
    return parsed


def _money(cents: int | None) -> str:
    return format_money(from_cents(cents or 0))


def _filter_receipts(query, store: int | None, start: date | None, end: date | None):
    query = query.filter(Receipt.voided.is_(False))
    if store is not None:
        query = query.filter(Receipt.store == store)
    start_dt, end_dt = day_bounds(start, end)
    if start_dt is not None:
        query = query.filter(Receipt.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(Receipt.created_at < end_dt)
    return query


def _resolve(store: Any, start: Any, end: Any) -> tuple[int | None, date | None, date | None]:
    store_id = validate_store(store) if store not in (None, "") else None
    start_d = parse_report_date(start, "start")
    end_d = parse_report_date(end, "end")
    if start_d and end_d and start_d > end_d:
        raise ValidationError("start must be on or before end", field="start")
    return store_id, start_d, end_d


def daily_sales(*, store: Any = None, start: Any = None, end: Any = None) -> dict:
    """
    Sales per (date, cashier) with per-date subtotals and a grand total.
    """
    store_id, start_d, end_d = _resolve(store, start, end)
    day = func.date(Receipt.created_at)

    query = db.session.query(
        day.label("day"),
        Receipt.cashier.label("cashier"),
        func.count(Receipt.id).label("receipts"),
        func.coalesce(func.sum(Receipt.total_cents), 0).label("total_cents"),
    )
    rows = (
        _filter_receipts(query, store_id, start_d, end_d)
        .group_by(day, Receipt.cashier)
        .order_by(day, Receipt.cashier)
        .all()
    )

    per_date: dict[str, int] = {}
    grand = 0
    out_rows = []
    for row in rows:
        key = str(row.day)
        cents = int(row.total_cents or 0)
        per_date[key] = per_date.get(key, 0) + cents
        grand += cents
        out_rows.append({
            "date": key,
            "cashier": row.cashier,
            "receipts": int(row.receipts or 0),
            "total": _money(cents),
        })

    return {
        "store": store_id,
        "start": start_d.isoformat() if start_d else None,
        "end": end_d.isoformat() if end_d else None,
        "rows": out_rows,
        "dates": [{"date": key, "total": _money(cents)} for key, cents in per_date.items()],
        "total": _money(grand),
    }


def payment_method_sales(*, store: Any = None, start: Any = None, end: Any = None) -> dict:
    """
    Date x payment method pivot. Known methods come first in their till
    order, custom labels follow alphabetically.
    """
    store_id, start_d, end_d = _resolve(store, start, end)
    day = func.date(Receipt.created_at)

    query = db.session.query(
        day.label("day"),
        ReceiptPayment.method.label("method"),
        func.coalesce(func.sum(ReceiptPayment.amount_cents), 0).label("amount_cents"),
    ).join(Receipt, ReceiptPayment.receipt_id == Receipt.id)
    rows = (
        _filter_receipts(query, store_id, start_d, end_d)
        .group_by(day, ReceiptPayment.method)
        .order_by(day)
        .all()
    )

    pivot: dict[str, dict[str, int]] = {}
    seen: set[str] = set()
    for row in rows:
        pivot.setdefault(str(row.day), {})[row.method] = int(row.amount_cents or 0)
        seen.add(row.method)

    methods = [m for m in PAYMENT_METHODS if m in seen]
    methods += sorted(m for m in seen if m not in PAYMENT_METHODS)

    method_totals = {m: 0 for m in methods}
    out_rows = []
    for key, amounts in pivot.items():
        for method, cents in amounts.items():
            method_totals[method] += cents
        out_rows.append({
            "date": key,
            "amounts": {m: _money(amounts.get(m, 0)) for m in methods},
            "total": _money(sum(amounts.values())),
        })

    return {
        "store": store_id,
        "start": start_d.isoformat() if start_d else None,
        "end": end_d.isoformat() if end_d else None,
        "methods": methods,
        "rows": out_rows,
        "totals": {m: _money(c) for m, c in method_totals.items()},
        "total": _money(sum(method_totals.values())),
    }


def _latest_balance_cents(store: int, business_date: date, balance_type: int) -> int | None:
    row = (
        db.session.query(CashDrawerBalance.amount_cents)
        .filter_by(store=store, business_date=business_date, type=balance_type)
        .order_by(CashDrawerBalance.id.desc())
        .first()
    )
    return row.amount_cents if row else None


def drawer_summary(*, store: Any, business_date: Any) -> dict:
    """
    Expected closing = opening + cash sales + cash in - cash out.
    Variance is recorded closing - expected, or None until closing is counted.
    """
    store_id = validate_store(store)
    day = parse_report_date(business_date, "date", required=True)
    start_dt, end_dt = day_bounds(day, day)

    opening = _latest_balance_cents(store_id, day, OPENING_BALANCE)
    closing = _latest_balance_cents(store_id, day, CLOSING_BALANCE)

    cash_sales = _filter_receipts(
        db.session.query(func.coalesce(func.sum(ReceiptPayment.amount_cents), 0))
        .join(Receipt, ReceiptPayment.receipt_id == Receipt.id)
        .filter(ReceiptPayment.method == CASH_METHOD),
        store_id,
        day,
        day,
    ).scalar()

    def _entries(entry_type: int) -> int:
        return db.session.query(func.coalesce(func.sum(CashEntry.amount_cents), 0)).filter(
            CashEntry.store == store_id,
            CashEntry.type == entry_type,
            CashEntry.created_at >= start_dt,
            CashEntry.created_at < end_dt,
        ).scalar()

    cash_in = int(_entries(CASH_IN) or 0)
    cash_out = int(_entries(CASH_OUT) or 0)
    expected = (opening or 0) + int(cash_sales or 0) + cash_in - cash_out

    return {
        "store": store_id,
        "date": day.isoformat(),
        "opening": _money(opening),
        "cash_sales": _money(cash_sales),
        "cash_in": _money(cash_in),
        "cash_out": _money(cash_out),
        "expected_closing": _money(expected),
        "closing": _money(closing) if closing is not None else None,
        "variance": _money(closing - expected) if closing is not None else None,
    }
