# Overview: Service-layer operations for the cash drawer; encapsulates business logic and database work.

from __future__ import annotations

from typing import Any

from flask import current_app

from ..engine.draft import validate_store
from ..engine.pricing import to_cents, to_money
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import CashDrawerBalance, CashEntry, DrawerOpenEvent
from ..models.cash import BALANCE_TYPES, CASH_ENTRY_TYPES
from ..time_utils import day_bounds
from .concurrency import run_with_retry
from .print_service import queue_drawer_kick
from .reporting_service import parse_report_date


def _parse_type(value: Any, allowed: dict[int, str], field: str = "type") -> int:
    """Accept 1/2 or the label ("IN", "OUT", "OPENING", "CLOSING")."""
    if isinstance(value, str):
        s = value.strip().upper()
        for key, label in allowed.items():
            if s == label:
                return key
        if s.isdigit():
            value = int(s)
    if isinstance(value, int) and not isinstance(value, bool) and value in allowed:
        return value
    raise ValidationError(f"{field} must be one of {sorted(allowed)} ({', '.join(allowed.values())})", field=field)


def _amount_cents(value: Any) -> int:
    if value in (None, ""):
        raise ValidationError("amount is required", field="amount")
    return to_cents(to_money(value))


def create_entry(*, store: Any, entry_type: Any, amount: Any, remark: str | None = None) -> CashEntry:
    store_id = validate_store(store)
    entry_type = _parse_type(entry_type, CASH_ENTRY_TYPES)
    cents = _amount_cents(amount)
    if cents <= 0:
        raise ValidationError("amount must be greater than 0", field="amount")

    def _op():
        entry = CashEntry(store=store_id, type=entry_type, amount_cents=cents, remark=(remark or "").strip() or None)
        db.session.add(entry)
        db.session.commit()
        return entry

    return run_with_retry(_op)


def delete_entry(entry_id: int) -> None:
    def _op():
        entry = db.session.get(CashEntry, entry_id)
        if entry is None:
            raise NotFoundError(f"Cash entry {entry_id} not found")
        db.session.delete(entry)
        db.session.commit()

    run_with_retry(_op)
    current_app.logger.info("Deleted cash entry %s", entry_id)


def list_entries(*, store: Any = None, start: Any = None, end: Any = None) -> list[CashEntry]:
    query = db.session.query(CashEntry)
    if store not in (None, ""):
        query = query.filter(CashEntry.store == validate_store(store))
    start_dt, end_dt = day_bounds(parse_report_date(start, "start"), parse_report_date(end, "end"))
    if start_dt is not None:
        query = query.filter(CashEntry.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(CashEntry.created_at < end_dt)
    return query.order_by(CashEntry.created_at, CashEntry.id).all()


def create_balance(
    *,
    store: Any,
    balance_type: Any,
    amount: Any,
    business_date: Any,
    remark: str | None = None,
) -> CashDrawerBalance:
    store_id = validate_store(store)
    balance_type = _parse_type(balance_type, BALANCE_TYPES)
    cents = _amount_cents(amount)
    if cents < 0:
        raise ValidationError("amount must be >= 0", field="amount")
    day = parse_report_date(business_date, "date", required=True)

    def _op():
        balance = CashDrawerBalance(
            store=store_id,
            type=balance_type,
            amount_cents=cents,
            business_date=day,
            remark=(remark or "").strip() or None,
        )
        db.session.add(balance)
        db.session.commit()
        return balance

    return run_with_retry(_op)


def delete_balance(balance_id: int) -> None:
    def _op():
        balance = db.session.get(CashDrawerBalance, balance_id)
        if balance is None:
            raise NotFoundError(f"Drawer balance {balance_id} not found")
        db.session.delete(balance)
        db.session.commit()

    run_with_retry(_op)
    current_app.logger.info("Deleted drawer balance %s", balance_id)


def list_balances(*, store: Any = None, start: Any = None, end: Any = None) -> list[CashDrawerBalance]:
    query = db.session.query(CashDrawerBalance)
    if store not in (None, ""):
        query = query.filter(CashDrawerBalance.store == validate_store(store))
    start_d = parse_report_date(start, "start")
    end_d = parse_report_date(end, "end")
    if start_d:
        query = query.filter(CashDrawerBalance.business_date >= start_d)
    if end_d:
        query = query.filter(CashDrawerBalance.business_date <= end_d)
    return query.order_by(CashDrawerBalance.business_date, CashDrawerBalance.id).all()


def open_drawer(*, store: Any, reason: str | None = None) -> DrawerOpenEvent:
    """Kick the drawer outside a sale; always leaves an audit row."""
    store_id = validate_store(store)

    def _op():
        event = DrawerOpenEvent(store=store_id, reason=(reason or "").strip() or None)
        db.session.add(event)
        queue_drawer_kick(store_id)
        db.session.commit()
        return event

    event = run_with_retry(_op)
    current_app.logger.info("Cash drawer opened for store %s", store_id)
    return event
