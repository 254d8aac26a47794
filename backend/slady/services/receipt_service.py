# Overview: Service-layer operations for receipts; encapsulates business logic and database work.

"""
Receipt Assembler

print: validate the draft, require remaining == 0, price every line on the
server, allocate the store's next reference number, persist the receipt
with its lines and payments, bump design hotness and queue the print job.
All of it is one transaction.

After print a receipt is never re-priced. void flips one flag (one-way),
reprint re-renders persisted data, delete removes the receipt outright.
"""

from __future__ import annotations

from typing import Any, Iterable

from flask import current_app

from ..engine.draft import ReceiptDraft, validate_store
from ..engine.pricing import format_money, percent_to_bps, to_cents, to_money
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Receipt, ReceiptLine, ReceiptPayment
from ..time_utils import day_bounds, utcnow
from .catalog_service import bump_hotness
from .concurrency import run_with_retry
from .document_service import SequenceRaceError, next_reference_number
from .print_service import queue_receipt
from .reporting_service import parse_report_date


def _check_client_total(draft: ReceiptDraft, total_price: Any) -> None:
    """A total sent by the client is checked against the server's pricing, never used."""
    if total_price in (None, ""):
        return
    server_total = draft.total
    if to_money(total_price) != server_total:
        raise ValidationError(
            f"total_price {format_money(to_money(total_price))} does not match "
            f"computed total {format_money(server_total)}",
            field="total_price",
            details={"computed_total": format_money(server_total)},
        )


def assemble_receipt(data: dict) -> Receipt:
    """
    Print a receipt from a draft payload:
    {store, cashier, items: [...], payments: [...], total_price?}
    """
    draft = ReceiptDraft.from_dict(data)
    result = draft.validate()
    _check_client_total(draft, data.get("total_price"))
    store = validate_store(draft.store)

    def _op():
        receipt = Receipt(
            store=store,
            cashier=draft.cashier,
            ref_no=next_reference_number(store=store),
            total_cents=to_cents(result.total),
            gst_cents=0,
            voided=False,
            reprint_count=0,
            created_at=utcnow(),
        )
        for position, line in enumerate(draft.lines):
            receipt.lines.append(ReceiptLine(
                position=position,
                code=line.code,
                qty=line.qty,
                unit_price_cents=to_cents(line.unit_price),
                discount_percent_bps=percent_to_bps(line.discount_percent),
                discount_cents=to_cents(line.discount_amount),
                final_price_cents=to_cents(line.final_price),
            ))
        for position, payment in enumerate(draft.payments):
            receipt.payments.append(ReceiptPayment(
                position=position,
                method=payment.method,
                amount_cents=to_cents(payment.amount),
            ))
        db.session.add(receipt)
        db.session.flush()

        bump_hotness(line.code for line in draft.lines)
        queue_receipt(receipt)
        db.session.commit()
        return receipt

    return run_with_retry(_op, retry_on=(SequenceRaceError,))


def get_receipt(receipt_id: int) -> Receipt:
    receipt = db.session.get(Receipt, receipt_id)
    if receipt is None:
        raise NotFoundError(f"Receipt {receipt_id} not found")
    return receipt


def set_voided(receipt_id: int, voided: Any) -> Receipt:
    """
    voided is one-directional. Voiding twice returns the receipt unchanged;
    asking to un-void is rejected.
    """
    if voided is None or str(voided).strip() == "":
        raise ValidationError("voided is required", field="voided")
    flag = str(voided).strip().lower() in ("1", "true")
    if not flag:
        raise ValidationError("A voided receipt cannot be un-voided", field="voided")

    def _op():
        receipt = get_receipt(receipt_id)
        if receipt.voided:
            return receipt
        receipt.voided = True
        receipt.voided_at = utcnow()
        db.session.commit()
        current_app.logger.info("Voided receipt %s (%s)", receipt.id, receipt.ref_no)
        return receipt

    return run_with_retry(_op)


def void_receipt(receipt_id: int) -> Receipt:
    return set_voided(receipt_id, True)


def reprint_receipt(receipt_id: int) -> Receipt:
    """Queue the persisted receipt again; totals are not recomputed."""

    def _op():
        receipt = get_receipt(receipt_id)
        receipt.reprint_count = (receipt.reprint_count or 0) + 1
        queue_receipt(receipt, reprint=True)
        db.session.commit()
        return receipt

    return run_with_retry(_op)


def delete_receipt(receipt_id: int) -> None:
    def _op():
        receipt = get_receipt(receipt_id)
        ref_no = receipt.ref_no
        db.session.delete(receipt)
        db.session.commit()
        return ref_no

    ref_no = run_with_retry(_op)
    current_app.logger.info("Deleted receipt %s (%s)", receipt_id, ref_no)


def list_receipts(
    *,
    store: Any = None,
    ref_no: str | None = None,
    start: Any = None,
    end: Any = None,
    include_voided: bool = True,
) -> Iterable[Receipt]:
    query = db.session.query(Receipt)
    if store not in (None, ""):
        query = query.filter(Receipt.store == validate_store(store))
    if ref_no:
        query = query.filter(Receipt.ref_no.contains(ref_no.strip(), autoescape=True))
    if not include_voided:
        query = query.filter(Receipt.voided.is_(False))
    start_dt, end_dt = day_bounds(parse_report_date(start, "start"), parse_report_date(end, "end"))
    if start_dt is not None:
        query = query.filter(Receipt.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(Receipt.created_at < end_dt)
    return query.order_by(Receipt.created_at.desc(), Receipt.id.desc()).all()
