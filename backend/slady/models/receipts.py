from __future__ import annotations

from ..extensions import db
from ..engine.pricing import bps_to_percent, format_money, from_cents
from ..time_utils import to_utc_z


class Receipt(db.Model):
    """
    Point-of-sale receipt.

    IMMUTABLE once printed: lines, payments and totals are never re-priced.
    The only mutations are:
    - voided: one-way False -> True; the row stays for audit but drops out
      of every sales rollup
    - reprint_count: incremented each time the receipt is re-emitted
    Hard delete removes the receipt and its children entirely.
    """
    __tablename__ = "receipts"
    __table_args__ = (
        db.UniqueConstraint("store", "ref_no", name="uq_receipts_store_ref_no"),
        db.Index("ix_receipts_store_voided_created", "store", "voided", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False, index=True)
    cashier = db.Column(db.String(64), nullable=False)

    # Human-readable reference (e.g., "S1-000042")
    ref_no = db.Column(db.String(32), nullable=False)

    total_cents = db.Column(db.Integer, nullable=False)
    gst_cents = db.Column(db.Integer, nullable=False, default=0)

    voided = db.Column(db.Boolean, nullable=False, default=False)
    voided_at = db.Column(db.DateTime(timezone=True), nullable=True)
    reprint_count = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    lines = db.relationship(
        "ReceiptLine",
        backref="receipt",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ReceiptLine.position",
    )
    payments = db.relationship(
        "ReceiptPayment",
        backref="receipt",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ReceiptPayment.position",
    )

    def __repr__(self) -> str:
        return f"<Receipt id={self.id} ref_no={self.ref_no!r} store={self.store} voided={self.voided}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store,
            "cashier": self.cashier,
            "ref_no": self.ref_no,
            "items": [line.to_dict() for line in self.lines],
            "payments": [payment.to_dict() for payment in self.payments],
            "total_price": format_money(from_cents(self.total_cents)),
            "gst": format_money(from_cents(self.gst_cents)),
            "voided": self.voided,
            "voided_at": to_utc_z(self.voided_at) if self.voided_at else None,
            "reprint_count": self.reprint_count,
            "created_at": to_utc_z(self.created_at),
        }


class ReceiptLine(db.Model):
    __tablename__ = "receipt_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    code = db.Column(db.String(64), nullable=False)
    qty = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    discount_percent_bps = db.Column(db.Integer, nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)

    # Computed once at print time; may be negative (credit lines)
    final_price_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "qty": self.qty,
            "unit_price": format_money(from_cents(self.unit_price_cents)),
            "discount_percent": str(bps_to_percent(self.discount_percent_bps)),
            "discount_amount": format_money(from_cents(self.discount_cents)),
            "final_price": format_money(from_cents(self.final_price_cents)),
        }


class ReceiptPayment(db.Model):
    __tablename__ = "receipt_payments"
    __table_args__ = (
        db.Index("ix_receipt_payments_method", "method"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    receipt_id = db.Column(db.Integer, db.ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    # Free text: the known tender list plus any label the cashier adds
    method = db.Column(db.String(64), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "amount": format_money(from_cents(self.amount_cents)),
        }


class ReferenceSequence(db.Model):
    """Per-store counter for receipt reference numbers."""
    __tablename__ = "reference_sequences"
    __table_args__ = (
        db.UniqueConstraint("store", "document_type", name="uq_reference_sequences_store_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False)
    document_type = db.Column(db.String(32), nullable=False)
    next_number = db.Column(db.Integer, nullable=False, default=1)
