from __future__ import annotations

from ..extensions import db
from ..engine.pricing import format_money, from_cents
from ..time_utils import to_utc_z

CASH_IN = 1
CASH_OUT = 2
CASH_ENTRY_TYPES = {CASH_IN: "IN", CASH_OUT: "OUT"}

OPENING_BALANCE = 1
CLOSING_BALANCE = 2
BALANCE_TYPES = {OPENING_BALANCE: "OPENING", CLOSING_BALANCE: "CLOSING"}


class CashEntry(db.Model):
    """
    Manual cash movement in or out of a store's drawer.

    amount_cents is always positive; the type gives the sign.
    Append-only: entries are created and deleted, never edited.
    """
    __tablename__ = "cash_entries"
    __table_args__ = (
        db.CheckConstraint("amount_cents > 0", name="ck_cash_entries_amount_positive"),
        db.Index("ix_cash_entries_store_created", "store", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False)
    type = db.Column(db.Integer, nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    remark = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    @property
    def signed_amount_cents(self) -> int:
        return self.amount_cents if self.type == CASH_IN else -self.amount_cents

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store,
            "type": self.type,
            "type_label": CASH_ENTRY_TYPES.get(self.type),
            "amount": format_money(from_cents(self.amount_cents)),
            "signed_amount": format_money(from_cents(self.signed_amount_cents)),
            "remark": self.remark,
            "created_at": to_utc_z(self.created_at),
        }


class CashDrawerBalance(db.Model):
    """Opening or closing drawer count for one store on one business date."""
    __tablename__ = "cash_drawer_balances"
    __table_args__ = (
        db.CheckConstraint("amount_cents >= 0", name="ck_cash_drawer_balances_amount_non_negative"),
        db.Index("ix_cash_drawer_balances_store_date", "store", "business_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False)
    type = db.Column(db.Integer, nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    business_date = db.Column(db.Date, nullable=False)
    remark = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store,
            "type": self.type,
            "type_label": BALANCE_TYPES.get(self.type),
            "amount": format_money(from_cents(self.amount_cents)),
            "date": self.business_date.isoformat(),
            "remark": self.remark,
            "created_at": to_utc_z(self.created_at),
        }


class DrawerOpenEvent(db.Model):
    """Audit row for every drawer kick that was not part of a sale."""
    __tablename__ = "drawer_open_events"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    store = db.Column(db.Integer, nullable=False, index=True)
    reason = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "store": self.store,
            "reason": self.reason,
            "occurred_at": to_utc_z(self.occurred_at),
        }
