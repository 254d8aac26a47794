# Overview: Receipt draft value object shared by the desktop and mobile editors.

"""
A ReceiptDraft is the cart being edited at the till: store, cashier, line
items and payment rows. It is immutable; every edit returns a new draft, so
a failed print leaves the caller's draft exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

from ..errors import ValidationError
from .pricing import MAX_MONEY, MAX_QTY, MONEY_QUANT, ONE_HUNDRED, LineItem, format_money, to_money
from .reconcile import PaymentEntry, Reconciliation, reconcile, require_settled

STORES = {
    1: {"shop": "Slady Fashion Pte. Ltd.", "address": "Raffles City (#03-29B)"},
    2: {"shop": "SL Studio Pte. Ltd.", "address": "Raffles Place (#04-24/25)"},
}


def validate_store(store: Any) -> int:
    if store is None or (isinstance(store, str) and not store.strip()):
        raise ValidationError("store is required", field="store")
    try:
        store_id = int(store)
    except (TypeError, ValueError):
        raise ValidationError("store must be 1 or 2", field="store")
    if store_id not in STORES:
        raise ValidationError("store must be 1 or 2", field="store")
    return store_id


def _check_amount(value: Decimal, label: str, field_name: str) -> None:
    if abs(value) > MAX_MONEY:
        raise ValidationError(f"{label} must not exceed {format_money(MAX_MONEY)}", field=field_name)
    if value != value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP):
        raise ValidationError(f"{label} must have at most 2 decimal places", field=field_name)


def validate_line(line: LineItem, index: int) -> None:
    prefix = f"Line {index + 1}"
    if not line.code:
        raise ValidationError(f"{prefix}: code is required", field=f"items[{index}].code")
    if line.qty <= 0 or line.qty > MAX_QTY:
        raise ValidationError(
            f"{prefix}: qty must be a whole number from 1 to {MAX_QTY}", field=f"items[{index}].qty"
        )
    _check_amount(line.unit_price, f"{prefix}: unit_price", f"items[{index}].unit_price")
    if line.discount_percent < 0 or line.discount_percent > ONE_HUNDRED:
        raise ValidationError(
            f"{prefix}: discount_percent must be between 0 and 100",
            field=f"items[{index}].discount_percent",
        )
    _check_amount(line.discount_percent, f"{prefix}: discount_percent", f"items[{index}].discount_percent")
    if line.discount_amount < 0:
        raise ValidationError(
            f"{prefix}: discount_amount must be >= 0", field=f"items[{index}].discount_amount"
        )
    _check_amount(line.discount_amount, f"{prefix}: discount_amount", f"items[{index}].discount_amount")
    _check_amount(line.final_price, f"{prefix}: final price", f"items[{index}].final_price")


def validate_payment(payment: PaymentEntry, index: int) -> None:
    if not payment.method:
        raise ValidationError(
            f"Payment {index + 1}: payment method is required", field=f"payments[{index}].method"
        )
    if payment.amount < 0:
        raise ValidationError(
            f"Payment {index + 1}: amount must be >= 0", field=f"payments[{index}].amount"
        )
    _check_amount(payment.amount, f"Payment {index + 1}: amount", f"payments[{index}].amount")


def _rows(data: Mapping[str, Any], field_name: str, *keys: str) -> list[Mapping[str, Any]]:
    """The list of objects under the first present key; anything else is a ValidationError."""
    rows = next((data[key] for key in keys if data.get(key) is not None), [])
    if not isinstance(rows, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list", field=field_name)
    for i, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise ValidationError(f"{field_name}[{i}] must be an object", field=f"{field_name}[{i}]")
    return list(rows)


@dataclass(frozen=True)
class ReceiptDraft:
    store: int = 1
    cashier: str = ""
    lines: tuple[LineItem, ...] = field(default_factory=tuple)
    payments: tuple[PaymentEntry, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReceiptDraft":
        """
        Build a draft from a request body. Values are coerced leniently, but
        items and payments must be lists of objects. A missing store stays
        None and is rejected by validate().
        """
        items = _rows(data, "items", "items", "lines")
        payments = _rows(data, "payments", "payments", "payment_list")
        return cls(
            store=data.get("store"),
            cashier=str(data.get("cashier") or "").strip(),
            lines=tuple(LineItem.from_dict(item) for item in items),
            payments=tuple(PaymentEntry.from_dict(p) for p in payments),
        )

    # --- line editing -----------------------------------------------------

    def add_line(self, line: LineItem) -> "ReceiptDraft":
        return replace(self, lines=self.lines + (line,))

    def replace_line(self, index: int, line: LineItem) -> "ReceiptDraft":
        lines = list(self.lines)
        lines[index] = line
        return replace(self, lines=tuple(lines))

    def remove_line(self, index: int) -> "ReceiptDraft":
        lines = list(self.lines)
        del lines[index]
        return replace(self, lines=tuple(lines))

    # --- payment editing --------------------------------------------------

    def add_payment(self, method: str = "", amount: Any = None) -> "ReceiptDraft":
        """
        Append a payment row. Without an explicit amount the row is
        pre-filled with what is still owed (total - paid) right now.
        """
        if not self.lines:
            raise ValidationError("Please add an item before adding a payment", field="items")
        if amount is None:
            value = self.reconcile().remaining
        else:
            value = to_money(amount)
        return replace(self, payments=self.payments + (PaymentEntry(method=method.strip(), amount=value),))

    def replace_payment(self, index: int, payment: PaymentEntry) -> "ReceiptDraft":
        payments = list(self.payments)
        payments[index] = payment
        return replace(self, payments=tuple(payments))

    def remove_payment(self, index: int) -> "ReceiptDraft":
        payments = list(self.payments)
        del payments[index]
        return replace(self, payments=tuple(payments))

    def cleared(self) -> "ReceiptDraft":
        """Empty cart for the same store and cashier (the editor's reset)."""
        return replace(self, lines=(), payments=())

    # --- checks -----------------------------------------------------------

    @property
    def total(self) -> Decimal:
        return self.reconcile().total

    def reconcile(self) -> Reconciliation:
        return reconcile(self.lines, self.payments)

    def validate(self) -> Reconciliation:
        """
        Field checks first (ValidationError), then the exact payment check
        (PaymentMismatchError). Returns the settled reconciliation.
        """
        validate_store(self.store)
        if not self.cashier:
            raise ValidationError("cashier is required", field="cashier")
        if not self.lines:
            raise ValidationError("At least one item is required", field="items")
        for i, line in enumerate(self.lines):
            validate_line(line, i)
        for i, payment in enumerate(self.payments):
            validate_payment(payment, i)
        _check_amount(self.total, "Receipt total", "items")
        return require_settled(self.lines, self.payments)

    def to_payload(self) -> dict:
        """Body for the print endpoint; final prices are included for the server to check."""
        result = self.reconcile()
        return {
            "store": self.store,
            "cashier": self.cashier,
            "items": [line.to_dict() for line in self.lines],
            "payments": [p.to_dict() for p in self.payments],
            "total_price": format_money(result.total),
        }
