# Overview: Payment reconciliation for receipt drafts; pure functions.

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Mapping

from ..errors import PaymentMismatchError
from .pricing import LineItem, ZERO, format_money, round2, to_money

SETTLED = "settled"
UNDERPAID = "underpaid"
OVERPAID = "overpaid"

PAYMENT_METHODS = (
    "Bank Transfer/Pay Now",
    "Wechat Pay",
    "Alipay",
    "Cash",
    "Nets",
    "VISA",
    "Master",
    "Union",
    "Slady Voucher",
    "AMEX",
    "Mall Voucher",
)
CASH_METHOD = "Cash"


@dataclass(frozen=True)
class PaymentEntry:
    method: str
    amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PaymentEntry":
        method = data.get("method", data.get("payment"))
        return cls(
            method=str(method).strip() if method is not None else "",
            amount=to_money(data.get("amount")),
        )

    def to_dict(self) -> dict:
        return {"method": self.method, "amount": format_money(self.amount)}


@dataclass(frozen=True)
class Reconciliation:
    total: Decimal
    paid: Decimal
    remaining: Decimal

    @property
    def status(self) -> str:
        # Exact comparison at cent precision; there is no tolerance band.
        if self.remaining == 0:
            return SETTLED
        return UNDERPAID if self.remaining > 0 else OVERPAID

    @property
    def is_settled(self) -> bool:
        return self.status == SETTLED

    def to_dict(self) -> dict:
        return {
            "total": format_money(self.total),
            "paid": format_money(self.paid),
            "remaining": format_money(self.remaining),
            "status": self.status,
        }


def total_of(lines: Iterable[LineItem]) -> Decimal:
    return round2(sum((line.final_price for line in lines), ZERO))


def paid_of(payments: Iterable[PaymentEntry]) -> Decimal:
    return round2(sum((p.amount for p in payments), ZERO))


def reconcile(lines: Iterable[LineItem], payments: Iterable[PaymentEntry]) -> Reconciliation:
    total = total_of(lines)
    paid = paid_of(payments)
    return Reconciliation(total=total, paid=paid, remaining=round2(total - paid))


def suggest_payment_amount(lines: Iterable[LineItem], payments: Iterable[PaymentEntry]) -> Decimal:
    """Amount pre-filled into a newly added payment row."""
    return reconcile(lines, payments).remaining


def require_settled(lines: Iterable[LineItem], payments: Iterable[PaymentEntry]) -> Reconciliation:
    """Reconcile and raise PaymentMismatchError unless remaining is exactly zero."""
    result = reconcile(lines, payments)
    if not result.is_settled:
        raise PaymentMismatchError(
            f"Payment amount {format_money(result.paid)} does not equal "
            f"total price {format_money(result.total)} ({result.status})",
            details={
                "total": format_money(result.total),
                "paid": format_money(result.paid),
                "remaining": format_money(result.remaining),
                "kind": result.status,
            },
        )
    return result
