"""Pure transaction engine: no Flask, no database."""

from .pricing import LineItem, final_price, round2, to_money, package_line, alteration_line, credit_line
from .reconcile import PaymentEntry, Reconciliation, reconcile, require_settled, suggest_payment_amount
from .draft import ReceiptDraft, STORES
from .order_states import OrderStatus, plan_transition, plan_reset, can_transition

__all__ = [
    "LineItem", "final_price", "round2", "to_money", "package_line", "alteration_line", "credit_line",
    "PaymentEntry", "Reconciliation", "reconcile", "require_settled", "suggest_payment_amount",
    "ReceiptDraft", "STORES",
    "OrderStatus", "plan_transition", "plan_reset", "can_transition",
]
