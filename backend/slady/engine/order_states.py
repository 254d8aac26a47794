# Overview: Order status enumeration and transition table; pure functions.

"""
Order lifecycle

    pending(0) --ship(date)--> shipped(1)
    pending|shipped ---------> completed(2) | out_of_stock(3) | damaged(4)
    any ----------reset------> pending

There is no terminal state: reset undoes a mis-click from anywhere.
Re-sending the transition to the status an order already has is accepted
and re-applies the same fields, so a retried request is harmless.

No transition touches stock. Stock was decremented when the order was
created; putting goods back after out_of_stock/damaged/delete is a separate
manual stock correction.
"""

from __future__ import annotations

from datetime import date
from enum import IntEnum
from typing import Any

from ..errors import InvalidTransitionError, ValidationError
from ..time_utils import parse_business_date


class OrderStatus(IntEnum):
    PENDING = 0
    SHIPPED = 1
    COMPLETED = 2
    OUT_OF_STOCK = 3
    DAMAGED = 4

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "OrderStatus":
        """Accept 2, "2", "completed" or "COMPLETED"."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            s = value.strip()
            if s.lstrip("-").isdigit():
                value = int(s)
            else:
                key = s.upper().replace("OUTOFSTOCK", "OUT_OF_STOCK")
                if key in cls.__members__:
                    return cls[key]
                raise ValidationError(f"Unknown order status: {value}", field="status")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"Unknown order status: {value}", field="status")
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(f"Unknown order status: {value}", field="status")


_LABELS = {
    OrderStatus.PENDING: "pending",
    OrderStatus.SHIPPED: "shipped",
    OrderStatus.COMPLETED: "completed",
    OrderStatus.OUT_OF_STOCK: "outOfStock",
    OrderStatus.DAMAGED: "damaged",
}

_OPEN = frozenset({OrderStatus.PENDING, OrderStatus.SHIPPED})

ALLOWED_SOURCES: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.SHIPPED: frozenset({OrderStatus.PENDING}),
    OrderStatus.COMPLETED: _OPEN,
    OrderStatus.OUT_OF_STOCK: _OPEN,
    OrderStatus.DAMAGED: _OPEN,
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    if target == OrderStatus.PENDING or target == current:
        return True
    return current in ALLOWED_SOURCES[target]


def plan_transition(current: Any, target: Any, shipped_date: Any = None) -> dict:
    """
    Validate a status change and return the fields to write:
    {"status": OrderStatus, "pending_date": date | None}.
    """
    current = OrderStatus.parse(current)
    target = OrderStatus.parse(target)

    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot move order from {current.label} to {target.label}",
            details={"from": current.label, "to": target.label},
        )

    pending_date: date | None = None
    if target == OrderStatus.SHIPPED:
        try:
            pending_date = parse_business_date(shipped_date)
        except ValueError:
            raise ValidationError("shipped_date must be YYYY-MM-DD", field="shipped_date")
        if pending_date is None:
            raise ValidationError("shipped_date is required to ship an order", field="shipped_date")

    return {"status": target, "pending_date": pending_date}


def plan_reset(current: Any) -> dict:
    return plan_transition(current, OrderStatus.PENDING)
