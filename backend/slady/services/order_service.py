# Overview: Service-layer operations for adjustment and customer orders; encapsulates business logic and database work.

"""
Order Service

Lifecycle:
- create: decrements the item's stock by the order quantity in the same
  transaction (InsufficientStockError blocks the order)
- transition/reset: record-only; the state table lives in engine.order_states
- edit: record-only (quantity, remark, color/size re-point)
- delete: permanent; stock is NOT reversed

Restocking after outOfStock/damaged/delete is an explicit operator action
through stock_service.apply_delta.
"""

from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Any, Iterable

from flask import current_app
from openpyxl import Workbook
from sqlalchemy import func

from ..engine.order_states import OrderStatus, plan_reset, plan_transition
from ..engine.pricing import from_cents
from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import ORDER_KIND_STORE, ORDER_KINDS, AdjustmentOrder, Design, Item
from ..time_utils import day_bounds, parse_business_date
from .concurrency import lock_for_update, run_with_retry
from .stock_service import MOVEMENT_ORDER, apply_delta_locked, parse_warehouse

DEFAULT_STORE_REMARK = "Store adjustment"

EXPORT_HEADERS = (
    "Order ID", "Created", "Design", "Warehouse", "Color", "Size",
    "Quantity", "Sale Price", "Status", "Shipped Date", "Kind", "Remark",
)


def _positive_quantity(value: Any) -> int:
    if isinstance(value, bool):
        raise ValidationError("quantity must be a positive integer", field="quantity")
    try:
        quantity = int(str(value).strip()) if isinstance(value, str) else value
    except ValueError:
        raise ValidationError("quantity must be a positive integer", field="quantity")
    if not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer", field="quantity")
    return quantity


def get_order(order_id: int) -> AdjustmentOrder:
    order = db.session.get(AdjustmentOrder, order_id)
    if order is None:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def create_order(
    item_id: int,
    quantity: Any,
    *,
    remark: str | None = None,
    kind: str = ORDER_KIND_STORE,
) -> AdjustmentOrder:
    """Create a pending order and take its quantity out of the item's stock."""
    quantity = _positive_quantity(quantity)
    kind = (kind or ORDER_KIND_STORE).strip().upper()
    if kind not in ORDER_KINDS:
        raise ValidationError(f"kind must be one of {list(ORDER_KINDS)}", field="kind")
    remark = (remark or "").strip() or (DEFAULT_STORE_REMARK if kind == ORDER_KIND_STORE else None)

    def _op():
        item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")

        order = AdjustmentOrder(
            item_id=item.id,
            kind=kind,
            quantity=quantity,
            remark=remark,
            status=int(OrderStatus.PENDING),
        )
        db.session.add(order)
        db.session.flush()

        apply_delta_locked(item, -quantity, kind=MOVEMENT_ORDER, order_id=order.id)
        db.session.commit()
        return order

    return run_with_retry(_op)


def transition_order(order_id: int, status: Any, shipped_date: Any = None) -> AdjustmentOrder:
    """
    Move an order to a new status. Re-sending the status the order already
    has is accepted and rewrites the same fields.
    """

    def _op():
        order = get_order(order_id)
        plan = plan_transition(order.status, status, shipped_date)
        order.status = int(plan["status"])
        order.pending_date = plan["pending_date"]
        db.session.commit()
        return order

    return run_with_retry(_op)


def reset_order(order_id: int) -> AdjustmentOrder:
    def _op():
        order = get_order(order_id)
        plan = plan_reset(order.status)
        order.status = int(plan["status"])
        order.pending_date = plan["pending_date"]
        db.session.commit()
        return order

    return run_with_retry(_op)


def edit_order(order_id: int, data: dict) -> AdjustmentOrder:
    """
    Edit the order record. Changing color or size moves the order onto the
    sibling item (same design and warehouse); stock is not touched either way.
    """
    if "quantity" in data:
        quantity = _positive_quantity(data["quantity"])

    def _op():
        order = get_order(order_id)

        if "quantity" in data:
            order.quantity = quantity
        if "remark" in data:
            order.remark = (data.get("remark") or "").strip() or None

        if "color" in data or "size" in data:
            item = order.item
            color = str(data.get("color") or item.color).strip()
            size = str(data.get("size") or item.size).strip()
            if (color, size) != (item.color, item.size):
                sibling = (
                    db.session.query(Item)
                    .filter_by(design_id=item.design_id, warehouse=item.warehouse, color=color, size=size)
                    .first()
                )
                if sibling is None:
                    raise ValidationError(
                        f"No {item.warehouse} item for color {color} / size {size}",
                        field="color" if color != item.color else "size",
                    )
                order.item = sibling

        db.session.commit()
        return order

    return run_with_retry(_op)


def delete_orders(order_ids: Iterable[int]) -> int:
    ids = [int(i) for i in order_ids]
    if not ids:
        raise ValidationError("ids must be a non-empty list", field="ids")

    def _op():
        count = (
            db.session.query(AdjustmentOrder)
            .filter(AdjustmentOrder.id.in_(ids))
            .delete(synchronize_session=False)
        )
        db.session.commit()
        return count

    count = run_with_retry(_op)
    current_app.logger.info("Deleted %s orders (%s)", count, ids)
    return count


def _parse_statuses(value: Any) -> list[int]:
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        value = [part.strip() for part in value.split(",") if part.strip()]
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [int(OrderStatus.parse(v)) for v in value]


def _parse_range_date(value: Any, field: str) -> date | None:
    try:
        return parse_business_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be YYYY-MM-DD", field=field)


def order_query(filters: dict | None = None):
    """
    Filters: warehouse, status (single or list), design_code (substring),
    remark (substring), start/end (inclusive creation dates).
    """
    filters = filters or {}
    query = db.session.query(AdjustmentOrder).join(Item, AdjustmentOrder.item_id == Item.id).join(Design)

    if filters.get("warehouse"):
        query = query.filter(Item.warehouse == parse_warehouse(filters["warehouse"]))

    statuses = _parse_statuses(filters.get("status", filters.get("statuses")))
    if statuses:
        query = query.filter(AdjustmentOrder.status.in_(statuses))

    code = (filters.get("design_code") or "").strip()
    if code:
        query = query.filter(func.lower(Design.code).contains(code.lower(), autoescape=True))

    remark = (filters.get("remark") or "").strip()
    if remark:
        query = query.filter(AdjustmentOrder.remark.contains(remark, autoescape=True))

    start_dt, end_dt = day_bounds(
        _parse_range_date(filters.get("start"), "start"),
        _parse_range_date(filters.get("end"), "end"),
    )
    if start_dt is not None:
        query = query.filter(AdjustmentOrder.created_at >= start_dt)
    if end_dt is not None:
        query = query.filter(AdjustmentOrder.created_at < end_dt)

    return query.order_by(AdjustmentOrder.created_at.desc(), AdjustmentOrder.id.desc())


def list_orders(filters: dict | None = None) -> list[AdjustmentOrder]:
    return order_query(filters).all()


def export_orders(filters: dict | None = None) -> bytes:
    """Render the filtered orders to an .xlsx workbook and return its bytes."""
    max_rows = current_app.config.get("ORDER_EXPORT_MAX_ROWS", 5000)
    orders = order_query(filters).limit(max_rows + 1).all()
    if len(orders) > max_rows:
        raise ValidationError(
            f"Too many orders to export (limit {max_rows}); narrow the filter",
            details={"limit": max_rows},
        )

    wb = Workbook()
    ws = wb.active
    ws.title = "Orders"
    ws.append(list(EXPORT_HEADERS))
    for order in orders:
        item = order.item
        ws.append([
            order.id,
            order.created_at.strftime("%Y-%m-%d %H:%M") if order.created_at else "",
            item.design.code,
            item.warehouse,
            item.color,
            item.size,
            order.quantity,
            float(from_cents(item.design.sale_price_cents)),
            order.order_status.label,
            order.pending_date.isoformat() if order.pending_date else "",
            order.kind,
            order.remark or "",
        ])

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
