# Overview: Service-layer operations for item stock; encapsulates business logic and database work.

"""
Stock Ledger

Invariants (authoritative):
- Item.stock is >= 0 at rest. Every change is validated against the row
  as it is in the database at that moment (locked where the DB supports
  it, version-checked everywhere) before it is written.
- Relative deltas are the normal path (orders, operator +/- adjustments).
  Absolute sets are reserved for manual corrections by an operator.
- Each mutation is one transaction: validate, write Item, append a
  StockMovement, commit. A failed validation changes nothing.
- No mutation here is ever triggered implicitly by a status change,
  void or delete elsewhere; compensations are explicit operator actions.
"""

from __future__ import annotations

from itertools import product
from typing import Any, Iterable

from flask import current_app

from ..errors import InsufficientStockError, InvalidStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Design, Item, StockMovement, Warehouse
from .concurrency import lock_for_update, run_with_retry

MOVEMENT_INITIAL = "INITIAL"
MOVEMENT_ORDER = "ORDER"
MOVEMENT_ADJUST = "ADJUST"
MOVEMENT_CORRECTION = "CORRECTION"


def _as_int(value: Any, field: str, error_cls=ValidationError) -> int:
    if isinstance(value, bool):
        raise error_cls(f"{field} must be an integer", details={"field": field})
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise error_cls(f"{field} must be an integer", details={"field": field})


def parse_warehouse(value: Any) -> str:
    raw = str(value or "").strip().upper()
    try:
        return Warehouse(raw).value
    except ValueError:
        raise ValidationError(
            f"Unknown warehouse: {value}. Must be one of {[w.value for w in Warehouse]}",
            field="warehouse",
        )


def _locked_item(item_id: int) -> Item:
    item = lock_for_update(db.session.query(Item).filter_by(id=item_id)).first()
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return item


def get_item(item_id: int) -> Item:
    item = db.session.get(Item, item_id)
    if item is None:
        raise NotFoundError(f"Item {item_id} not found")
    return item


def list_items(design_id: int | None = None, warehouse: str | None = None) -> list[Item]:
    query = db.session.query(Item)
    if design_id is not None:
        query = query.filter(Item.design_id == design_id)
    if warehouse:
        query = query.filter(Item.warehouse == parse_warehouse(warehouse))
    return query.order_by(Item.warehouse, Item.color, Item.size, Item.id).all()


def list_movements(item_id: int, limit: int = 100) -> list[StockMovement]:
    get_item(item_id)
    return (
        db.session.query(StockMovement)
        .filter_by(item_id=item_id)
        .order_by(StockMovement.id.desc())
        .limit(limit)
        .all()
    )


def apply_delta_locked(
    item: Item,
    delta: int,
    *,
    kind: str = MOVEMENT_ADJUST,
    order_id: int | None = None,
    note: str | None = None,
) -> int:
    """
    Apply a delta to an item the caller has already loaded under lock.
    Does not commit; used by order creation to share its transaction.
    """
    new_stock = item.stock + delta
    if delta < 0 and new_stock < 0:
        raise InsufficientStockError(
            f"Insufficient stock for item {item.id}: have {item.stock}, need {-delta}",
            details={"item_id": item.id, "stock": item.stock, "requested": -delta},
        )
    item.stock = new_stock
    db.session.add(
        StockMovement(
            item_id=item.id,
            kind=kind,
            delta=delta,
            stock_after=new_stock,
            order_id=order_id,
            note=note,
        )
    )
    return new_stock


def apply_delta(item_id: int, delta: Any, *, note: str | None = None) -> int:
    """Operator +/- adjustment. Returns the new stock."""
    delta = _as_int(delta, "delta")
    if delta == 0:
        raise ValidationError("delta must be non-zero", field="delta")

    def _op():
        item = _locked_item(item_id)
        new_stock = apply_delta_locked(item, delta, kind=MOVEMENT_ADJUST, note=note)
        db.session.commit()
        return new_stock

    return run_with_retry(_op)


def set_stock(item_id: int, new_value: Any, *, note: str | None = None) -> int:
    """
    Manual correction to an absolute count (after a physical count).
    Recorded as a CORRECTION movement with delta = new - old.
    """
    new_value = _as_int(new_value, "stock", InvalidStockError)
    if new_value < 0:
        raise InvalidStockError(
            f"Stock cannot be negative: {new_value}",
            details={"item_id": item_id, "stock": new_value},
        )

    def _op():
        item = _locked_item(item_id)
        old = item.stock
        item.stock = new_value
        db.session.add(
            StockMovement(
                item_id=item.id,
                kind=MOVEMENT_CORRECTION,
                delta=new_value - old,
                stock_after=new_value,
                note=note,
            )
        )
        db.session.commit()
        current_app.logger.info("Stock corrected for item %s: %s -> %s", item.id, old, new_value)
        return new_value

    return run_with_retry(_op)


def create_items(
    design_id: int,
    warehouses: Iterable[str],
    colors: Iterable[str],
    sizes: Iterable[str],
    initial_stock: Any = 0,
) -> list[Item]:
    """
    Stock a design into warehouses: one Item per warehouse x color x size.

    Colors and sizes must be offered by the design. Combinations that
    already exist are returned as they are (their stock is not touched).
    """
    initial_stock = _as_int(initial_stock, "stock", InvalidStockError)
    if initial_stock < 0:
        raise InvalidStockError("Initial stock cannot be negative", details={"stock": initial_stock})

    warehouse_list = [parse_warehouse(w) for w in warehouses]
    color_list = [str(c).strip() for c in colors if str(c).strip()]
    size_list = [str(s).strip() for s in sizes if str(s).strip()]
    if not warehouse_list:
        raise ValidationError("At least one warehouse is required", field="warehouses")
    if not color_list:
        raise ValidationError("At least one color is required", field="colors")
    if not size_list:
        raise ValidationError("At least one size is required", field="sizes")

    def _op():
        design = db.session.get(Design, design_id)
        if design is None:
            raise NotFoundError(f"Design {design_id} not found")

        bad_colors = [c for c in color_list if c not in (design.colors or [])]
        if bad_colors:
            raise ValidationError(f"Colors not offered by design: {', '.join(bad_colors)}", field="colors")
        bad_sizes = [s for s in size_list if s not in (design.sizes or [])]
        if bad_sizes:
            raise ValidationError(f"Sizes not offered by design: {', '.join(bad_sizes)}", field="sizes")

        existing = {
            (item.warehouse, item.color, item.size): item
            for item in db.session.query(Item).filter_by(design_id=design_id).all()
        }

        result: list[Item] = []
        created: list[Item] = []
        for key in product(dict.fromkeys(warehouse_list), dict.fromkeys(color_list), dict.fromkeys(size_list)):
            item = existing.get(key)
            if item is None:
                warehouse, color, size = key
                item = Item(design_id=design_id, warehouse=warehouse, color=color, size=size, stock=initial_stock)
                db.session.add(item)
                created.append(item)
                existing[key] = item
            result.append(item)

        db.session.flush()
        for item in created:
            if item.stock:
                db.session.add(
                    StockMovement(
                        item_id=item.id,
                        kind=MOVEMENT_INITIAL,
                        delta=item.stock,
                        stock_after=item.stock,
                    )
                )
        db.session.commit()
        return result

    return run_with_retry(_op)
