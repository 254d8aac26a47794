# Overview: Service-layer operations for the design catalog; encapsulates business logic and database work.

"""
Catalog Service

The catalog screens own designs; the transaction engine reads them for
price lookup (barcode scan at the till) and bumps the hotness counter when
a design code appears on a printed receipt.
"""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..engine.pricing import to_cents, to_money
from ..models import AdjustmentOrder, Design, Item
from .concurrency import run_with_retry

MAX_PRICE_CENTS = 999_999_999

TYPE_TAGS = {
    "AL", "DR", "TB", "SK", "ST", "PT", "GO", "JK", "JS", "BT", "SH",
    "SE", "SI", "AC", "BG", "CDJ", "SO", "CL", "IN", "BP", "XL",
}


def _clean_list(value: Any, field: str) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [part for part in value.split(",")]
    if not isinstance(value, (list, tuple, set)):
        raise ValidationError(f"{field} must be a list", field=field)
    cleaned: list[str] = []
    for entry in value:
        text = str(entry).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def _price_cents(value: Any, field: str) -> int:
    cents = to_cents(to_money(value))
    if cents < 0:
        raise ValidationError(f"{field} must be >= 0", field=field)
    if cents > MAX_PRICE_CENTS:
        raise ValidationError(f"{field} is too large", field=field)
    return cents


def _fabric_text(fabric_list: list[dict]) -> str:
    parts = []
    for entry in fabric_list:
        name = str(entry.get("fabric", "")).strip()
        if not name:
            continue
        percent = entry.get("percent")
        parts.append(f"{name} {percent}%" if percent not in (None, "") else name)
    return ", ".join(parts)


def _apply_fields(design: Design, data: dict) -> None:
    if "code" in data:
        code = str(data.get("code") or "").strip()
        if not code:
            raise ValidationError("code cannot be blank", field="code")
        design.code = code
    if "type_tags" in data:
        tags = [tag.upper() for tag in _clean_list(data["type_tags"], "type_tags")]
        unknown = [tag for tag in tags if tag not in TYPE_TAGS]
        if unknown:
            raise ValidationError(f"Unknown type tags: {', '.join(unknown)}", field="type_tags")
        design.type_tags = tags
    if "purchase_price" in data:
        design.purchase_price_cents = _price_cents(data["purchase_price"], "purchase_price")
    if "sale_price" in data:
        design.sale_price_cents = _price_cents(data["sale_price"], "sale_price")
    if "fabric_list" in data:
        fabric_list = data["fabric_list"] or []
        if not isinstance(fabric_list, list) or not all(isinstance(f, dict) for f in fabric_list):
            raise ValidationError("fabric_list must be a list of {fabric, percent}", field="fabric_list")
        design.fabric_list = fabric_list
        design.fabric = data.get("fabric") or _fabric_text(fabric_list)
    elif "fabric" in data:
        design.fabric = data["fabric"]
    if "colors" in data:
        design.colors = _clean_list(data["colors"], "colors")
    if "sizes" in data:
        design.sizes = _clean_list(data["sizes"], "sizes")
    if "remark" in data:
        design.remark = data["remark"]


def _ensure_code_free(code: str, exclude_id: int | None = None) -> None:
    query = db.session.query(Design.id).filter(Design.code == code)
    if exclude_id is not None:
        query = query.filter(Design.id != exclude_id)
    if query.first():
        raise ConflictError(f"Design code {code} already exists", details={"code": code})


def create_design(data: dict) -> Design:
    if not str(data.get("code") or "").strip():
        raise ValidationError("code is required", field="code")

    def _op():
        design = Design(type_tags=[], fabric_list=[], colors=[], sizes=[])
        _apply_fields(design, data)
        _ensure_code_free(design.code)
        db.session.add(design)
        db.session.commit()
        return design

    return run_with_retry(_op)


def get_design(design_id: int) -> Design:
    design = db.session.get(Design, design_id)
    if design is None:
        raise NotFoundError(f"Design {design_id} not found")
    return design


def update_design(design_id: int, data: dict) -> Design:
    def _op():
        design = get_design(design_id)
        if "code" in data:
            _ensure_code_free(str(data["code"] or "").strip(), exclude_id=design.id)
        _apply_fields(design, data)
        db.session.commit()
        return design

    return run_with_retry(_op)


def delete_designs(design_ids: Iterable[int]) -> int:
    """
    Delete designs with their items and stock history.

    Refused while any of the design's items is referenced by an order,
    since orders are the record of stock already taken out.
    """
    ids = list(design_ids)

    def _op():
        referenced = (
            db.session.query(Item.design_id)
            .join(AdjustmentOrder, AdjustmentOrder.item_id == Item.id)
            .filter(Item.design_id.in_(ids))
            .distinct()
            .all()
        )
        if referenced:
            raise ConflictError(
                "Designs with orders cannot be deleted",
                details={"design_ids": sorted(row.design_id for row in referenced)},
            )
        designs = db.session.query(Design).filter(Design.id.in_(ids)).all()
        for design in designs:
            db.session.delete(design)
        db.session.commit()
        return len(designs)

    return run_with_retry(_op)


def find_design_by_code(code: str) -> Design:
    """Exact code lookup used by the scanner flow at the till."""
    code = (code or "").strip()
    design = db.session.query(Design).filter(func.lower(Design.code) == code.lower()).first()
    if design is None:
        raise NotFoundError(f"No design with code {code}", details={"code": code})
    return design


def bump_hotness(codes: Iterable[str]) -> None:
    """Count a sale for each design code; unknown codes (packages, credits) are ignored."""
    counts: dict[str, int] = {}
    for code in codes:
        key = (code or "").strip().lower()
        if key:
            counts[key] = counts.get(key, 0) + 1
    if not counts:
        return
    designs = db.session.query(Design).filter(func.lower(Design.code).in_(list(counts))).all()
    for design in designs:
        design.hot = (design.hot or 0) + counts[design.code.lower()]
