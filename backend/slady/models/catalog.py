from __future__ import annotations

from enum import Enum

from ..extensions import db
from ..engine.pricing import format_money, from_cents
from ..time_utils import to_utc_z


class Warehouse(str, Enum):
    """Fixed stock locations: two shops and the live-stream pool."""

    SLADY = "SLADY"
    SL = "SL"
    LIVE = "LIVE"

    @property
    def label(self) -> str:
        return {
            Warehouse.SLADY: "Slady Store 1",
            Warehouse.SL: "SL Store 2",
            Warehouse.LIVE: "Live Stream",
        }[self]


class Design(db.Model):
    """
    Catalog product ("style").

    Owned by the catalog screens; the transaction engine only reads it,
    except for the hotness counter which receipts bump.
    stock is never stored here: it is the sum over the design's Items.
    """
    __tablename__ = "designs"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    # Human key printed on labels and typed/scanned at the till
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)

    type_tags = db.Column(db.JSON, nullable=False, default=list)
    purchase_price_cents = db.Column(db.Integer, nullable=False, default=0)
    sale_price_cents = db.Column(db.Integer, nullable=False, default=0)

    # e.g. "Cotton 80%, Linen 20%" plus the structured list it came from
    fabric = db.Column(db.String(255), nullable=True)
    fabric_list = db.Column(db.JSON, nullable=False, default=list)

    colors = db.Column(db.JSON, nullable=False, default=list)
    sizes = db.Column(db.JSON, nullable=False, default=list)

    hot = db.Column(db.Integer, nullable=False, default=0)
    remark = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    items = db.relationship("Item", backref="design", lazy=True, cascade="all, delete-orphan")

    @property
    def stock(self) -> int:
        return sum(item.stock for item in self.items)

    def __repr__(self) -> str:
        return f"<Design id={self.id} code={self.code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "type_tags": list(self.type_tags or []),
            "purchase_price": format_money(from_cents(self.purchase_price_cents)),
            "sale_price": format_money(from_cents(self.sale_price_cents)),
            "fabric": self.fabric,
            "fabric_list": list(self.fabric_list or []),
            "colors": list(self.colors or []),
            "sizes": list(self.sizes or []),
            "stock": self.stock,
            "hot": self.hot,
            "remark": self.remark,
            "created_at": to_utc_z(self.created_at),
        }


class Item(db.Model):
    """
    Stock-keeping unit: (design, warehouse, color, size).

    stock is only changed through stock_service, which validates every
    change against the row it has just locked and records a StockMovement.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.UniqueConstraint("design_id", "warehouse", "color", "size", name="uq_items_design_wh_color_size"),
        db.CheckConstraint("stock >= 0", name="ck_items_stock_non_negative"),
        db.Index("ix_items_design_warehouse", "design_id", "warehouse"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    design_id = db.Column(db.Integer, db.ForeignKey("designs.id"), nullable=False, index=True)
    warehouse = db.Column(db.String(16), nullable=False)
    color = db.Column(db.String(64), nullable=False)
    size = db.Column(db.String(32), nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)

    # Optimistic-lock counter; a concurrent write raises StaleDataError and is retried
    version_id = db.Column(db.Integer, nullable=False, default=1)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Item id={self.id} design_id={self.design_id} {self.warehouse}/{self.color}/{self.size} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "design_id": self.design_id,
            "design_code": self.design.code if self.design else None,
            "warehouse": self.warehouse,
            "color": self.color,
            "size": self.size,
            "stock": self.stock,
            "version_id": self.version_id,
            "created_at": to_utc_z(self.created_at),
        }


class StockMovement(db.Model):
    """
    Append-only record of every stock change.

    KINDS:
    - INITIAL: stock set when the item was created
    - ORDER: decrement when an adjustment/customer order was created
    - ADJUST: operator delta (+/-)
    - CORRECTION: operator absolute set (delta = new - old)
    """
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_item_occurred", "item_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id", ondelete="CASCADE"), nullable=False, index=True)
    kind = db.Column(db.String(16), nullable=False)
    delta = db.Column(db.Integer, nullable=False)
    stock_after = db.Column(db.Integer, nullable=False)

    # Plain integer, not a foreign key: orders can be hard-deleted while movements stay
    order_id = db.Column(db.Integer, nullable=True, index=True)
    note = db.Column(db.String(255), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    item = db.relationship(
        "Item", backref=db.backref("movements", lazy=True, cascade="all, delete-orphan")
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "kind": self.kind,
            "delta": self.delta,
            "stock_after": self.stock_after,
            "order_id": self.order_id,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }
