from __future__ import annotations

from ..extensions import db
from ..engine.order_states import OrderStatus
from ..engine.pricing import format_money, from_cents
from ..time_utils import to_utc_z

ORDER_KIND_STORE = "STORE"
ORDER_KIND_CUSTOMER = "CUSTOMER"
ORDER_KINDS = (ORDER_KIND_STORE, ORDER_KIND_CUSTOMER)


class AdjustmentOrder(db.Model):
    """
    Stock movement tied to one Item: a store-internal adjustment or a
    customer order.

    The item's stock is decremented by `quantity` when the order is created.
    Status changes afterwards are record-only (see engine.order_states).
    Concurrent edits are last-write-wins, so there is no version counter.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        db.Index("ix_orders_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)

    kind = db.Column(db.String(16), nullable=False, default=ORDER_KIND_STORE)
    quantity = db.Column(db.Integer, nullable=False)
    remark = db.Column(db.String(255), nullable=True)

    status = db.Column(db.Integer, nullable=False, default=int(OrderStatus.PENDING), index=True)

    # Shipped date; only set while status == SHIPPED
    pending_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    item = db.relationship("Item", backref=db.backref("orders", lazy=True))

    @property
    def order_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    def __repr__(self) -> str:
        return f"<AdjustmentOrder id={self.id} item_id={self.item_id} qty={self.quantity} status={self.status}>"

    def to_dict(self) -> dict:
        item = self.item
        design = item.design if item else None
        return {
            "id": self.id,
            "item_id": self.item_id,
            "kind": self.kind,
            "quantity": self.quantity,
            "remark": self.remark,
            "status": self.status,
            "status_label": self.order_status.label,
            "pending_date": self.pending_date.isoformat() if self.pending_date else None,
            "design_id": design.id if design else None,
            "design_code": design.code if design else None,
            "sale_price": format_money(from_cents(design.sale_price_cents)) if design else None,
            "warehouse": item.warehouse if item else None,
            "color": item.color if item else None,
            "size": item.size if item else None,
            "created_at": to_utc_z(self.created_at),
        }
