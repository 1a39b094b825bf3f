from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import StockReason, enum_column_type


class Item(db.Model):
    """
    A stocked material (props, fabric, lighting gels, ...).

    quantity is the current on-hand stock and is only ever changed through
    the stock ledger service, which writes a StockMovement for each change.
    """
    __tablename__ = "items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_items_quantity_nonnegative"),
        db.Index("ix_items_category_name", "category", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(120), nullable=True)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    min_threshold = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= (self.min_threshold or 0)

    def __repr__(self) -> str:
        return f"<Item id={self.id} name={self.name!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "quantity": self.quantity,
            "min_threshold": self.min_threshold,
            "unit": self.unit,
            "is_low_stock": self.is_low_stock,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }


class StockMovement(db.Model):
    """Append-only record of every change to an item's quantity."""
    __tablename__ = "stock_movements"
    __table_args__ = (
        db.Index("ix_stock_movements_item_occurred", "item_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False, index=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=True, index=True)

    reason = db.Column(enum_column_type(StockReason, "stock_reason"), nullable=False)
    quantity_delta = db.Column(db.Integer, nullable=False)
    quantity_after = db.Column(db.Integer, nullable=False)

    actor_employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    note = db.Column(db.String(255), nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    item = db.relationship("Item", backref=db.backref("movements", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "order_id": self.order_id,
            "reason": self.reason.value,
            "quantity_delta": self.quantity_delta,
            "quantity_after": self.quantity_after,
            "actor_employee_id": self.actor_employee_id,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }
