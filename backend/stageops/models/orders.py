from __future__ import annotations

from sqlalchemy.orm import validates

from ..extensions import db
from ..time_utils import to_utc_z
from .enums import OrderStatus, PaymentMethod, PaymentStatus, enum_column_type


class Order(db.Model):
    """
    Procurement order for a quantity of one item from one supplier.

    LIFECYCLE (fulfillment):
    Pending -> Approved -> Delivered -> Received -> Paid
    Pending -> Rejected (terminal)

    The embedded OrderPayment carries the payment dimension. status only
    becomes Paid in the same transaction that moves the payment to Paid.

    total_cost_cents is derived from quantity and unit_price_cents whenever
    either one is assigned; callers never set it.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        db.CheckConstraint("unit_price_cents > 0", name="ck_orders_unit_price_positive"),
        db.UniqueConstraint("reference", name="uq_orders_reference"),
        db.UniqueConstraint("tracking_number", name="uq_orders_tracking_number"),
        db.Index("ix_orders_supplier_status", "supplier_id", "status"),
        db.Index("ix_orders_item", "item_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    reference = db.Column(db.String(32), nullable=False)

    item_id = db.Column(db.Integer, db.ForeignKey("items.id"), nullable=False)
    item_name = db.Column(db.String(255), nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)
    supplier_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_cost_cents = db.Column(db.Integer, nullable=False)

    status = db.Column(
        enum_column_type(OrderStatus, "order_status"),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    notes = db.Column(db.Text, nullable=True)

    # Assigned exactly once, at MarkDelivered
    tracking_number = db.Column(db.String(32), nullable=True)

    # Lifecycle attribution
    created_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)
    approved_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    rejected_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)
    delivered_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    received_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)

    # Lifecycle timestamps
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejected_at = db.Column(db.DateTime(timezone=True), nullable=True)
    delivery_date = db.Column(db.DateTime(timezone=True), nullable=True)
    received_at = db.Column(db.DateTime(timezone=True), nullable=True)
    paid_at = db.Column(db.DateTime(timezone=True), nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    item = db.relationship("Item", backref=db.backref("orders", lazy=True))
    supplier = db.relationship("Employee", foreign_keys=[supplier_id])
    payment = db.relationship(
        "OrderPayment",
        uselist=False,
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version_id}

    @validates("quantity", "unit_price_cents")
    def _recompute_total(self, key, value):
        quantity = value if key == "quantity" else self.quantity
        unit_price_cents = value if key == "unit_price_cents" else self.unit_price_cents
        if quantity is not None and unit_price_cents is not None:
            self.total_cost_cents = quantity * unit_price_cents
        return value

    @property
    def is_open(self) -> bool:
        return self.status not in (OrderStatus.REJECTED, OrderStatus.PAID)

    def __repr__(self) -> str:
        return f"<Order id={self.id} ref={self.reference!r} status={self.status.value}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "reference": self.reference,
            "item": {"id": self.item_id, "name": self.item_name},
            "supplier": {"id": self.supplier_id, "name": self.supplier_name},
            "quantity": self.quantity,
            "unit_price_cents": self.unit_price_cents,
            "total_cost_cents": self.total_cost_cents,
            "status": self.status.value,
            "notes": self.notes,
            "tracking_number": self.tracking_number,
            "created_by_id": self.created_by_id,
            "approved_by_id": self.approved_by_id,
            "rejected_by_id": self.rejected_by_id,
            "rejection_reason": self.rejection_reason,
            "delivered_by_id": self.delivered_by_id,
            "received_by_id": self.received_by_id,
            "created_at": to_utc_z(self.created_at),
            "approved_at": to_utc_z(self.approved_at),
            "rejected_at": to_utc_z(self.rejected_at),
            "delivery_date": to_utc_z(self.delivery_date),
            "received_at": to_utc_z(self.received_at),
            "paid_at": to_utc_z(self.paid_at),
            "version_id": self.version_id,
            "payment": self.payment.to_dict() if self.payment else None,
        }


class OrderPayment(db.Model):
    """
    Payment sub-record of an order (1:1).

    LIFECYCLE (payment):
    Pending -> Submitted -> Approved -> Paid
    Submitted -> Rejected -> Submitted (resubmission)

    supplier_confirmation may only become true once status is Paid.
    """
    __tablename__ = "order_payments"
    __table_args__ = (
        db.UniqueConstraint("order_id", name="uq_order_payments_order"),
        db.Index("ix_order_payments_status", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False)

    status = db.Column(
        enum_column_type(PaymentStatus, "payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    amount_cents = db.Column(db.Integer, nullable=True)
    amount_paid_cents = db.Column(db.Integer, nullable=True)
    payment_method = db.Column(enum_column_type(PaymentMethod, "payment_method"), nullable=True)
    transaction_id = db.Column(db.String(128), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    submission_count = db.Column(db.Integer, nullable=False, default=0)

    # Actor attribution
    submitted_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    submitted_by_name = db.Column(db.String(255), nullable=True)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    approved_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    approved_by_name = db.Column(db.String(255), nullable=True)
    approved_at = db.Column(db.DateTime(timezone=True), nullable=True)

    processed_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    processed_by_name = db.Column(db.String(255), nullable=True)
    processed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    rejected_by_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    rejected_by_name = db.Column(db.String(255), nullable=True)
    rejected_at = db.Column(db.DateTime(timezone=True), nullable=True)
    rejection_reason = db.Column(db.Text, nullable=True)

    # Supplier acknowledgment of a completed payment
    supplier_confirmation = db.Column(db.Boolean, nullable=False, default=False)
    confirmed_by_name = db.Column(db.String(255), nullable=True)
    confirmation_date = db.Column(db.DateTime(timezone=True), nullable=True)
    transaction_proof = db.Column(db.String(255), nullable=True)
    confirmation_notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    order = db.relationship("Order", back_populates="payment")

    __mapper_args__ = {"version_id_col": version_id}

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "amount_cents": self.amount_cents,
            "amount_paid_cents": self.amount_paid_cents,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "transaction_id": self.transaction_id,
            "notes": self.notes,
            "submission_count": self.submission_count,
            "submitted_by_id": self.submitted_by_id,
            "submitted_by_name": self.submitted_by_name,
            "submitted_at": to_utc_z(self.submitted_at),
            "approved_by_id": self.approved_by_id,
            "approved_by_name": self.approved_by_name,
            "approved_at": to_utc_z(self.approved_at),
            "processed_by_id": self.processed_by_id,
            "processed_by_name": self.processed_by_name,
            "processed_at": to_utc_z(self.processed_at),
            "rejected_by_id": self.rejected_by_id,
            "rejected_by_name": self.rejected_by_name,
            "rejected_at": to_utc_z(self.rejected_at),
            "rejection_reason": self.rejection_reason,
            "supplier_confirmation": self.supplier_confirmation,
            "confirmed_by_name": self.confirmed_by_name,
            "confirmation_date": to_utc_z(self.confirmation_date),
            "transaction_proof": self.transaction_proof,
            "confirmation_notes": self.confirmation_notes,
        }


class OrderEvent(db.Model):
    """
    Append-only audit trail of order and payment transitions.

    Written in the same DB transaction as the transition it records.
    """
    __tablename__ = "order_events"
    __table_args__ = (
        db.Index("ix_order_events_order_occurred", "order_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    event_type = db.Column(db.String(64), nullable=False, index=True)
    actor_employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)
    actor_department = db.Column(db.String(32), nullable=True)
    from_status = db.Column(db.String(16), nullable=True)
    to_status = db.Column(db.String(16), nullable=True)
    note = db.Column(db.Text, nullable=True)
    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", backref=db.backref("events", lazy=True, order_by="OrderEvent.id"))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "event_type": self.event_type,
            "actor_employee_id": self.actor_employee_id,
            "actor_department": self.actor_department,
            "from_status": self.from_status,
            "to_status": self.to_status,
            "note": self.note,
            "occurred_at": to_utc_z(self.occurred_at),
        }
