# Overview: Service-layer operations for the order aggregate's fulfillment lifecycle.

"""
Order Service

WHY: One authoritative place for the fulfillment half of a procurement
order. Inventory raises the order, the bound supplier approves/rejects and
delivers it, Inventory confirms receipt (crediting stock).

LIFECYCLE:
1. PENDING: Created by Inventory against an item and a supplier
2. APPROVED: Supplier accepted the order
3. REJECTED: Supplier declined (terminal)
4. DELIVERED: Supplier shipped; tracking number assigned
5. RECEIVED: Inventory confirmed receipt; stock credited
6. PAID: Set by the payment service when the payment is settled

Every transition is one DB transaction that also appends an OrderEvent
(and, for receipt, the stock movement). The order row is versioned, so a
concurrent writer that loses the race is retried and then fails its guard.

Authorization happens in the role gateways; this module trusts its actor.
"""

from __future__ import annotations

import secrets
import string
import uuid
from datetime import datetime

from flask import current_app

from ..commands import CreateOrderCommand, RejectCommand
from ..extensions import db
from ..errors import NotFound
from ..models import (
    Department,
    Employee,
    Item,
    Order,
    OrderPayment,
    OrderStatus,
    PaymentStatus,
    StockReason,
)
from ..time_utils import utcnow
from . import stock_service
from .concurrency import lock_for_update, run_with_retry
from .notification_service import emit_order_changed, get_order_events, record_order_event
from .workflow import FulfillmentAction, is_replay, next_order_status, order_target


TRACKING_ALPHABET = string.ascii_uppercase + string.digits
TRACKING_SUFFIX_LENGTH = 10


def generate_tracking_number() -> str:
    prefix = current_app.config.get("TRACKING_NUMBER_PREFIX", "TRK")
    suffix = "".join(secrets.choice(TRACKING_ALPHABET) for _ in range(TRACKING_SUFFIX_LENGTH))
    return f"{prefix}{suffix}"


def get_order(order_id: int, *, lock: bool = False) -> Order:
    query = db.session.query(Order).filter_by(id=order_id)
    if lock:
        query = lock_for_update(query)
    order = query.first()
    if order is None:
        raise NotFound(f"Order {order_id} not found", resource="order", id=order_id)
    return order


def get_supplier(supplier_id: int) -> Employee:
    supplier = db.session.query(Employee).filter_by(id=supplier_id).first()
    if supplier is None or supplier.department != Department.SUPPLIER or not supplier.is_active:
        raise NotFound(f"Supplier {supplier_id} not found", resource="supplier", id=supplier_id)
    return supplier


def create_order(command: CreateOrderCommand, *, actor) -> Order:
    """
    Create a PENDING order with a PENDING payment record.

    Raises:
        NotFound: item or supplier does not exist
    """
    def _op():
        item = db.session.query(Item).filter_by(id=command.item_id).first()
        if item is None:
            raise NotFound(f"Item {command.item_id} not found", resource="item", id=command.item_id)
        supplier = get_supplier(command.supplier_id)

        order = Order(
            reference=uuid.uuid4().hex,
            item_id=item.id,
            item_name=item.name,
            supplier_id=supplier.id,
            supplier_name=supplier.full_name,
            quantity=command.quantity,
            unit_price_cents=command.unit_price_cents,
            status=OrderStatus.PENDING,
            notes=command.notes,
            created_by_id=actor.employee_id,
            created_at=utcnow(),
        )
        order.payment = OrderPayment(status=PaymentStatus.PENDING, submission_count=0)
        db.session.add(order)
        db.session.flush()

        record_order_event(
            order=order,
            event_type="order.created",
            actor=actor,
            to_status=OrderStatus.PENDING,
            note=f"{order.quantity} x {order.item_name} from {order.supplier_name}",
        )
        db.session.commit()
        return order

    order = run_with_retry(_op)
    emit_order_changed(order, "order.created")
    return order


def _transition(order_id: int, action: FulfillmentAction, *, actor, replay, apply, event_type: str, note=None) -> Order:
    """
    Run one fulfillment transition as a single unit of work.

    replay(order) is consulted only when the order already sits in the
    action's target status; returning True makes the call a no-op.
    apply(order, now) performs the transition's effects.
    """
    def _op():
        order = get_order(order_id, lock=True)
        if order.status == order_target(action) and replay(order):
            return order, False

        previous = order.status
        order.status = next_order_status(order.status, action)
        apply(order, utcnow())

        record_order_event(
            order=order,
            event_type=event_type,
            actor=actor,
            from_status=previous,
            to_status=order.status,
            note=note,
        )
        db.session.commit()
        return order, True

    order, changed = run_with_retry(_op)
    if changed:
        emit_order_changed(order, event_type)
    return order


def approve_order(order_id: int, *, actor) -> Order:
    """Supplier accepts a PENDING order."""
    def _apply(order: Order, now: datetime) -> None:
        order.approved_by_id = actor.employee_id
        order.approved_at = now

    return _transition(
        order_id,
        FulfillmentAction.APPROVE,
        actor=actor,
        replay=lambda o: is_replay(o.approved_by_id, actor, same_parameters=True, step="approve order"),
        apply=_apply,
        event_type="order.approved",
    )


def reject_order(order_id: int, command: RejectCommand, *, actor) -> Order:
    """Supplier declines a PENDING order. Terminal."""
    def _apply(order: Order, now: datetime) -> None:
        order.rejected_by_id = actor.employee_id
        order.rejected_at = now
        order.rejection_reason = command.reason

    return _transition(
        order_id,
        FulfillmentAction.REJECT,
        actor=actor,
        replay=lambda o: is_replay(
            o.rejected_by_id,
            actor,
            same_parameters=o.rejection_reason == command.reason,
            step="reject order",
        ),
        apply=_apply,
        event_type="order.rejected",
        note=command.reason,
    )


def mark_delivered(order_id: int, *, actor) -> Order:
    """Supplier ships an APPROVED order; the tracking number is assigned here, once."""
    def _apply(order: Order, now: datetime) -> None:
        if order.tracking_number is None:
            order.tracking_number = generate_tracking_number()
        order.delivered_by_id = actor.employee_id
        order.delivery_date = now

    return _transition(
        order_id,
        FulfillmentAction.DELIVER,
        actor=actor,
        replay=lambda o: is_replay(o.delivered_by_id, actor, same_parameters=True, step="mark delivered"),
        apply=_apply,
        event_type="order.delivered",
    )


def mark_received(order_id: int, *, actor) -> Order:
    """
    Inventory confirms a DELIVERED order arrived.

    The stock credit is written in the same transaction as the status
    change, so a replayed call can never add stock twice.
    """
    def _apply(order: Order, now: datetime) -> None:
        order.received_by_id = actor.employee_id
        order.received_at = now
        stock_service.increment(
            order.item_id,
            order.quantity,
            reason=StockReason.ORDER_RECEIVED,
            order_id=order.id,
            actor=actor,
            note=f"Received order {order.reference[-6:]}",
        )

    return _transition(
        order_id,
        FulfillmentAction.RECEIVE,
        actor=actor,
        replay=lambda o: is_replay(o.received_by_id, actor, same_parameters=True, step="mark received"),
        apply=_apply,
        event_type="order.received",
    )


def list_orders(
    *,
    status: OrderStatus | None = None,
    payment_status: PaymentStatus | None = None,
    supplier_id: int | None = None,
    item_id: int | None = None,
    from_date: datetime | None = None,
    to_date: datetime | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Order], int]:
    """
    List orders, newest first.

    Returns:
        Tuple of (list of orders, total count)
    """
    query = db.session.query(Order)

    if status:
        query = query.filter(Order.status == status)
    if payment_status:
        query = query.join(Order.payment).filter(OrderPayment.status == payment_status)
    if supplier_id:
        query = query.filter(Order.supplier_id == supplier_id)
    if item_id:
        query = query.filter(Order.item_id == item_id)
    if from_date:
        query = query.filter(Order.created_at >= from_date)
    if to_date:
        query = query.filter(Order.created_at <= to_date)

    total = query.count()

    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    query = query.offset(offset).limit(limit)

    return query.all(), total


def order_history(order_id: int) -> list:
    get_order(order_id)
    return get_order_events(order_id)
