# Overview: Read-only projections over orders and stock for dashboards and finance.

from __future__ import annotations

from typing import Iterable

from sqlalchemy import func

from ..extensions import db
from ..errors import ValidationError
from ..models import Department, Item, Order, OrderPayment, OrderStatus, PaymentStatus
from .stock_service import list_low_stock_items


SEARCH_FILTERS = ("all", "paid", "pending_confirmation") + tuple(s.value.lower() for s in OrderStatus)


def _awaiting_confirmation(order: Order) -> bool:
    return (
        order.payment is not None
        and order.payment.status == PaymentStatus.PAID
        and not order.payment.supplier_confirmation
    )


def order_stats(orders: Iterable[Order]) -> dict:
    """
    Count orders per fulfillment and payment status.

    awaiting_confirmation counts Paid payments the supplier has not yet
    acknowledged.
    """
    stats = {
        "total": 0,
        "pending": 0,
        "approved": 0,
        "rejected": 0,
        "delivered": 0,
        "received": 0,
        "paid": 0,
        "awaiting_confirmation": 0,
        "payment": {s.value.lower(): 0 for s in PaymentStatus},
    }
    for order in orders:
        stats["total"] += 1
        stats[order.status.value.lower()] += 1
        if order.payment is not None:
            stats["payment"][order.payment.status.value.lower()] += 1
        if _awaiting_confirmation(order):
            stats["awaiting_confirmation"] += 1
    return stats


def search_orders(orders: Iterable[Order], *, filter_key: str = "all", text: str | None = None) -> list[Order]:
    """
    Narrow a list of orders by a filter key and free text.

    filter_key is "all", a fulfillment status name, "paid" (payment settled)
    or "pending_confirmation". Text matches item name, the tail of the
    reference, or the tracking number, case-insensitively.
    """
    key = (filter_key or "all").strip().lower()
    if key not in SEARCH_FILTERS:
        raise ValidationError(
            f"Invalid filter. Must be one of: {', '.join(SEARCH_FILTERS)}",
            field="filter",
        )
    needle = (text or "").strip().lower()

    results = []
    for order in orders:
        if key == "paid":
            if order.payment is None or order.payment.status != PaymentStatus.PAID:
                continue
        elif key == "pending_confirmation":
            if not _awaiting_confirmation(order):
                continue
        elif key != "all" and order.status.value.lower() != key:
            continue

        if needle:
            haystack = (
                (order.item_name or "").lower(),
                (order.reference or "").lower()[-6:],
                (order.tracking_number or "").lower(),
            )
            if not any(needle in field for field in haystack):
                continue
        results.append(order)
    return results


def _orders_for(actor) -> list[Order]:
    query = db.session.query(Order)
    if actor.department == Department.SUPPLIER:
        query = query.filter(Order.supplier_id == actor.employee_id)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def dashboard_for(actor, *, recent: int = 5) -> dict:
    """Stats scoped to what the actor's department may see."""
    orders = _orders_for(actor)
    return {
        "department": actor.department.value,
        "stats": order_stats(orders),
        "recent_orders": [o.to_dict() for o in orders[:recent]],
    }


def payment_queue(payment_status: PaymentStatus | None = None) -> list[Order]:
    """
    Finance's working list. None means every order whose payment has left
    PENDING.
    """
    query = db.session.query(Order).join(Order.payment)
    if payment_status is None:
        query = query.filter(OrderPayment.status != PaymentStatus.PENDING)
    else:
        query = query.filter(OrderPayment.status == payment_status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def finance_summary() -> dict:
    paid_filter = OrderPayment.status == PaymentStatus.PAID

    total_revenue = (
        db.session.query(func.coalesce(func.sum(OrderPayment.amount_paid_cents), 0))
        .filter(paid_filter)
        .scalar()
    )
    pending = (
        db.session.query(func.count(OrderPayment.id))
        .filter(OrderPayment.status.in_([PaymentStatus.SUBMITTED, PaymentStatus.APPROVED]))
        .scalar()
    )
    paid = db.session.query(func.count(OrderPayment.id)).filter(paid_filter).scalar()

    rows = (
        db.session.query(
            Order.item_name.label("item_name"),
            func.count(Order.id).label("orders"),
            func.coalesce(func.sum(OrderPayment.amount_paid_cents), 0).label("amount_cents"),
        )
        .join(Order.payment)
        .filter(paid_filter)
        .group_by(Order.item_name)
        .order_by(Order.item_name)
        .all()
    )

    return {
        "total_revenue_cents": int(total_revenue or 0),
        "counts": {"pending": int(pending or 0), "paid": int(paid or 0)},
        "by_item": [
            {
                "item_name": row.item_name,
                "orders": int(row.orders or 0),
                "amount_cents": int(row.amount_cents or 0),
            }
            for row in rows
        ],
    }


def inventory_summary() -> dict:
    item_count = db.session.query(func.count(Item.id)).scalar()
    open_orders = (
        db.session.query(func.count(Order.id))
        .filter(Order.status.notin_([OrderStatus.REJECTED, OrderStatus.PAID]))
        .scalar()
    )
    awaiting_receipt = (
        db.session.query(func.count(Order.id))
        .filter(Order.status == OrderStatus.DELIVERED)
        .scalar()
    )
    low_stock = list_low_stock_items()
    return {
        "item_count": int(item_count or 0),
        "low_stock_count": len(low_stock),
        "low_stock_items": [item.to_dict() for item in low_stock],
        "open_order_count": int(open_orders or 0),
        "awaiting_receipt_count": int(awaiting_receipt or 0),
    }
