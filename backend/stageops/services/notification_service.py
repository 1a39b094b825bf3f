# Overview: Order event ledger and best-effort "order changed" notifications.

"""
Order Events and Notifications

Two separate concerns:

1. ``record_order_event`` appends an OrderEvent row inside the caller's
   DB transaction. It is part of the transition and commits with it.
2. ``emit_order_changed`` fires the ``order_changed`` signal after the
   transition has committed so dashboards can refresh. Receivers are
   best-effort: a failing receiver is logged and never undoes or blocks
   the committed state change.
"""

from __future__ import annotations

from blinker import Namespace
from flask import current_app

from ..extensions import db
from ..models import Order, OrderEvent
from ..time_utils import utcnow


_signals = Namespace()

# Sent with sender=<event_type>, order_id=<int>, order=<dict>
order_changed = _signals.signal("order-changed")


def record_order_event(
    *,
    order: Order,
    event_type: str,
    actor=None,
    from_status=None,
    to_status=None,
    note: str | None = None,
) -> OrderEvent:
    """
    Append an order event in the current transaction.

    - No domain logic here.
    - No deletes/updates of existing events.
    """
    ev = OrderEvent(
        order_id=order.id,
        event_type=event_type,
        actor_employee_id=actor.employee_id if actor else None,
        actor_department=actor.department.value if actor else None,
        from_status=getattr(from_status, "value", from_status),
        to_status=getattr(to_status, "value", to_status),
        note=note,
        occurred_at=utcnow(),
    )
    db.session.add(ev)
    db.session.flush()  # ensures ev.id is assigned without committing
    return ev


def emit_order_changed(order: Order, event_type: str) -> None:
    """Notify receivers that an order changed. Never raises."""
    current_app.logger.info("Order %s changed: %s", order.id, event_type)
    for receiver in order_changed.receivers_for(event_type):
        try:
            receiver(event_type, order_id=order.id, order=order.to_dict())
        except Exception:
            current_app.logger.exception(
                "order_changed receiver %r failed for order %s", receiver, order.id
            )


def get_order_events(order_id: int) -> list[OrderEvent]:
    return (
        db.session.query(OrderEvent)
        .filter(OrderEvent.order_id == order_id)
        .order_by(OrderEvent.id)
        .all()
    )
