# Overview: Service-layer operations for items and the stock ledger.

"""
Stock Ledger Service

WHY: Item.quantity is the authoritative stock count shared by procurement
orders (which credit it on receipt) and production material requests
(which debit it when materials are issued).

INVARIANTS:
- quantity never goes negative; a decrement that would do so raises
  InsufficientStock and nothing is written.
- Every change writes a StockMovement row in the same DB transaction.
- Changes to one item are serialized: the row is selected FOR UPDATE and
  carries a version_id_col, so two writers cannot both read-modify-write
  the same count.

``increment`` / ``decrement`` do not commit; they join the caller's
transaction. ``restock_item`` / ``issue_stock`` are the standalone entry
points and commit themselves.
"""

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import ConflictError, InsufficientStock, NotFound, ValidationError
from ..models import Item, Order, OrderStatus, StockMovement, StockReason
from ..validation import (
    ITEM_CREATE_POLICY,
    ITEM_UPDATE_POLICY,
    enforce_rules_item,
    validate_payload,
)
from ..time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry


def get_item(item_id: int, *, lock: bool = False) -> Item:
    query = db.session.query(Item).filter_by(id=item_id)
    if lock:
        query = lock_for_update(query)
    item = query.first()
    if item is None:
        raise NotFound(f"Item {item_id} not found", resource="item", id=item_id)
    return item


def _record_movement(
    item: Item,
    *,
    delta: int,
    reason: StockReason,
    order_id: int | None,
    actor,
    note: str | None,
) -> StockMovement:
    movement = StockMovement(
        item_id=item.id,
        order_id=order_id,
        reason=reason,
        quantity_delta=delta,
        quantity_after=item.quantity,
        actor_employee_id=actor.employee_id if actor else None,
        note=note,
        occurred_at=utcnow(),
    )
    db.session.add(movement)
    return movement


def increment(
    item_id: int,
    qty: int,
    *,
    reason: StockReason,
    order_id: int | None = None,
    actor=None,
    note: str | None = None,
) -> Item:
    """
    Add qty to an item's stock inside the current transaction.

    Raises:
        NotFound: unknown item
        ValidationError: qty is not positive
    """
    if qty <= 0:
        raise ValidationError("Stock increment must be positive", field="quantity")

    item = get_item(item_id, lock=True)
    item.quantity = item.quantity + qty
    _record_movement(item, delta=qty, reason=reason, order_id=order_id, actor=actor, note=note)
    db.session.flush()
    return item


def decrement(
    item_id: int,
    qty: int,
    *,
    reason: StockReason,
    order_id: int | None = None,
    actor=None,
    note: str | None = None,
) -> Item:
    """
    Remove qty from an item's stock inside the current transaction.

    Raises:
        NotFound: unknown item
        ValidationError: qty is not positive
        InsufficientStock: stock would drop below zero
    """
    if qty <= 0:
        raise ValidationError("Stock decrement must be positive", field="quantity")

    item = get_item(item_id, lock=True)
    if item.quantity - qty < 0:
        raise InsufficientStock(item_id=item.id, available=item.quantity, requested=qty)

    item.quantity = item.quantity - qty
    _record_movement(item, delta=-qty, reason=reason, order_id=order_id, actor=actor, note=note)
    db.session.flush()
    return item


# =============================================================================
# ITEM MANAGEMENT
# =============================================================================

def create_item(payload: dict, *, actor=None) -> Item:
    """
    Create an item. An opening quantity is recorded as a RESTOCK movement
    so the ledger always explains the current count.
    """
    patch = validate_payload(model=Item, payload=payload, policy=ITEM_CREATE_POLICY, partial=False)
    enforce_rules_item(patch)

    opening_quantity = patch.pop("quantity", None) or 0
    fields = {"min_threshold": 0}
    fields.update({k: v for k, v in patch.items() if v is not None})

    def _op():
        item = Item(quantity=0, **fields)
        db.session.add(item)
        db.session.flush()
        if opening_quantity:
            increment(
                item.id,
                opening_quantity,
                reason=StockReason.RESTOCK,
                actor=actor,
                note="Opening stock",
            )
        db.session.commit()
        return item

    return run_with_retry(_op)


def update_item(item_id: int, payload: dict) -> Item:
    """Edit item metadata. Quantity is not writable here."""
    patch = validate_payload(model=Item, payload=payload, policy=ITEM_UPDATE_POLICY, partial=True)
    enforce_rules_item(patch)

    def _op():
        item = get_item(item_id, lock=True)
        for key, value in patch.items():
            setattr(item, key, value)
        db.session.commit()
        return item

    return run_with_retry(_op)


def delete_item(item_id: int) -> None:
    """
    Delete an item that no open order references.

    Raises:
        NotFound: unknown item
        ConflictError: an open order or stock history references it
    """
    def _op():
        item = get_item(item_id, lock=True)
        open_orders = (
            db.session.query(func.count(Order.id))
            .filter(
                Order.item_id == item_id,
                Order.status.notin_([OrderStatus.REJECTED, OrderStatus.PAID]),
            )
            .scalar()
        )
        if open_orders:
            raise ConflictError(
                f"Item {item_id} is referenced by {open_orders} open order(s)",
                item_id=item_id,
            )
        any_orders = db.session.query(Order.id).filter(Order.item_id == item_id).first()
        if any_orders or item.movements:
            raise ConflictError(
                f"Item {item_id} has order or stock history and cannot be deleted",
                item_id=item_id,
            )
        db.session.delete(item)
        db.session.commit()

    run_with_retry(_op)


def restock_item(item_id: int, qty: int, *, actor=None, note: str | None = None) -> Item:
    """Direct restock entry (stock found, donated, or bought outside an order)."""
    def _op():
        item = increment(item_id, qty, reason=StockReason.RESTOCK, actor=actor, note=note)
        db.session.commit()
        return item

    return run_with_retry(_op)


def issue_stock(item_id: int, qty: int, *, actor=None, note: str | None = None) -> Item:
    """Issue stock out of inventory, e.g. to fulfil a production material request."""
    def _op():
        item = decrement(item_id, qty, reason=StockReason.ISSUE, actor=actor, note=note)
        db.session.commit()
        return item

    return run_with_retry(_op)


def list_items(*, search: str | None = None, category: str | None = None) -> list[Item]:
    query = db.session.query(Item)
    if search:
        like = f"%{search.strip()}%"
        query = query.filter(Item.name.ilike(like))
    if category:
        query = query.filter(Item.category == category)
    return query.order_by(Item.name).all()


def list_low_stock_items() -> list[Item]:
    return (
        db.session.query(Item)
        .filter(Item.quantity <= Item.min_threshold)
        .order_by(Item.quantity, Item.name)
        .all()
    )


def get_stock_movements(item_id: int, *, limit: int = 100) -> list[StockMovement]:
    get_item(item_id)
    return (
        db.session.query(StockMovement)
        .filter(StockMovement.item_id == item_id)
        .order_by(StockMovement.id.desc())
        .limit(limit)
        .all()
    )
