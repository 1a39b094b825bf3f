# Overview: Transition tables for the order fulfillment and payment dimensions.

"""
Order Workflow Tables

These two tables are the only place legal status changes are defined.
Services ask ``next_order_status`` / ``next_payment_status`` for the target
state of an action; any (state, action) pair missing from a table raises
InvalidTransition carrying the current status and the action's target.

FULFILLMENT:
    Pending   --approve-->  Approved
    Pending   --reject--->  Rejected   (terminal)
    Approved  --deliver-->  Delivered
    Delivered --receive-->  Received
    Received  --settle--->  Paid       (only together with payment settle)

PAYMENT (only while the order is Received):
    Pending   --submit--->  Submitted
    Rejected  --submit--->  Submitted  (resubmission after a rejection)
    Submitted --approve-->  Approved
    Submitted --reject--->  Rejected
    Approved  --settle--->  Paid
"""

from __future__ import annotations

from enum import Enum

from ..errors import ConflictError, InvalidTransition
from ..models import OrderStatus, PaymentStatus


class FulfillmentAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    DELIVER = "deliver"
    RECEIVE = "receive"
    SETTLE = "settle"


class PaymentAction(str, Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    SETTLE = "settle"


FULFILLMENT_TRANSITIONS = {
    (OrderStatus.PENDING, FulfillmentAction.APPROVE): OrderStatus.APPROVED,
    (OrderStatus.PENDING, FulfillmentAction.REJECT): OrderStatus.REJECTED,
    (OrderStatus.APPROVED, FulfillmentAction.DELIVER): OrderStatus.DELIVERED,
    (OrderStatus.DELIVERED, FulfillmentAction.RECEIVE): OrderStatus.RECEIVED,
    (OrderStatus.RECEIVED, FulfillmentAction.SETTLE): OrderStatus.PAID,
}

PAYMENT_TRANSITIONS = {
    (PaymentStatus.PENDING, PaymentAction.SUBMIT): PaymentStatus.SUBMITTED,
    (PaymentStatus.REJECTED, PaymentAction.SUBMIT): PaymentStatus.SUBMITTED,
    (PaymentStatus.SUBMITTED, PaymentAction.APPROVE): PaymentStatus.APPROVED,
    (PaymentStatus.SUBMITTED, PaymentAction.REJECT): PaymentStatus.REJECTED,
    (PaymentStatus.APPROVED, PaymentAction.SETTLE): PaymentStatus.PAID,
}

# Every payment action requires the goods to have been received first
PAYMENT_REQUIRES_ORDER_STATUS = OrderStatus.RECEIVED


def _targets(table: dict) -> dict:
    targets = {}
    for (_, action), target in table.items():
        targets[action] = target
    return targets


FULFILLMENT_TARGETS = _targets(FULFILLMENT_TRANSITIONS)
PAYMENT_TARGETS = _targets(PAYMENT_TRANSITIONS)


def order_target(action: FulfillmentAction) -> OrderStatus:
    return FULFILLMENT_TARGETS[action]


def payment_target(action: PaymentAction) -> PaymentStatus:
    return PAYMENT_TARGETS[action]


def next_order_status(current: OrderStatus, action: FulfillmentAction) -> OrderStatus:
    target = FULFILLMENT_TRANSITIONS.get((current, action))
    if target is None:
        raise InvalidTransition(current, order_target(action), dimension="order")
    return target


def next_payment_status(
    order_status: OrderStatus,
    current: PaymentStatus,
    action: PaymentAction,
) -> PaymentStatus:
    target = PAYMENT_TRANSITIONS.get((current, action))
    if target is None:
        raise InvalidTransition(current, payment_target(action), dimension="payment")
    if order_status != PAYMENT_REQUIRES_ORDER_STATUS:
        raise InvalidTransition(
            order_status,
            target,
            dimension="payment",
            message=(
                f"Payment cannot move to {target.value} while the order is "
                f"{order_status.value}; the order must be {PAYMENT_REQUIRES_ORDER_STATUS.value}"
            ),
        )
    return target


def is_replay(recorded_actor_id: int | None, actor, *, same_parameters: bool, step: str) -> bool:
    """
    Decide whether a call that targets the current status is a retry.

    The step counts as already applied for this caller only when the caller
    is the actor recorded for it. The same caller with different parameters
    is a divergent retry and raises ConflictError. Anyone else gets False,
    and the transition table then rejects the call as InvalidTransition.
    """
    if recorded_actor_id is None or recorded_actor_id != actor.employee_id:
        return False
    if not same_parameters:
        raise ConflictError(
            f"{step} was already recorded by this actor with different details",
            step=step,
        )
    return True
