# Overview: Service-layer operations for the payment sub-workflow of an order.

"""
Payment Service

WHY: Payment is a separate dimension from fulfillment. It can only move
once the goods are Received, and the order itself becomes Paid only in
the same transaction that settles the payment.

LIFECYCLE:
1. PENDING: Created together with the order
2. SUBMITTED: Inventory submitted the invoice amount for approval
3. APPROVED / REJECTED: Finance decided; a rejected payment may be resubmitted
4. PAID: Finance processed (or marked) the payment; order moves to Paid
5. Supplier confirms receipt of a Paid payment with a transaction proof

DESIGN PRINCIPLES:
- Guard first, validate next, write last. A validation failure leaves the
  payment exactly where it was.
- Replays by the actor who already performed a step are no-ops.
- All writes for one call commit together, including the OrderEvent rows.
"""

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..commands import (
    ConfirmReceiptCommand,
    MarkPaidCommand,
    ProcessPaymentCommand,
    RejectCommand,
    SubmitPaymentCommand,
)
from ..extensions import db
from ..errors import ConflictError, InvalidTransition, ValidationError
from ..models import Order, OrderPayment, PaymentMethod, PaymentStatus
from ..time_utils import utcnow
from .concurrency import run_with_retry
from .notification_service import emit_order_changed, record_order_event
from .order_service import get_order
from .workflow import (
    FulfillmentAction,
    PaymentAction,
    is_replay,
    next_order_status,
    next_payment_status,
    payment_target,
)


DEFAULT_PAYMENT_REJECTION_REASON = "Payment rejected by finance"


def _payment_transition(
    order_id: int,
    action: PaymentAction,
    *,
    actor,
    replay,
    apply,
    event_type: str,
    note=None,
) -> Order:
    """
    Run one payment transition as a single unit of work.

    replay(payment) is consulted only when the payment already sits in the
    action's target status. apply(order, payment, now) validates its input
    before writing anything.
    """
    def _op():
        order = get_order(order_id, lock=True)
        payment = order.payment
        if payment.status == payment_target(action) and replay(payment):
            return order, False

        previous = payment.status
        target = next_payment_status(order.status, payment.status, action)
        apply(order, payment, utcnow())
        payment.status = target

        record_order_event(
            order=order,
            event_type=event_type,
            actor=actor,
            from_status=previous,
            to_status=target,
            note=note,
        )
        db.session.commit()
        return order, True

    order, changed = run_with_retry(_op)
    if changed:
        emit_order_changed(order, event_type)
    return order


def submit_payment(order_id: int, command: SubmitPaymentCommand, *, actor) -> Order:
    """
    Inventory submits a payment for a RECEIVED order.

    Allowed from PENDING, and from REJECTED as a resubmission.

    Raises:
        InvalidTransition: order not Received or payment not Pending/Rejected
        ConflictError: PAYMENT_MAX_SUBMISSIONS reached
    """
    def _amount(order: Order) -> int:
        return command.amount_cents if command.amount_cents is not None else order.total_cost_cents

    def _replay(payment: OrderPayment) -> bool:
        return is_replay(
            payment.submitted_by_id,
            actor,
            same_parameters=(
                payment.amount_cents == _amount(payment.order)
                and payment.payment_method == command.payment_method
                and payment.notes == command.notes
            ),
            step="submit payment",
        )

    def _apply(order: Order, payment: OrderPayment, now: datetime) -> None:
        cap = current_app.config.get("PAYMENT_MAX_SUBMISSIONS")
        if cap is not None and (payment.submission_count or 0) >= cap:
            raise ConflictError(
                f"Payment has already been submitted {payment.submission_count} time(s); limit is {cap}",
                submission_count=payment.submission_count,
                limit=cap,
            )

        payment.amount_cents = _amount(order)
        payment.payment_method = command.payment_method
        payment.notes = command.notes
        payment.submission_count = (payment.submission_count or 0) + 1
        payment.submitted_by_id = actor.employee_id
        payment.submitted_by_name = actor.name
        payment.submitted_at = now

        # A resubmission starts a fresh decision
        payment.approved_by_id = None
        payment.approved_by_name = None
        payment.approved_at = None
        payment.rejected_by_id = None
        payment.rejected_by_name = None
        payment.rejected_at = None
        payment.rejection_reason = None

    return _payment_transition(
        order_id,
        PaymentAction.SUBMIT,
        actor=actor,
        replay=_replay,
        apply=_apply,
        event_type="payment.submitted",
        note=command.notes,
    )


def approve_payment(order_id: int, *, actor) -> Order:
    """Finance approves a SUBMITTED payment."""
    def _apply(order: Order, payment: OrderPayment, now: datetime) -> None:
        payment.approved_by_id = actor.employee_id
        payment.approved_by_name = actor.name
        payment.approved_at = now

    return _payment_transition(
        order_id,
        PaymentAction.APPROVE,
        actor=actor,
        replay=lambda p: is_replay(p.approved_by_id, actor, same_parameters=True, step="approve payment"),
        apply=_apply,
        event_type="payment.approved",
    )


def reject_payment(order_id: int, command: RejectCommand, *, actor) -> Order:
    """Finance rejects a SUBMITTED payment. Inventory may resubmit."""
    reason = command.reason or DEFAULT_PAYMENT_REJECTION_REASON

    def _apply(order: Order, payment: OrderPayment, now: datetime) -> None:
        payment.rejected_by_id = actor.employee_id
        payment.rejected_by_name = actor.name
        payment.rejected_at = now
        payment.rejection_reason = reason

    return _payment_transition(
        order_id,
        PaymentAction.REJECT,
        actor=actor,
        replay=lambda p: is_replay(
            p.rejected_by_id,
            actor,
            same_parameters=p.rejection_reason == reason,
            step="reject payment",
        ),
        apply=_apply,
        event_type="payment.rejected",
        note=reason,
    )


def _validate_settlement(method: PaymentMethod | None, transaction_id: str | None, amount_paid_cents: int | None) -> None:
    if method is None:
        raise ValidationError("payment_method is required", field="payment_method")
    if method != PaymentMethod.CASH and not (transaction_id or "").strip():
        raise ValidationError(
            f"transaction_id is required for {method.value} payments",
            field="transaction_id",
        )
    if amount_paid_cents is None or amount_paid_cents <= 0:
        raise ValidationError("amount_paid must be greater than 0", field="amount_paid")


def _settle(order: Order, payment: OrderPayment, *, actor, now: datetime,
            method: PaymentMethod, transaction_id: str | None, amount_paid_cents: int,
            notes: str | None) -> None:
    _validate_settlement(method, transaction_id, amount_paid_cents)

    previous_order_status = order.status
    order.status = next_order_status(order.status, FulfillmentAction.SETTLE)
    order.paid_at = now

    payment.payment_method = method
    payment.transaction_id = transaction_id
    payment.amount_paid_cents = amount_paid_cents
    if notes:
        payment.notes = notes
    payment.processed_by_id = actor.employee_id
    payment.processed_by_name = actor.name
    payment.processed_at = now

    record_order_event(
        order=order,
        event_type="order.paid",
        actor=actor,
        from_status=previous_order_status,
        to_status=order.status,
    )


def process_payment(order_id: int, command: ProcessPaymentCommand, *, actor) -> Order:
    """
    Finance settles an APPROVED payment; the order moves to PAID with it.

    Raises:
        InvalidTransition: payment not Approved (or order not Received)
        ValidationError: missing transaction id for a non-cash method
    """
    def _apply(order: Order, payment: OrderPayment, now: datetime) -> None:
        _settle(
            order,
            payment,
            actor=actor,
            now=now,
            method=command.payment_method,
            transaction_id=command.transaction_id,
            amount_paid_cents=command.amount_paid_cents,
            notes=command.notes,
        )

    return _payment_transition(
        order_id,
        PaymentAction.SETTLE,
        actor=actor,
        replay=lambda p: is_replay(
            p.processed_by_id,
            actor,
            same_parameters=(
                p.payment_method == command.payment_method
                and p.transaction_id == command.transaction_id
                and p.amount_paid_cents == command.amount_paid_cents
            ),
            step="process payment",
        ),
        apply=_apply,
        event_type="payment.processed",
        note=command.notes,
    )


def mark_as_paid(order_id: int, command: MarkPaidCommand, *, actor) -> Order:
    """
    Finance shortcut: settle an APPROVED payment for the submitted amount.

    Method and transaction id default to what the payment record holds.
    """
    def _method(payment: OrderPayment) -> PaymentMethod | None:
        return command.payment_method or payment.payment_method

    def _transaction_id(payment: OrderPayment) -> str | None:
        return command.transaction_id or payment.transaction_id

    def _apply(order: Order, payment: OrderPayment, now: datetime) -> None:
        _settle(
            order,
            payment,
            actor=actor,
            now=now,
            method=_method(payment),
            transaction_id=_transaction_id(payment),
            amount_paid_cents=payment.amount_cents,
            notes=command.notes,
        )

    return _payment_transition(
        order_id,
        PaymentAction.SETTLE,
        actor=actor,
        replay=lambda p: is_replay(
            p.processed_by_id,
            actor,
            same_parameters=(
                p.payment_method == _method(p)
                and p.transaction_id == _transaction_id(p)
                and p.amount_paid_cents == p.amount_cents
            ),
            step="mark as paid",
        ),
        apply=_apply,
        event_type="payment.marked_paid",
        note=command.notes,
    )


def confirm_payment_receipt(order_id: int, command: ConfirmReceiptCommand, *, actor) -> Order:
    """
    The bound supplier acknowledges a PAID payment.

    Confirming twice with the same proof is a no-op; a different proof
    raises ConflictError.
    """
    def _op():
        order = get_order(order_id, lock=True)
        payment = order.payment

        if payment.supplier_confirmation:
            if is_replay(
                order.supplier_id,
                actor,
                same_parameters=payment.transaction_proof == command.transaction_proof,
                step="confirm payment receipt",
            ):
                return order, False
            raise InvalidTransition(
                payment.status,
                PaymentStatus.PAID,
                dimension="confirmation",
                message="Payment receipt has already been confirmed",
            )

        if payment.status != PaymentStatus.PAID:
            raise InvalidTransition(
                payment.status,
                PaymentStatus.PAID,
                dimension="confirmation",
                message=f"Payment must be Paid before receipt can be confirmed (currently {payment.status.value})",
            )

        payment.supplier_confirmation = True
        payment.confirmed_by_name = actor.name
        payment.confirmation_date = utcnow()
        payment.transaction_proof = command.transaction_proof
        payment.confirmation_notes = command.notes

        record_order_event(
            order=order,
            event_type="payment.confirmed",
            actor=actor,
            from_status=payment.status,
            to_status=payment.status,
            note=command.transaction_proof,
        )
        db.session.commit()
        return order, True

    order, changed = run_with_retry(_op)
    if changed:
        emit_order_changed(order, "payment.confirmed")
    return order
