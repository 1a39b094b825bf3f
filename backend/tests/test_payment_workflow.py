# Overview: Pytest coverage for the payment sub-workflow of an order.

"""
Payment Workflow Tests

Covers submit/approve/reject/process/mark-paid/confirm, the resubmission
path, settlement validation, the Order-Paid-iff-Payment-Paid rule and
replays of already-applied steps.
"""

import pytest

from stageops.commands import (
    ConfirmReceiptCommand,
    MarkPaidCommand,
    ProcessPaymentCommand,
    RejectCommand,
    SubmitPaymentCommand,
)
from stageops.errors import ConflictError, InvalidTransition, ValidationError
from stageops.models import OrderEvent, OrderStatus, PaymentMethod, PaymentStatus
from stageops.services import order_service, payment_service
from stageops.services.payment_service import DEFAULT_PAYMENT_REJECTION_REASON
from stageops.services.workflow import PAYMENT_TRANSITIONS, PaymentAction, next_payment_status


def _process(amount_cents=250000, method=PaymentMethod.MPESA, transaction_id="ABC123"):
    return ProcessPaymentCommand(
        payment_method=method,
        amount_paid_cents=amount_cents,
        transaction_id=transaction_id,
    )


class TestPaymentTable:
    def test_payment_requires_received_order(self):
        for order_status in OrderStatus:
            if order_status == OrderStatus.RECEIVED:
                continue
            with pytest.raises(InvalidTransition):
                next_payment_status(order_status, PaymentStatus.PENDING, PaymentAction.SUBMIT)

    def test_only_table_edges_are_legal(self):
        for status in PaymentStatus:
            for action in PaymentAction:
                if (status, action) in PAYMENT_TRANSITIONS:
                    assert next_payment_status(OrderStatus.RECEIVED, status, action) == PAYMENT_TRANSITIONS[(status, action)]
                else:
                    with pytest.raises(InvalidTransition):
                        next_payment_status(OrderStatus.RECEIVED, status, action)


class TestSubmit:
    def test_submit_defaults_to_total_cost(self, db_session, received_order, inventory_actor):
        order = payment_service.submit_payment(received_order.id, SubmitPaymentCommand(), actor=inventory_actor)
        payment = order.payment
        assert payment.status == PaymentStatus.SUBMITTED
        assert payment.amount_cents == order.total_cost_cents == 250000
        assert payment.payment_method == PaymentMethod.BANK_TRANSFER
        assert payment.submission_count == 1
        assert payment.submitted_by_name == "Irene Inventory"
        assert order.status == OrderStatus.RECEIVED

    def test_submit_before_receipt_is_invalid(self, db_session, make_order, inventory_actor):
        order = make_order()
        with pytest.raises(InvalidTransition) as exc:
            payment_service.submit_payment(order.id, SubmitPaymentCommand(), actor=inventory_actor)
        assert exc.value.current_status == "Pending"
        assert order_service.get_order(order.id).payment.status == PaymentStatus.PENDING

    def test_submit_twice_same_details_is_noop(self, db_session, submitted_order, inventory_actor):
        order = payment_service.submit_payment(submitted_order.id, SubmitPaymentCommand(), actor=inventory_actor)
        assert order.payment.submission_count == 1

    def test_submit_twice_different_amount_conflicts(self, db_session, submitted_order, inventory_actor):
        with pytest.raises(ConflictError):
            payment_service.submit_payment(
                submitted_order.id, SubmitPaymentCommand(amount_cents=1000), actor=inventory_actor
            )


class TestDecision:
    def test_reject_then_resubmit_then_approve(self, db_session, submitted_order, inventory_actor, finance_actor):
        order = payment_service.reject_payment(submitted_order.id, RejectCommand(), actor=finance_actor)
        assert order.payment.status == PaymentStatus.REJECTED
        assert order.payment.rejection_reason == DEFAULT_PAYMENT_REJECTION_REASON
        assert order.status == OrderStatus.RECEIVED

        order = payment_service.submit_payment(order.id, SubmitPaymentCommand(), actor=inventory_actor)
        assert order.payment.status == PaymentStatus.SUBMITTED
        assert order.payment.submission_count == 2
        assert order.payment.rejected_by_id is None
        assert order.payment.rejection_reason is None

        order = payment_service.approve_payment(order.id, actor=finance_actor)
        assert order.payment.status == PaymentStatus.APPROVED
        assert order.payment.approved_by_id == finance_actor.employee_id

    def test_submission_cap(self, app, db_session, submitted_order, inventory_actor, finance_actor):
        app.config["PAYMENT_MAX_SUBMISSIONS"] = 1
        try:
            payment_service.reject_payment(submitted_order.id, RejectCommand(reason="Wrong amount"), actor=finance_actor)
            with pytest.raises(ConflictError):
                payment_service.submit_payment(submitted_order.id, SubmitPaymentCommand(), actor=inventory_actor)
            assert order_service.get_order(submitted_order.id).payment.status == PaymentStatus.REJECTED
        finally:
            app.config["PAYMENT_MAX_SUBMISSIONS"] = None

    def test_approve_requires_submitted(self, db_session, received_order, finance_actor):
        with pytest.raises(InvalidTransition):
            payment_service.approve_payment(received_order.id, actor=finance_actor)

    def test_second_finance_officer_cannot_reapprove(self, db_session, approved_order, second_finance_actor):
        with pytest.raises(InvalidTransition):
            payment_service.approve_payment(approved_order.id, actor=second_finance_actor)

    def test_same_finance_officer_reapprove_is_noop(self, db_session, approved_order, finance_actor):
        before = db_session.query(OrderEvent).count()
        order = payment_service.approve_payment(approved_order.id, actor=finance_actor)
        assert order.payment.status == PaymentStatus.APPROVED
        assert db_session.query(OrderEvent).count() == before


class TestSettlement:
    def test_full_payment_path(self, db_session, received_order, inventory_actor, finance_actor):
        """Submit -> Reject -> Submit -> Approve -> Process ends Paid/Paid with one processed stamp."""
        oid = received_order.id
        payment_service.submit_payment(oid, SubmitPaymentCommand(), actor=inventory_actor)
        payment_service.reject_payment(oid, RejectCommand(reason="Missing invoice"), actor=finance_actor)
        payment_service.submit_payment(oid, SubmitPaymentCommand(), actor=inventory_actor)
        payment_service.approve_payment(oid, actor=finance_actor)
        order = payment_service.process_payment(oid, _process(), actor=finance_actor)

        assert order.status == OrderStatus.PAID
        assert order.payment.status == PaymentStatus.PAID
        assert order.paid_at is not None
        assert order.payment.amount_paid_cents == 250000
        assert order.payment.transaction_id == "ABC123"
        assert order.payment.processed_by_id == finance_actor.employee_id
        assert db_session.query(OrderEvent).filter_by(order_id=oid, event_type="payment.processed").count() == 1
        assert db_session.query(OrderEvent).filter_by(order_id=oid, event_type="order.paid").count() == 1

    def test_missing_transaction_id_leaves_payment_approved(self, db_session, approved_order, finance_actor):
        with pytest.raises(ValidationError) as exc:
            payment_service.process_payment(approved_order.id, _process(transaction_id=None), actor=finance_actor)
        assert exc.value.details["field"] == "transaction_id"

        order = order_service.get_order(approved_order.id)
        assert order.payment.status == PaymentStatus.APPROVED
        assert order.status == OrderStatus.RECEIVED
        assert order.payment.processed_by_id is None

    def test_cash_needs_no_transaction_id(self, db_session, approved_order, finance_actor):
        order = payment_service.process_payment(
            approved_order.id, _process(method=PaymentMethod.CASH, transaction_id=None), actor=finance_actor
        )
        assert order.status == OrderStatus.PAID

    def test_process_requires_approved(self, db_session, submitted_order, finance_actor):
        with pytest.raises(InvalidTransition):
            payment_service.process_payment(submitted_order.id, _process(), actor=finance_actor)

    def test_reprocess_same_details_is_noop(self, db_session, approved_order, finance_actor):
        first = payment_service.process_payment(approved_order.id, _process(), actor=finance_actor)
        processed_at = first.payment.processed_at
        again = payment_service.process_payment(approved_order.id, _process(), actor=finance_actor)
        assert again.payment.processed_at == processed_at

    def test_reprocess_different_details_conflicts(self, db_session, approved_order, finance_actor):
        payment_service.process_payment(approved_order.id, _process(), actor=finance_actor)
        with pytest.raises(ConflictError):
            payment_service.process_payment(approved_order.id, _process(transaction_id="XYZ999"), actor=finance_actor)

    def test_mark_as_paid_uses_submitted_amount(self, db_session, received_order, inventory_actor, finance_actor):
        payment_service.submit_payment(
            received_order.id,
            SubmitPaymentCommand(amount_cents=200000, payment_method=PaymentMethod.CASH),
            actor=inventory_actor,
        )
        payment_service.approve_payment(received_order.id, actor=finance_actor)
        order = payment_service.mark_as_paid(received_order.id, MarkPaidCommand(), actor=finance_actor)

        assert order.status == OrderStatus.PAID
        assert order.payment.amount_paid_cents == 200000
        assert order.payment.payment_method == PaymentMethod.CASH

    def test_mark_as_paid_bank_transfer_needs_transaction_id(self, db_session, approved_order, finance_actor):
        with pytest.raises(ValidationError):
            payment_service.mark_as_paid(approved_order.id, MarkPaidCommand(), actor=finance_actor)

        order = payment_service.mark_as_paid(
            approved_order.id, MarkPaidCommand(transaction_id="BANK-778"), actor=finance_actor
        )
        assert order.payment.status == PaymentStatus.PAID
        assert order.payment.transaction_id == "BANK-778"


    def test_mark_as_paid_after_partial_settlement_conflicts(self, db_session, approved_order, finance_actor):
        payment_service.process_payment(approved_order.id, _process(amount_cents=1000), actor=finance_actor)
        with pytest.raises(ConflictError):
            payment_service.mark_as_paid(approved_order.id, MarkPaidCommand(), actor=finance_actor)
        assert order_service.get_order(approved_order.id).payment.amount_paid_cents == 1000

    def test_mark_as_paid_after_full_settlement_is_noop(self, db_session, approved_order, finance_actor):
        first = payment_service.process_payment(approved_order.id, _process(), actor=finance_actor)
        processed_at = first.payment.processed_at
        again = payment_service.mark_as_paid(approved_order.id, MarkPaidCommand(), actor=finance_actor)
        assert again.payment.processed_at == processed_at

class TestConfirmation:
    @pytest.fixture
    def paid_order(self, approved_order, finance_actor):
        return payment_service.process_payment(approved_order.id, _process(), actor=finance_actor)

    def test_confirm_requires_paid(self, db_session, approved_order, supplier_actor):
        with pytest.raises(InvalidTransition):
            payment_service.confirm_payment_receipt(
                approved_order.id, ConfirmReceiptCommand(transaction_proof="RCPT-1"), actor=supplier_actor
            )
        assert order_service.get_order(approved_order.id).payment.supplier_confirmation is False

    def test_confirm_records_proof(self, db_session, paid_order, supplier_actor):
        order = payment_service.confirm_payment_receipt(
            paid_order.id, ConfirmReceiptCommand(transaction_proof="RCPT-1", notes="Thanks"), actor=supplier_actor
        )
        payment = order.payment
        assert payment.supplier_confirmation is True
        assert payment.confirmed_by_name == "Sam Supplier"
        assert payment.confirmation_date is not None
        assert payment.transaction_proof == "RCPT-1"

    def test_confirm_twice_same_proof_is_noop(self, db_session, paid_order, supplier_actor):
        cmd = ConfirmReceiptCommand(transaction_proof="RCPT-1")
        first = payment_service.confirm_payment_receipt(paid_order.id, cmd, actor=supplier_actor)
        confirmed_at = first.payment.confirmation_date
        again = payment_service.confirm_payment_receipt(paid_order.id, cmd, actor=supplier_actor)
        assert again.payment.confirmation_date == confirmed_at
        assert db_session.query(OrderEvent).filter_by(event_type="payment.confirmed").count() == 1

    def test_confirm_twice_different_proof_conflicts(self, db_session, paid_order, supplier_actor):
        payment_service.confirm_payment_receipt(
            paid_order.id, ConfirmReceiptCommand(transaction_proof="RCPT-1"), actor=supplier_actor
        )
        with pytest.raises(ConflictError):
            payment_service.confirm_payment_receipt(
                paid_order.id, ConfirmReceiptCommand(transaction_proof="RCPT-2"), actor=supplier_actor
            )
