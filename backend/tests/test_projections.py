# Overview: Pytest coverage for dashboard stats, order search and finance summaries.

import pytest

from stageops.commands import ConfirmReceiptCommand, ProcessPaymentCommand, RejectCommand
from stageops.errors import ValidationError
from stageops.models import PaymentMethod, PaymentStatus
from stageops.services import order_service, payment_service, projection_service, stock_service


@pytest.fixture
def paid_order(approved_order, finance_actor):
    command = ProcessPaymentCommand(
        payment_method=PaymentMethod.MPESA,
        amount_paid_cents=250000,
        transaction_id="ABC123",
    )
    return payment_service.process_payment(approved_order.id, command, actor=finance_actor)


class TestOrderStats:
    def test_counts_each_dimension(self, db_session, make_order, paid_order, supplier_actor):
        pending = make_order(quantity=1)
        rejected = make_order(quantity=2)
        order_service.reject_order(rejected.id, RejectCommand(reason="Discontinued"), actor=supplier_actor)

        orders, _ = order_service.list_orders()
        stats = projection_service.order_stats(orders)

        assert stats["total"] == 3
        assert stats["pending"] == 1
        assert stats["rejected"] == 1
        assert stats["paid"] == 1
        assert stats["awaiting_confirmation"] == 1
        assert stats["payment"]["pending"] == 2
        assert stats["payment"]["paid"] == 1
        assert pending.id in {o.id for o in orders}

    def test_confirmation_clears_awaiting(self, db_session, paid_order, supplier_actor):
        payment_service.confirm_payment_receipt(
            paid_order.id, ConfirmReceiptCommand(transaction_proof="RCPT-1"), actor=supplier_actor
        )
        orders, _ = order_service.list_orders()
        assert projection_service.order_stats(orders)["awaiting_confirmation"] == 0

    def test_empty(self):
        stats = projection_service.order_stats([])
        assert stats["total"] == 0
        assert stats["payment"] == {"pending": 0, "submitted": 0, "approved": 0, "rejected": 0, "paid": 0}


class TestSearchOrders:
    def test_filter_by_status_name(self, db_session, make_order, received_order):
        make_order()
        orders, _ = order_service.list_orders()
        assert [o.id for o in projection_service.search_orders(orders, filter_key="received")] == [received_order.id]
        assert len(projection_service.search_orders(orders, filter_key="All")) == 2

    def test_paid_and_pending_confirmation(self, db_session, make_order, paid_order):
        make_order()
        orders, _ = order_service.list_orders()
        assert [o.id for o in projection_service.search_orders(orders, filter_key="paid")] == [paid_order.id]
        assert [o.id for o in projection_service.search_orders(orders, filter_key="pending_confirmation")] == [paid_order.id]

    def test_text_matches_item_reference_or_tracking(self, db_session, received_order):
        orders = [order_service.get_order(received_order.id)]
        assert projection_service.search_orders(orders, text="stage")
        assert projection_service.search_orders(orders, text=received_order.reference[-6:].upper())
        assert projection_service.search_orders(orders, text=received_order.tracking_number.lower())
        assert projection_service.search_orders(orders, text="gels") == []

    def test_invalid_filter(self):
        with pytest.raises(ValidationError) as exc:
            projection_service.search_orders([], filter_key="shipped")
        assert exc.value.details["field"] == "filter"


class TestDashboards:
    def test_supplier_dashboard_is_scoped(self, db_session, make_order, other_supplier, supplier_actor, other_supplier_actor):
        make_order()
        make_order()
        make_order(supplier_id=other_supplier.id)

        mine = projection_service.dashboard_for(supplier_actor)
        theirs = projection_service.dashboard_for(other_supplier_actor)
        assert mine["stats"]["total"] == 2
        assert theirs["stats"]["total"] == 1
        assert mine["department"] == "supplier"

    def test_recent_orders_are_capped(self, db_session, make_order, inventory_actor):
        for qty in range(1, 8):
            make_order(quantity=qty)
        data = projection_service.dashboard_for(inventory_actor, recent=5)
        assert data["stats"]["total"] == 7
        assert len(data["recent_orders"]) == 5


class TestFinanceProjections:
    def test_payment_queue_excludes_pending(self, db_session, make_order, submitted_order):
        make_order()
        queue = projection_service.payment_queue()
        assert [o.id for o in queue] == [submitted_order.id]
        assert projection_service.payment_queue(PaymentStatus.PENDING)[0].id != submitted_order.id

    def test_finance_summary(self, db_session, paid_order, make_order, inventory_actor):
        summary = projection_service.finance_summary()
        assert summary["total_revenue_cents"] == 250000
        assert summary["counts"] == {"pending": 0, "paid": 1}
        assert summary["by_item"] == [{"item_name": "Stage Lights", "orders": 1, "amount_cents": 250000}]

    def test_finance_summary_counts_open_payments(self, db_session, submitted_order):
        summary = projection_service.finance_summary()
        assert summary["total_revenue_cents"] == 0
        assert summary["counts"] == {"pending": 1, "paid": 0}
        assert summary["by_item"] == []


class TestInventorySummary:
    def test_low_stock_and_open_orders(self, db_session, item, make_order, supplier_actor):
        stock_service.create_item({"name": "Batteries", "quantity": 1, "min_threshold": 10})
        order = make_order()
        order_service.approve_order(order.id, actor=supplier_actor)
        order_service.mark_delivered(order.id, actor=supplier_actor)

        summary = projection_service.inventory_summary()
        assert summary["item_count"] == 2
        assert summary["low_stock_count"] == 1
        assert summary["low_stock_items"][0]["name"] == "Batteries"
        assert summary["open_order_count"] == 1
        assert summary["awaiting_receipt_count"] == 1
