# Overview: Pytest coverage for the stock ledger and item management.

import pytest

from stageops.errors import ConflictError, InsufficientStock, NotFound, ValidationError
from stageops.models import Item, StockMovement, StockReason
from stageops.services import order_service, stock_service


class TestLedgerPrimitives:
    def test_increment_writes_movement(self, db_session, item, inventory_actor):
        stock_service.increment(item.id, 3, reason=StockReason.RESTOCK, actor=inventory_actor, note="found")
        db_session.commit()

        assert db_session.get(Item, item.id).quantity == 8
        movement = db_session.query(StockMovement).filter_by(item_id=item.id).one()
        assert movement.quantity_delta == 3
        assert movement.quantity_after == 8
        assert movement.actor_employee_id == inventory_actor.employee_id
        assert movement.reason == StockReason.RESTOCK

    def test_decrement_below_zero_raises_and_writes_nothing(self, db_session, item):
        with pytest.raises(InsufficientStock) as exc:
            stock_service.decrement(item.id, 6, reason=StockReason.ISSUE)
        db_session.rollback()

        assert exc.value.available == 5
        assert exc.value.requested == 6
        assert db_session.get(Item, item.id).quantity == 5
        assert db_session.query(StockMovement).count() == 0

    def test_decrement_to_exactly_zero(self, db_session, item):
        stock_service.decrement(item.id, 5, reason=StockReason.ISSUE)
        db_session.commit()
        assert db_session.get(Item, item.id).quantity == 0

    @pytest.mark.parametrize("qty", [0, -1])
    def test_non_positive_quantity_rejected(self, db_session, item, qty):
        with pytest.raises(ValidationError):
            stock_service.increment(item.id, qty, reason=StockReason.RESTOCK)
        with pytest.raises(ValidationError):
            stock_service.decrement(item.id, qty, reason=StockReason.ISSUE)

    def test_unknown_item(self, db_session):
        with pytest.raises(NotFound):
            stock_service.increment(9999, 1, reason=StockReason.RESTOCK)


class TestItemManagement:
    def test_create_item_records_opening_stock(self, db_session, inventory_actor):
        item = stock_service.create_item(
            {"name": "Gel Filters", "category": "Lighting", "quantity": 20, "min_threshold": 5},
            actor=inventory_actor,
        )
        assert item.quantity == 20
        movements = stock_service.get_stock_movements(item.id)
        assert [m.quantity_delta for m in movements] == [20]
        assert movements[0].note == "Opening stock"

    def test_create_item_without_stock(self, db_session):
        item = stock_service.create_item({"name": "Rope"})
        assert item.quantity == 0
        assert stock_service.get_stock_movements(item.id) == []

    def test_create_item_rejects_negative_quantity(self, db_session):
        with pytest.raises(ValidationError):
            stock_service.create_item({"name": "Rope", "quantity": -1})

    def test_create_item_requires_name(self, db_session):
        with pytest.raises(ValidationError):
            stock_service.create_item({"category": "Set"})

    def test_update_item_cannot_touch_quantity(self, db_session, item):
        with pytest.raises(ValidationError):
            stock_service.update_item(item.id, {"quantity": 100})

        updated = stock_service.update_item(item.id, {"min_threshold": 8, "unit": "boxes"})
        assert updated.min_threshold == 8
        assert updated.unit == "boxes"
        assert updated.quantity == 5

    def test_restock_and_issue(self, db_session, item, inventory_actor):
        stock_service.restock_item(item.id, 10, actor=inventory_actor)
        stock_service.issue_stock(item.id, 12, actor=inventory_actor, note="Hamlet rehearsal")

        assert stock_service.get_item(item.id).quantity == 3
        reasons = [m.reason for m in stock_service.get_stock_movements(item.id)]
        assert reasons == [StockReason.ISSUE, StockReason.RESTOCK]

    def test_issue_more_than_available(self, db_session, item):
        with pytest.raises(InsufficientStock):
            stock_service.issue_stock(item.id, 50)
        assert stock_service.get_item(item.id).quantity == 5

    def test_low_stock_listing(self, db_session, item):
        stock_service.create_item({"name": "Batteries", "quantity": 1, "min_threshold": 10})
        stock_service.create_item({"name": "Tape", "quantity": 50, "min_threshold": 10})

        names = [i.name for i in stock_service.list_low_stock_items()]
        assert names == ["Batteries"]

    def test_list_items_search(self, db_session, item):
        stock_service.create_item({"name": "Stage Rope", "category": "Rigging"})
        assert {i.name for i in stock_service.list_items(search="stage")} == {"Stage Lights", "Stage Rope"}
        assert [i.name for i in stock_service.list_items(category="Rigging")] == ["Stage Rope"]

    def test_delete_unused_item(self, db_session):
        item = stock_service.create_item({"name": "Spare"})
        stock_service.delete_item(item.id)
        with pytest.raises(NotFound):
            stock_service.get_item(item.id)

    def test_delete_item_with_open_order_conflicts(self, db_session, make_order):
        order = make_order()
        with pytest.raises(ConflictError):
            stock_service.delete_item(order.item_id)
        assert order_service.get_order(order.id).item_id == order.item_id
