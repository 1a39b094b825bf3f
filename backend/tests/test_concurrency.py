# Overview: Threaded races between two actors driving the same order step.

"""
Concurrency Tests

Runs against a file-backed SQLite database so each thread gets its own
connection. The losing writer must re-read the winner's state and fail
cleanly instead of overwriting it.
"""

import threading

import pytest

from stageops import create_app
from stageops.actors import Actor
from stageops.commands import CreateOrderCommand, SubmitPaymentCommand
from stageops.errors import InvalidTransition
from stageops.extensions import db
from stageops.models import Department, Employee, Item, OrderEvent, PaymentStatus, StockMovement
from stageops.services import order_service, payment_service, stock_service


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'concurrency.db'}",
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


@pytest.fixture
def staff(file_app):
    """One employee per workflow department plus a second finance officer."""
    with file_app.app_context():
        people = {
            "inventory": Employee(full_name="Irene Inventory", email="irene@stageops.test", department=Department.INVENTORY),
            "supplier": Employee(full_name="Sam Supplier", email="sam@stageops.test", department=Department.SUPPLIER),
            "finance_a": Employee(full_name="Fiona Finance", email="fiona@stageops.test", department=Department.FINANCE),
            "finance_b": Employee(full_name="Frank Finance", email="frank@stageops.test", department=Department.FINANCE),
        }
        db.session.add_all(people.values())
        db.session.commit()
        return {key: Actor.from_employee(employee) for key, employee in people.items()}


def _received_order(file_app, staff):
    with file_app.app_context():
        item = Item(name="Fog Fluid", quantity=0, min_threshold=1)
        db.session.add(item)
        db.session.commit()
        order = order_service.create_order(
            CreateOrderCommand(item_id=item.id, supplier_id=staff["supplier"].employee_id, quantity=4, unit_price_cents=1500),
            actor=staff["inventory"],
        )
        order_service.approve_order(order.id, actor=staff["supplier"])
        order_service.mark_delivered(order.id, actor=staff["supplier"])
        order_service.mark_received(order.id, actor=staff["inventory"])
        return order.id, item.id


def _race(file_app, workers):
    """Start every worker behind one barrier and collect results or exceptions."""
    barrier = threading.Barrier(len(workers))
    results = []
    lock = threading.Lock()

    def run(fn):
        with file_app.app_context():
            try:
                barrier.wait()
                outcome = fn()
                with lock:
                    results.append(outcome)
            except Exception as exc:
                with lock:
                    results.append(exc)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=run, args=(fn,)) for fn in workers]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


class TestPaymentRaces:
    def test_two_finance_officers_approve_once(self, file_app, staff):
        order_id, _ = _received_order(file_app, staff)
        with file_app.app_context():
            payment_service.submit_payment(order_id, SubmitPaymentCommand(), actor=staff["inventory"])

        results = _race(file_app, [
            lambda: payment_service.approve_payment(order_id, actor=staff["finance_a"]).id,
            lambda: payment_service.approve_payment(order_id, actor=staff["finance_b"]).id,
        ])

        successes = [r for r in results if r == order_id]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidTransition)

        with file_app.app_context():
            payment = order_service.get_order(order_id).payment
            assert payment.status == PaymentStatus.APPROVED
            assert payment.approved_by_id in (staff["finance_a"].employee_id, staff["finance_b"].employee_id)
            assert db.session.query(OrderEvent).filter_by(order_id=order_id, event_type="payment.approved").count() == 1


class TestStockRaces:
    def test_concurrent_issues_never_oversell(self, file_app, staff):
        _, item_id = _received_order(file_app, staff)

        results = _race(file_app, [
            lambda: stock_service.issue_stock(item_id, 3, actor=staff["inventory"]).quantity,
            lambda: stock_service.issue_stock(item_id, 3, actor=staff["inventory"]).quantity,
        ])

        issued = [r for r in results if isinstance(r, int)]
        assert len(issued) == 1
        with file_app.app_context():
            assert stock_service.get_item(item_id).quantity == 1
            assert db.session.query(StockMovement).filter_by(item_id=item_id).count() == 2
