"""
Pytest fixtures for StageOps backend tests.

Provides the in-memory app, a per-test clean database, one employee per
department, an item, and helpers to drive an order through its lifecycle.
"""

import pytest
from stageops import create_app
from stageops.actors import Actor
from stageops.commands import CreateOrderCommand, SubmitPaymentCommand
from stageops.extensions import db
from stageops.models import Department, Employee, Item
from stageops.services import order_service, payment_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


def _employee(db_session, full_name, email, department, is_active=True):
    employee = Employee(full_name=full_name, email=email, department=department, is_active=is_active)
    db_session.add(employee)
    db_session.commit()
    return employee


@pytest.fixture(scope='function')
def inventory_clerk(db_session):
    return _employee(db_session, "Irene Inventory", "irene@stageops.test", Department.INVENTORY)


@pytest.fixture(scope='function')
def supplier(db_session):
    return _employee(db_session, "Sam Supplier", "sam@stageops.test", Department.SUPPLIER)


@pytest.fixture(scope='function')
def other_supplier(db_session):
    return _employee(db_session, "Olga Other", "olga@stageops.test", Department.SUPPLIER)


@pytest.fixture(scope='function')
def finance_officer(db_session):
    return _employee(db_session, "Fiona Finance", "fiona@stageops.test", Department.FINANCE)


@pytest.fixture(scope='function')
def second_finance_officer(db_session):
    return _employee(db_session, "Frank Finance", "frank@stageops.test", Department.FINANCE)


@pytest.fixture(scope='function')
def production_lead(db_session):
    return _employee(db_session, "Paul Production", "paul@stageops.test", Department.PRODUCTION)


@pytest.fixture(scope='function')
def inventory_actor(inventory_clerk):
    return Actor.from_employee(inventory_clerk)


@pytest.fixture(scope='function')
def supplier_actor(supplier):
    return Actor.from_employee(supplier)


@pytest.fixture(scope='function')
def other_supplier_actor(other_supplier):
    return Actor.from_employee(other_supplier)


@pytest.fixture(scope='function')
def finance_actor(finance_officer):
    return Actor.from_employee(finance_officer)


@pytest.fixture(scope='function')
def second_finance_actor(second_finance_officer):
    return Actor.from_employee(second_finance_officer)


@pytest.fixture(scope='function')
def item(db_session):
    """Stage lights with 5 on hand."""
    item = Item(name="Stage Lights", category="Lighting", quantity=5, min_threshold=2, unit="pcs")
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def make_order(item, supplier, inventory_actor):
    """Factory: create a Pending order (10 x 250.00 by default)."""
    def _make(quantity=10, unit_price_cents=25000, supplier_id=None, item_id=None, notes=None):
        command = CreateOrderCommand(
            item_id=item_id or item.id,
            supplier_id=supplier_id or supplier.id,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
            notes=notes,
        )
        return order_service.create_order(command, actor=inventory_actor)
    return _make


@pytest.fixture(scope='function')
def received_order(make_order, supplier_actor, inventory_actor):
    """A Received order of 10 x 250.00 (total 2,500.00) with a Pending payment."""
    order = make_order()
    order_service.approve_order(order.id, actor=supplier_actor)
    order_service.mark_delivered(order.id, actor=supplier_actor)
    return order_service.mark_received(order.id, actor=inventory_actor)


@pytest.fixture(scope='function')
def submitted_order(received_order, inventory_actor):
    return payment_service.submit_payment(received_order.id, SubmitPaymentCommand(), actor=inventory_actor)


@pytest.fixture(scope='function')
def approved_order(submitted_order, finance_actor):
    return payment_service.approve_payment(submitted_order.id, actor=finance_actor)
