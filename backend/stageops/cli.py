# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/stageops/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migrated databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Idempotent demo data: one employee per department and a few items.
#
# Employees:
# - python -m flask employees list [--department supplier]
# - python -m flask employees create --name "Jane Doe" --department finance --email jane@stageops.local
#
# Items / orders:
# - python -m flask items list [--low-stock]
# - python -m flask orders list [--status Pending]
# - python -m flask orders show 12
#   Print an order with its payment and event history.
#
# Permissions:
# - python -m flask perms list [--department inventory]

import click
from flask.cli import with_appcontext

from .errors import OrderWorkflowError
from .extensions import db
from .models import Department, Employee, Item
from .permissions import DEPARTMENT_PERMISSIONS, PERMISSION_DEFINITIONS
from .services import employee_service, order_service, stock_service
from .commands import parse_order_status


def _money(cents) -> str:
    if cents is None:
        return "-"
    return f"{cents / 100:,.2f}"


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system seed' to add demo data.")


DEFAULT_EMPLOYEES = [
    ("Irene Inventory", "inventory@stageops.local", Department.INVENTORY),
    ("Sam Supplier", "supplier@stageops.local", Department.SUPPLIER),
    ("Fiona Finance", "finance@stageops.local", Department.FINANCE),
    ("Paul Production", "production@stageops.local", Department.PRODUCTION),
    ("Mona Manager", "manager@stageops.local", Department.MANAGER),
]

DEFAULT_ITEMS = [
    {"name": "Stage Lights", "category": "Lighting", "quantity": 12, "min_threshold": 4, "unit": "pcs"},
    {"name": "Wireless Microphone", "category": "Sound", "quantity": 3, "min_threshold": 5, "unit": "pcs"},
    {"name": "Black Curtain Fabric", "category": "Set", "quantity": 40, "min_threshold": 10, "unit": "m"},
]


@system_group.command('seed')
@with_appcontext
def seed():
    """Seed one employee per department and a few items. Safe to re-run."""
    click.echo("START Seeding demo data...")

    for full_name, email, department in DEFAULT_EMPLOYEES:
        existing = db.session.query(Employee).filter_by(email=email).first()
        if existing:
            click.echo(f"SKIP Employee {email} already exists (ID: {existing.id})")
            continue
        employee = employee_service.create_employee({
            "full_name": full_name,
            "email": email,
            "department": department.value,
        })
        click.echo(f"PASS Created {department.value} employee: {employee.full_name} (ID: {employee.id})")

    for payload in DEFAULT_ITEMS:
        existing = db.session.query(Item).filter_by(name=payload["name"]).first()
        if existing:
            click.echo(f"SKIP Item '{payload['name']}' already exists (ID: {existing.id})")
            continue
        item = stock_service.create_item(dict(payload))
        click.echo(f"PASS Created item: {item.name} (ID: {item.id}, qty {item.quantity})")

    click.echo("DONE Seed complete.")


@click.group('employees')
def employees_group():
    """Employee inspection and bootstrap."""


@employees_group.command('list')
@click.option('--department', help='Filter by department')
@click.option('--all', 'include_inactive', is_flag=True, help='Include inactive employees')
@with_appcontext
def list_employees_cli(department, include_inactive):
    """List employees."""
    try:
        dept = employee_service.parse_department(department) if department else None
    except OrderWorkflowError as e:
        click.echo(f"FAIL {e.message}")
        return

    employees = employee_service.list_employees(department=dept, include_inactive=include_inactive)
    if not employees:
        click.echo("No employees found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<32} {'Department':<12} {'Active'}")
    click.echo("="*90)
    for e in employees:
        active_str = "Yes" if e.is_active else "No"
        click.echo(f"{e.id:<5} {e.full_name:<25} {(e.email or '-'):<32} {e.department.value:<12} {active_str}")
    click.echo("="*90 + "\n")


@employees_group.command('create')
@click.option('--name', 'full_name', prompt=True, help='Full name')
@click.option('--department', type=click.Choice([d.value for d in Department]), prompt=True, help='Department')
@click.option('--email', default=None, help='Email address')
@click.option('--phone', default=None, help='Phone number')
@with_appcontext
def create_employee_cli(full_name, department, email, phone):
    """Create an employee."""
    payload = {"full_name": full_name, "department": department}
    if email:
        payload["email"] = email
    if phone:
        payload["phone"] = phone
    try:
        employee = employee_service.create_employee(payload)
    except OrderWorkflowError as e:
        click.echo(f"FAIL {e.message}")
        return
    click.echo(f"PASS Created employee {employee.full_name} (ID: {employee.id}, {employee.department.value})")


@click.group('items')
def items_group():
    """Item and stock inspection."""


@items_group.command('list')
@click.option('--low-stock', is_flag=True, help='Only items at or below their threshold')
@with_appcontext
def list_items_cli(low_stock):
    """List items with current stock."""
    items = stock_service.list_low_stock_items() if low_stock else stock_service.list_items()
    if not items:
        click.echo("No items found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Category':<15} {'Qty':>8} {'Min':>6}  {'Low'}")
    click.echo("="*80)
    for i in items:
        low_str = "LOW" if i.is_low_stock else ""
        click.echo(f"{i.id:<5} {i.name:<30} {(i.category or '-'):<15} {i.quantity:>8} {i.min_threshold:>6}  {low_str}")
    click.echo("="*80 + "\n")


@click.group('orders')
def orders_group():
    """Order inspection."""


@orders_group.command('list')
@click.option('--status', help='Filter by fulfillment status')
@click.option('--limit', type=int, default=50, show_default=True)
@with_appcontext
def list_orders_cli(status, limit):
    """List recent orders."""
    try:
        order_status = parse_order_status(status)
    except OrderWorkflowError as e:
        click.echo(f"FAIL {e.message}")
        return

    orders, total = order_service.list_orders(status=order_status, limit=limit)
    if not orders:
        click.echo("No orders found.")
        return

    click.echo("\n" + "="*100)
    click.echo(f"{'ID':<5} {'Ref':<8} {'Item':<25} {'Supplier':<20} {'Qty':>5} {'Total':>12} {'Status':<10} {'Payment'}")
    click.echo("="*100)
    for o in orders:
        click.echo(
            f"{o.id:<5} {o.reference[-6:]:<8} {o.item_name[:25]:<25} {o.supplier_name[:20]:<20} "
            f"{o.quantity:>5} {_money(o.total_cost_cents):>12} {o.status.value:<10} {o.payment.status.value}"
        )
    click.echo("="*100)
    click.echo(f"Showing {len(orders)} of {total}\n")


@orders_group.command('show')
@click.argument('order_id', type=int)
@with_appcontext
def show_order_cli(order_id):
    """Show one order with its payment and history."""
    try:
        order = order_service.get_order(order_id)
    except OrderWorkflowError as e:
        click.echo(f"FAIL {e.message}")
        return

    payment = order.payment
    click.echo(f"\nOrder {order.id} ({order.reference})")
    click.echo("-"*60)
    click.echo(f"Item:        {order.item_name} x {order.quantity}")
    click.echo(f"Supplier:    {order.supplier_name}")
    click.echo(f"Unit price:  {_money(order.unit_price_cents)}")
    click.echo(f"Total:       {_money(order.total_cost_cents)}")
    click.echo(f"Status:      {order.status.value}")
    click.echo(f"Tracking:    {order.tracking_number or '-'}")
    click.echo(f"Payment:     {payment.status.value} ({_money(payment.amount_cents)})")
    if payment.supplier_confirmation:
        click.echo(f"Confirmed:   {payment.confirmed_by_name} ({payment.transaction_proof})")

    click.echo("\nHistory:")
    for ev in order_service.order_history(order.id):
        transition = f"{ev.from_status or '-'} -> {ev.to_status or '-'}"
        click.echo(f"  {ev.occurred_at:%Y-%m-%d %H:%M}  {ev.event_type:<22} {transition:<24} {ev.note or ''}")
    click.echo("")


@click.group('perms')
def perms_group():
    """Permission inspection."""


@perms_group.command('list')
@click.option('--department', type=click.Choice([d.value for d in Department]), help='Filter by department')
@with_appcontext
def list_permissions_cli(department):
    """List permission codes, optionally only those a department holds."""
    granted = None
    if department:
        granted = DEPARTMENT_PERMISSIONS.get(Department(department), frozenset())

    click.echo(f"\n{'='*80}")
    click.echo(f"Permissions{' for ' + department if department else ''}")
    click.echo(f"{'='*80}\n")

    current_category = None
    count = 0
    for code, name, _description, category in PERMISSION_DEFINITIONS:
        if granted is not None and code not in granted:
            continue
        if category != current_category:
            if current_category:
                click.echo("")
            click.echo(f"CATEGORY {category}")
            click.echo("-"*80)
            current_category = category
        click.echo(f"  {code:<28} {name}")
        count += 1

    click.echo(f"\n Total: {count} permissions\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(employees_group)
    app.cli.add_command(items_group)
    app.cli.add_command(orders_group)
    app.cli.add_command(perms_group)
