# Overview: Service-layer operations for employees (including suppliers).

"""
Employee Service

WHY: Every order names a supplier and every action names an actor. Both
are employees; the department column decides which gateway they may use.

DESIGN:
- Suppliers are employees in the supplier department; there is no
  separate supplier table.
- Email is optional but unique when given (case-insensitive).
- Employees are never deleted, only deactivated, so order attribution
  stays resolvable.
"""

from __future__ import annotations

from sqlalchemy import func

from ..extensions import db
from ..errors import ConflictError, NotFound, ValidationError
from ..models import Department, Employee
from ..validation import EMPLOYEE_CREATE_POLICY, validate_payload
from .concurrency import run_with_retry


def parse_department(value) -> Department:
    if isinstance(value, Department):
        return value
    if isinstance(value, str):
        wanted = value.strip().lower()
        for department in Department:
            if department.value == wanted:
                return department
    allowed = ", ".join(d.value for d in Department)
    raise ValidationError(f"Invalid department. Must be one of: {allowed}", field="department")


def get_employee(employee_id: int) -> Employee:
    employee = db.session.query(Employee).filter_by(id=employee_id).first()
    if employee is None:
        raise NotFound(f"Employee {employee_id} not found", resource="employee", id=employee_id)
    return employee


def find_active_employee(employee_id: int) -> Employee | None:
    """Lookup used by the transport layer to resolve the calling employee."""
    return (
        db.session.query(Employee)
        .filter(Employee.id == employee_id, Employee.is_active.is_(True))
        .first()
    )


def create_employee(payload: dict) -> Employee:
    """
    Create an employee from a client payload.

    Raises:
        ValidationError: missing/invalid fields or unknown department
        ConflictError: email already in use
    """
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_CREATE_POLICY, partial=False)
    patch["department"] = parse_department(patch.get("department"))
    if patch.get("email"):
        patch["email"] = patch["email"].lower()
    else:
        patch["email"] = None

    def _op():
        if patch["email"]:
            existing = (
                db.session.query(Employee.id)
                .filter(func.lower(Employee.email) == patch["email"])
                .first()
            )
            if existing:
                raise ConflictError(f"Email '{patch['email']}' is already registered", field="email")

        employee = Employee(is_active=True, **patch)
        db.session.add(employee)
        db.session.commit()
        return employee

    return run_with_retry(_op)


def list_employees(*, department: Department | None = None, include_inactive: bool = False) -> list[Employee]:
    query = db.session.query(Employee)
    if department is not None:
        query = query.filter(Employee.department == department)
    if not include_inactive:
        query = query.filter(Employee.is_active.is_(True))
    return query.order_by(Employee.full_name, Employee.id).all()
