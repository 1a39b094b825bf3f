# Overview: Flask API routes for employees and suppliers.

from flask import Blueprint, request, jsonify

from ..decorators import require_actor, workflow_errors
from ..services import employee_service


employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@workflow_errors
@require_actor
def list_employees_route():
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    employees = employee_service.list_employees(include_inactive=include_inactive)
    return jsonify({"items": [e.to_dict() for e in employees], "count": len(employees)})


@employees_bp.post("")
@workflow_errors
def create_employee_route():
    """
    Register an employee. Open to unauthenticated callers so a new
    department can sign up its first member.

    Request body:
    {"full_name": "...", "department": "supplier", "email": "...", "phone": "..."}
    """
    employee = employee_service.create_employee(request.get_json(silent=True))
    return jsonify({"employee": employee.to_dict()}), 201


@employees_bp.get("/department/<string:department>")
@workflow_errors
@require_actor
def employees_by_department_route(department: str):
    """Used by Inventory to pick a supplier when raising an order."""
    dept = employee_service.parse_department(department)
    employees = employee_service.list_employees(department=dept)
    return jsonify({"items": [e.to_dict() for e in employees], "count": len(employees)})
