# backend/stageops/routes/system.py
"""
System health endpoint.

Reports database connectivity and whether the staff needed to run the
procurement workflow (inventory, supplier, finance) exists.
"""

import time
from flask import Blueprint, current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Department, Employee, Item, Order
from ..time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")

WORKFLOW_DEPARTMENTS = (Department.INVENTORY, Department.SUPPLIER, Department.FINANCE)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        order_count = db.session.query(Order).count()
        item_count = db.session.query(Item).count()
        employee_count = db.session.query(Employee).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "orders": order_count,
                "items": item_count,
                "employees": employee_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


def check_staffing_health() -> dict:
    """
    Check that every department in the order workflow has an active employee.
    """
    start_time = time.time()
    try:
        rows = (
            db.session.query(Employee.department, func.count(Employee.id))
            .filter(Employee.is_active.is_(True))
            .group_by(Employee.department)
            .all()
        )
        counts = {department: count for department, count in rows}
        missing = [d.value for d in WORKFLOW_DEPARTMENTS if not counts.get(d)]

        elapsed_ms = (time.time() - start_time) * 1000

        details = {d.value: int(counts.get(d, 0)) for d in WORKFLOW_DEPARTMENTS}
        if missing:
            return {
                "status": "degraded",
                "latency_ms": round(elapsed_ms, 2),
                "warning": f"No active employees in: {', '.join(missing)}",
                "details": details,
            }

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Staffing health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Staffing check error"
        }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: healthy or degraded (still operational)
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    staffing_health = check_staffing_health()

    all_checks = [database_health, staffing_health]
    unhealthy_count = sum(1 for check in all_checks if check["status"] == "unhealthy")
    degraded_count = sum(1 for check in all_checks if check["status"] == "degraded")

    if unhealthy_count > 0:
        overall_status = "unhealthy"
        http_status = 503
    elif degraded_count > 0:
        overall_status = "degraded"
        http_status = 200  # Degraded is still operational
    else:
        overall_status = "healthy"
        http_status = 200

    total_elapsed_ms = (time.time() - start_time) * 1000

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round(total_elapsed_ms, 2),
        "currency": current_app.config.get("CURRENCY_CODE"),
        "checks": {
            "database": database_health,
            "staffing": staffing_health,
        }
    }

    return response, http_status
