# Overview: Flask API routes for role dashboards and summaries.

from flask import Blueprint, jsonify, g

from ..decorators import require_actor, require_permission, workflow_errors
from ..gateways import gateway_for
from ..services import projection_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("")
@workflow_errors
@require_actor
def dashboard_route():
    """Order counts scoped to the caller's role (suppliers see only their orders)."""
    return jsonify(gateway_for(g.actor).invoke("dashboard"))


@dashboard_bp.get("/finance")
@workflow_errors
@require_actor
def finance_dashboard_route():
    return jsonify(gateway_for(g.actor).invoke("finance_summary"))


@dashboard_bp.get("/inventory")
@workflow_errors
@require_actor
@require_permission("VIEW_STOCK")
def inventory_dashboard_route():
    return jsonify(projection_service.inventory_summary())
