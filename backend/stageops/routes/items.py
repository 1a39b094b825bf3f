# Overview: Flask API routes for items and the stock ledger.

"""
Item Routes

SECURITY:
- Reads require VIEW_STOCK (inventory, production, management)
- Writes go through the Inventory gateway (MANAGE_ITEMS / ADJUST_STOCK)

Quantity is never edited directly; it moves via restock, issue, or an
order being received.
"""

from flask import Blueprint, request, jsonify, g

from ..commands import StockAdjustmentCommand
from ..decorators import require_actor, require_permission, workflow_errors
from ..gateways import gateway_for
from ..services import stock_service


items_bp = Blueprint("items", __name__, url_prefix="/api/items")


@items_bp.get("")
@workflow_errors
@require_actor
@require_permission("VIEW_STOCK")
def list_items_route():
    """
    Query parameters:
    - search: substring match on item name
    - category: exact category
    """
    items = stock_service.list_items(
        search=request.args.get("search"),
        category=request.args.get("category"),
    )
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)})


@items_bp.post("")
@workflow_errors
@require_actor
def create_item_route():
    """
    Request body:
    {"name": "Stage Lights", "category": "Lighting", "quantity": 5, "min_threshold": 2, "unit": "pcs"}
    """
    payload = request.get_json(silent=True)
    item = gateway_for(g.actor).invoke("create_item", payload=payload)
    return jsonify({"item": item.to_dict()}), 201


@items_bp.get("/low-stock")
@workflow_errors
@require_actor
@require_permission("VIEW_STOCK")
def low_stock_route():
    items = stock_service.list_low_stock_items()
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)})


@items_bp.get("/<int:item_id>")
@workflow_errors
@require_actor
@require_permission("VIEW_STOCK")
def get_item_route(item_id: int):
    item = stock_service.get_item(item_id)
    return jsonify({"item": item.to_dict()})


@items_bp.patch("/<int:item_id>")
@workflow_errors
@require_actor
def update_item_route(item_id: int):
    payload = request.get_json(silent=True)
    item = gateway_for(g.actor).invoke("update_item", item_id=item_id, payload=payload)
    return jsonify({"item": item.to_dict()})


@items_bp.delete("/<int:item_id>")
@workflow_errors
@require_actor
def delete_item_route(item_id: int):
    gateway_for(g.actor).invoke("delete_item", item_id=item_id)
    return jsonify({"deleted": True, "id": item_id})


@items_bp.post("/<int:item_id>/restock")
@workflow_errors
@require_actor
def restock_item_route(item_id: int):
    """Request body: {"quantity": 5, "note": "..."}"""
    command = StockAdjustmentCommand.from_payload(request.get_json(silent=True))
    item = gateway_for(g.actor).invoke("restock_item", item_id=item_id, command=command)
    return jsonify({"item": item.to_dict()})


@items_bp.post("/<int:item_id>/issue")
@workflow_errors
@require_actor
def issue_stock_route(item_id: int):
    """Request body: {"quantity": 5, "note": "Issued to production"}"""
    command = StockAdjustmentCommand.from_payload(request.get_json(silent=True))
    item = gateway_for(g.actor).invoke("issue_stock", item_id=item_id, command=command)
    return jsonify({"item": item.to_dict()})


@items_bp.get("/<int:item_id>/movements")
@workflow_errors
@require_actor
@require_permission("VIEW_STOCK")
def item_movements_route(item_id: int):
    limit = request.args.get("limit", 100, type=int)
    if limit < 1:
        limit = 1
    if limit > 500:
        limit = 500
    movements = stock_service.get_stock_movements(item_id, limit=limit)
    return jsonify({
        "item_id": item_id,
        "movements": [m.to_dict() for m in movements],
    })
