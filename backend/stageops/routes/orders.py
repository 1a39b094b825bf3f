# Overview: Flask API routes for procurement orders and their payments.

"""
Order Routes

SECURITY: Every route resolves the caller via X-Employee-Id and goes
through the caller's role gateway; the gateway decides whether the
operation is allowed for the caller's department.

All state-changing routes return {"order": Order} with the nested payment.
"""

from flask import Blueprint, request, jsonify, g

from ..commands import (
    ConfirmReceiptCommand,
    CreateOrderCommand,
    MarkPaidCommand,
    ProcessPaymentCommand,
    RejectCommand,
    SubmitPaymentCommand,
    parse_datetime_param,
    parse_order_status,
    parse_payment_status,
)
from ..decorators import require_actor, workflow_errors
from ..gateways import gateway_for
from ..services.projection_service import search_orders


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")

# Upper bound when a text search has to scan every visible order
SEARCH_SCAN_LIMIT = 5000


def _order_response(order, status: int = 200):
    return jsonify({"order": order.to_dict()}), status


@orders_bp.get("")
@workflow_errors
@require_actor
def list_orders_route():
    """
    List orders visible to the caller (suppliers only see their own).

    Query parameters:
    - status: fulfillment status filter
    - payment_status: payment status filter
    - filter: all | <status> | paid | pending_confirmation
    - search: free text (item name, reference suffix, tracking number)
    - from / to: ISO-8601 creation time range
    - limit: Maximum results (default: 100)
    - offset: Pagination offset (default: 0)
    """
    limit = request.args.get("limit", 100, type=int)
    offset = request.args.get("offset", 0, type=int)

    # Clamp limit
    if limit < 1:
        limit = 1
    if limit > 500:
        limit = 500
    if offset < 0:
        offset = 0

    filters = {
        "status": parse_order_status(request.args.get("status")),
        "payment_status": parse_payment_status(request.args.get("payment_status")),
        "from_date": parse_datetime_param(request.args.get("from"), "from"),
        "to_date": parse_datetime_param(request.args.get("to"), "to"),
    }
    filter_key = request.args.get("filter")
    search = request.args.get("search")

    gateway = gateway_for(g.actor)
    if filter_key or search:
        candidates, _ = gateway.invoke("list_orders", limit=SEARCH_SCAN_LIMIT, offset=0, **filters)
        matched = search_orders(candidates, filter_key=filter_key or "all", text=search)
        total = len(matched)
        orders = matched[offset:offset + limit]
    else:
        orders, total = gateway.invoke("list_orders", limit=limit, offset=offset, **filters)

    return jsonify({
        "items": [o.to_dict() for o in orders],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@orders_bp.post("")
@workflow_errors
@require_actor
def create_order_route():
    """
    Create an order (Inventory).

    Request body:
    {
        "item_id": 1,          // required
        "supplier_id": 2,      // required, an active supplier
        "quantity": 10,        // required, positive integer
        "unit_price": "250",   // required, positive, max 2 decimals
        "notes": "..."         // optional
    }
    """
    command = CreateOrderCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("create_order", command=command)
    return _order_response(order, 201)


@orders_bp.get("/<int:order_id>")
@workflow_errors
@require_actor
def get_order_route(order_id: int):
    order = gateway_for(g.actor).invoke("get_order", order_id=order_id)
    return _order_response(order)


@orders_bp.get("/<int:order_id>/history")
@workflow_errors
@require_actor
def order_history_route(order_id: int):
    events = gateway_for(g.actor).invoke("order_history", order_id=order_id)
    return jsonify({"order_id": order_id, "events": [e.to_dict() for e in events]})


@orders_bp.get("/payment-status/<string:payment_status>")
@workflow_errors
@require_actor
def orders_by_payment_status_route(payment_status: str):
    """Finance payment queue. "All" lists every order whose payment has left Pending."""
    status = parse_payment_status(payment_status, allow_all=True)
    orders = gateway_for(g.actor).invoke("payment_queue", payment_status=status)
    return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)})


# -- Fulfillment --

@orders_bp.put("/<int:order_id>/approve")
@workflow_errors
@require_actor
def approve_order_route(order_id: int):
    order = gateway_for(g.actor).invoke("approve_order", order_id=order_id)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/reject")
@workflow_errors
@require_actor
def reject_order_route(order_id: int):
    command = RejectCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("reject_order", order_id=order_id, command=command)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/deliver")
@workflow_errors
@require_actor
def deliver_order_route(order_id: int):
    order = gateway_for(g.actor).invoke("mark_delivered", order_id=order_id)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/receive")
@workflow_errors
@require_actor
def receive_order_route(order_id: int):
    order = gateway_for(g.actor).invoke("mark_received", order_id=order_id)
    return _order_response(order)


# -- Payment --

@orders_bp.put("/<int:order_id>/submit-payment")
@workflow_errors
@require_actor
def submit_payment_route(order_id: int):
    """
    Request body (all optional):
    {"amount": "2500", "payment_method": "Bank Transfer", "notes": "..."}
    """
    command = SubmitPaymentCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("submit_payment", order_id=order_id, command=command)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/approve-payment")
@workflow_errors
@require_actor
def approve_payment_route(order_id: int):
    order = gateway_for(g.actor).invoke("approve_payment", order_id=order_id)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/reject-payment")
@workflow_errors
@require_actor
def reject_payment_route(order_id: int):
    command = RejectCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("reject_payment", order_id=order_id, command=command)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/process-payment")
@workflow_errors
@require_actor
def process_payment_route(order_id: int):
    """
    Request body:
    {
        "payment_method": "MPesa",   // required
        "amount_paid": "2500",       // required
        "transaction_id": "ABC123",  // required unless Cash
        "notes": "..."               // optional
    }
    """
    command = ProcessPaymentCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("process_payment", order_id=order_id, command=command)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/mark-paid")
@workflow_errors
@require_actor
def mark_paid_route(order_id: int):
    command = MarkPaidCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("mark_as_paid", order_id=order_id, command=command)
    return _order_response(order)


@orders_bp.put("/<int:order_id>/confirm-payment")
@workflow_errors
@require_actor
def confirm_payment_route(order_id: int):
    """Request body: {"transaction_proof": "...", "notes": "..."}"""
    command = ConfirmReceiptCommand.from_payload(request.get_json(silent=True))
    order = gateway_for(g.actor).invoke("confirm_payment_receipt", order_id=order_id, command=command)
    return _order_response(order)
