# Overview: Typed failures returned by the procurement core.

"""
Procurement Error Taxonomy

Every failure the order/payment core can report is one of the classes below.
Routes map them onto HTTP status codes via ``http_status``; nothing in the
core swallows them or retries them.
"""

from __future__ import annotations


class OrderWorkflowError(Exception):
    """Base class for all typed procurement failures."""

    code = "ORDER_WORKFLOW_ERROR"
    http_status = 400

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload = {"error": self.code, "message": self.message}
        payload.update(self.details)
        return payload


class ValidationError(OrderWorkflowError, ValueError):
    """400-level input problem."""

    code = "VALIDATION_ERROR"
    http_status = 400


class PermissionDenied(OrderWorkflowError):
    """Actor is not authorized for the requested operation."""

    code = "PERMISSION_DENIED"
    http_status = 403


class NotFound(OrderWorkflowError):
    """Referenced order, item, supplier or employee does not exist."""

    code = "NOT_FOUND"
    http_status = 404


class InvalidTransition(OrderWorkflowError):
    """Operation is not legal from the current status."""

    code = "INVALID_TRANSITION"
    http_status = 409

    def __init__(self, current_status, requested_status, *, dimension: str = "order", message: str | None = None):
        current = getattr(current_status, "value", current_status)
        requested = getattr(requested_status, "value", requested_status)
        super().__init__(
            message or f"Cannot move {dimension} from {current} to {requested}",
            dimension=dimension,
            current_status=current,
            requested_status=requested,
        )
        self.current_status = current
        self.requested_status = requested


class ConflictError(OrderWorkflowError, ValueError):
    """409-level business rule conflict (e.g., divergent retry of an applied step)."""

    code = "CONFLICT"
    http_status = 409


class InsufficientStock(OrderWorkflowError):
    """A stock mutation would drive an item's quantity negative."""

    code = "INSUFFICIENT_STOCK"
    http_status = 409

    def __init__(self, item_id: int, available: int, requested: int):
        super().__init__(
            f"Item {item_id} has {available} in stock, {requested} requested",
            item_id=item_id,
            available=available,
            requested=requested,
        )
        self.item_id = item_id
        self.available = available
        self.requested = requested
