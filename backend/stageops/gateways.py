# Overview: Role-scoped facades over the order, payment and stock services.

"""
Role Gateways

Each department talks to the procurement core through its own gateway,
built from an explicit Actor. A gateway exposes only its department's
operations; anything else raises PermissionDenied before a service runs.

SECURITY:
- The actor's department is re-checked when the gateway is built and the
  permission code is re-checked on every call.
- Supplier operations additionally require the order to be bound to the
  calling supplier (order.supplier_id == actor.employee_id).
"""

from __future__ import annotations

from .actors import Actor
from .commands import (
    ConfirmReceiptCommand,
    CreateOrderCommand,
    MarkPaidCommand,
    ProcessPaymentCommand,
    RejectCommand,
    StockAdjustmentCommand,
    SubmitPaymentCommand,
)
from .errors import PermissionDenied
from .models import Department, Order, PaymentStatus
from .permissions import department_has_permission
from .services import (
    order_service,
    payment_service,
    projection_service,
    stock_service,
)


class Gateway:
    """Base gateway: operation allowlist plus permission checks."""

    DEPARTMENT: Department | None = None
    OPERATIONS: frozenset[str] = frozenset()

    def __init__(self, actor: Actor):
        if actor is None:
            raise PermissionDenied("An actor is required")
        if actor.department != self.DEPARTMENT:
            raise PermissionDenied(
                f"{actor.department.value} employees cannot use the {self.DEPARTMENT.value} gateway",
                department=actor.department.value,
            )
        self.actor = actor

    def invoke(self, operation: str, **kwargs):
        """Dispatch a named operation if this gateway allows it."""
        if operation not in self.OPERATIONS:
            raise PermissionDenied(
                f"Operation '{operation}' is not available to the {self.DEPARTMENT.value} department",
                operation=operation,
                department=self.DEPARTMENT.value,
            )
        return getattr(self, operation)(**kwargs)

    def _require(self, code: str) -> None:
        if not department_has_permission(self.actor.department, code):
            raise PermissionDenied(
                f"Permission {code} is required",
                required_permission=code,
            )


class InventoryGateway(Gateway):
    DEPARTMENT = Department.INVENTORY
    OPERATIONS = frozenset({
        "create_order",
        "mark_received",
        "submit_payment",
        "create_item",
        "update_item",
        "delete_item",
        "restock_item",
        "issue_stock",
        "list_orders",
        "get_order",
        "order_history",
        "dashboard",
    })

    def create_order(self, *, command: CreateOrderCommand) -> Order:
        self._require("CREATE_ORDER")
        return order_service.create_order(command, actor=self.actor)

    def mark_received(self, *, order_id: int) -> Order:
        self._require("RECEIVE_ORDER")
        return order_service.mark_received(order_id, actor=self.actor)

    def submit_payment(self, *, order_id: int, command: SubmitPaymentCommand) -> Order:
        self._require("SUBMIT_PAYMENT")
        return payment_service.submit_payment(order_id, command, actor=self.actor)

    def create_item(self, *, payload: dict):
        self._require("MANAGE_ITEMS")
        return stock_service.create_item(payload, actor=self.actor)

    def update_item(self, *, item_id: int, payload: dict):
        self._require("MANAGE_ITEMS")
        return stock_service.update_item(item_id, payload)

    def delete_item(self, *, item_id: int) -> None:
        self._require("MANAGE_ITEMS")
        stock_service.delete_item(item_id)

    def restock_item(self, *, item_id: int, command: StockAdjustmentCommand):
        self._require("ADJUST_STOCK")
        return stock_service.restock_item(item_id, command.quantity, actor=self.actor, note=command.note)

    def issue_stock(self, *, item_id: int, command: StockAdjustmentCommand):
        self._require("ADJUST_STOCK")
        return stock_service.issue_stock(item_id, command.quantity, actor=self.actor, note=command.note)

    def list_orders(self, **filters):
        self._require("VIEW_ORDERS")
        return order_service.list_orders(**filters)

    def get_order(self, *, order_id: int) -> Order:
        self._require("VIEW_ORDERS")
        return order_service.get_order(order_id)

    def order_history(self, *, order_id: int):
        self._require("VIEW_ORDERS")
        return order_service.order_history(order_id)

    def dashboard(self) -> dict:
        self._require("VIEW_DASHBOARD")
        data = projection_service.dashboard_for(self.actor)
        data["inventory"] = projection_service.inventory_summary()
        return data


class SupplierGateway(Gateway):
    DEPARTMENT = Department.SUPPLIER
    OPERATIONS = frozenset({
        "approve_order",
        "reject_order",
        "mark_delivered",
        "confirm_payment_receipt",
        "list_orders",
        "get_order",
        "order_history",
        "dashboard",
    })

    def _own_order(self, order_id: int) -> Order:
        order = order_service.get_order(order_id)
        if order.supplier_id != self.actor.employee_id:
            raise PermissionDenied(
                f"Order {order_id} is not assigned to this supplier",
                order_id=order_id,
            )
        return order

    def approve_order(self, *, order_id: int) -> Order:
        self._require("FULFIL_ORDER")
        self._own_order(order_id)
        return order_service.approve_order(order_id, actor=self.actor)

    def reject_order(self, *, order_id: int, command: RejectCommand) -> Order:
        self._require("FULFIL_ORDER")
        self._own_order(order_id)
        return order_service.reject_order(order_id, command, actor=self.actor)

    def mark_delivered(self, *, order_id: int) -> Order:
        self._require("FULFIL_ORDER")
        self._own_order(order_id)
        return order_service.mark_delivered(order_id, actor=self.actor)

    def confirm_payment_receipt(self, *, order_id: int, command: ConfirmReceiptCommand) -> Order:
        self._require("CONFIRM_PAYMENT")
        self._own_order(order_id)
        return payment_service.confirm_payment_receipt(order_id, command, actor=self.actor)

    def list_orders(self, **filters):
        self._require("VIEW_ORDERS")
        # Suppliers only ever see their own orders
        filters["supplier_id"] = self.actor.employee_id
        return order_service.list_orders(**filters)

    def get_order(self, *, order_id: int) -> Order:
        self._require("VIEW_ORDERS")
        return self._own_order(order_id)

    def order_history(self, *, order_id: int):
        self._require("VIEW_ORDERS")
        self._own_order(order_id)
        return order_service.order_history(order_id)

    def dashboard(self) -> dict:
        self._require("VIEW_DASHBOARD")
        return projection_service.dashboard_for(self.actor)


class FinanceGateway(Gateway):
    DEPARTMENT = Department.FINANCE
    OPERATIONS = frozenset({
        "approve_payment",
        "reject_payment",
        "process_payment",
        "mark_as_paid",
        "list_orders",
        "get_order",
        "order_history",
        "payment_queue",
        "finance_summary",
        "dashboard",
    })

    def approve_payment(self, *, order_id: int) -> Order:
        self._require("DECIDE_PAYMENT")
        return payment_service.approve_payment(order_id, actor=self.actor)

    def reject_payment(self, *, order_id: int, command: RejectCommand) -> Order:
        self._require("DECIDE_PAYMENT")
        return payment_service.reject_payment(order_id, command, actor=self.actor)

    def process_payment(self, *, order_id: int, command: ProcessPaymentCommand) -> Order:
        self._require("PROCESS_PAYMENT")
        return payment_service.process_payment(order_id, command, actor=self.actor)

    def mark_as_paid(self, *, order_id: int, command: MarkPaidCommand) -> Order:
        self._require("PROCESS_PAYMENT")
        return payment_service.mark_as_paid(order_id, command, actor=self.actor)

    def list_orders(self, **filters):
        self._require("VIEW_ORDERS")
        return order_service.list_orders(**filters)

    def get_order(self, *, order_id: int) -> Order:
        self._require("VIEW_ORDERS")
        return order_service.get_order(order_id)

    def order_history(self, *, order_id: int):
        self._require("VIEW_ORDERS")
        return order_service.order_history(order_id)

    def payment_queue(self, *, payment_status: PaymentStatus | None = None):
        self._require("VIEW_FINANCE_REPORTS")
        return projection_service.payment_queue(payment_status)

    def finance_summary(self) -> dict:
        self._require("VIEW_FINANCE_REPORTS")
        return projection_service.finance_summary()

    def dashboard(self) -> dict:
        self._require("VIEW_DASHBOARD")
        data = projection_service.dashboard_for(self.actor)
        data["finance"] = projection_service.finance_summary()
        return data


GATEWAYS = {
    Department.INVENTORY: InventoryGateway,
    Department.SUPPLIER: SupplierGateway,
    Department.FINANCE: FinanceGateway,
}


def gateway_for(actor: Actor) -> Gateway:
    """Pick the gateway for the actor's department."""
    gateway_cls = GATEWAYS.get(actor.department)
    if gateway_cls is None:
        raise PermissionDenied(
            f"The {actor.department.value} department has no access to procurement orders",
            department=actor.department.value,
        )
    return gateway_cls(actor)
