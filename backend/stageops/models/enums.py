from __future__ import annotations

from enum import Enum

from ..extensions import db


class Department(str, Enum):
    INVENTORY = "inventory"
    SUPPLIER = "supplier"
    FINANCE = "finance"
    PRODUCTION = "production"
    MANAGER = "manager"


class OrderStatus(str, Enum):
    """Fulfillment dimension of an order."""
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    DELIVERED = "Delivered"
    RECEIVED = "Received"
    PAID = "Paid"


class PaymentStatus(str, Enum):
    """Payment dimension of an order."""
    PENDING = "Pending"
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "Bank Transfer"
    MPESA = "MPesa"
    CHEQUE = "Cheque"
    CASH = "Cash"
    OTHER = "Other"


class StockReason(str, Enum):
    ORDER_RECEIVED = "ORDER_RECEIVED"
    RESTOCK = "RESTOCK"
    ISSUE = "ISSUE"


def enum_column_type(enum_cls: type[Enum], name: str):
    """String-backed column type that stores the enum's value, not its name."""
    return db.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )
