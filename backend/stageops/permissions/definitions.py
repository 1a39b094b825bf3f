# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "VIEW_ORDERS",
        "View Orders",
        "View procurement orders and their history",
        PermissionCategory.ORDERS,
    ),
    (
        "CREATE_ORDER",
        "Create Order",
        "Raise a procurement order against an item and supplier",
        PermissionCategory.ORDERS,
    ),
    (
        "RECEIVE_ORDER",
        "Receive Order",
        "Confirm a delivered order was received into stock",
        PermissionCategory.ORDERS,
    ),
    (
        "FULFIL_ORDER",
        "Fulfil Order",
        "Approve, reject and deliver orders bound to the supplier",
        PermissionCategory.ORDERS,
    ),
]


# -- PAYMENTS --

PAYMENT_PERMISSIONS = [
    (
        "SUBMIT_PAYMENT",
        "Submit Payment",
        "Request payment for a received order",
        PermissionCategory.PAYMENTS,
    ),
    (
        "DECIDE_PAYMENT",
        "Approve/Reject Payment",
        "Approve or reject a submitted payment request",
        PermissionCategory.PAYMENTS,
    ),
    (
        "PROCESS_PAYMENT",
        "Process Payment",
        "Record an approved payment as paid",
        PermissionCategory.PAYMENTS,
    ),
    (
        "CONFIRM_PAYMENT",
        "Confirm Payment Receipt",
        "Acknowledge receipt of a completed payment (supplier)",
        PermissionCategory.PAYMENTS,
    ),
]


# -- STOCK --

STOCK_PERMISSIONS = [
    (
        "VIEW_STOCK",
        "View Stock",
        "View items, quantities and stock movements",
        PermissionCategory.STOCK,
    ),
    (
        "MANAGE_ITEMS",
        "Manage Items",
        "Create, edit or delete items",
        PermissionCategory.STOCK,
    ),
    (
        "ADJUST_STOCK",
        "Adjust Stock",
        "Restock items and issue stock to productions",
        PermissionCategory.STOCK,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View order counts for the caller's role",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_FINANCE_REPORTS",
        "View Finance Reports",
        "View revenue totals and the payment queue",
        PermissionCategory.REPORTS,
    ),
]


# Combined list of all permissions (preserves original ordering)
PERMISSION_DEFINITIONS = (
    ORDER_PERMISSIONS
    + PAYMENT_PERMISSIONS
    + STOCK_PERMISSIONS
    + REPORT_PERMISSIONS
)
