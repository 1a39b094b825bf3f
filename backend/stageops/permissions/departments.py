# Overview: Default permission grants per department.

from ..models.enums import Department


DEPARTMENT_PERMISSIONS = {
    Department.INVENTORY: frozenset({
        "VIEW_ORDERS",
        "CREATE_ORDER",
        "RECEIVE_ORDER",
        "SUBMIT_PAYMENT",
        "VIEW_STOCK",
        "MANAGE_ITEMS",
        "ADJUST_STOCK",
        "VIEW_DASHBOARD",
    }),
    Department.SUPPLIER: frozenset({
        "VIEW_ORDERS",
        "FULFIL_ORDER",
        "CONFIRM_PAYMENT",
        "VIEW_DASHBOARD",
    }),
    Department.FINANCE: frozenset({
        "VIEW_ORDERS",
        "DECIDE_PAYMENT",
        "PROCESS_PAYMENT",
        "VIEW_DASHBOARD",
        "VIEW_FINANCE_REPORTS",
    }),
    # Read-only stock access; no procurement gateway
    Department.PRODUCTION: frozenset({"VIEW_STOCK"}),
    Department.MANAGER: frozenset({"VIEW_STOCK"}),
}
