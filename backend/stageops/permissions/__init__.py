# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    ORDER_PERMISSIONS,
    PAYMENT_PERMISSIONS,
    STOCK_PERMISSIONS,
    REPORT_PERMISSIONS,
)
from .departments import DEPARTMENT_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permission_definition,
    department_has_permission,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "ORDER_PERMISSIONS",
    "PAYMENT_PERMISSIONS",
    "STOCK_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "DEPARTMENT_PERMISSIONS",
    "get_all_permission_codes",
    "get_permission_definition",
    "department_has_permission",
]
