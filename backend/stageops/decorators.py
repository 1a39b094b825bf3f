# Overview: Request decorators for API routes (caller identity, permissions, error mapping).

from functools import wraps
from flask import request, jsonify, g, current_app

from .actors import Actor
from .errors import OrderWorkflowError
from .permissions import department_has_permission
from .services import employee_service


EMPLOYEE_HEADER = "X-Employee-Id"


def require_actor(f):
    """
    Resolve the calling employee and build the explicit Actor credential.

    Sets g.actor and g.employee. Returns 401 if the X-Employee-Id header is
    missing, malformed, or names an unknown/deactivated employee.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw = (request.headers.get(EMPLOYEE_HEADER) or "").strip()
        if not raw:
            return jsonify({"error": "Authentication required"}), 401
        if not (raw.isascii() and raw.isdigit()):
            return jsonify({"error": f"Invalid {EMPLOYEE_HEADER} header"}), 401

        employee = employee_service.find_active_employee(int(raw))
        if employee is None:
            return jsonify({"error": "Unknown or inactive employee"}), 401

        g.employee = employee
        g.actor = Actor.from_employee(employee)
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require the calling actor's department to hold a permission code."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_actor was called first
            if not hasattr(g, "actor"):
                return jsonify({"error": "Authentication required"}), 401

            if not department_has_permission(g.actor.department, permission_code):
                return jsonify({
                    "error": "PERMISSION_DENIED",
                    "required_permission": permission_code,
                    "message": f"Requires {permission_code}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def workflow_errors(f):
    """
    Translate typed procurement errors into JSON responses.

    OrderWorkflowError subclasses map to their own http_status. Anything
    else is logged and answered with 500.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except OrderWorkflowError as e:
            return jsonify(e.to_dict()), e.http_status
        except Exception:
            current_app.logger.exception("Unhandled error in %s %s", request.method, request.path)
            return jsonify({"error": "INTERNAL_ERROR", "message": "Internal server error"}), 500

    return decorated_function
