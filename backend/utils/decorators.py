from functools import wraps
from flask import jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from utils.audit import log_event

def current_user():
    """Resolve the JWT identity of the current request to a live ``User``."""
    from fuelstation.extensions import db
    from fuelstation.models import User

    user_id = get_jwt_identity()
    if not user_id:
        return None
    user = db.session.get(User, int(user_id))
    if user is None or user.deleted:
        return None
    return user

def _check_role(allowed_roles):
    user = current_user()
    if not user:
        return jsonify({"error": "User not found"}), 401

    user_role_name = user.role.name.lower() if user.role else ""
    if allowed_roles and user_role_name not in allowed_roles:
        log_event(
            "ACCESS_DENIED", user_id=user.id, ip=request.remote_addr,
            description=f"{user_role_name or 'no role'} on {request.method} {request.path}",
            level="WARNING",
        )
        return jsonify({"error": "Access forbidden: insufficient permissions"}), 403
    return None

def auth_required(*allowed_roles):
    """
    Gate a view behind a valid access token and, optionally, a set of roles.

    Missing or bad tokens are rejected by the JWT error loaders (401) before
    the view runs; a role outside ``allowed_roles`` gets a 403. With no roles
    given any authenticated user is admitted.
    Usage: @auth_required("admin", "manager", "accountant")
    """
    allowed_roles = set(role.lower() for role in allowed_roles)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            rejection = _check_role(allowed_roles)
            if rejection is not None:
                return rejection
            return fn(*args, **kwargs)
        return wrapper
    return decorator
