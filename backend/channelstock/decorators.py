# Overview: Request role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .channels import Role, can_access_channel, parse_channel, parse_role
from .validation import ValidationError

ROLE_HEADER = "X-Role"


def require_role(*allowed_roles: Role):
    """
    Resolve the caller's role and optionally restrict it.

    The role is set by the authentication layer in front of this API and
    arrives in the X-Role header. Sets g.role to the parsed Role.

    Returns 401 if the header is missing or unknown, 403 if the role is not
    in ``allowed_roles`` (when given).
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            raw = request.headers.get(ROLE_HEADER)
            if not raw:
                return jsonify({"error": "Role required"}), 401

            try:
                role = parse_role(raw)
            except ValidationError as e:
                return jsonify({"error": str(e)}), 401

            if allowed_roles and role not in allowed_roles:
                return jsonify({
                    "error": "Permission denied",
                    "required_roles": [r.value for r in allowed_roles],
                }), 403

            g.role = role
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_channel_access(f):
    """
    Require that g.role may operate the channel in the URL.

    Must be stacked under @require_role(). Replaces the ``channel`` URL value
    with the parsed Channel.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        role = getattr(g, "role", None)
        if role is None:
            return jsonify({"error": "Role required"}), 401

        try:
            channel = parse_channel(kwargs.get("channel"))
        except ValidationError as e:
            return jsonify({"error": str(e)}), 404

        if not can_access_channel(role, channel):
            return jsonify({
                "error": "Permission denied",
                "message": f"role {role.value} cannot use the {channel.value} cart",
            }), 403

        kwargs["channel"] = channel
        return f(*args, **kwargs)

    return decorated_function
