from __future__ import annotations
from functools import wraps
from flask import current_app, request, g, abort
from services.errors import AuthenticationFailure
from utils.security import decode_token


def jwt_required():
    """
    Require a valid bearer access token. The token is trusted on signature and
    expiry alone: no user lookup, so a deleted user's token works until it expires.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                abort(401, description="Missing or invalid Authorization header")
            token = auth.split(" ", 1)[1].strip()
            try:
                decoded = decode_token(current_app.extensions["jwt_settings"], token)
            except AuthenticationFailure as e:
                abort(401, description=e.message)

            g.current_user_id = decoded["sub"]
            g.current_user_name = decoded.get("name")
            g.current_user_roles = decoded.get("roles", [])
            g.current_token_jti = decoded.get("jti")
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Allow access if the user has ANY of the required roles.
    Deny (403) only if there is NO overlap between user_roles and required_roles.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user_roles = set(getattr(g, "current_user_roles", []))
            if not (user_roles & req):
                abort(403, description="Insufficient role")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
