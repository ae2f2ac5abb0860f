"""Per-request service construction and shared query-string parsing."""
from __future__ import annotations

from typing import Tuple

from flask import abort, current_app, request

from models import storage
from services.association_service import AssociationService
from services.auth_service import AuthService
from services.user_service import UserService
from services.user_token_service import UserTokenService

MAX_LIMIT = 100


def get_user_service() -> UserService:
    return UserService(storage)


def get_user_token_service(user_service: UserService | None = None) -> UserTokenService:
    settings = current_app.extensions["jwt_settings"]
    return UserTokenService(
        storage,
        user_service or get_user_service(),
        refresh_token_days=settings.refresh_token_expiration_days,
    )


def get_auth_service() -> AuthService:
    users = get_user_service()
    return AuthService(users, get_user_token_service(users), current_app.extensions["jwt_settings"])


def get_association_service() -> AssociationService:
    return AssociationService(storage)


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def parse_sort(default="name") -> bool:
    """Return True for descending; only the name field is sortable."""
    sort = request.args.get("sort", default)
    desc = sort.startswith("-")
    key = sort[1:] if desc else sort
    if key != "name":
        abort(400, description="Unsupported sort field. Allowed: name")
    return desc


def parse_flag(name: str) -> bool:
    return request.args.get(name, "false").lower() in ("1", "true", "yes")
