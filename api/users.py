from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, g, jsonify, request

from models.schemas.user import UserOutSchema, UserRolesSchema, UserUpdateSchema
from utils.decorators import jwt_required, roles_required

from .deps import get_user_service, get_user_token_service, parse_pagination, parse_sort

logger = logging.getLogger(__name__)

bp = Blueprint("users", __name__)

update_schema = UserUpdateSchema()
roles_schema = UserRolesSchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)


def _is_admin() -> bool:
    return "admin" in (getattr(g, "current_user_roles", None) or [])


def _require_self_or_admin(user_id: str) -> None:
    if g.current_user_id != user_id and not _is_admin():
        abort(403, description="Insufficient role")


@bp.get("/users")
@jwt_required()
def list_users():
    """
    List users (pagination, sort by name, q search)
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 20 }
      - { in: query, name: sort, type: string, default: name }
      - { in: query, name: q, type: string }
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    page, limit = parse_pagination()
    descending = parse_sort()
    rows, total = get_user_service().get_users(page, limit, request.args.get("q"), descending)
    logger.info("Returning %d users", len(rows))
    return jsonify(
        {
            "data": user_list_out_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/users/me")
@jwt_required()
def me():
    """
    Current user, read from the access token claims
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
    """
    return jsonify(
        {
            "data": {
                "userId": g.current_user_id,
                "userName": g.current_user_name,
                "roles": g.current_user_roles,
            }
        }
    ), 200


@bp.get("/users/<user_id>")
@jwt_required()
def get_user(user_id: str):
    """
    Get a user by id
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = get_user_service().get_user_by_user_id(user_id)
    if user is None:
        abort(404, description="User not found")
    return jsonify({"data": user_out_schema.dump(user)})


@bp.patch("/users/<user_id>")
@jwt_required()
def update_user(user_id: str):
    """
    Update a user (partial): email, phoneNumber, active.
    Users may edit themselves; other users and ``active`` need the admin role.
    Deactivating a user invalidates their refresh token.
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            email: { type: string }
            phoneNumber: { type: string }
            active: { type: boolean }
    responses:
      200: { description: OK }
      403: { description: Not this user and not an admin }
      404: { description: Not found }
      422: { description: Validation error }
    """
    _require_self_or_admin(user_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if "active" in data and not _is_admin():
        abort(403, description="Insufficient role")

    users = get_user_service()
    user = users.update_user(user_id, **data)
    if data.get("active") is False:
        get_user_token_service(users).invalidate_refresh_token(user_id)
        logger.info("User %s deactivated", user_id)
    return jsonify({"data": user_out_schema.dump(user)})


@bp.delete("/users/<user_id>")
@jwt_required()
def delete_user(user_id: str):
    """
    Soft delete a user (self or admin) and invalidate their refresh token
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      403: { description: Not this user and not an admin }
      404: { description: Not found }
    """
    _require_self_or_admin(user_id)
    users = get_user_service()
    users.delete_user(user_id)
    get_user_token_service(users).invalidate_refresh_token(user_id)
    logger.info("User %s deleted", user_id)
    return ("", 204)


@bp.post("/users/<user_id>/roles")
@roles_required(["admin"])
def set_roles(user_id: str):
    """
    Admin-only: set roles for a user (roles array).
    Body: { "roles": ["admin", "user"] }
    ---
    tags:
      - Users
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        schema:
          type: object
          properties:
            roles: { type: array, items: { type: string } }
    responses:
      200: { description: OK }
      403: { description: Not an admin }
      422: { description: Unknown role }
    """
    roles = roles_schema.load(request.get_json(silent=True) or {})["roles"]
    allowed = current_app.config.get("ALLOWED_ROLES", ["admin", "user"])
    user = get_user_service().set_roles(user_id, roles, allowed=allowed)
    return jsonify({"data": user_out_schema.dump(user)}), 200
