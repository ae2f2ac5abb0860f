"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout

The access token is returned in the body; the refresh token only ever travels
in an HttpOnly, Secure, SameSite=Strict cookie named ``refreshToken``.
Every failure answers with the same generic message per endpoint so a caller
cannot tell which check failed.
"""
from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request
from marshmallow import ValidationError

from models.schemas.user import TokenOutSchema, UserLoginSchema, UserOutSchema, UserRegisterSchema
from services.dto import LoginUserIn, RegisterUserIn, TokenPairDto
from services.errors import AuthenticationFailure, ConflictError

from .deps import get_auth_service
from .errors import error_response

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

register_schema = UserRegisterSchema()
login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()
token_out_schema = TokenOutSchema()

INVALID_LOGIN = "Invalid username or password"
# registration answers with the login wording, taken names included
INVALID_REGISTRATION = INVALID_LOGIN
INVALID_SESSION = "Invalid or expired refresh token"


def _cookie_name() -> str:
    return current_app.config.get("REFRESH_COOKIE_NAME", "refreshToken")


def _token_response(tokens: TokenPairDto):
    response = jsonify(token_out_schema.dump(tokens))
    response.set_cookie(
        _cookie_name(),
        tokens.refresh_token,
        expires=tokens.refresh_token_expires_at,
        httponly=True,
        secure=current_app.config.get("REFRESH_COOKIE_SECURE", True),
        samesite="Strict",
        path="/",
    )
    return response, 200


def _refresh_cookie() -> str | None:
    return request.cookies.get(_cookie_name()) or None


@bp.post("/register")
def register():
    """
    Register a new user.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [userName, password]
          properties:
            userName: { type: string }
            password: { type: string }
            email: { type: string }
            phoneNumber: { type: string }
    responses:
      200:
        description: Created user (no password hash)
      400:
        description: User name taken or invalid input
    """
    try:
        data = register_schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return error_response("BAD_REQUEST", "Invalid input", 400, details=err.messages)
    logger.info("Attempting to register user: %s", data["user_name"])

    try:
        user = get_auth_service().register(RegisterUserIn(**data))
    except ConflictError:
        logger.warning("User %s already registered", data["user_name"])
        return error_response("BAD_REQUEST", INVALID_REGISTRATION, 400)

    return jsonify(user_out_schema.dump(user)), 200


@bp.post("/login")
def login():
    """
    Login: returns an access token and sets the refresh token cookie
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             userName: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (access token in body, refreshToken cookie set)
      400:
        description: Invalid username or password, or invalid input
    """
    try:
        data = login_schema.load(request.get_json(silent=True) or {})
    except ValidationError as err:
        return error_response("BAD_REQUEST", "Invalid input", 400, details=err.messages)
    logger.info("Attempting to log in user: %s", data["user_name"])

    try:
        tokens = get_auth_service().login(LoginUserIn(**data))
    except AuthenticationFailure:
        logger.warning("Rejected login for user: %s", data["user_name"])
        return error_response("BAD_REQUEST", INVALID_LOGIN, 400)

    return _token_response(tokens)


@bp.post("/refresh-token")
def refresh_token():
    """
    Exchange the refreshToken cookie for a new access token (and cookie)
    ---
    tags:
      - Auth
    responses:
      200:
        description: OK (new access token, refreshToken cookie set)
      401:
        description: Missing, invalid or expired refresh token
    """
    token = _refresh_cookie()
    if token is None:
        return error_response("UNAUTHORIZED", INVALID_SESSION, 401)

    try:
        tokens = get_auth_service().refresh_tokens(token)
    except AuthenticationFailure:
        logger.warning("Rejected refresh token")
        return error_response("UNAUTHORIZED", INVALID_SESSION, 401)

    return _token_response(tokens)


@bp.post("/logout")
def logout():
    """
    Logout: invalidates the refresh token from the cookie and clears it
    ---
    tags:
      - Auth
    responses:
      200:
        description: Logged out
      401:
        description: Missing or unknown refresh token
    """
    token = _refresh_cookie()
    if token is None:
        return error_response("UNAUTHORIZED", INVALID_SESSION, 401)

    try:
        get_auth_service().logout(token)
    except AuthenticationFailure:
        logger.warning("Logout with unknown refresh token")
        return error_response("UNAUTHORIZED", INVALID_SESSION, 401)

    response = jsonify({"message": "Logged out"})
    response.delete_cookie(
        _cookie_name(),
        path="/",
        httponly=True,
        secure=current_app.config.get("REFRESH_COOKIE_SECURE", True),
        samesite="Strict",
    )
    return response, 200
