"""
Authentication lifecycle: register, login, logout and refresh.

Composes the user store, the password hasher, the access token issuer and the
refresh token store. Built per request; holds no state between requests.

Access tokens are stateless: logout revokes the refresh token only, and an
access token already handed out stays valid until it expires.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from services.dto import LoginUserIn, RegisterUserIn, TokenPairDto, UserDto
from services.errors import AuthenticationFailure, ConflictError
from services.user_service import UserService
from services.user_token_service import UserTokenService
from utils.security import (
    JwtSettings,
    create_access_token,
    hash_password,
    needs_rehash,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"

# verified against unknown user names so both failure paths hash once
_DUMMY_HASH = hash_password("securitynet-dummy-password")


def _aware_now() -> datetime:
    return datetime.now(timezone.utc)


class AuthService:
    def __init__(
        self,
        user_service: UserService,
        user_token_service: UserTokenService,
        settings: JwtSettings,
        clock: Callable[[], datetime] = _aware_now,
    ):
        self.users = user_service
        self.tokens = user_token_service
        self.settings = settings
        self.clock = clock

    def register(self, request: RegisterUserIn) -> UserDto:
        """
        Create a user with a freshly hashed password.

        :raises ConflictError: if the user name is already taken.
        """
        if self.users.user_name_exists(request.user_name):
            raise ConflictError("User name already registered")

        return self.users.add_user(
            user_name=request.user_name,
            password_hash=hash_password(request.password),
            email=request.email,
            phone_number=request.phone_number,
        )

    def login(self, request: LoginUserIn) -> TokenPairDto:
        """
        Check credentials and hand out an access token plus the user's
        refresh token.

        :raises AuthenticationFailure: unknown user, inactive user or wrong
            password, indistinguishable to the caller.
        """
        user = self.users.get_user_by_user_name(request.user_name)
        if user is None:
            verify_password(request.password, _DUMMY_HASH)
            raise AuthenticationFailure(INVALID_CREDENTIALS)
        if not verify_password(request.password, user.password_hash) or not user.active:
            raise AuthenticationFailure(INVALID_CREDENTIALS)

        if needs_rehash(user.password_hash):
            self.users.set_password_hash(user.user_id, hash_password(request.password))

        return self._generate_user_tokens(user)

    def logout(self, refresh_token: str) -> int:
        """
        Invalidate the refresh token's owner record.

        :returns: rows affected.
        :raises AuthenticationFailure: nobody owns this token, or it expired.
        """
        user = self.tokens.validate_refresh_token(refresh_token)
        if user is None:
            raise AuthenticationFailure(INVALID_REFRESH_TOKEN)
        return self.tokens.invalidate_refresh_token(user.user_id)

    def refresh_tokens(self, refresh_token: str) -> TokenPairDto:
        user = self.tokens.validate_refresh_token(refresh_token)
        if user is None:
            raise AuthenticationFailure(INVALID_REFRESH_TOKEN)
        return self._generate_user_tokens(user, rotate=self.settings.rotate_refresh_tokens)

    def _generate_user_tokens(self, user: UserDto, rotate: bool = False) -> TokenPairDto:
        access = create_access_token(
            self.settings,
            subject_id=user.user_id,
            user_name=user.user_name,
            roles=user.roles,
            now=self.clock(),
        )
        refresh = self.tokens.add_user_token(user.user_id, rotate=rotate)
        return TokenPairDto(
            access_token=access,
            expires_in=self.settings.expiration_minutes * 60,
            refresh_token=refresh.token,
            refresh_token_expires_at=refresh.expires_at,
        )
