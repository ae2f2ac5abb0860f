"""
Refresh token store and rotator.

One ``user_tokens`` row per user. A token is an opaque random string (32 bytes
from the OS CSPRNG, base64-encoded); the row is the only place it lives.

Issue is read-then-write. The row is locked FOR UPDATE on backends that
support it, and a concurrent first insert that trips the unique ``user_id``
constraint is retried once against the row that won.
"""
from __future__ import annotations

import base64
import hmac
import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.user_token import UserToken
from services.dto import RefreshTokenDto, UserDto
from services.errors import UnknownUserError

logger = logging.getLogger(__name__)

REFRESH_TOKEN_BYTES = 32


def generate_refresh_token() -> str:
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")


def is_live(token: Optional[str], expires_at: Optional[datetime], now: datetime) -> bool:
    """A stored token is usable only if present and expiring strictly after now."""
    return bool(token) and expires_at is not None and expires_at > now


class UserTokenService:
    def __init__(
        self,
        storage,
        user_service,
        refresh_token_days: int,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.storage = storage
        self.user_service = user_service
        self.lifetime = timedelta(days=refresh_token_days)
        self.clock = clock

    @property
    def session(self):
        return self.storage.get_session()

    def _locked_record(self, user_id: str) -> Optional[UserToken]:
        return (
            self.session.query(UserToken)
            .filter(UserToken.user_id == user_id)
            .with_for_update()
            .first()
        )

    def add_user_token(self, user_id: str, rotate: bool = False) -> RefreshTokenDto:
        """
        Return the user's refresh token, creating or replacing it when absent,
        expired, or when ``rotate`` is set. A live token is returned unchanged.
        """
        if not self.user_service.user_id_exists(user_id):
            raise UnknownUserError(user_id)

        try:
            return self._upsert(user_id, rotate)
        except IntegrityError:
            self.storage.rollback()
            logger.info("Concurrent refresh token insert for user %s, retrying", user_id)
            return self._upsert(user_id, rotate)

    def _upsert(self, user_id: str, rotate: bool) -> RefreshTokenDto:
        now = self.clock()
        record = self._locked_record(user_id)
        if record is None:
            record = UserToken(user_id=user_id)
            self.storage.new(record)

        if rotate or not is_live(record.refresh_token, record.refresh_token_expires_at, now):
            record.refresh_token = generate_refresh_token()
            record.refresh_token_expires_at = now + self.lifetime
            logger.debug("Issued new refresh token for user %s", user_id)

        self.storage.save()
        return RefreshTokenDto(token=record.refresh_token, expires_at=record.refresh_token_expires_at)

    def validate_refresh_token(self, refresh_token: str) -> Optional[UserDto]:
        """Active owner of a live refresh token, or None. Fails closed."""
        if not refresh_token:
            return None
        user = self.user_service.get_user_by_refresh_token(refresh_token)
        if user is None or not user.active or not user.refresh_token:
            return None
        if not hmac.compare_digest(user.refresh_token.encode(), refresh_token.encode()):
            return None
        if not is_live(user.refresh_token, user.refresh_token_expires_at, self.clock()):
            return None
        return user

    def invalidate_refresh_token(self, user_id: str) -> int:
        """
        Null the token and expire it now. Returns rows affected (0 or 1).
        """
        if not self.user_service.user_id_exists(user_id):
            raise UnknownUserError(user_id)

        rows = (
            self.session.query(UserToken)
            .filter(UserToken.user_id == user_id)
            .update(
                {
                    UserToken.refresh_token: None,
                    UserToken.refresh_token_expires_at: self.clock(),
                },
                synchronize_session=False,
            )
        )
        self.storage.save()
        # the bulk update bypassed the identity map
        self.session.expire_all()
        return rows
