"""
User store: every read and write of ``users`` rows goes through here.

Soft-deleted users are hidden from lookups; existence checks for user names
and ids still see them, so a trashed name cannot be registered again.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import User
from models.user_token import UserToken
from services.dto import UserDto
from services.errors import ConflictError, UnexpectedError, UnknownUserError, ValidationError

logger = logging.getLogger(__name__)

MAX_LIMIT = 100


def to_user_dto(user: User, token: Optional[UserToken] = None) -> UserDto:
    return UserDto(
        user_id=user.id,
        user_name=user.user_name or "",
        email=user.email or "",
        phone_number=user.phone_number or "",
        active=bool(user.active),
        roles=list(user.roles or []),
        password_hash=user.password_hash or "",
        refresh_token=token.refresh_token if token else None,
        refresh_token_expires_at=token.refresh_token_expires_at if token else None,
        created_at=user.created_at,
    )


class UserService:
    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def _live(self):
        return self.session.query(User).filter(User.deleted_at.is_(None))

    def _with_token(self, query) -> Optional[UserDto]:
        user = query.first()
        if user is None:
            return None
        return to_user_dto(user, user.user_token)

    def get_users(
        self, page: int = 1, limit: int = 20, q: str | None = None, descending: bool = False
    ) -> Tuple[List[UserDto], int]:
        query = self._live()
        if q:
            query = query.filter(func.lower(User.user_name).like(f"%{q.strip().lower()}%"))
        total = query.count()
        order = User.user_name.desc() if descending else User.user_name.asc()
        limit = max(1, min(limit, MAX_LIMIT))
        rows = query.order_by(order).offset((max(page, 1) - 1) * limit).limit(limit).all()
        return [to_user_dto(u) for u in rows], total

    def get_user_by_user_id(self, user_id: str) -> Optional[UserDto]:
        return self._with_token(self._live().filter(User.id == user_id))

    def get_user_by_user_name(self, user_name: str) -> Optional[UserDto]:
        return self._with_token(self._live().filter(User.user_name == user_name))

    def get_user_by_refresh_token(self, refresh_token: str) -> Optional[UserDto]:
        if not refresh_token:
            return None
        row = (
            self.session.query(User, UserToken)
            .join(UserToken, UserToken.user_id == User.id)
            .filter(UserToken.refresh_token == refresh_token, User.deleted_at.is_(None))
            .first()
        )
        if row is None:
            return None
        user, token = row
        return to_user_dto(user, token)

    def user_name_exists(self, user_name: str) -> bool:
        query = self.session.query(User.id).filter(User.user_name == user_name)
        return self.session.query(query.exists()).scalar()

    def user_id_exists(self, user_id: str) -> bool:
        query = self.session.query(User.id).filter(User.id == user_id)
        return self.session.query(query.exists()).scalar()

    def add_user(
        self,
        user_name: str,
        password_hash: str,
        email: str | None = None,
        phone_number: str | None = None,
    ) -> UserDto:
        user = User(
            user_name=user_name,
            password_hash=password_hash,
            email=email,
            phone_number=phone_number,
            active=True,
            roles=["user"],
        )
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError:
            # lost a race against another registration of the same name
            logger.warning("Duplicate user name on insert: %s", user_name)
            raise ConflictError("User name already registered")
        return to_user_dto(user)

    def _get_model(self, user_id: str) -> User:
        user = self._live().filter(User.id == user_id).first()
        if user is None:
            raise UnknownUserError(user_id)
        return user

    def update_user(self, user_id: str, **changes) -> UserDto:
        user = self._get_model(user_id)
        for key in ("email", "phone_number", "active"):
            if key in changes:
                setattr(user, key, changes[key])
        self._commit(user)
        return to_user_dto(user)

    def set_roles(self, user_id: str, roles: List[str], allowed: Iterable[str] | None = None) -> UserDto:
        """
        Replace a user's roles.

        :raises ValidationError: if ``allowed`` is given and a role is not in it.
        """
        if allowed is not None:
            allowed = set(allowed)
            unknown = [r for r in roles if r not in allowed]
            if unknown:
                raise ValidationError(f"Roles must be a subset of {sorted(allowed)}")
        user = self._get_model(user_id)
        # a new list so the JSON column is flagged dirty
        user.roles = list(roles)
        self._commit(user)
        return to_user_dto(user)

    def set_password_hash(self, user_id: str, password_hash: str) -> None:
        user = self._get_model(user_id)
        user.password_hash = password_hash
        self._commit(user)

    def delete_user(self, user_id: str) -> None:
        """Soft delete; the caller invalidates the refresh token."""
        user = self._get_model(user_id)
        user.delete()

    def _commit(self, obj) -> None:
        self.storage.new(obj)
        try:
            self.storage.save()
        except SQLAlchemyError:
            logger.exception("Failed to persist %s", obj.__class__.__name__)
            raise UnexpectedError()
