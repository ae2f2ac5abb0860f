"""
Data transfer objects passed between the services and the blueprints.

They keep the ORM models out of the API layer; marshmallow schemas in
models/schemas dump them by attribute.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserDto:
    """
    Read model for a user.

    ``password_hash`` and the refresh token fields are carried for the auth
    services only; output schemas never dump them.
    """

    user_id: str
    user_name: str
    email: str = ""
    phone_number: str = ""
    active: bool = True
    roles: list[str] = field(default_factory=list)
    password_hash: str = ""
    refresh_token: str | None = None
    refresh_token_expires_at: datetime | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class RegisterUserIn:
    user_name: str
    password: str
    email: str | None = None
    phone_number: str | None = None


@dataclass(frozen=True)
class LoginUserIn:
    user_name: str
    password: str


@dataclass(frozen=True)
class RefreshTokenDto:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class TokenPairDto:
    access_token: str
    expires_in: int
    refresh_token: str
    refresh_token_expires_at: datetime
    token_type: str = "bearer"


@dataclass(frozen=True)
class AssociationDto:
    association_id: str
    name: str
    website: str = ""
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


@dataclass(frozen=True)
class AssociationIn:
    name: str
    website: str = ""
    active: bool = True
