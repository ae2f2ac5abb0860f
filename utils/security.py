"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT access token creation/verification via PyJWT (HS512)
- JWT settings, validated once at startup
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from services.errors import AuthenticationFailure, ConfigurationError

ph = PasswordHasher()

ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class JwtSettings:
    key: str
    issuer: str
    audience: str
    expiration_minutes: int
    refresh_token_expiration_days: int
    algorithm: str = "HS512"
    rotate_refresh_tokens: bool = False

    @property
    def access_token_lifetime(self) -> timedelta:
        return timedelta(minutes=self.expiration_minutes)

    @property
    def refresh_token_lifetime(self) -> timedelta:
        return timedelta(days=self.refresh_token_expiration_days)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "JwtSettings":
        """
        Build settings from a Flask config mapping.
        Raises ConfigurationError naming every missing or invalid key.
        """
        required = (
            "JWT_KEY",
            "JWT_ISSUER",
            "JWT_AUDIENCE",
            "JWT_EXPIRATION_MINUTES",
            "REFRESH_TOKEN_EXPIRATION_DAYS",
        )
        missing = [name for name in required if config.get(name) in (None, "")]
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")

        numbers = {}
        for name in ("JWT_EXPIRATION_MINUTES", "REFRESH_TOKEN_EXPIRATION_DAYS"):
            try:
                numbers[name] = int(config[name])
            except (TypeError, ValueError):
                raise ConfigurationError(f"{name} must be an integer")
            if numbers[name] <= 0:
                raise ConfigurationError(f"{name} must be positive")

        algorithm = config.get("JWT_ALGORITHM") or "HS512"
        if not algorithm.startswith("HS"):
            raise ConfigurationError("JWT_ALGORITHM must be an HMAC algorithm")

        return cls(
            key=str(config["JWT_KEY"]),
            issuer=str(config["JWT_ISSUER"]),
            audience=str(config["JWT_AUDIENCE"]),
            expiration_minutes=numbers["JWT_EXPIRATION_MINUTES"],
            refresh_token_expiration_days=numbers["REFRESH_TOKEN_EXPIRATION_DAYS"],
            algorithm=algorithm,
            rotate_refresh_tokens=bool(config.get("REFRESH_TOKEN_ROTATE_ON_REFRESH", False)),
        )


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2 (random salt per hash)
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password using argon2. Never raises.
    """
    if not password_hash or password is None:
        return False
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    try:
        return ph.check_needs_rehash(password_hash)
    except InvalidHashError:
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def unique_roles(roles: Iterable[str] | None) -> List[str]:
    """Drop blanks and duplicates, keeping first-seen order."""
    seen: Dict[str, None] = {}
    for role in roles or []:
        if role and role not in seen:
            seen[role] = None
    return list(seen)


def create_access_token(
    settings: JwtSettings,
    subject_id: str,
    user_name: str,
    roles: Iterable[str] | None = None,
    now: datetime | None = None,
) -> str:
    """
    Sign a short-lived access token for a user.

    Roles are signed twice: joined with "," in ``role`` and as an ordered
    JSON array in ``roles``. The token is self-contained and is never looked
    up server-side.
    """
    issued = now or _now()
    exp = issued + settings.access_token_lifetime
    role_list = unique_roles(roles)
    payload = {
        "iss": settings.issuer,
        "aud": settings.audience,
        "sub": str(subject_id),
        "name": user_name,
        "role": ",".join(role_list),
        "roles": role_list,
        "iat": int(issued.timestamp()),
        "exp": int(exp.timestamp()),
        "type": ACCESS_TOKEN_TYPE,
        "jti": generate_jti(),
    }
    return jwt.encode(payload, settings.key, algorithm=settings.algorithm)


def decode_token(settings: JwtSettings, token: str, expected_type: str = ACCESS_TOKEN_TYPE) -> Dict[str, Any]:
    """
    Decode and validate a JWT: signature, expiry, issuer, audience and type.
    Raises AuthenticationFailure on any problem.
    """
    try:
        decoded = jwt.decode(
            token,
            settings.key,
            algorithms=[settings.algorithm],
            audience=settings.audience,
            issuer=settings.issuer,
            options={"require": ["exp", "sub", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationFailure("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationFailure("Invalid token")

    if decoded.get("type") != expected_type:
        raise AuthenticationFailure("Wrong token type")
    return decoded
