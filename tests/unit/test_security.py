"""Password hashing, access token issuing and JWT settings."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from services.errors import AuthenticationFailure, ConfigurationError
from utils.security import (
    JwtSettings,
    create_access_token,
    decode_token,
    hash_password,
    needs_rehash,
    unique_roles,
    verify_password,
)

SETTINGS = JwtSettings(
    key="k" * 64,
    issuer="issuer",
    audience="audience",
    expiration_minutes=15,
    refresh_token_expiration_days=7,
)

VALID_CONFIG = {
    "JWT_KEY": "k" * 64,
    "JWT_ISSUER": "issuer",
    "JWT_AUDIENCE": "audience",
    "JWT_EXPIRATION_MINUTES": "15",
    "REFRESH_TOKEN_EXPIRATION_DAYS": "7",
}


@pytest.mark.parametrize("password", ["Pw1!", "correct horse battery staple", "ünïcødé-密码"])
def test_hash_then_verify(password):
    assert verify_password(password, hash_password(password))


def test_same_password_hashes_differently():
    first, second = hash_password("Pw1!"), hash_password("Pw1!")
    assert first != second
    assert verify_password("Pw1!", first) and verify_password("Pw1!", second)


def test_wrong_password_does_not_verify():
    assert verify_password("Pw2!", hash_password("Pw1!")) is False


@pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$argon2id$v=19$broken"])
def test_malformed_hash_never_raises(bad_hash):
    assert verify_password("Pw1!", bad_hash) is False


def test_fresh_hash_needs_no_rehash():
    assert needs_rehash(hash_password("Pw1!")) is False


def test_unique_roles_keeps_order():
    assert unique_roles(["user", "admin", "user", "", "auditor"]) == ["user", "admin", "auditor"]


def test_access_token_claims():
    now = datetime.now(timezone.utc)
    token = create_access_token(SETTINGS, "user-1", "alice", ["user", "admin"], now=now)

    header = jwt.get_unverified_header(token)
    claims = decode_token(SETTINGS, token)

    assert header["alg"] == "HS512"
    assert claims["sub"] == "user-1"
    assert claims["name"] == "alice"
    assert claims["role"] == "user,admin"
    assert claims["roles"] == ["user", "admin"]
    assert claims["iss"] == "issuer"
    assert claims["aud"] == "audience"
    assert claims["exp"] == int((now + timedelta(minutes=15)).timestamp())


def test_role_claim_is_deduplicated_and_joined():
    claims = decode_token(SETTINGS, create_access_token(SETTINGS, "user-1", "alice", ["user", "admin", "user"]))
    assert claims["role"] == "user,admin"

    bare = decode_token(SETTINGS, create_access_token(SETTINGS, "user-1", "alice", None))
    assert bare["role"] == ""
    assert bare["roles"] == []


def test_expired_access_token_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(minutes=16)
    token = create_access_token(SETTINGS, "user-1", "alice", [], now=issued)
    with pytest.raises(AuthenticationFailure):
        decode_token(SETTINGS, token)


@pytest.mark.parametrize(
    "other",
    [
        replace(SETTINGS, key="z" * 64),
        replace(SETTINGS, audience="someone-else"),
        replace(SETTINGS, issuer="someone-else"),
    ],
)
def test_token_from_other_settings_is_rejected(other):
    token = create_access_token(other, "user-1", "alice", [])
    with pytest.raises(AuthenticationFailure):
        decode_token(SETTINGS, token)


def test_wrong_token_type_is_rejected():
    token = create_access_token(SETTINGS, "user-1", "alice", [])
    with pytest.raises(AuthenticationFailure):
        decode_token(SETTINGS, token, expected_type="refresh")


def test_settings_from_config():
    settings = JwtSettings.from_config(VALID_CONFIG)
    assert settings.expiration_minutes == 15
    assert settings.refresh_token_lifetime == timedelta(days=7)
    assert settings.algorithm == "HS512"
    assert settings.rotate_refresh_tokens is False


@pytest.mark.parametrize("missing", sorted(VALID_CONFIG))
def test_settings_missing_value_is_fatal(missing):
    config = dict(VALID_CONFIG, **{missing: ""})
    with pytest.raises(ConfigurationError) as exc:
        JwtSettings.from_config(config)
    assert missing in str(exc.value)


@pytest.mark.parametrize("value", ["abc", "0", "-5"])
def test_settings_reject_bad_lifetimes(value):
    with pytest.raises(ConfigurationError):
        JwtSettings.from_config(dict(VALID_CONFIG, JWT_EXPIRATION_MINUTES=value))


def test_settings_reject_asymmetric_algorithm():
    with pytest.raises(ConfigurationError):
        JwtSettings.from_config(dict(VALID_CONFIG, JWT_ALGORITHM="RS256"))
