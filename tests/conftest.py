"""Pytest fixtures: a fresh app on an in-memory SQLite database per test."""

from __future__ import annotations

import os

import pytest

os.environ.setdefault("APP_ENV", "testing")

from api import create_app  # noqa: E402
from api.config import TestingConfig  # noqa: E402
from models import storage as _storage  # noqa: E402
from services.user_service import UserService  # noqa: E402
from tests.helpers import PASSWORD, bearer  # noqa: E402
from utils.security import create_access_token  # noqa: E402


@pytest.fixture
def app():
    """Flask app with TestingConfig; create_app() rebuilds the in-memory db."""
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
    _storage.close()


@pytest.fixture
def client(app):
    """Test client that never stores cookies: tests send the refresh cookie explicitly."""
    return app.test_client(use_cookies=False)


@pytest.fixture
def storage(app):
    return _storage


@pytest.fixture
def settings(app):
    return app.extensions["jwt_settings"]


@pytest.fixture
def user_service(storage):
    return UserService(storage)


@pytest.fixture
def register(client):
    def _register(user_name="alice", password=PASSWORD, **extra):
        return client.post("/api/v1/auth/register", json={"userName": user_name, "password": password, **extra})

    return _register


@pytest.fixture
def login(client):
    def _login(user_name="alice", password=PASSWORD):
        return client.post("/api/v1/auth/login", json={"userName": user_name, "password": password})

    return _login


@pytest.fixture
def auth_header(register, login):
    """Bearer header for a freshly registered user."""
    register("carol")
    resp = login("carol")
    return bearer(resp.get_json()["accessToken"])


@pytest.fixture
def admin_header(settings):
    """Bearer header for an admin; the token is trusted on signature alone."""
    return bearer(create_access_token(settings, "admin-id", "root", ["admin"]))
