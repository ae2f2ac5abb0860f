"""Integration tests for the /auth endpoints."""

from __future__ import annotations

from tests.helpers import bearer, cookie_header, refresh_cookie, set_cookie_header


def test_register_returns_user_without_hash(register):
    resp = register("alice", email="alice@example.com", phoneNumber="555-0100")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["userName"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["phoneNumber"] == "555-0100"
    assert body["userId"]
    assert "password" not in body and "passwordHash" not in body


def test_register_duplicate_is_bad_request(register):
    assert register("alice").status_code == 200
    resp = register("alice", password="another")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid username or password"


def test_register_validation(client):
    resp = client.post("/api/v1/auth/register", json={"password": "Pw1!"})
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == "BAD_REQUEST"
    assert "userName" in body["details"]

    short = client.post("/api/v1/auth/register", json={"userName": "alice", "password": "abc"})
    assert short.status_code == 400
    assert "password" in short.get_json()["details"]


def test_login_validation(client):
    resp = client.post("/api/v1/auth/login", json={"userName": "alice"})
    assert resp.status_code == 400
    assert "password" in resp.get_json()["details"]
    assert client.post("/api/v1/auth/login", data="not json").status_code == 400


def test_login_sets_secure_cookie(register, login):
    register("alice")
    resp = login("alice")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["accessToken"]
    assert body["tokenType"] == "bearer"
    assert body["expiresIn"] == 15 * 60
    assert "refreshToken" not in body

    header = set_cookie_header(resp)
    assert refresh_cookie(resp)
    assert "HttpOnly" in header
    assert "Secure" in header
    assert "SameSite=Strict" in header
    assert "Expires=" in header


def test_login_wrong_password(register, login):
    register("alice")
    resp = login("alice", "wrong")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid username or password"
    assert refresh_cookie(resp) is None


def test_login_unknown_user_same_answer(login):
    resp = login("nobody")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid username or password"


def test_refresh_without_cookie(client):
    resp = client.post("/api/v1/auth/refresh-token")
    assert resp.status_code == 401


def test_refresh_with_unknown_cookie(client):
    resp = client.post("/api/v1/auth/refresh-token", headers=cookie_header("bm9wZQ=="))
    assert resp.status_code == 401


def test_logout_without_cookie(client):
    assert client.post("/api/v1/auth/logout").status_code == 401


def test_logout_clears_cookie(client, register, login):
    register("alice")
    token = refresh_cookie(login("alice"))

    resp = client.post("/api/v1/auth/logout", headers=cookie_header(token))

    assert resp.status_code == 200
    header = set_cookie_header(resp)
    assert header.startswith("refreshToken=;") or header.startswith('refreshToken="";')
    assert "Max-Age=0" in header


def test_end_to_end_session(client, register, login):
    assert register("alice", "Pw1!").status_code == 200

    first = login("alice", "Pw1!")
    assert first.status_code == 200
    refresh = refresh_cookie(first)
    assert refresh

    assert login("alice", "wrong").status_code == 400

    renewed = client.post("/api/v1/auth/refresh-token", headers=cookie_header(refresh))
    assert renewed.status_code == 200
    new_refresh = refresh_cookie(renewed)
    access = renewed.get_json()["accessToken"]

    me = client.get("/api/v1/users/me", headers=bearer(access))
    assert me.status_code == 200
    assert me.get_json()["data"]["userName"] == "alice"

    assert client.post("/api/v1/auth/logout", headers=cookie_header(new_refresh)).status_code == 200
    assert client.post("/api/v1/auth/refresh-token", headers=cookie_header(new_refresh)).status_code == 401
    assert client.post("/api/v1/auth/logout", headers=cookie_header(new_refresh)).status_code == 401


def test_rotation_on_refresh_when_enabled(app, client, register, login, settings):
    from dataclasses import replace

    app.extensions["jwt_settings"] = replace(settings, rotate_refresh_tokens=True)
    register("alice")
    original = refresh_cookie(login("alice"))

    renewed = client.post("/api/v1/auth/refresh-token", headers=cookie_header(original))
    assert renewed.status_code == 200
    assert refresh_cookie(renewed) != original

    replay = client.post("/api/v1/auth/refresh-token", headers=cookie_header(original))
    assert replay.status_code == 401


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.headers["X-Request-ID"] == "abc-123"
    assert resp.get_json()["database"] == "up"
