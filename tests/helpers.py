"""HTTP helpers shared by the integration tests."""

from __future__ import annotations

PASSWORD = "Pw1!"


def refresh_cookie(response) -> str | None:
    """Value of the refreshToken cookie set by a response, if any."""
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith("refreshToken="):
            return header.split(";", 1)[0].split("=", 1)[1].strip('"')
    return None


def set_cookie_header(response) -> str:
    for header in response.headers.getlist("Set-Cookie"):
        if header.startswith("refreshToken="):
            return header
    return ""


def cookie_header(token: str) -> dict:
    return {"Cookie": f"refreshToken={token}"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
