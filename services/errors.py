"""
Service-level exceptions.

These are not HTTP errors: api/errors.py translates them into the uniform
error envelope. Messages are safe to show to callers.
"""
from __future__ import annotations


class ServiceError(Exception):
    """Base class for every error raised by the service layer."""

    message = "Service error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(ServiceError):
    """Malformed or missing input."""

    message = "Invalid input"


class AuthenticationFailure(ServiceError):
    """Bad credentials or an unusable refresh token. Always reported uniformly."""

    message = "Invalid credentials"


class ConflictError(ServiceError):
    message = "Conflict"


class NotFoundError(ServiceError):
    message = "Resource not found"

    def __init__(self, entity: str, key):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.key = key


class UnknownUserError(NotFoundError):
    def __init__(self, user_id):
        super().__init__("User", user_id)


class ConfigurationError(ServiceError):
    """Missing or invalid settings. Raised at startup only."""

    message = "Invalid configuration"


class UnexpectedError(ServiceError):
    """Store or transport failure. Detail is logged, never returned."""

    message = "An unexpected error occurred"
