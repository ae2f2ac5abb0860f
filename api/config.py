"""
Environment-aware configuration.

JWT settings have no defaults outside TestingConfig: create_app() refuses to
start when any of them is missing (see utils.security.JwtSettings).
"""
import os
from dotenv import load_dotenv

load_dotenv()  # Read .env if present


def _bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    APP_ENV = os.getenv("APP_ENV", "dev")

    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///securitynet.db")
    SQL_ECHO = _bool("SQL_ECHO")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON = _bool("LOG_JSON")

    # Access tokens
    JWT_KEY = os.getenv("JWT_KEY")
    JWT_ISSUER = os.getenv("JWT_ISSUER")
    JWT_AUDIENCE = os.getenv("JWT_AUDIENCE")
    JWT_EXPIRATION_MINUTES = os.getenv("JWT_EXPIRATION_MINUTES")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS512")

    # Refresh tokens
    REFRESH_TOKEN_EXPIRATION_DAYS = os.getenv("REFRESH_TOKEN_EXPIRATION_DAYS")
    REFRESH_TOKEN_ROTATE_ON_REFRESH = _bool("REFRESH_TOKEN_ROTATE_ON_REFRESH")
    REFRESH_COOKIE_NAME = "refreshToken"
    REFRESH_COOKIE_SECURE = _bool("REFRESH_COOKIE_SECURE", "true")

    ALLOWED_ROLES = os.getenv("ALLOWED_ROLES", "admin,user").split(",")


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    DATABASE_URL = "sqlite://"
    SQL_ECHO = False
    LOG_LEVEL = "WARNING"
    JWT_KEY = "testing-signing-key-" + "x" * 64
    JWT_ISSUER = "securitynet-tests"
    JWT_AUDIENCE = "securitynet-tests"
    JWT_EXPIRATION_MINUTES = 15
    REFRESH_TOKEN_EXPIRATION_DAYS = 7
    REFRESH_TOKEN_ROTATE_ON_REFRESH = False


class ProductionConfig(BaseConfig):
    DEBUG = False
    LOG_JSON = _bool("LOG_JSON", "true")


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
