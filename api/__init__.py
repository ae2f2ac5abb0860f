from flask import Flask
from flasgger import Swagger
from flask_cors import CORS
import logging

from .config import get_config
from .errors import register_error_handlers
from . import logger as app_logger
from models import storage  # DBStorage (scoped_session registry)
from utils.security import JwtSettings

log = logging.getLogger(__name__)

# Minimal Swagger config: exposes /swagger.json and UI at /apidocs
SWAGGER_TEMPLATE = {
    "swagger": "2.0",
    "info": {
        "title": "SecurityNet API",
        "version": "1.0.0",
        "description": "REST API for associations and users, with password login and refresh tokens.",
    },
    "basePath": "/",  # blueprints are mounted under /api/v1
    "schemes": ["http", "https"],
    "securityDefinitions": {
        "Bearer": {
            "type": "apiKey",
            "name": "Authorization",
            "in": "header",
            "description": "Enter the token with the `Bearer ` prefix, e.g. \"Bearer abcde12345\"."
        }
    }
}

SWAGGER_CONFIG = {
    "headers": [],
    "specs": [
        {
            "endpoint": "apispec_1",
            "route": "/swagger.json",
            "rule_filter": lambda rule: True,   # include all endpoints
            "model_filter": lambda tag: True,   # include all models
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/apidocs/",
}


def create_app(config_name: str | type | None = None) -> Flask:
    """
    Application factory: creates and configures the Flask app.

    Raises services.errors.ConfigurationError when signing settings are
    missing, so a misconfigured deployment fails at boot rather than per request.
    """
    app = Flask(__name__)

    # Load configuration (reads .env via get_config); a config class can be passed directly
    config = config_name if isinstance(config_name, type) else get_config(config_name)
    app.config.from_object(config)

    app_logger.init_app(app)

    app.extensions["jwt_settings"] = JwtSettings.from_config(app.config)

    storage.reload(app.config["DATABASE_URL"], echo=app.config.get("SQL_ECHO", False))

    # Cross-Origin Resource Sharing: enable for dev, configurable for prod
    CORS(app, resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}})

    # Swagger UI and JSON
    Swagger(app, template=SWAGGER_TEMPLATE, config=SWAGGER_CONFIG)

    # Global error handlers returning the uniform error envelope
    register_error_handlers(app)

    from .health import bp as health_bp
    from .auth import bp as auth_bp
    from .users import bp as users_bp
    from .associations import bp as associations_bp

    app.register_blueprint(health_bp, url_prefix="/api/v1")
    app.register_blueprint(auth_bp, url_prefix="/api/v1/auth")
    app.register_blueprint(users_bp, url_prefix="/api/v1")
    app.register_blueprint(associations_bp, url_prefix="/api/v1")

    # Ensure the DB session is removed at the end of each request/app context
    @app.teardown_appcontext
    def remove_session(exception=None):
        storage.close()

    @app.route("/")
    def root():
        return {
            "message": "Welcome to SecurityNet API",
            "docs": "/apidocs/",
            "health": "/api/v1/health",
        }, 200

    log.info("SecurityNet API configured (env=%s)", app.config.get("APP_ENV"))
    return app
