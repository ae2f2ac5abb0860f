from flask import jsonify
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import SQLAlchemyError
import logging

from services import errors as service_errors

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "An unexpected error occurred"

HTTP_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    415: "UNSUPPORTED_MEDIA_TYPE",
    422: "VALIDATION_ERROR",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    @app.errorhandler(service_errors.ValidationError)
    def handle_service_validation(err):
        return error_response("VALIDATION_ERROR", err.message, 422)

    @app.errorhandler(service_errors.AuthenticationFailure)
    def handle_auth_failure(err):
        return error_response("UNAUTHORIZED", err.message, 401)

    @app.errorhandler(service_errors.ConflictError)
    def handle_conflict(err):
        return error_response("CONFLICT", err.message, 409)

    @app.errorhandler(service_errors.NotFoundError)
    def handle_not_found(err):
        return error_response("NOT_FOUND", err.message, 404)

    @app.errorhandler(service_errors.UnexpectedError)
    def handle_unexpected(err):
        # the store already logged the cause
        return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)

    # store/transport failures never leak driver messages
    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(err: SQLAlchemyError):
        logger.exception("Database error", exc_info=err)
        return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)

    # Werkzeug HTTPExceptions (abort(...)) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        if status >= 500:
            logger.error("HTTP %s: %s", status, err.description)
            return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, status)
        return error_response(HTTP_CODES.get(status, "BAD_REQUEST"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        return error_response("INTERNAL_ERROR", GENERIC_MESSAGE, 500)
