"""Error taxonomy shared by services and routes.

Services raise these; the handlers registered by :func:`register_error_handlers`
turn them into ``{"error": ...}`` JSON responses. Anything else that escapes a
view is logged with its traceback and reported as a bare 500.
"""
from __future__ import annotations

from http import HTTPStatus

from flask import Flask, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class APIError(Exception):
    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "internal server error"

    def __init__(self, message: str | None = None, *, code: str | None = None) -> None:
        self.message = message or self.default_message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        payload = {"error": self.message}
        if self.code:
            payload["code"] = self.code
        return payload


class ValidationError(APIError):
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "invalid request"


class AuthError(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    default_message = "authentication required"


class PermissionDenied(APIError):
    status_code = HTTPStatus.FORBIDDEN
    default_message = "insufficient permissions"


class NotFoundError(APIError):
    status_code = HTTPStatus.NOT_FOUND
    default_message = "not found"


class ConflictError(APIError):
    # Business rule violations are reported as 400, not 409.
    status_code = HTTPStatus.BAD_REQUEST
    default_message = "request conflicts with current state"


class InternalError(APIError):
    pass


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(exc: APIError):
        if isinstance(exc, InternalError):
            app.logger.error("internal error: %s", exc.message)
            return jsonify({"error": InternalError.default_message}), exc.status_code
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(SQLAlchemyError)
    def handle_store_error(exc: SQLAlchemyError):
        app.logger.exception("database error")
        return jsonify({"error": InternalError.default_message}), HTTPStatus.INTERNAL_SERVER_ERROR

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        app.logger.exception("unhandled exception")
        return jsonify({"error": InternalError.default_message}), HTTPStatus.INTERNAL_SERVER_ERROR
