from __future__ import annotations

import enum
from dataclasses import dataclass
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable

from flask import Flask, jsonify, request
from flask_jwt_extended import (
    JWTManager,
    create_access_token,
    get_jwt,
    get_jwt_identity,
    verify_jwt_in_request,
)
from flask_limiter.util import get_remote_address

from .errors import AuthError, PermissionDenied
from .extensions import jwt
from .models import User, UserRole


class Capability(enum.Enum):
    public = "public"
    any_authenticated = "any_authenticated"
    admin_only = "admin_only"


@dataclass(frozen=True, slots=True)
class Identity:
    id: int
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin.value


def register_security(app: Flask) -> JWTManager:
    _setup_jwt_callbacks()

    @app.after_request
    def add_security_headers(response):  # type: ignore[override]
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-XSS-Protection", "1; mode=block")
        return response

    return jwt


def _credential_error(message: str, code: str):
    return jsonify({"error": message, "code": code}), HTTPStatus.UNAUTHORIZED


def _setup_jwt_callbacks() -> None:
    @jwt.expired_token_loader
    def expired_token_loader(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
        return _credential_error("token has expired", "invalid_credential")

    @jwt.unauthorized_loader
    def unauthorized_loader_callback(message: str):
        return _credential_error(message or "Authorization header required", "missing_credential")

    @jwt.invalid_token_loader
    def invalid_token_loader_callback(message: str):
        return _credential_error(message or "Invalid token", "invalid_credential")


def issue_token(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"id": user.id, "username": user.username, "role": user.role.value},
    )


def _check_header_shape() -> None:
    header = request.headers.get("Authorization")
    if not header or not header.strip():
        raise AuthError("Authorization header required", code="missing_credential")
    parts = header.split()
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError("Invalid authorization format", code="malformed_credential")


def authorize(capability: Capability) -> Identity | None:
    """Validate the caller against a route's declared capability."""
    if capability is Capability.public:
        return None
    _check_header_shape()
    verify_jwt_in_request()
    identity = current_identity()
    if identity is None:
        raise AuthError("Invalid token", code="invalid_credential")
    if capability is Capability.admin_only and not identity.is_admin:
        raise PermissionDenied("Unauthorized - Admin only action", code="forbidden")
    return identity


def requires(capability: Capability) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            authorize(capability)
            return fn(*args, **kwargs)

        wrapper.required_capability = capability  # type: ignore[attr-defined]
        return wrapper

    return decorator


def current_identity() -> Identity | None:
    claims = get_jwt()
    if not claims:
        return None
    try:
        user_id = int(claims.get("id", get_jwt_identity()))
    except (TypeError, ValueError):
        return None
    return Identity(
        id=user_id,
        username=str(claims.get("username", "")),
        role=str(claims.get("role", UserRole.student.value)),
    )


def login_rate_limit_key() -> str:
    payload = request.get_json(silent=True) or {}
    identifier = str(payload.get("username") or "").lower()
    return f"login:{get_remote_address()}:{identifier}"


def authenticated_rate_limit_key() -> str:
    try:
        verify_jwt_in_request(optional=True)
    except Exception:
        return f"ip:{get_remote_address()}"
    identity = get_jwt_identity()
    if identity is not None:
        return f"user:{identity}"
    return f"ip:{get_remote_address()}"
