from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask_limiter.util import get_remote_address

from ..errors import AuthError
from ..extensions import limiter
from ..security import Capability, issue_token, login_rate_limit_key, requires
from ..services import users

bp = Blueprint("auth", __name__)


@bp.post("/login")
@requires(Capability.public)
@limiter.limit("6 per minute", key_func=login_rate_limit_key, error_message="Too many login attempts. Try again later.")
def login():
    payload = request.get_json(silent=True) or {}
    username = payload.get("username")
    try:
        user = users.authenticate(username, payload.get("password"))
    except AuthError:
        current_app.logger.warning("failed login for %r from %s", username, get_remote_address())
        raise

    current_app.logger.info("user %s logged in", user.id)
    return jsonify({"token": issue_token(user)}), HTTPStatus.OK


@bp.post("/register")
@requires(Capability.public)
@limiter.limit("10 per minute", key_func=lambda: f"register:{get_remote_address()}")
def register():
    payload = request.get_json(silent=True) or {}
    user = users.register_student(payload.get("username"), payload.get("password"))
    current_app.logger.info("registered user %s (%s)", user.id, user.role.value)
    return jsonify({"message": "Registration successful"}), HTTPStatus.CREATED
