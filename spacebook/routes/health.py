"""Health check endpoint for the deployment platform."""
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..security import Capability, requires

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.route("/health", methods=["GET"])
@requires(Capability.public)
def health_check():
    """
    Liveness plus a database round trip.
    """
    try:
        with db.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("health check: database unreachable")
        return jsonify({
            "status": "unhealthy",
            "database": "disconnected",
        }), 503

    return jsonify({
        "status": "healthy",
        "database": "connected"
    }), 200
