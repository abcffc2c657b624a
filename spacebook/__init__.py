from __future__ import annotations

import atexit
import logging

import click
from flask import Flask
from flask_cors import CORS
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from .config import Config
from .errors import register_error_handlers
from .extensions import bcrypt, db, jwt, limiter, migrate
from .security import register_security
from .sweeper import ExpirySweeper


# Routes only unpack the request;
# booking rules live in services/bookings.py

def create_app(config_class: type[Config] | None = None) -> Flask:
    """Application factory."""
    app = Flask(__name__)
    app.config.from_object(config_class or Config())

    configure_logging(app)
    _ensure_database_connection(app)
    register_extensions(app)
    register_security(app)
    register_error_handlers(app)
    register_blueprints(app)
    register_commands(app)

    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", [])}},
        allow_headers=app.config.get("CORS_HEADERS", "Content-Type"),
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )

    if app.config.get("EXPIRY_SWEEPER_ENABLED"):
        start_sweeper(app)

    return app


def _ensure_database_connection(app: Flask) -> None:
    """Fail fast with a readable message when the database is unreachable."""
    uri = app.config.get("SQLALCHEMY_DATABASE_URI")
    if not uri:
        raise RuntimeError(
            "SQLALCHEMY_DATABASE_URI is not set. "
            "Provide a valid DATABASE_URL (for example a PostgreSQL URL)."
        )

    engine = None
    try:
        engine = create_engine(uri, pool_pre_ping=True)
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except OperationalError as exc:
        root_cause = exc.orig if hasattr(exc, "orig") else exc
        message = (
            "Could not connect to the database at %s (%s). "
            "Check that PostgreSQL is running and DATABASE_URL is correct."
        ) % (uri, root_cause)
        app.logger.error(message)
        raise RuntimeError(message) from exc
    finally:
        if engine is not None:
            engine.dispose()


def register_extensions(app: Flask) -> None:
    db.init_app(app)
    migrate.init_app(app, db)
    bcrypt.init_app(app)
    jwt.init_app(app)
    limiter.init_app(app)


def register_blueprints(app: Flask) -> None:
    from .routes import auth, bookings, health, spaces

    app.register_blueprint(health.bp)
    app.register_blueprint(auth.bp)
    app.register_blueprint(spaces.bp)
    app.register_blueprint(bookings.bp)


def register_commands(app: Flask) -> None:
    @app.cli.command("sweep-expired")
    def sweep_expired_command():
        """Run one expiry sweep and report what was released."""
        result = ExpirySweeper(app).run_once()
        click.echo(
            f"released spaces: {result.released_spaces or 'none'}, "
            f"removed bookings: {result.removed_bookings}"
        )


def start_sweeper(app: Flask) -> ExpirySweeper:
    sweeper = app.extensions.get("expiry_sweeper")
    if sweeper is None:
        sweeper = ExpirySweeper(app, app.config.get("EXPIRY_SWEEP_INTERVAL_SECONDS"))
        app.extensions["expiry_sweeper"] = sweeper
        atexit.register(sweeper.stop)
    sweeper.start()
    return sweeper


def configure_logging(app: Flask) -> None:
    if not app.debug:
        level = app.config.get("LOG_LEVEL", "INFO")
        app.logger.setLevel(level)
        logging.getLogger("spacebook.sweeper").setLevel(level)
