"""TagJournal application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask
from sqlalchemy.exc import SQLAlchemyError

from tagjournal.config import DEFAULT_SECRET, config_by_name
from tagjournal.core.auth.password import init_credential_engine
from tagjournal.core.errors import AppError, InfrastructureError, SigningKeyError
from tagjournal.extensions import db, init_extensions


def create_app(config_name: Optional[str] = None, journal_service=None) -> Flask:
    """Create and configure the TagJournal Flask application.

    ``journal_service`` lets tests swap in a service built on other stores.
    """
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    logging.getLogger("tagjournal").setLevel(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("ENV") == "production" and app.config["JWT_SECRET_KEY"] in (None, "", DEFAULT_SECRET):
        raise SigningKeyError("JWT_SECRET_KEY must be set in production")

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///"):
        db_path = db_uri.replace("sqlite:///", "", 1)
        abs_path = project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    init_extensions(app)
    init_credential_engine(app)

    from tagjournal.domains.journal.services.journal_service import init_journal_service

    init_journal_service(app, journal_service)

    _register_blueprints(app)
    _register_error_handlers(app)

    if app.config.get("DB_MIGRATE_ON_START"):
        _migrate_db(app)
    else:
        app.logger.debug("Skipping DB migrations")

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from tagjournal.core.users.controllers import user_api_bp
    from tagjournal.domains.journal.controllers.journal_api import journal_api_bp

    app.register_blueprint(user_api_bp, url_prefix="/user")
    app.register_blueprint(journal_api_bp, url_prefix="/journal")


def _register_error_handlers(app: Flask) -> None:
    """JSON error responses for the error taxonomy in ``tagjournal.core.errors``."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(AppError)
    def _app_error(exc: AppError):
        if isinstance(exc, InfrastructureError):
            app.logger.error("Infrastructure failure: %s", exc, exc_info=exc)
            return {"ok": False, "error": "unexpected_error"}, 500
        return exc.to_dict(), exc.status_code

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        code = (exc.name or "http_error").lower().replace(" ", "_")
        return {"ok": False, "error": code, "message": exc.description}, exc.code

    @app.errorhandler(SQLAlchemyError)
    def _db_error(exc: SQLAlchemyError):
        db.session.rollback()
        app.logger.exception("Database error: %s", exc)
        return {"ok": False, "error": "unexpected_error"}, 500

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _migrate_db(app: Flask) -> None:
    from flask_migrate import upgrade

    app.logger.debug("Running DB migrations")
    with app.app_context():
        upgrade()
