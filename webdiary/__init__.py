"""Web diary application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import InterfaceError, OperationalError

from webdiary.config import config_by_name
from webdiary.core.errors import DependencyError, DiaryError, ValidationError
from webdiary.core.utils.validation import jsonable_errors
from webdiary.extensions import db, init_extensions, jwt
from webdiary.storage import BlobStorage, init_blob_storage


def create_app(config_name: Optional[str] = None, *, blob_storage: Optional[BlobStorage] = None) -> Flask:
    """Create and configure the web diary Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///"):
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    _configure_logging(app)
    init_extensions(app)
    init_blob_storage(app, blob_storage)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    from webdiary.scripts.reindex import register_commands

    register_commands(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.logger.setLevel(level)
    logging.getLogger("webdiary").setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from webdiary.core.auth.controllers import auth_bp  # local import to avoid circulars
    from webdiary.domains.diary.controllers.category_api import category_api_bp
    from webdiary.domains.diary.controllers.diary_api import diary_api_bp
    from webdiary.domains.diary.controllers.public_api import public_api_bp
    from webdiary.domains.tasks.controllers.task_api import task_api_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(diary_api_bp, url_prefix="/api/diary")
    app.register_blueprint(public_api_bp, url_prefix="/api/public")
    app.register_blueprint(category_api_bp, url_prefix="/api/categories")
    app.register_blueprint(task_api_bp, url_prefix="/api/tasks")


def _register_error_handlers(app: Flask) -> None:
    """JSON error envelopes for service and framework errors."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(DiaryError)
    def _diary_error(exc: DiaryError):
        if isinstance(exc, DependencyError):
            app.logger.error("Dependency failure: %s", exc.message)
        return exc.to_dict(), exc.status

    @app.errorhandler(SchemaValidationError)
    def _schema_error(exc: SchemaValidationError):
        error = ValidationError("Invalid request", details=jsonable_errors(exc))
        return error.to_dict(), error.status

    @app.errorhandler(OperationalError)
    @app.errorhandler(InterfaceError)
    def _database_unavailable(exc: Exception):
        app.logger.error("Database unavailable: %s", exc)
        db.session.rollback()
        error = DependencyError("Data store unavailable")
        return error.to_dict(), error.status

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.name.lower().replace(" ", "_"), "message": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        db.session.rollback()
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": "unexpected_error", "message": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """Bearer token failures use the same JSON envelope as other errors."""

    @jwt.unauthorized_loader
    def _missing_token(reason: str):
        return {"ok": False, "error": "unauthorized", "message": reason}, 401

    @jwt.invalid_token_loader
    def _invalid_token(reason: str):
        return {"ok": False, "error": "invalid_token", "message": reason}, 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return {"ok": False, "error": "token_expired", "message": "Token has expired"}, 401
