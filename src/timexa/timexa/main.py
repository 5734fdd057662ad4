from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import api_response, error_response
from .container import Container, build_container
from .core.constants import DEFAULT_MAX_SESSION_MINUTES, DEFAULT_OTP_MAX_ATTEMPTS
from .core.exceptions import DependencyError
from .core.result import ErrorKind
from .database.bootstrap import apply_schema, list_tables
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DependencyError)
    def handle_dependency_error(e: DependencyError):
        logger.error("Dependency failure: %s", e)
        return error_response(ErrorKind.DEPENDENCY_FAILURE, "Service temporarily unavailable")

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return api_response(e.description or e.name, None, status=e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unexpected error")
        message = f"Unexpected error: {e}" if app.config.get("DEBUG") else "An unexpected error occurred"
        return api_response(message, None, status=500)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            mail_config=getattr(settings, "MAIL_CONFIG"),
            jwt_config=getattr(settings, "JWT_CONFIG"),
            default_admin=getattr(settings, "DEFAULT_ADMIN", None),
            max_session_minutes=int(getattr(settings, "MAX_SESSION_MINUTES", DEFAULT_MAX_SESSION_MINUTES)),
            otp_max_attempts=int(getattr(settings, "OTP_MAX_ATTEMPTS", DEFAULT_OTP_MAX_ATTEMPTS)),
        )

    app.extensions["timexa"] = container

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return api_response("Service is running", {"status": "ok"})

    register_users(app, container)
    register_attendance(app, container)
    register_error_handlers(app)

    return app
