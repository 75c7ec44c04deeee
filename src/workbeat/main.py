from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify

from .common.logging_setup import configure_logging
from .config import get_settings_module
from .container import Container, build_container, build_memory_container
from .core.exceptions import (
    ConcurrencyConflict,
    DomainError,
    InsufficientBalance,
    InvalidTransition,
    InvariantViolation,
    NotFoundError,
    OverlapConflict,
    ValidationError,
)
from .database.bootstrap import apply_schema, list_tables
from .attendance.controller import register as register_attendance
from .requests.controller import register as register_leave

logger = logging.getLogger(__name__)

# First match wins; subclasses sit above their parents.
ERROR_STATUS = (
    (InvariantViolation, 500),
    (InsufficientBalance, 400),
    (ValidationError, 400),
    (NotFoundError, 404),
    (OverlapConflict, 409),
    (InvalidTransition, 409),
    (ConcurrencyConflict, 409),
)


def status_for(exc: DomainError) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 400


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        body = {"success": False, "error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, OverlapConflict):
            body["conflicting_ids"] = list(exc.conflicting_ids)
        if status >= 500:
            body["message"] = "Internal ledger error"
        return jsonify(body), status


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
        if backend == "memory":
            container = build_memory_container(settings=settings)
        else:
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
                apply_schema(db_config)
                logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
            container = build_container(db_config=db_config, settings=settings)

    app.extensions["workbeat"] = container
    _register_error_handlers(app)
    register_attendance(app, container)
    register_leave(app, container)

    return app
