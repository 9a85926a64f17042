from __future__ import annotations

import dataclasses
import logging
from typing import Any

from flask import Flask, request
from werkzeug.exceptions import HTTPException

from flora.blueprints.api.health import health_api
from flora.blueprints.api.plants import plants_api
from flora.config import load_config, setup_logging
from flora.extensions import init_extensions, socketio


def create_app(config_overrides: dict[str, Any] | None = None, *, backend=None) -> Flask:
    """Build the Flask application.

    Args:
        config_overrides: AppConfig field overrides; unknown names raise TypeError
        backend: Pre-built LLMBackend; when omitted one is created from config
    """
    config = load_config()
    if config_overrides:
        # replace() re-runs __post_init__
        config = dataclasses.replace(config, **config_overrides)

    # Configure logging early so backend initialisation is visible in the terminal and flora.log.
    setup_logging(debug=config.DEBUG, log_dir=config.log_dir, level=config.log_level)

    flask_app = Flask(__name__)
    flask_app.config.update(config.as_flask_config())
    flask_app.config["SESSION_COOKIE_HTTPONLY"] = True
    flask_app.config["SESSION_COOKIE_SAMESITE"] = "Lax"
    flask_app.config["SESSION_COOKIE_SECURE"] = config.environment == "production"

    # Initialize Socket.IO BEFORE building ServiceContainer (EmitterService needs it)
    init_extensions(flask_app, config.socketio_cors_origins)

    from flora.services.container import ServiceContainer
    from flora.utils.emitters import EmitterService

    container = ServiceContainer.build(config, backend=backend, emitter=EmitterService(socketio))
    flask_app.config["CONTAINER"] = container

    # Global JSON error handler - catches any unhandled exception on /api/
    # routes and returns a generic message instead of leaking stack traces.
    # Domain exceptions carry their own ``http_status``.
    @flask_app.errorhandler(Exception)
    def _handle_unhandled(exc):
        if not request.path.startswith("/api/"):
            if isinstance(exc, HTTPException):
                return exc
            raise exc
        from flora.domain.exceptions import FloraError
        from flora.utils.http import error_response, safe_error

        if isinstance(exc, HTTPException):
            status = int(exc.code or 500)
            if status >= 500:
                return safe_error(exc, status, context="http-exception")
            return error_response(exc.description or "Request failed", status)

        if isinstance(exc, FloraError):
            status = exc.http_status
            if status >= 500:
                return safe_error(exc, status, context=type(exc).__name__)
            # 4xx - surface the message; it was written for the caller.
            return error_response(str(exc) or "Request failed", status)

        return safe_error(exc, 500, context="unhandled")

    @flask_app.errorhandler(413)
    def _handle_too_large(_exc):
        from flora.utils.http import error_response

        return error_response("Request payload too large", 413)

    # ── API version prefix ──────────────────────────────────────────
    # All API endpoints live under /api/v1/
    V1 = "/api/v1"

    flask_app.register_blueprint(plants_api, url_prefix=f"{V1}/plants")
    flask_app.register_blueprint(health_api, url_prefix=f"{V1}/health")

    # Register Socket.IO event handlers (must be after socketio init)
    from flora.socketio import register_handlers

    register_handlers()

    for bp_name in flask_app.blueprints:
        logging.info(f" Registered blueprint: {bp_name}")

    logger = logging.getLogger(__name__)
    logger.info("Flora application initialized successfully.")

    return flask_app


__all__ = ["create_app", "socketio"]
