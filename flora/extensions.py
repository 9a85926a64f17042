"""Flask Extension Instances and Initialisation."""

import logging
import os

from flask import Flask
from flask_socketio import SocketIO


def _socketio_transports() -> list[str]:
    """Return allowed Engine.IO transports.

    Default to polling-only to avoid Werkzeug websocket upgrade crashes.
    Override with `FLORA_SOCKETIO_TRANSPORTS`, e.g. `polling,websocket`.
    """
    raw = os.getenv("FLORA_SOCKETIO_TRANSPORTS")
    if raw:
        transports = [t.strip() for t in raw.split(",") if t.strip()]
        if transports:
            return transports

    return ["polling"]


# Threading mode: the analysis call blocks a worker thread while the
# progress ticker emits from its own thread.
socketio = SocketIO(
    async_mode="threading",
    cors_allowed_origins=[],
    logger=False,
    engineio_logger=False,
    ping_timeout=60,
    ping_interval=25,
    transports=_socketio_transports(),
)


def init_extensions(app: Flask, cors_origins: str) -> None:
    """Initialise Flask extension objects."""
    origins = cors_origins if isinstance(cors_origins, str) else "*"

    try:
        socketio.init_app(
            app, cors_allowed_origins=origins, logger=logging.getLogger("socketio"), engineio_logger=False
        )
        logging.info(f"Socket.IO initialized with CORS origins: {origins}")
    except Exception as e:
        logging.error(f"Failed to initialize Socket.IO: {e}", exc_info=True)
        raise
