"""Entry point for the Flora backend application.

Used both for development (``python flora_app.py``) and by the
``flora-server`` console script.
"""
from __future__ import annotations

import logging
import os

from flora import create_app
from flora.extensions import socketio
from flora.config import _env_bool


def main() -> int:
    app = create_app()

    host = os.getenv("FLORA_HOST", "0.0.0.0")
    port = int(os.getenv("FLORA_PORT", "8000"))
    debug = _env_bool("FLORA_DEBUG")

    logging.info("Starting server on %s:%s", host, port)
    logging.info("SocketIO async_mode: %s", socketio.async_mode)

    try:
        socketio.run(
            app,
            host=host,
            port=port,
            debug=debug,
            use_reloader=False,
            allow_unsafe_werkzeug=True,
        )
        logging.info("Server stopped.")
        return 0
    except KeyboardInterrupt:
        logging.info("Server stopped by user.")
        return 0
    except Exception as exc:  # pragma: no cover - top-level runtime errors
        logging.exception("ERROR: Failed to start server: %s", exc)
        return 1
    finally:
        app.config["CONTAINER"].shutdown()


if __name__ == "__main__":
    raise SystemExit(main())
