"""
Socket.IO Event Handlers
========================

Namespaces:
- /analysis - Image analysis status texts

Usage:
    Import this module after socketio.init_app() to register all handlers.

    from flora.socketio import register_handlers
    register_handlers()
"""

import logging

logger = logging.getLogger(__name__)


def register_handlers():
    """
    Register all Socket.IO event handlers.

    This function must be called AFTER socketio.init_app() to ensure
    the Flask app context is available for all handlers.
    """
    # Import handlers to trigger @socketio.on() decorator registration
    from . import analysis_handlers  # noqa: F401

    logger.info("Socket.IO handlers registered (analysis)")
