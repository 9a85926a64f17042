"""
WebSocket Emitters
==================

Centralized Socket.IO emitter used to push analysis status texts to the
browser while an image identification is running.

Each HTTP session has its own room (``session_<id>``) on the ``/analysis``
namespace; the socket handler joins it on connect.
"""

import logging
from typing import Any

from flask_socketio import SocketIO

logger = logging.getLogger("emitters")

SOCKETIO_NAMESPACE_ANALYSIS = "/analysis"
WS_EVENT_ANALYSIS_PROGRESS = "analysis_progress"


def session_room(session_id: str) -> str:
    """Socket.IO room name for a plant session."""
    return f"session_{session_id}"


class EmitterService:
    """
    Centralized WebSocket Emitter Service.

    Attributes:
        sio: The Socket.IO SocketIO instance for emitting events.
    """

    def __init__(self, sio: SocketIO):
        self.sio = sio

    def emit(
        self,
        event: str,
        payload: dict[str, Any],
        room: str | None = None,
        namespace: str = "/",
    ) -> None:
        """
        Emit a Socket.IO event.

        Args:
            event (str): Event name (e.g., "analysis_progress").
            payload (dict): JSON serializable data to send.
            room (Optional[str]): Socket.IO room identifier. Broadcasts if None.
            namespace (str): Socket.IO namespace to emit under (default "/").
        """
        try:
            logger.debug("Emitting event='%s' to namespace='%s' room='%s'", event, namespace, room or "broadcast")
            self.sio.emit(event, payload, room=room, namespace=namespace)
        except Exception as e:
            logger.exception(f"[Emitter] Failed to emit event '{event}' to room '{room}': {e}")

    def emit_analysis_progress(self, session_id: str, text: str) -> None:
        """Push one "analyzing..." status text to the session's room."""
        self.emit(
            event=WS_EVENT_ANALYSIS_PROGRESS,
            payload={"session_id": session_id, "text": text},
            room=session_room(session_id),
            namespace=SOCKETIO_NAMESPACE_ANALYSIS,
        )

    def progress_callback(self, session_id: str):
        """Bind :meth:`emit_analysis_progress` to one session."""

        def _emit(text: str) -> None:
            self.emit_analysis_progress(session_id, text)

        return _emit
