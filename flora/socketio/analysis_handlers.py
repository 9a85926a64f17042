"""flora.socketio.analysis_handlers

Room membership for the ``/analysis`` namespace.

A client is put in the room of the plant session held in its Flask session
cookie, so the status texts of an identification started over HTTP reach the
same browser. Clients may also join explicitly with ``join_session``.
"""

import logging

from flask import request, session
from flask_socketio import emit, join_room, leave_room

from flora.blueprints.api._common import SESSION_KEY
from flora.extensions import socketio
from flora.utils.emitters import SOCKETIO_NAMESPACE_ANALYSIS, session_room

logger = logging.getLogger(__name__)


def _session_id_from_payload(data) -> str | None:
    session_id = data.get("session_id") if isinstance(data, dict) else None
    if not isinstance(session_id, str) or not session_id.strip():
        return None
    return session_id.strip()


@socketio.on("connect", namespace=SOCKETIO_NAMESPACE_ANALYSIS)
def handle_analysis_connect(auth=None):
    session_id = session.get(SESSION_KEY)
    if session_id is None:
        logger.info("Client %s connected to %s with no plant session", request.sid, SOCKETIO_NAMESPACE_ANALYSIS)
        return
    join_room(session_room(session_id))
    logger.info("Client %s auto-joined %s", request.sid, session_room(session_id))


@socketio.on("disconnect", namespace=SOCKETIO_NAMESPACE_ANALYSIS)
def handle_analysis_disconnect(*_args):
    logger.debug("Client %s disconnected from %s", request.sid, SOCKETIO_NAMESPACE_ANALYSIS)


@socketio.on("join_session", namespace=SOCKETIO_NAMESPACE_ANALYSIS)
def handle_join_session(data):
    session_id = _session_id_from_payload(data)
    if session_id is None:
        logger.warning("Client %s sent join_session without session_id", request.sid)
        emit("error", {"message": "session_id is required"})
        return
    join_room(session_room(session_id))
    logger.info("Client %s joined %s", request.sid, session_room(session_id))
    emit("joined", {"session_id": session_id})


@socketio.on("leave_session", namespace=SOCKETIO_NAMESPACE_ANALYSIS)
def handle_leave_session(data):
    session_id = _session_id_from_payload(data)
    if session_id is None:
        return
    leave_room(session_room(session_id))
    logger.info("Client %s left %s", request.sid, session_room(session_id))
