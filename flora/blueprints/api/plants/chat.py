"""
Plant Care Conversation
=======================

Endpoints for:
- Inspecting and discarding the caller's plant session
- Sending chat messages about the identified plant
- Stateless one-off advice questions
"""
from __future__ import annotations

import logging

from flask import Response
from pydantic import ValidationError

from . import plants_api
from flora.blueprints.api._common import (
    current_session_id as _current_session_id,
    fail as _fail,
    get_json as _get_json,
    get_plant_advisor as _advisor,
    get_plant_session_service as _session_service,
    success as _success,
    validation_details as _validation_details,
)
from flora.schemas import AdviceRequest, ChatMessageRequest
from flora.domain.exceptions import ConflictError
from flora.services.application.plant_session_service import NO_PLANT_MESSAGE, empty_session_snapshot
from flora.utils.http import safe_route

logger = logging.getLogger("plants_api.chat")


# ============================================================================
# SESSION
# ============================================================================


@plants_api.get("/session")
@safe_route("Failed to load plant session")
def get_session() -> Response:
    """
    Current plant, conversation log and state.

    Binds a session id to the cookie (so Socket.IO can join its room before the
    first identify) but stores nothing until the session is actually used.
    """
    session_id = _current_session_id()
    session = _session_service().find_session(session_id)
    if session is None:
        return _success(empty_session_snapshot(session_id))
    return _success(session.to_dict())


@plants_api.delete("/session")
@safe_route("Failed to reset plant session")
def reset_session() -> Response:
    """Discard the caller's plant and conversation."""
    session_id = _current_session_id(create=False)
    discarded = bool(session_id) and _session_service().reset_session(session_id)
    logger.info("Reset plant session %s (existed=%s)", session_id, discarded)
    return _success({"reset": discarded})


# ============================================================================
# CHAT
# ============================================================================


@plants_api.post("/chat")
@safe_route("Failed to send chat message")
def send_chat_message() -> Response:
    """
    Ask a question about the identified plant.

    Request:
        {"message": "How often should I water it?"}

    Returns:
        {
            "user_message": {...},
            "assistant_message": {...},
            "source": "llm|empty_response|error",
            "messages": [...],
            "state": "conversing"
        }
    """
    try:
        body = ChatMessageRequest(**_get_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details=_validation_details(ve))

    session = _session_service().find_session(_current_session_id(create=False))
    if session is None:
        raise ConflictError(NO_PLANT_MESSAGE)
    exchange = _session_service().send_message(session, body.message)

    payload = exchange.to_dict()
    snapshot = session.to_dict()
    payload["messages"] = snapshot["messages"]
    payload["state"] = snapshot["state"]
    return _success(payload)


@plants_api.post("/advice")
@safe_route("Failed to get plant advice")
def get_advice() -> Response:
    """
    One-off question, optionally about a given plant; no session state.

    Request:
        {"question": "...", "plant": {PlantInfo}?}
    """
    try:
        body = AdviceRequest(**_get_json())
    except ValidationError as ve:
        return _fail("Invalid request", 400, details=_validation_details(ve))

    plant = body.plant.to_domain() if body.plant is not None else None
    result = _advisor().ask(body.question, plant_context=plant)
    return _success(result.to_dict())
