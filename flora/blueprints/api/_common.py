"""
Blueprint Common Utilities
==========================

Shared helper functions for all API blueprints.
Import these instead of duplicating helper code in each blueprint.

Usage:
    from flora.blueprints.api._common import (
        get_container, get_json, success, fail,
        get_plant_session_service, current_session_id, ...
    )
"""
from __future__ import annotations

import logging
import uuid
from typing import Any

from flask import current_app, request, session
from pydantic import ValidationError as PydanticValidationError

from flora.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

# Flask session cookie key holding the plant session id
SESSION_KEY = "flora_session_id"

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


def get_plant_session_service():
    """Get PlantSessionService from container."""
    return get_container().plant_session_service


def get_plant_advisor():
    """Get PlantAdvisorService from container."""
    return get_container().plant_advisor


def get_emitter_service():
    """Get EmitterService from container (None when Socket.IO is off)."""
    return get_container().emitter_service


# ============================================================================
# SESSION UTILITIES
# ============================================================================


def current_session_id(*, create: bool = True) -> str | None:
    """
    Plant session id bound to the caller's Flask session cookie.

    A new id is minted on first use unless *create* is False.
    """
    session_id = session.get(SESSION_KEY)
    if session_id is None and create:
        session_id = uuid.uuid4().hex
        session[SESSION_KEY] = session_id
        logger.debug("Assigned new plant session id %s", session_id)
    return session_id


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def validation_details(exc: PydanticValidationError) -> dict[str, Any]:
    """JSON-safe summary of a pydantic validation error."""
    return {"errors": exc.errors(include_url=False, include_context=False, include_input=False)}


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)
