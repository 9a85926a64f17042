"""
Health API Blueprint
====================

Routes:
- GET /api/v1/health - Liveness plus generative-AI availability
- GET /api/v1/health/ping - Basic liveness check
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response

from flora.blueprints.api._common import get_container as _container, success as _success
from flora.utils.http import safe_route
from flora.utils.time import iso_now

logger = logging.getLogger("health_api")

health_api = Blueprint("health_api", __name__)


@health_api.get("")
@safe_route("Failed to get service health")
def get_health() -> Response:
    """
    Service status and active LLM provider.

    Returns:
        {"status": "healthy|degraded", "llm_provider": "gemini", "ai_available": true, ...}
    """
    container = _container()
    advisor = container.plant_advisor
    analyzer = container.plant_analyzer
    ai_available = advisor.is_available and analyzer.is_available
    return _success(
        {
            "status": "healthy" if ai_available else "degraded",
            "llm_provider": advisor.provider_name,
            "ai_available": ai_available,
            "active_sessions": len(container.session_store),
            "timestamp": iso_now(),
        }
    )


@health_api.get("/ping")
@safe_route("Failed to handle ping request")
def ping() -> Response:
    """Basic liveness check for monitoring tools."""
    return _success({"status": "ok", "timestamp": iso_now()})
