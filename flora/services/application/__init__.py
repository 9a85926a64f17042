"""Application services: session state and orchestration of the AI calls."""

from flora.services.application.plant_session_service import (
    IDENTIFICATION_FAILED_MESSAGE,
    ChatExchange,
    IdentificationResult,
    PlantSession,
    PlantSessionService,
    PlantSessionStore,
)

__all__ = [
    "IDENTIFICATION_FAILED_MESSAGE",
    "ChatExchange",
    "IdentificationResult",
    "PlantSession",
    "PlantSessionService",
    "PlantSessionStore",
]
