"""Domain objects for plant identification and conversation."""

from flora.domain.conversation import (
    WELCOME_MESSAGE_ID,
    ConversationLog,
    Message,
    MessageRole,
    SessionState,
    welcome_text,
)
from flora.domain.plant_info import PlantCareGuide, PlantInfo

__all__ = [
    "WELCOME_MESSAGE_ID",
    "ConversationLog",
    "Message",
    "MessageRole",
    "PlantCareGuide",
    "PlantInfo",
    "SessionState",
    "welcome_text",
]
