"""
Conversation Log
================

Ordered, append-only message history for the active plant session.

Insertion order is display order is chronological order. Messages are never
edited or removed; the only way to drop history is :meth:`ConversationLog.reset`,
which starts a fresh log seeded with a single welcome message whenever a new
plant is identified.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from flora.utils.concurrency import synchronized
from flora.utils.time import utc_now

WELCOME_MESSAGE_ID = "welcome"


class MessageRole(str, Enum):
    """Who authored a message."""

    USER = "user"
    ASSISTANT = "assistant"


class SessionState(str, Enum):
    """Lifecycle of a plant session."""

    EMPTY = "empty"  # no plant identified, log empty
    IDENTIFIED = "identified"  # plant set, log holds only the welcome message
    CONVERSING = "conversing"  # at least one exchange after the welcome


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    id: str
    role: MessageRole
    text: str
    timestamp: datetime = field(default_factory=utc_now)

    @classmethod
    def create(cls, role: MessageRole, text: str, *, message_id: str | None = None) -> Message:
        return cls(id=message_id or uuid.uuid4().hex, role=role, text=text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


def welcome_text(plant_name: str) -> str:
    return (
        f"I've identified your plant as a {plant_name}! You can see the full care guide above. "
        "Do you have any specific questions about it?"
    )


class ConversationLog:
    """Thread-safe append-only sequence of :class:`Message`."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._messages: list[Message] = []

    @synchronized
    def append(self, message: Message) -> Message:
        if any(existing.id == message.id for existing in self._messages):
            raise ValueError(f"Duplicate message id '{message.id}'")
        self._messages.append(message)
        return message

    @synchronized
    def reset(self, plant_name: str) -> Message:
        """Discard all history and seed a fresh welcome message."""
        welcome = Message.create(MessageRole.ASSISTANT, welcome_text(plant_name), message_id=WELCOME_MESSAGE_ID)
        self._messages = [welcome]
        return welcome

    @synchronized
    def snapshot(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self.snapshot())

    def to_list(self) -> list[dict[str, Any]]:
        return [message.to_dict() for message in self.snapshot()]
