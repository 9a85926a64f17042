"""
Plant Session Service
=====================

Owns the per-user conversation state and drives the two AI calls.

A :class:`PlantSession` holds the currently identified plant and its
:class:`~flora.domain.conversation.ConversationLog`.  State transitions:

* ``EMPTY -> IDENTIFIED``: a successful image analysis.
* ``IDENTIFIED/CONVERSING -> IDENTIFIED``: another successful analysis; the log
  is reset to a single welcome message.
* ``IDENTIFIED -> CONVERSING``: the first chat exchange.

A failed analysis never touches the session.  Chat exchanges are serialized
per session, so a user message is always immediately followed by its reply
even when requests overlap.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from flora.domain.conversation import ConversationLog, Message, MessageRole, SessionState
from flora.domain.exceptions import ConflictError, ValidationError
from flora.domain.plant_info import PlantInfo
from flora.services.ai.plant_advisor import AdviceSource, PlantAdvisorService
from flora.services.ai.plant_analyzer import PlantImageAnalyzer
from flora.utils.concurrency import synchronized
from flora.utils.progress import ProgressCallback
from flora.utils.time import utc_now

logger = logging.getLogger(__name__)

IDENTIFICATION_FAILED_MESSAGE = "Sorry, I couldn't identify this plant. Please try a clearer photo."
NO_PLANT_MESSAGE = "Identify a plant to start a conversation about its care."


# ---------------------------------------------------------------------------
# Session state container
# ---------------------------------------------------------------------------


class PlantSession:
    """Session-scoped plant and conversation state."""

    def __init__(self, session_id: str | None = None):
        self.session_id = session_id or uuid.uuid4().hex
        self.created_at: datetime = utc_now()
        self.updated_at: datetime = self.created_at
        self._lock = threading.RLock()
        # Held for a whole exchange (user append -> advice -> reply append)
        self.exchange_lock = threading.Lock()
        self._plant: PlantInfo | None = None
        self._log = ConversationLog()

    @property
    @synchronized
    def plant(self) -> PlantInfo | None:
        return self._plant

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._log.snapshot()

    @property
    @synchronized
    def state(self) -> SessionState:
        if self._plant is None:
            return SessionState.EMPTY
        if len(self._log) <= 1:
            return SessionState.IDENTIFIED
        return SessionState.CONVERSING

    @synchronized
    def adopt_plant(self, plant: PlantInfo) -> Message:
        """Replace the plant and restart the conversation with a welcome message."""
        self._plant = plant
        self.updated_at = utc_now()
        return self._log.reset(plant.name)

    @synchronized
    def append(self, role: MessageRole, text: str) -> Message:
        message = self._log.append(Message.create(role, text))
        self.updated_at = message.timestamp
        return message

    @synchronized
    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "plant": self._plant.to_dict() if self._plant is not None else None,
            "messages": self._log.to_list(),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def empty_session_snapshot(session_id: str | None = None) -> dict[str, Any]:
    """What a caller without a stored session sees: no plant, no messages."""
    return {
        "session_id": session_id,
        "state": SessionState.EMPTY.value,
        "plant": None,
        "messages": [],
        "created_at": None,
        "updated_at": None,
    }


class PlantSessionStore:
    """
    In-memory registry of sessions keyed by session id (no persistence).

    Sessions untouched for longer than *idle_ttl* seconds are evicted whenever
    a new session is created; ``None`` or ``0`` keeps them until discarded.
    """

    def __init__(self, idle_ttl: float | None = None) -> None:
        self._lock = threading.Lock()
        self._sessions: dict[str, PlantSession] = {}
        self._idle_ttl = timedelta(seconds=idle_ttl) if idle_ttl and idle_ttl > 0 else None

    @synchronized
    def get_or_create(self, session_id: str) -> PlantSession:
        session = self._sessions.get(session_id)
        if session is None:
            self._evict_idle_locked()
            session = PlantSession(session_id)
            self._sessions[session_id] = session
            logger.debug("Created plant session %s", session_id)
        return session

    @synchronized
    def get(self, session_id: str) -> PlantSession | None:
        return self._sessions.get(session_id)

    @synchronized
    def discard(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    @synchronized
    def evict_idle(self) -> int:
        """Drop sessions idle past the TTL; returns how many were removed."""
        return self._evict_idle_locked()

    @synchronized
    def clear(self) -> None:
        self._sessions.clear()

    @synchronized
    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_idle_locked(self) -> int:
        if self._idle_ttl is None:
            return 0
        cutoff = utc_now() - self._idle_ttl
        expired = [sid for sid, s in self._sessions.items() if s.updated_at < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted %d idle plant session(s)", len(expired))
        return len(expired)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class IdentificationResult:
    """What an identify attempt did to the session."""

    ok: bool
    session: PlantSession
    plant: PlantInfo | None = None
    failure_kind: str | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = self.session.to_dict()
        payload["identified"] = self.ok
        if not self.ok:
            payload["failure"] = self.failure_kind
            payload["message"] = self.message
        return payload


@dataclass
class ChatExchange:
    """One user question and the assistant reply that followed it."""

    user_message: Message
    assistant_message: Message
    source: AdviceSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_message": self.user_message.to_dict(),
            "assistant_message": self.assistant_message.to_dict(),
            "source": self.source.value,
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PlantSessionService:
    """
    Orchestrates identify and chat actions against a :class:`PlantSession`.

    Parameters
    ----------
    analyzer:
        Image Analysis Call component.
    advisor:
        Advice Call component.
    store:
        Session registry; a fresh in-memory one by default.
    """

    def __init__(
        self,
        analyzer: PlantImageAnalyzer,
        advisor: PlantAdvisorService,
        store: PlantSessionStore | None = None,
    ):
        self.analyzer = analyzer
        self.advisor = advisor
        self.store = store if store is not None else PlantSessionStore()

    def get_session(self, session_id: str) -> PlantSession:
        return self.store.get_or_create(session_id)

    def find_session(self, session_id: str | None) -> PlantSession | None:
        """Existing session for *session_id*, without creating one."""
        return self.store.get(session_id) if session_id else None

    def reset_session(self, session_id: str) -> bool:
        return self.store.discard(session_id)

    def identify_plant(
        self,
        session: PlantSession,
        image_data: str,
        mime_type: str,
        on_progress: ProgressCallback | None = None,
    ) -> IdentificationResult:
        """Analyze an image; on success reseed the session, otherwise leave it alone."""
        outcome = self.analyzer.analyze(image_data, mime_type, on_progress=on_progress)

        if outcome.plant is None:
            logger.info(
                "Session %s: identification failed (%s); keeping state %s",
                session.session_id,
                outcome.failure_kind,
                session.state.value,
            )
            return IdentificationResult(
                ok=False,
                session=session,
                plant=session.plant,
                failure_kind=outcome.failure_kind,
                message=IDENTIFICATION_FAILED_MESSAGE,
            )

        with session.exchange_lock:
            session.adopt_plant(outcome.plant)
        logger.info("Session %s: identified %s", session.session_id, outcome.plant.name)
        return IdentificationResult(ok=True, session=session, plant=outcome.plant)

    def send_message(self, session: PlantSession, text: str) -> ChatExchange:
        """Append the user's question, ask the advisor, append the reply."""
        if not text or not text.strip():
            raise ValidationError("Message must not be empty")

        with session.exchange_lock:
            plant = session.plant
            if plant is None:
                raise ConflictError(NO_PLANT_MESSAGE)

            user_message = session.append(MessageRole.USER, text)
            result = self.advisor.ask(text, plant_context=plant)
            assistant_message = session.append(MessageRole.ASSISTANT, result.text)

        if result.is_fallback:
            logger.warning("Session %s: advice fell back (%s)", session.session_id, result.source.value)
        return ChatExchange(user_message=user_message, assistant_message=assistant_message, source=result.source)
