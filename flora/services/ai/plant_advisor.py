"""
Plant Advisor Service - Free-form Gardening Q&A
================================================
Wraps an :class:`LLMBackend` and answers a grower's question, optionally
grounded in the plant that was just identified.

The advisor never raises: an empty model answer and a failed call each map to
their own fixed fallback text, and :class:`AdviceResult.source` tells them
apart.

Usage
-----
::

    advisor = PlantAdvisorService(backend=my_backend)
    text = advisor.get_advice("How often should I water?", plant_context=plant)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from flora.domain.plant_info import PlantInfo
    from flora.services.ai.llm_backends import LLMBackend

logger = logging.getLogger(__name__)

DEFAULT_ADVICE_MODEL = "gemini-3-flash-preview"

EMPTY_RESPONSE_FALLBACK = "I'm sorry, I couldn't process that question."
ERROR_FALLBACK = "I encountered an error while thinking. Please try again."

_GENERIC_PERSONA = "You are Flora, an expert botanist. Provide concise, helpful gardening advice."


class AdviceSource(str, Enum):
    """Where the advice text came from."""

    LLM = "llm"
    EMPTY_RESPONSE = "empty_response"
    ERROR = "error"


@dataclass
class AdviceResult:
    """Advice text plus how it was produced."""

    text: str
    source: AdviceSource = AdviceSource.LLM
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.source is not AdviceSource.LLM

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "source": self.source.value,
            "latency_ms": round(self.latency_ms, 1),
        }


def build_system_instruction(plant_context: "PlantInfo" | None = None) -> str:
    """Persona prompt naming the plant when one is known."""
    if plant_context is None:
        return _GENERIC_PERSONA
    return (
        "You are Flora, an expert botanist. "
        f"The user is asking about their {plant_context.name} ({plant_context.scientific_name}). "
        "Provide concise, helpful gardening advice."
    )


class PlantAdvisorService:
    """
    Advice Call.

    Parameters
    ----------
    backend:
        An initialised :class:`LLMBackend`.  ``None`` means every question
        gets the error fallback.
    model:
        Model used for advice (the lighter-weight one).
    max_tokens:
        Token budget for answers (``None`` = provider default).
    temperature:
        Sampling temperature (``None`` = provider default).
    """

    def __init__(
        self,
        backend: "LLMBackend" | None = None,
        model: str = DEFAULT_ADVICE_MODEL,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ):
        self._backend = backend
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    # -- public API ---------------------------------------------------------

    @property
    def is_available(self) -> bool:
        """``True`` when the backing LLM is ready."""
        return self._backend is not None and self._backend.is_available

    @property
    def provider_name(self) -> str:
        """Name of the active backend, or ``"none"``."""
        if self._backend is not None:
            return self._backend.name
        return "none"

    def get_advice(self, question: str, plant_context: "PlantInfo" | None = None) -> str:
        """Answer *question*; always returns text."""
        return self.ask(question, plant_context).text

    def ask(self, question: str, plant_context: "PlantInfo" | None = None) -> AdviceResult:
        """
        Ask the advisor a free-form question.

        Returns
        -------
        AdviceResult - always returned, never raises.
        """
        if not self.is_available:
            logger.error("Plant advisor has no available backend")
            return AdviceResult(text=ERROR_FALLBACK, source=AdviceSource.ERROR)

        try:
            response = self._backend.generate(  # type: ignore[union-attr]
                system_prompt=build_system_instruction(plant_context),
                user_prompt=question,
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as exc:
            logger.error("Error getting plant advice: %s", exc, exc_info=True)
            return AdviceResult(text=ERROR_FALLBACK, source=AdviceSource.ERROR)

        usage = getattr(response, "usage", {}) or {}
        latency_ms = getattr(response, "latency_ms", 0.0) or 0.0
        text = getattr(response, "text", None)
        if not text:
            logger.warning("Plant advisor received an empty response")
            return AdviceResult(
                text=EMPTY_RESPONSE_FALLBACK,
                source=AdviceSource.EMPTY_RESPONSE,
                usage=usage,
                latency_ms=latency_ms,
            )

        return AdviceResult(text=text, source=AdviceSource.LLM, usage=usage, latency_ms=latency_ms)
