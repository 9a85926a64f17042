"""
Plant Image Analyzer - Identification & Care Guide
===================================================
Sends a plant photo to the generative model with a strict response schema and
turns the JSON answer into a :class:`~flora.domain.plant_info.PlantInfo`.

The analyzer never raises.  Every failure is classified as a
:class:`~flora.domain.exceptions.TransportFailure`,
:class:`~flora.domain.exceptions.EmptyResponse` or
:class:`~flora.domain.exceptions.SchemaViolation`, logged, and recorded on the
returned :class:`AnalysisOutcome`; :meth:`PlantImageAnalyzer.analyze_image`
collapses all three to ``None``.

Usage
-----
::

    analyzer = PlantImageAnalyzer(backend=my_backend)
    plant = analyzer.analyze_image(b64_jpeg, "image/jpeg", on_progress=print)
    if plant is None:
        print("Sorry, I couldn't identify this plant.")
"""

from __future__ import annotations

import binascii
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Sequence

from pydantic import ValidationError as PydanticValidationError

from flora.domain.exceptions import AnalysisFailure, EmptyResponse, SchemaViolation, TransportFailure
from flora.domain.plant_info import CARE_GUIDE_FIELDS, PlantInfo
from flora.schemas.plants import PlantInfoSchema
from flora.services.ai.llm_backends import ImageInput
from flora.utils.progress import ProgressCallback, ProgressTicker

if TYPE_CHECKING:
    from flora.services.ai.llm_backends import LLMBackend

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_MODEL = "gemini-3-pro-preview"

ANALYSIS_INSTRUCTION = (
    "Analyze this plant image. Identify the plant and provide comprehensive care instructions "
    "in the specified JSON format."
)

ANALYZING_MESSAGES: tuple[str, ...] = (
    "Identifying your green friend...",
    "Consulting the botanical archives...",
    "Decoding leaf patterns...",
    "Measuring optimal sunlight needs...",
    "Almost there! Preparing care guide...",
)

_CARE_GUIDE_DESCRIPTIONS = {
    "watering": "Detailed watering instructions",
    "sunlight": "Light requirement details",
    "temperature": "Ideal temperature range",
    "humidity": "Humidity needs",
    "soil": "Soil type recommendation",
    "fertilizer": "Fertilization schedule and type",
}

PLANT_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Common name of the plant"},
        "scientificName": {"type": "string", "description": "Botanical/Scientific name"},
        "description": {"type": "string", "description": "A brief, engaging overview of the plant"},
        "careGuide": {
            "type": "object",
            "properties": {
                name: {"type": "string", "description": _CARE_GUIDE_DESCRIPTIONS[name]}
                for name in CARE_GUIDE_FIELDS
            },
            "required": list(CARE_GUIDE_FIELDS),
        },
        "toxicity": {"type": "string", "description": "Toxicity to pets or humans"},
        "commonIssues": {
            "type": "array",
            "items": {"type": "string"},
            "description": "List of common problems or pests",
        },
    },
    "required": ["name", "scientificName", "description", "careGuide", "toxicity", "commonIssues"],
}


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass
class AnalysisOutcome:
    """Result of one analysis attempt: a plant, or the reason there is none."""

    plant: PlantInfo | None = None
    failure: AnalysisFailure | None = None
    model: str = ""
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.plant is not None

    @property
    def failure_kind(self) -> str | None:
        return self.failure.kind if self.failure is not None else None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class PlantImageAnalyzer:
    """
    Image Analysis Call.

    Parameters
    ----------
    backend:
        An initialised :class:`LLMBackend`.  ``None`` means every analysis
        fails with a transport failure.
    model:
        Model used for analysis (the heavier, multimodal one).
    progress_messages:
        Rotating status texts fed to ``on_progress`` while waiting.
    progress_interval:
        Seconds between status texts.
    """

    def __init__(
        self,
        backend: "LLMBackend" | None = None,
        model: str = DEFAULT_ANALYSIS_MODEL,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
        progress_messages: Sequence[str] = ANALYZING_MESSAGES,
        progress_interval: float = 1.5,
    ):
        self._backend = backend
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._progress_messages = tuple(progress_messages)
        self._progress_interval = progress_interval

    # -- public API ---------------------------------------------------------

    @property
    def is_available(self) -> bool:
        return self._backend is not None and self._backend.is_available

    def analyze_image(
        self,
        image_data: str,
        mime_type: str,
        on_progress: ProgressCallback | None = None,
    ) -> PlantInfo | None:
        """Identify the plant in *image_data* (base64), or return ``None``."""
        return self.analyze(image_data, mime_type, on_progress=on_progress).plant

    def analyze(
        self,
        image_data: str,
        mime_type: str,
        *,
        on_progress: ProgressCallback | None = None,
    ) -> AnalysisOutcome:
        """
        Run one analysis attempt and report the differentiated outcome.

        Returns
        -------
        AnalysisOutcome - always returned, never raises.
        """
        outcome = AnalysisOutcome(model=self._model)
        try:
            with ProgressTicker(self._progress_messages, on_progress, interval=self._progress_interval):
                outcome.plant = self._identify(image_data, mime_type, outcome)
        except AnalysisFailure as failure:
            outcome.failure = failure
            logger.warning("Plant analysis failed [%s]: %s", failure.kind, failure)
            return outcome

        logger.info(
            "Plant identified as %s (%s) in %.0f ms",
            outcome.plant.name,
            outcome.plant.scientific_name,
            outcome.latency_ms,
        )
        return outcome

    # -- internal -----------------------------------------------------------

    def _identify(self, image_data: str, mime_type: str, outcome: AnalysisOutcome) -> PlantInfo:
        if not self.is_available:
            raise TransportFailure("No generative backend available for image analysis")

        try:
            image = ImageInput.from_base64(image_data, mime_type)
        except (binascii.Error, ValueError) as exc:
            raise TransportFailure(f"Image data is not valid base64: {exc}") from exc

        try:
            response = self._backend.generate(  # type: ignore[union-attr]
                system_prompt=None,
                user_prompt=ANALYSIS_INSTRUCTION,
                images=[image],
                response_schema=PLANT_ANALYSIS_SCHEMA,
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
            )
        except Exception as exc:
            logger.error("Error analyzing plant image: %s", exc, exc_info=True)
            raise TransportFailure(str(exc) or type(exc).__name__) from exc

        outcome.usage = getattr(response, "usage", {}) or {}
        outcome.latency_ms = getattr(response, "latency_ms", 0.0) or 0.0

        text = getattr(response, "text", None)
        if not text or not text.strip():
            raise EmptyResponse("Model returned no text")

        return self._parse_plant(text)

    def _parse_plant(self, text: str) -> PlantInfo:
        """Parse and validate the model's JSON text into a :class:`PlantInfo`."""
        try:
            data = json.loads(_strip_fences(text))
        except (json.JSONDecodeError, RecursionError) as exc:
            # Pathologically nested arrays exhaust the decoder stack
            raise SchemaViolation(f"Response is not valid JSON: {exc}", detail={"text": text[:200]}) from exc

        try:
            return PlantInfoSchema.model_validate(data).to_domain()
        except PydanticValidationError as exc:
            raise SchemaViolation(
                f"Response does not match the plant schema ({exc.error_count()} errors)",
                detail={"errors": exc.errors(include_url=False)},
            ) from exc


def _strip_fences(text: str) -> str:
    """Remove markdown code fences some backends wrap JSON in."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        lines = [ln for ln in cleaned.split("\n") if not ln.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()
    return cleaned
