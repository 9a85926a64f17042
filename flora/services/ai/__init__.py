"""Generative-AI services: provider backends, image analysis and advice."""

from flora.services.ai.llm_backends import (
    AnthropicBackend,
    GeminiBackend,
    ImageInput,
    LLMBackend,
    LLMResponse,
    OpenAIBackend,
    create_backend,
)
from flora.services.ai.plant_advisor import (
    EMPTY_RESPONSE_FALLBACK,
    ERROR_FALLBACK,
    AdviceResult,
    AdviceSource,
    PlantAdvisorService,
)
from flora.services.ai.plant_analyzer import (
    ANALYZING_MESSAGES,
    PLANT_ANALYSIS_SCHEMA,
    AnalysisOutcome,
    PlantImageAnalyzer,
)

__all__ = [
    "ANALYZING_MESSAGES",
    "EMPTY_RESPONSE_FALLBACK",
    "ERROR_FALLBACK",
    "PLANT_ANALYSIS_SCHEMA",
    "AdviceResult",
    "AdviceSource",
    "AnalysisOutcome",
    "AnthropicBackend",
    "GeminiBackend",
    "ImageInput",
    "LLMBackend",
    "LLMResponse",
    "OpenAIBackend",
    "PlantAdvisorService",
    "PlantImageAnalyzer",
    "create_backend",
]
