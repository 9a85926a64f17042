from __future__ import annotations

import logging
from dataclasses import dataclass

from flora.config import AppConfig
from flora.services.ai.llm_backends import LLMBackend, create_backend
from flora.services.ai.plant_advisor import DEFAULT_ADVICE_MODEL, PlantAdvisorService
from flora.services.ai.plant_analyzer import DEFAULT_ANALYSIS_MODEL, PlantImageAnalyzer
from flora.services.application.plant_session_service import PlantSessionService, PlantSessionStore
from flora.utils.emitters import EmitterService

logger = logging.getLogger(__name__)


def _resolve_model(provider: str, configured: str, gemini_default: str) -> str:
    """Configured model, else the Gemini default, else "" (backend default)."""
    if configured:
        return configured
    if provider == "gemini":
        return gemini_default
    return ""


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    llm_backend: LLMBackend | None
    plant_analyzer: PlantImageAnalyzer
    plant_advisor: PlantAdvisorService
    session_store: PlantSessionStore
    plant_session_service: PlantSessionService
    emitter_service: EmitterService | None

    @classmethod
    def build(
        cls,
        config: AppConfig,
        *,
        backend: LLMBackend | None = None,
        emitter: EmitterService | None = None,
    ) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
            backend: Pre-built LLM backend (tests); built from config when omitted
            emitter: Socket.IO emitter for analysis status texts
        """
        logger.info("Building ServiceContainer...")
        provider = config.llm_provider.strip().lower()

        if backend is None:
            backend = create_backend(
                provider,
                api_key=config.llm_api_key,
                model=_resolve_model(provider, config.llm_advice_model, DEFAULT_ADVICE_MODEL),
                base_url=config.llm_base_url or None,
                timeout=config.llm_timeout,
            )
        if backend is None:
            logger.warning("No LLM backend available; identification and chat will return fallbacks")
        else:
            logger.info("LLM backend active (provider=%s)", backend.name)

        max_tokens = config.llm_max_tokens or None
        analyzer = PlantImageAnalyzer(
            backend=backend,
            model=_resolve_model(provider, config.llm_analysis_model, DEFAULT_ANALYSIS_MODEL),
            max_tokens=max_tokens,
            temperature=config.llm_temperature,
            progress_interval=config.progress_interval,
        )
        advisor = PlantAdvisorService(
            backend=backend,
            model=_resolve_model(provider, config.llm_advice_model, DEFAULT_ADVICE_MODEL),
            max_tokens=max_tokens,
            temperature=config.llm_temperature,
        )
        store = PlantSessionStore(idle_ttl=config.session_ttl_minutes * 60)
        session_service = PlantSessionService(analyzer=analyzer, advisor=advisor, store=store)

        container = cls(
            config=config,
            llm_backend=backend,
            plant_analyzer=analyzer,
            plant_advisor=advisor,
            session_store=store,
            plant_session_service=session_service,
            emitter_service=emitter,
        )
        logger.info("ServiceContainer built successfully.")
        return container

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.session_store.clear()
        logger.info("ServiceContainer shutdown complete.")
