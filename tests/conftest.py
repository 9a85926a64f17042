"""
Shared test fixtures for the Flora backend test suite.

Provides:
- A MagicMock LLM backend whose ``generate`` answers can be scripted
- Canned plant data as the model would return it (``samples``)
- Analyzer / advisor / session service wired to the mock backend
- Flask app and test client built around the same backend

Usage:
    def test_example(llm_backend, samples, session_service):
        llm_backend.generate.return_value = samples.response(samples.plant_json())
        ...
"""

from __future__ import annotations

import base64
import copy
import json
import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

from flora.domain.plant_info import PlantInfo
from flora.services.ai.llm_backends import LLMBackend, LLMResponse
from flora.services.ai.plant_advisor import PlantAdvisorService
from flora.services.ai.plant_analyzer import PlantImageAnalyzer
from flora.services.application.plant_session_service import PlantSessionService

# ---------------------------------------------------------------------------
# Logging - keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("flora").setLevel(logging.WARNING)


# ============================== Sample data ================================

_MONSTERA: dict[str, Any] = {
    "name": "Monstera",
    "scientificName": "Monstera deliciosa",
    "description": "A climbing aroid famous for its split leaves.",
    "careGuide": {
        "watering": "Water when the top 5 cm of soil is dry.",
        "sunlight": "Bright, indirect light.",
        "temperature": "18-29 °C",
        "humidity": "60% or higher",
        "soil": "Chunky, well-draining aroid mix",
        "fertilizer": "Balanced liquid feed monthly in spring and summer",
    },
    "toxicity": "Toxic to cats and dogs if ingested.",
    "commonIssues": ["Yellow leaves from overwatering", "Spider mites"],
}


class SampleData:
    """Helper for building model answers and request payloads.

    Usage:
        def test_something(samples):
            text = samples.plant_json(name="Snake Plant")
    """

    photo_bytes = b"\xff\xd8\xff\xe0fake-jpeg-bytes"
    photo_b64 = base64.b64encode(photo_bytes).decode("ascii")

    def plant_payload(self, **overrides: Any) -> dict[str, Any]:
        data = copy.deepcopy(_MONSTERA)
        data.update(overrides)
        return data

    def plant_json(self, **overrides: Any) -> str:
        return json.dumps(self.plant_payload(**overrides))

    def response(self, text: str, *, model: str = "test-model") -> LLMResponse:
        """Wrap *text* the way every backend does."""
        return LLMResponse(text=text, model=model, usage={"total_tokens": 42}, latency_ms=12.5)


@pytest.fixture()
def samples() -> SampleData:
    return SampleData()


@pytest.fixture()
def monstera(samples) -> PlantInfo:
    return PlantInfo.from_dict(samples.plant_payload())


# ============================== Services ===================================


@pytest.fixture()
def llm_backend(samples) -> MagicMock:
    """Ready backend double answering with the Monstera JSON; script ``generate`` per test."""
    backend = MagicMock(spec=LLMBackend)
    backend.name = "mock"
    backend.is_available = True
    backend.generate.return_value = samples.response(samples.plant_json())
    return backend


@pytest.fixture()
def analyzer(llm_backend) -> PlantImageAnalyzer:
    return PlantImageAnalyzer(backend=llm_backend, progress_interval=0.01)


@pytest.fixture()
def advisor(llm_backend) -> PlantAdvisorService:
    return PlantAdvisorService(backend=llm_backend)


@pytest.fixture()
def session_service(analyzer, advisor) -> PlantSessionService:
    return PlantSessionService(analyzer=analyzer, advisor=advisor)


# ============================== Flask app ==================================


@pytest.fixture()
def app(tmp_path, monkeypatch, llm_backend):
    monkeypatch.setenv("FLORA_SECRET_KEY", "test-secret")
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.setenv("FLORA_PROGRESS_INTERVAL", "0.01")

    from flora import create_app

    app = create_app({"log_dir": str(tmp_path / "logs")}, backend=llm_backend)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()
