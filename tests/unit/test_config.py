from __future__ import annotations

import pytest

from flora.config import AppConfig, validate_config


def test_defaults(monkeypatch):
    for name in ("LLM_PROVIDER", "LLM_API_KEY", "GEMINI_API_KEY", "API_KEY", "FLORA_ENV", "FLORA_PROGRESS_INTERVAL"):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig()

    assert config.llm_provider == "gemini"
    assert config.llm_api_key == ""
    assert config.progress_interval == 1.5
    assert config.as_flask_config()["MAX_CONTENT_LENGTH"] == 16 * 1024 * 1024


def test_api_key_falls_back_to_gemini_key(monkeypatch):
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")

    assert AppConfig().llm_api_key == "gem-key"


def test_explicit_llm_key_wins(monkeypatch):
    monkeypatch.setenv("LLM_API_KEY", "primary")
    monkeypatch.setenv("GEMINI_API_KEY", "secondary")

    assert AppConfig().llm_api_key == "primary"


def test_production_refuses_default_secret(monkeypatch):
    monkeypatch.setenv("FLORA_ENV", "production")
    monkeypatch.delenv("FLORA_SECRET_KEY", raising=False)

    with pytest.raises(RuntimeError):
        AppConfig()


def test_invalid_integer_env(monkeypatch):
    monkeypatch.setenv("LLM_TIMEOUT", "soon")

    with pytest.raises(ValueError):
        AppConfig()


def test_validate_config_warns_about_missing_key(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "gemini")
    for name in ("LLM_API_KEY", "GEMINI_API_KEY", "API_KEY"):
        monkeypatch.delenv(name, raising=False)

    warnings = validate_config(AppConfig())

    assert any("without an API key" in w for w in warnings)


def test_validate_config_accepts_disabled_provider(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", "none")
    monkeypatch.delenv("LLM_TEMPERATURE", raising=False)
    monkeypatch.delenv("FLORA_PROGRESS_INTERVAL", raising=False)

    assert validate_config(AppConfig()) == []
