"""
Configuration for Flora
=======================
Runtime settings loaded from environment variables, plus the logging setup.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

_DEFAULT_SECRET_KEY = "FloraDevSecretKey"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


def _env_float(name: str, default: float | None) -> float | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be a number.") from None


def _env_first(names: tuple[str, ...], default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return default


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("FLORA_ENV", "development"))
    secret_key: str = field(default_factory=lambda: os.getenv("FLORA_SECRET_KEY", _DEFAULT_SECRET_KEY))
    DEBUG: bool = field(default_factory=lambda: _env_bool("FLORA_DEBUG", False))
    log_level: str = field(default_factory=lambda: os.getenv("FLORA_LOG_LEVEL", "INFO"))
    log_dir: str = field(default_factory=lambda: os.getenv("FLORA_LOG_DIR", "logs"))
    socketio_cors_origins: str = field(default_factory=lambda: os.getenv("FLORA_SOCKETIO_CORS", "*"))

    # Upload / request size limits
    max_upload_mb: int = field(default_factory=lambda: _env_int("FLORA_MAX_UPLOAD_MB", 16))

    # LLM Configuration
    # Provider: "none" (disabled), "gemini", "openai", "anthropic"
    llm_provider: str = field(default_factory=lambda: os.getenv("LLM_PROVIDER", "gemini"))
    llm_api_key: str = field(default_factory=lambda: _env_first(("LLM_API_KEY", "GEMINI_API_KEY", "API_KEY")))
    llm_base_url: str = field(default_factory=lambda: os.getenv("LLM_BASE_URL", ""))
    # Empty = provider default (Gemini: pro for analysis, flash for advice)
    llm_analysis_model: str = field(default_factory=lambda: os.getenv("LLM_ANALYSIS_MODEL", ""))
    llm_advice_model: str = field(default_factory=lambda: os.getenv("LLM_ADVICE_MODEL", ""))
    # 0 / unset = provider default
    llm_max_tokens: int = field(default_factory=lambda: _env_int("LLM_MAX_TOKENS", 0))
    llm_temperature: float | None = field(default_factory=lambda: _env_float("LLM_TEMPERATURE", None))
    llm_timeout: int = field(default_factory=lambda: _env_int("LLM_TIMEOUT", 60))

    # Rotating "analyzing..." status cadence (seconds)
    progress_interval: float = field(default_factory=lambda: _env_float("FLORA_PROGRESS_INTERVAL", 1.5))

    # Idle plant sessions are evicted after this many minutes (0 = never)
    session_ttl_minutes: int = field(default_factory=lambda: _env_int("FLORA_SESSION_TTL_MINUTES", 120))

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == _DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set FLORA_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DEBUG": self.DEBUG,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "MAX_CONTENT_LENGTH": self.max_upload_mb * 1024 * 1024,
        }


def validate_config(config: AppConfig) -> list[str]:
    """
    Validate configuration and return list of warnings.

    Args:
        config: AppConfig instance

    Returns:
        List of warning messages (empty if all valid)
    """
    warnings = []

    provider = config.llm_provider.strip().lower()
    if provider not in {"none", "", "gemini", "openai", "anthropic"}:
        warnings.append(f"Unknown LLM provider '{config.llm_provider}'. AI features will be disabled.")
    elif provider not in {"none", ""} and not config.llm_api_key:
        warnings.append(
            f"LLM provider '{provider}' configured without an API key. "
            "Set LLM_API_KEY (or GEMINI_API_KEY) to enable plant identification."
        )

    if config.llm_temperature is not None and not 0.0 <= config.llm_temperature <= 2.0:
        warnings.append(f"LLM temperature ({config.llm_temperature}) is outside the usual 0.0-2.0 range.")

    if config.progress_interval is not None and config.progress_interval <= 0:
        warnings.append(f"Progress interval ({config.progress_interval}s) must be positive; status texts disabled.")

    return warnings


def setup_logging(debug: bool = False, *, log_dir: str = "logs", level: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    log_level = logging.DEBUG if debug else logging.getLevelName((level or "INFO").upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "flora_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "flora_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8 to avoid UnicodeEncodeError on Windows terminals)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "flora_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    # File handler
    if not has_file and log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, "flora.log"),
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "flora_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"flora_console", "flora_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info(f"Logging initialized at level: {logging.getLevelName(log_level)}")

    if _env_bool("FLORA_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    if _env_bool("FLORA_SILENCE_SOCKETIO", True):
        logging.getLogger("socketio").setLevel(logging.WARNING)
        logging.getLogger("engineio").setLevel(logging.WARNING)
        # The SDKs log every HTTP request at INFO
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("google_genai").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    import logging

    config = AppConfig()
    logger = logging.getLogger("config_loader")
    for warning in validate_config(config):
        logger.warning(warning)
    return config
