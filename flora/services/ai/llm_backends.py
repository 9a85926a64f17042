"""
LLM Backend Abstraction Layer
==============================
Pluggable backends for generative-model inference inside Flora.

Supported backends
------------------
* **GeminiBackend** - Gemini via the ``google-genai`` SDK (default).
* **OpenAIBackend** - GPT-4o family via the ``openai`` SDK.
* **AnthropicBackend** - Claude via the ``anthropic`` SDK.

Every backend accepts inline images and an optional JSON response schema,
which is all the image analysis and advice calls need. SDKs are imported
lazily in :meth:`LLMBackend.initialize` so the module never breaks at import
time when a particular SDK is missing.

Quick-start
-----------
::

    from flora.services.ai.llm_backends import GeminiBackend

    backend = GeminiBackend(api_key="...", model="gemini-3-flash-preview")
    if backend.initialize():
        reply = backend.generate(
            system_prompt="You are Flora, an expert botanist.",
            user_prompt="My monstera leaves are yellowing.",
        )
"""

from __future__ import annotations

import base64
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Sequence

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_ANTHROPIC_MODEL = "claude-3-5-haiku-latest"

# Anthropic requires an explicit output budget.
_ANTHROPIC_DEFAULT_MAX_TOKENS = 2048


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImageInput:
    """Raw image bytes plus the MIME type they are encoded in."""

    data: bytes
    mime_type: str

    @classmethod
    def from_base64(cls, encoded: str, mime_type: str) -> ImageInput:
        """Decode base64 image data; raises ``binascii.Error`` on bad input."""
        return cls(data=base64.b64decode(encoded, validate=True), mime_type=mime_type)

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def as_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.as_base64()}"


@dataclass
class LLMResponse:
    """Standardised wrapper around every backend response."""

    text: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)  # prompt_tokens, completion_tokens, total_tokens
    latency_ms: float = 0.0
    raw: Any = None  # backend-specific raw response object


# ---------------------------------------------------------------------------
# Abstract backend
# ---------------------------------------------------------------------------


class LLMBackend(ABC):
    """
    Abstract base for every LLM backend.

    Subclasses must implement :meth:`initialize`, :meth:`generate`,
    :attr:`name` and :attr:`is_available`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this backend (e.g. ``"gemini"``)."""

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """``True`` when the backend has been initialised and is ready."""

    @abstractmethod
    def initialize(self) -> bool:
        """
        Perform one-time setup (create the SDK client, validate API key, …).

        Returns ``True`` on success.
        """

    @abstractmethod
    def generate(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        images: Sequence[ImageInput] = (),
        response_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        """
        Generate a completion.

        Parameters
        ----------
        system_prompt:
            Role / persona instruction, or ``None`` for none.
        user_prompt:
            The concrete request.
        images:
            Inline images sent before the prompt text.
        response_schema:
            JSON Schema (``object``/``string``/``array`` vocabulary) the
            answer must follow.  Implies JSON output.
        model:
            Per-call model override; the backend default is used otherwise.
        max_tokens:
            Upper-bound on generated tokens (``None`` = provider default).
        temperature:
            Sampling temperature (``None`` = provider default).

        Returns
        -------
        LLMResponse
        """

    # -- helpers available to all backends ----------------------------------

    def _timed(self, fn, *args, **kwargs):
        """Call *fn* and return ``(result, elapsed_ms)``."""
        t0 = time.perf_counter()
        result = fn(*args, **kwargs)
        return result, (time.perf_counter() - t0) * 1000


def to_gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Convert a JSON Schema dict to the Gemini ``Schema`` vocabulary.

    Gemini spells types in upper case and has no ``additionalProperties``.
    """
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "additionalProperties":
            continue
        if key == "type" and isinstance(value, str):
            converted[key] = value.upper()
        elif key == "properties":
            converted[key] = {name: to_gemini_schema(sub) for name, sub in value.items()}
        elif key == "items":
            converted[key] = to_gemini_schema(value)
        else:
            converted[key] = value
    return converted


# ---------------------------------------------------------------------------
# Gemini backend  (google-genai)
# ---------------------------------------------------------------------------


class GeminiBackend(LLMBackend):
    """
    Backend for Google's Gemini API.

    Requires the ``google-genai`` package (``pip install google-genai``).

    Parameters
    ----------
    api_key:
        Gemini API key.
    model:
        Default model identifier (``gemini-3-flash-preview``).
    timeout:
        Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: int = 60,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: Any = None

    # -- ABC ----------------------------------------------------------------

    @property
    def name(self) -> str:
        return "gemini"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not self._api_key:
            logger.warning("Gemini backend: no API key provided")
            return False
        try:
            from google import genai
            from google.genai import types

            self._client = genai.Client(
                api_key=self._api_key,
                http_options=types.HttpOptions(timeout=self._timeout * 1000),
            )
            logger.info("Gemini backend initialised (model=%s)", self._model)
            return True
        except ImportError:
            logger.error("Gemini backend: 'google-genai' package not installed.  Run: pip install google-genai")
        except Exception as exc:
            logger.error("Gemini backend init failed: %s", exc)
        return False

    def generate(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        images: Sequence[ImageInput] = (),
        response_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("Gemini backend not initialised")

        from google.genai import types

        parts = [types.Part.from_bytes(data=image.data, mime_type=image.mime_type) for image in images]
        parts.append(types.Part.from_text(text=user_prompt))

        config_kwargs: dict[str, Any] = {}
        if system_prompt:
            config_kwargs["system_instruction"] = system_prompt
        if max_tokens:
            config_kwargs["max_output_tokens"] = max_tokens
        if temperature is not None:
            config_kwargs["temperature"] = temperature
        if response_schema is not None:
            config_kwargs["response_mime_type"] = "application/json"
            config_kwargs["response_schema"] = to_gemini_schema(response_schema)

        model_name = model or self._model
        response, latency = self._timed(
            self._client.models.generate_content,
            model=model_name,
            contents=[types.Content(role="user", parts=parts)],
            config=types.GenerateContentConfig(**config_kwargs),
        )

        usage = {}
        metadata = getattr(response, "usage_metadata", None)
        if metadata:
            prompt_tokens = metadata.prompt_token_count or 0
            completion_tokens = metadata.candidates_token_count or 0
            usage = {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": metadata.total_token_count or (prompt_tokens + completion_tokens),
            }

        return LLMResponse(
            text=response.text or "",
            model=model_name,
            usage=usage,
            latency_ms=latency,
            raw=response,
        )


# ---------------------------------------------------------------------------
# OpenAI backend  (GPT-4o family)
# ---------------------------------------------------------------------------


class OpenAIBackend(LLMBackend):
    """
    Backend for OpenAI's Chat Completions API.

    Requires the ``openai`` package (``pip install openai``).  Images are
    sent as ``data:`` URLs, so the model must be vision-capable.

    Parameters
    ----------
    api_key:
        OpenAI API key.
    model:
        Model identifier (default ``gpt-4o-mini``).
    base_url:
        Optional custom endpoint (e.g. Azure OpenAI or compatible proxy).
    timeout:
        Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        base_url: str | None = None,
        timeout: int = 60,
    ):
        self._api_key = api_key
        self._model = model
        self._base_url = base_url
        self._timeout = timeout
        self._client: Any = None

    # -- ABC ----------------------------------------------------------------

    @property
    def name(self) -> str:
        return "openai"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not self._api_key:
            logger.warning("OpenAI backend: no API key provided")
            return False
        try:
            import openai

            kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": self._timeout,
            }
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = openai.OpenAI(**kwargs)
            logger.info("OpenAI backend initialised (model=%s)", self._model)
            return True
        except ImportError:
            logger.error("OpenAI backend: 'openai' package not installed.  Run: pip install openai")
        except Exception as exc:
            logger.error("OpenAI backend init failed: %s", exc)
        return False

    def generate(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        images: Sequence[ImageInput] = (),
        response_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("OpenAI backend not initialised")

        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if images:
            content: Any = [{"type": "image_url", "image_url": {"url": image.as_data_url()}} for image in images]
            content.append({"type": "text", "text": user_prompt})
        else:
            content = user_prompt
        messages.append({"role": "user", "content": content})

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "messages": messages,
        }
        if max_tokens:
            kwargs["max_tokens"] = max_tokens
        if temperature is not None:
            kwargs["temperature"] = temperature
        if response_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "structured_output", "schema": response_schema},
            }

        response, latency = self._timed(self._client.chat.completions.create, **kwargs)

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=response.model,
            usage=usage,
            latency_ms=latency,
            raw=response,
        )


# ---------------------------------------------------------------------------
# Anthropic backend  (Claude)
# ---------------------------------------------------------------------------


class AnthropicBackend(LLMBackend):
    """
    Backend for Anthropic's Messages API.

    Requires the ``anthropic`` package (``pip install anthropic``).

    Parameters
    ----------
    api_key:
        Anthropic API key.
    model:
        Model identifier (default ``claude-3-5-haiku-latest``).
    timeout:
        Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        timeout: int = 60,
    ):
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._client: Any = None

    # -- ABC ----------------------------------------------------------------

    @property
    def name(self) -> str:
        return "anthropic"

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def initialize(self) -> bool:
        if not self._api_key:
            logger.warning("Anthropic backend: no API key provided")
            return False
        try:
            import anthropic

            self._client = anthropic.Anthropic(
                api_key=self._api_key,
                timeout=self._timeout,
            )
            logger.info("Anthropic backend initialised (model=%s)", self._model)
            return True
        except ImportError:
            logger.error("Anthropic backend: 'anthropic' package not installed.  Run: pip install anthropic")
        except Exception as exc:
            logger.error("Anthropic backend init failed: %s", exc)
        return False

    def generate(
        self,
        system_prompt: str | None,
        user_prompt: str,
        *,
        images: Sequence[ImageInput] = (),
        response_schema: dict[str, Any] | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> LLMResponse:
        if not self.is_available:
            raise RuntimeError("Anthropic backend not initialised")

        # Anthropic has no native schema mode; the schema rides in the prompt
        prompt = user_prompt
        if response_schema is not None:
            prompt += (
                "\n\nRespond ONLY with valid JSON matching this JSON Schema, no markdown fences:\n"
                + json.dumps(response_schema)
            )

        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {"type": "base64", "media_type": image.mime_type, "data": image.as_base64()},
            }
            for image in images
        ]
        content.append({"type": "text", "text": prompt})

        kwargs: dict[str, Any] = {
            "model": model or self._model,
            "max_tokens": max_tokens or _ANTHROPIC_DEFAULT_MAX_TOKENS,
            "messages": [{"role": "user", "content": content}],
        }
        if system_prompt:
            kwargs["system"] = system_prompt
        if temperature is not None:
            kwargs["temperature"] = temperature

        response, latency = self._timed(self._client.messages.create, **kwargs)

        text = "".join(getattr(block, "text", "") for block in response.content or [])

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
                "total_tokens": (response.usage.input_tokens + response.usage.output_tokens),
            }

        return LLMResponse(
            text=text,
            model=response.model,
            usage=usage,
            latency_ms=latency,
            raw=response,
        )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_backend(
    provider: str,
    *,
    api_key: str = "",
    model: str = "",
    base_url: str | None = None,
    timeout: int = 60,
) -> LLMBackend | None:
    """
    Factory: create and initialise the right backend from a provider name.

    Parameters
    ----------
    provider:
        One of ``"gemini"``, ``"openai"``, ``"anthropic"``, or ``"none"``.

    Returns
    -------
    An initialised :class:`LLMBackend`, or ``None`` if the provider is
    ``"none"`` or initialisation fails.
    """
    provider = provider.strip().lower()

    if provider in ("none", ""):
        logger.info("LLM provider set to 'none' - AI features disabled")
        return None

    backend: LLMBackend | None = None

    if provider == "gemini":
        backend = GeminiBackend(
            api_key=api_key,
            model=model or DEFAULT_GEMINI_MODEL,
            timeout=timeout,
        )
    elif provider == "openai":
        backend = OpenAIBackend(
            api_key=api_key,
            model=model or DEFAULT_OPENAI_MODEL,
            base_url=base_url,
            timeout=timeout,
        )
    elif provider == "anthropic":
        backend = AnthropicBackend(
            api_key=api_key,
            model=model or DEFAULT_ANTHROPIC_MODEL,
            timeout=timeout,
        )
    else:
        logger.error("Unknown LLM provider '%s'", provider)
        return None

    if backend.initialize():
        return backend

    logger.warning(
        "LLM backend '%s' failed to initialise - AI features disabled",
        provider,
    )
    return None
