"""Centralized exception hierarchy for Flora.

All domain and service exceptions inherit from :class:`FloraError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``flora/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    FloraError (base - maps to 500)
    ├── ValidationError          (400 - bad input from caller)
    ├── ConflictError            (409 - state conflict)
    ├── ServiceError             (500 - business-logic failure)
    │   └── ExternalServiceError (502 - generative-AI provider)
    │       └── AnalysisFailure
    │           ├── TransportFailure  (provider raised / unreachable)
    │           ├── EmptyResponse     (provider returned no text)
    │           └── SchemaViolation   (text is not a valid PlantInfo)

The three ``AnalysisFailure`` subclasses never escape the AI call components;
they are caught there and recorded on the outcome so callers see a single
"could not identify" result while logs and tests keep the distinction.
"""

from __future__ import annotations


class FloraError(Exception):
    """Base exception for all Flora application errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(FloraError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class ConflictError(FloraError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(FloraError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class ExternalServiceError(ServiceError):
    """Generative-AI provider or network failure (HTTP 502)."""

    http_status: int = 502


# ── Image analysis failure taxonomy ──────────────────────────────────


class AnalysisFailure(ExternalServiceError):
    """Base for every reason an image analysis can fail."""

    kind: str = "analysis_failure"


class TransportFailure(AnalysisFailure):
    """The provider call raised, or no provider is configured."""

    kind: str = "transport_failure"


class EmptyResponse(AnalysisFailure):
    """The provider answered without any text."""

    kind: str = "empty_response"


class SchemaViolation(AnalysisFailure):
    """The provider text is not JSON, or not of the PlantInfo shape."""

    kind: str = "schema_violation"
