"""
JSON envelope helpers shared by every API route.

Every response body has the shape ``{"ok": bool, "data": ..., "error": ...}``.
Errors carry ``{"message", "timestamp", **details}`` so a client can branch on
the extra keys (``failure``, ``errors``) without parsing the message.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import Response, jsonify

from flora.utils.time import iso_now

_log = logging.getLogger(__name__)

# Server-side failures are reported with these texts only; provider error
# bodies can contain API keys or request URLs.
_GENERIC_MESSAGES: dict[int, str] = {
    500: "An internal error occurred",
    502: "Upstream service error",
}


def _envelope(ok: bool, data: Any, error: dict | None, status: int) -> Response:
    response = jsonify({"ok": ok, "data": data, "error": error})
    response.status_code = status
    return response


def success_response(data: dict | list | None = None, status: int = 200) -> Response:
    return _envelope(True, data, None, status)


def error_response(message: str, status: int = 500, *, details: dict | None = None) -> Response:
    error: dict[str, Any] = {"message": message, "timestamp": iso_now()}
    if details:
        error.update(details)
    return _envelope(False, None, error, status)


def safe_error(exc: BaseException, status: int = 500, *, context: str = "") -> Response:
    """Log *exc* with its traceback and answer with the generic text for *status*."""
    _log.error("API error [%s] %s: %s", status, context, exc, exc_info=exc)
    return error_response(_GENERIC_MESSAGES.get(status, _GENERIC_MESSAGES[500]), status)


def safe_route(error_message: str = "An internal error occurred") -> Callable:
    """Wrap a route so exceptions become envelopes.

    :class:`~flora.domain.exceptions.FloraError` maps through its
    ``http_status``: 4xx messages are shown to the caller, 5xx are replaced by
    the generic text.  Anything else is a logged 500.
    """
    from flora.domain.exceptions import FloraError

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Response:
            try:
                return fn(*args, **kwargs)
            except FloraError as exc:
                if exc.http_status >= 500:
                    return safe_error(exc, exc.http_status, context=error_message)
                return error_response(str(exc) or error_message, exc.http_status, details=exc.detail or None)
            except Exception as exc:
                return safe_error(exc, 500, context=error_message)

        return wrapper

    return decorator
