# findmyhome/core/api/errors.py
"""
Typed errors for the backend API client.

Exports
-------
- ApiError, HttpStatusError, NetworkError, ResponseFormatError
- API_ERRORS
- classify_api_error(exc)
- api_error_guard()
- error_message(exc, fallback)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import requests

# =========================
# Exception types
# =========================


class ApiError(RuntimeError):
    """
    Base class for backend API failures.

    ``detail`` is the human-readable message shown to the user; ``status`` is the
    HTTP status code when one was received; ``data`` is the decoded error body.
    """

    def __init__(self, detail: str, *, status: int | None = None, data: Any = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status = status
        self.data: dict[str, Any] = data if isinstance(data, dict) else {}


class HttpStatusError(ApiError):
    """The backend answered with a non-2xx status."""


class NetworkError(ApiError):
    """Transport failure (connection refused, DNS, timeout) before any response."""


class ResponseFormatError(ApiError):
    """A 2xx response whose body does not have the expected shape."""


API_ERRORS = (
    HttpStatusError,
    NetworkError,
    ResponseFormatError,
)


# =========================
# Classification helpers
# =========================


def classify_api_error(exc: Exception) -> ApiError:
    """
    Map arbitrary exceptions raised while talking to the backend to an ApiError.

      - ApiError subclasses → passed through
      - requests.* errors → NetworkError
      - ValueError (JSON decode / pydantic validation) → ResponseFormatError
      - Fallback → ApiError
    """
    if isinstance(exc, ApiError):
        return exc

    if isinstance(exc, requests.RequestException):
        return NetworkError(str(exc) or type(exc).__name__)

    if isinstance(exc, ValueError):
        return ResponseFormatError(f"Unexpected response from server: {exc}")

    return ApiError(f"{type(exc).__name__}: {exc}")


@contextmanager
def api_error_guard() -> Iterator[None]:
    """Context manager to normalize unexpected exceptions from client internals."""
    try:
        yield
    except API_ERRORS:
        raise
    except Exception as exc:  # noqa: BLE001
        raise classify_api_error(exc) from exc


def error_message(exc: BaseException, fallback: str) -> str:
    """Text for a status banner: the server-provided detail, else ``fallback``."""
    if isinstance(exc, ApiError) and exc.detail:
        return exc.detail
    return fallback


__all__ = [
    "ApiError",
    "HttpStatusError",
    "NetworkError",
    "ResponseFormatError",
    "API_ERRORS",
    "classify_api_error",
    "api_error_guard",
    "error_message",
]
