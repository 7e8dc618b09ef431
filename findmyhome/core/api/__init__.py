# findmyhome/core/api/__init__.py
from .client import ApiClient
from .errors import (
    API_ERRORS,
    ApiError,
    HttpStatusError,
    NetworkError,
    ResponseFormatError,
    api_error_guard,
    classify_api_error,
    error_message,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "HttpStatusError",
    "NetworkError",
    "ResponseFormatError",
    "API_ERRORS",
    "classify_api_error",
    "api_error_guard",
    "error_message",
]
