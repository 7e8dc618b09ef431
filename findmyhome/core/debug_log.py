# findmyhome/core/debug_log.py
"""
Debug logging for the client.

``configure_logging`` attaches a rotating file handler to the ``findmyhome``
logger when ``FINDMYHOME_DEBUG`` is set. Bearer tokens are redacted from every
record written by that handler. Logging setup failures never break the client.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "findmyhome"
LOG_PATH = os.path.join("logs", "findmyhome_debug.log")

_BEARER = re.compile(r"(Bearer\s+)[A-Za-z0-9._~+/=-]+")

_CONFIGURED = False


def debug_enabled() -> bool:
    return os.getenv("FINDMYHOME_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def redact(text: str, secrets: tuple[str, ...] = ()) -> str:
    text = _BEARER.sub(r"\1[REDACTED]", text)
    for s in secrets:
        if s:
            text = text.replace(s, "[REDACTED]")
    return text


class RedactingFormatter(logging.Formatter):
    def __init__(self, *args: object, secrets: tuple[str, ...] = (), **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.secrets = secrets

    def format(self, record: logging.LogRecord) -> str:
        return redact(super().format(record), self.secrets)


def configure_logging(log_path: str = LOG_PATH, *, force: bool = False) -> logging.Logger:
    """Create/reuse the package logger; file output only in debug mode (or ``force``)."""
    global _CONFIGURED
    logger = logging.getLogger(LOGGER_NAME)
    if _CONFIGURED or not (force or debug_enabled()):
        return logger

    logger.setLevel(logging.DEBUG)
    try:
        os.makedirs(os.path.dirname(log_path) or ".", exist_ok=True)
        handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
        handler.setFormatter(
            RedactingFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                datefmt="(%Y-%m-%d %H:%M:%S)",
            )
        )
        logger.addHandler(handler)
    except OSError:
        # Unwritable log directory: keep the logger, just without a file.
        return logger

    _CONFIGURED = True
    return logger


__all__ = ["configure_logging", "debug_enabled", "redact", "RedactingFormatter", "LOGGER_NAME"]
