"""Structured logging for the verification client.

Records go through the stdlib ``captcha_verify`` logger, rendered as JSON by a
locally wrapped structlog logger; neither the root logger nor structlog's
global configuration is touched. Hosts that want output without wiring their
own handlers call :func:`configure_logging`.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any, MutableMapping

import structlog

from captcha_verify.utils.config import Config

LOGGER_NAME = "captcha_verify"

# Form fields that must never reach a log sink.
REDACTED_KEYS = frozenset({"secret", "response", "token"})

logging.getLogger(LOGGER_NAME).addHandler(logging.NullHandler())


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def redact_sensitive_fields(
    _logger: Any, _method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(level: str | None = None) -> logging.Logger:
    """Send the library's records to stdout at ``level`` (default from ``Config``)."""

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(_resolve_level(level or Config.CAPTCHA_VERIFY_LOG_LEVEL))
    if not any(
        getattr(handler, "_captcha_verify_stdout", False)
        for handler in stdlib_logger.handlers
    ):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler._captcha_verify_stdout = True  # type: ignore[attr-defined]
        stdlib_logger.addHandler(handler)
    return stdlib_logger


@lru_cache(maxsize=1)
def _base_logger() -> structlog.stdlib.BoundLogger:
    return structlog.wrap_logger(
        logging.getLogger(LOGGER_NAME),
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            redact_sensitive_fields,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
    )


def get_logger(**initial_context: Any) -> structlog.stdlib.BoundLogger:
    logger = _base_logger()
    if initial_context:
        return logger.bind(**initial_context)
    return logger


def log_event(
    logger: structlog.stdlib.BoundLogger,
    event: str,
    level: str = "warning",
    **fields: Any,
) -> None:
    """Emit ``event`` at ``level`` with a UTC ``occurred_at`` stamp.

    Unknown level names fall back to ``info`` so a typo never drops the record.
    """

    log_method = getattr(logger, level.lower(), None)
    if not callable(log_method):
        log_method = logger.info
    log_method(event, occurred_at=datetime.now(UTC).isoformat(), **fields)
