"""Structured stdout logger built on structlog.

Renders JSON (CI, production) or key=value console lines (development).
A redaction processor runs before rendering: any context key that names a
credential (password, secret, token) is replaced, so a careless call site
cannot leak a refresh token or reset token into the log stream.

Does NOT inherit from LoggerProtocol (PEP 544 structural subtyping).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog

REDACTED = "[REDACTED]"
_SENSITIVE_KEY_PARTS = ("password", "secret", "token")
_SAFE_KEYS = frozenset({"token_type", "token_id", "expires_in"})


def redact_sensitive(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credential-bearing fields."""
    for key in list(event_dict):
        lowered = key.lower()
        if lowered in _SAFE_KEYS:
            continue
        if any(part in lowered for part in _SENSITIVE_KEY_PARTS):
            event_dict[key] = REDACTED
    return event_dict


def _configure(use_json: bool, level: str) -> None:
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    min_level = logging.getLevelName(level.upper())
    if not isinstance(min_level, int):
        min_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_sensitive,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


class ConsoleAdapter:
    """LoggerProtocol implementation writing to stdout.

    Args:
        use_json: JSON lines when True, console lines when False.
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Unknown names fall back to INFO.
    """

    def __init__(self, *, use_json: bool = False, level: str = "INFO") -> None:
        _configure(use_json, level)
        self._logger = structlog.get_logger()

    @classmethod
    def _wrap(cls, bound: Any) -> ConsoleAdapter:
        adapter = cls.__new__(cls)
        adapter._logger = bound
        return adapter

    def debug(self, message: str, /, **context: Any) -> None:
        self._logger.debug(message, **context)

    def info(self, message: str, /, **context: Any) -> None:
        self._logger.info(message, **context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._logger.warning(message, **context)

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        self._emit("error", message, error, context)

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        self._emit("critical", message, error, context)

    def bind(self, **context: Any) -> ConsoleAdapter:
        """New adapter carrying `context` on every entry; self is unchanged."""
        return self._wrap(self._logger.bind(**context))

    def with_context(self, **context: Any) -> ConsoleAdapter:
        return self.bind(**context)

    def _emit(
        self,
        level: str,
        message: str,
        error: Exception | None,
        context: dict[str, Any],
    ) -> None:
        if error is not None:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
        getattr(self._logger, level)(message, **context)
