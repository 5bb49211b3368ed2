"""Structured logging port.

Call sites pass a snake_case event name plus keyword context. Refresh
secrets, reset tokens and passwords are never passed as context; the
console adapter also redacts any such key as a backstop.

    log = logger.bind(family_id=str(record.family_id))
    log.warning("refresh_token_reuse_detected", revoked_count=revoked)
"""

from __future__ import annotations

from typing import Any, Protocol


class LoggerProtocol(Protocol):
    def debug(self, message: str, /, **context: Any) -> None: ...

    def info(self, message: str, /, **context: Any) -> None: ...

    def warning(self, message: str, /, **context: Any) -> None: ...

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        """Log at error level; `error` adds error_type and error_message fields."""
        ...

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None: ...

    def bind(self, **context: Any) -> LoggerProtocol:
        """Child logger carrying `context` on every entry; self is unchanged."""
        ...

    def with_context(self, **context: Any) -> LoggerProtocol: ...
