"""Base error value returned inside Failure.

Errors here are data, not exceptions: services build them, wrap them in
Failure and return them. Only infrastructure faults (database down, broken
signing key) travel as exceptions, and those are logged and turned into an
INTERNAL_ERROR value at the service boundary.
"""

from dataclasses import dataclass
from typing import Any

from authcore.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Error value shared by every layer.

    Attributes:
        code: Stable ErrorCode callers branch on.
        message: Text safe to return to the client. Never names which of
            email or password was wrong.
        details: Structured extras, such as the violations of a weak
            password. Token family and record ids stay in logs and events.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"
