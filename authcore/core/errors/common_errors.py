"""Concrete error kinds.

    return Failure(
        error=AuthenticationError(
            code=ErrorCode.TOKEN_REUSE_DETECTED,
            message="Invalid refresh token",
        )
    )
"""

from dataclasses import dataclass

from authcore.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthenticationError(DomainError):
    """Rejected credentials, locked account, or a bad access/refresh/reset token."""


@dataclass(frozen=True, slots=True, kw_only=True)
class ValidationError(DomainError):
    """Rejected input, such as a new password failing the strength policy.

    Attributes:
        field: Name of the offending input, when there is one.
    """

    field: str | None = None
