"""Audit trail protocol (port) for security-relevant activity.

The authentication core informs the audit sink of logins, logouts,
password changes and token reuse. Audit records are written by event
handlers on the event bus, so a failing audit sink never blocks or fails
an authentication operation.

Usage:
    result = await audit.record(
        action=AuditAction.USER_LOGIN_SUCCESS,
        user_id=user_id,
        resource_type="session",
        ip_address="203.0.113.xxx",
        context={"family_id": str(family_id)},
    )
"""

from typing import Any, Protocol
from uuid import UUID

from authcore.core.errors import DomainError
from authcore.core.result import Result
from authcore.domain.enums import AuditAction


class AuditProtocol(Protocol):
    """Protocol for audit trail sinks.

    Error Handling:
        Implementations return Failure instead of raising.
    """

    async def record(
        self,
        *,
        action: AuditAction,
        resource_type: str,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> Result[None, DomainError]:
        """Record an audit entry.

        Args:
            action: What happened.
            resource_type: What kind of resource was affected ("session", "password").
            user_id: Who it happened to, when known.
            ip_address: Client IP (masked) when known.
            user_agent: Client user agent when known.
            context: Additional structured data. Never tokens or passwords.

        Returns:
            Success(None) if recorded, Failure(DomainError) otherwise.
        """
        ...
