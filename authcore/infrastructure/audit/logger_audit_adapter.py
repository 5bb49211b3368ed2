"""Audit adapter that writes audit entries to the structured log stream.

Each entry is emitted as an `audit_record` log event at INFO level with the
action, resource type, user and context fields, so it can be shipped to a
log-based audit store by the deployment's log pipeline.
"""

from typing import Any
from uuid import UUID

from authcore.core.enums import ErrorCode
from authcore.core.errors import DomainError
from authcore.core.result import Failure, Result, Success
from authcore.domain.enums import AuditAction
from authcore.domain.protocols.logger_protocol import LoggerProtocol


class LoggerAuditAdapter:
    """AuditProtocol implementation backed by LoggerProtocol."""

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger.bind(channel="audit")

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
        """Write one audit entry.

        Returns:
            Success(None), or Failure(DomainError) if the log sink raised.
        """
        try:
            self._logger.info(
                "audit_record",
                action=action.value,
                resource_type=resource_type,
                user_id=str(user_id) if user_id else None,
                ip_address=ip_address,
                user_agent=user_agent[:200] if user_agent else None,
                context=context or {},
            )
        except Exception as e:
            return Failure(
                error=DomainError(
                    code=ErrorCode.INTERNAL_ERROR,
                    message="Failed to record audit entry",
                    details={"error_type": type(e).__name__, "error_message": str(e)},
                )
            )
        return Success(value=None)
