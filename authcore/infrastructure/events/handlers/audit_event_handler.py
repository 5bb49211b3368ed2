"""Audit event handler for authentication domain events.

Maps security-relevant events to AuditAction values and hands them to the
configured AuditProtocol sink.

Event → Audit Action Mapping:
    - UserLoginSucceeded → USER_LOGIN_SUCCESS
    - UserLoginFailed → USER_LOGIN_FAILED
    - UserLogoutSucceeded → USER_LOGOUT
    - SessionsRevoked → SESSION_REVOKED
    - TokenRefreshSucceeded → TOKEN_REFRESHED
    - RefreshTokenReuseDetected → TOKEN_REUSE_DETECTED
    - PasswordResetRequested → PASSWORD_RESET_REQUESTED
    - PasswordResetCompleted → PASSWORD_RESET_COMPLETED
    - PasswordResetFailed → PASSWORD_RESET_FAILED

An audit sink returning Failure is logged and otherwise ignored; auditing
never fails the operation that published the event.
"""

from typing import Any
from uuid import UUID

from authcore.core.result import Failure
from authcore.domain.enums import AuditAction
from authcore.domain.events.auth_events import (
    PasswordResetCompleted,
    PasswordResetFailed,
    PasswordResetRequested,
    RefreshTokenReuseDetected,
    SessionsRevoked,
    TokenRefreshSucceeded,
    UserLoginFailed,
    UserLoginSucceeded,
    UserLogoutSucceeded,
)
from authcore.domain.protocols.audit_protocol import AuditProtocol
from authcore.domain.protocols.logger_protocol import LoggerProtocol


class AuditEventHandler:
    """Event handler for audit trail recording.

    Attributes:
        _audit: Audit sink.
        _logger: Logger for sink failures.

    Example:
        >>> handler = AuditEventHandler(audit=LoggerAuditAdapter(logger), logger=logger)
        >>> event_bus.subscribe(UserLoginFailed, handler.handle_user_login_failed)
    """

    def __init__(self, audit: AuditProtocol, logger: LoggerProtocol) -> None:
        self._audit = audit
        self._logger = logger

    async def _record(
        self,
        *,
        action: AuditAction,
        resource_type: str,
        event_id: UUID,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        result = await self._audit.record(
            action=action,
            resource_type=resource_type,
            user_id=user_id,
            ip_address=ip_address,
            context={"event_id": str(event_id), **(context or {})},
        )
        if isinstance(result, Failure):
            self._logger.warning(
                "audit_record_failed",
                action=action.value,
                error_code=result.error.code.value,
                error_message=result.error.message,
            )

    # =========================================================================
    # Login / Logout
    # =========================================================================

    async def handle_user_login_succeeded(self, event: UserLoginSucceeded) -> None:
        """Record successful login.

        Audit Record:
            - action: USER_LOGIN_SUCCESS
            - resource_type: "session"
            - context: {family_id, device_id}
        """
        await self._record(
            action=AuditAction.USER_LOGIN_SUCCESS,
            resource_type="session",
            event_id=event.event_id,
            user_id=event.user_id,
            ip_address=event.ip_address,
            context={"family_id": str(event.family_id), "device_id": event.device_id},
        )

    async def handle_user_login_failed(self, event: UserLoginFailed) -> None:
        """Record failed login.

        Audit Record:
            - action: USER_LOGIN_FAILED
            - user_id: None (the identifier may not belong to any account)
            - context: {identifier, reason}
        """
        await self._record(
            action=AuditAction.USER_LOGIN_FAILED,
            resource_type="session",
            event_id=event.event_id,
            ip_address=event.ip_address,
            context={"identifier": event.identifier, "reason": event.reason},
        )

    async def handle_user_logout_succeeded(self, event: UserLogoutSucceeded) -> None:
        await self._record(
            action=AuditAction.USER_LOGOUT,
            resource_type="session",
            event_id=event.event_id,
            user_id=event.user_id,
            context={
                "all_devices": event.all_devices,
                "revoked_count": event.revoked_count,
            },
        )

    async def handle_sessions_revoked(self, event: SessionsRevoked) -> None:
        await self._record(
            action=AuditAction.SESSION_REVOKED,
            resource_type="session",
            event_id=event.event_id,
            user_id=event.user_id,
            context={
                "reason": event.reason,
                "revoked_count": event.revoked_count,
                "device_id": event.device_id,
            },
        )

    # =========================================================================
    # Refresh tokens
    # =========================================================================

    async def handle_token_refresh_succeeded(
        self, event: TokenRefreshSucceeded
    ) -> None:
        await self._record(
            action=AuditAction.TOKEN_REFRESHED,
            resource_type="refresh_token",
            event_id=event.event_id,
            user_id=event.user_id,
            context={
                "family_id": str(event.family_id),
                "old_record_id": str(event.old_record_id),
                "new_record_id": str(event.new_record_id),
            },
        )

    async def handle_refresh_token_reuse_detected(
        self, event: RefreshTokenReuseDetected
    ) -> None:
        """Record refresh token reuse (security incident).

        Audit Record:
            - action: TOKEN_REUSE_DETECTED
            - resource_type: "refresh_token"
            - context: {family_id, record_id, revoked_count}
        """
        await self._record(
            action=AuditAction.TOKEN_REUSE_DETECTED,
            resource_type="refresh_token",
            event_id=event.event_id,
            user_id=event.user_id,
            ip_address=event.ip_address,
            context={
                "family_id": str(event.family_id),
                "record_id": str(event.record_id),
                "revoked_count": event.revoked_count,
            },
        )

    # =========================================================================
    # Password reset
    # =========================================================================

    async def handle_password_reset_requested(
        self, event: PasswordResetRequested
    ) -> None:
        await self._record(
            action=AuditAction.PASSWORD_RESET_REQUESTED,
            resource_type="password",
            event_id=event.event_id,
            user_id=event.user_id,
            ip_address=event.ip_address,
            context={"record_id": str(event.record_id)},
        )

    async def handle_password_reset_completed(
        self, event: PasswordResetCompleted
    ) -> None:
        await self._record(
            action=AuditAction.PASSWORD_RESET_COMPLETED,
            resource_type="password",
            event_id=event.event_id,
            user_id=event.user_id,
            context={"revoked_sessions": event.revoked_sessions},
        )

    async def handle_password_reset_failed(self, event: PasswordResetFailed) -> None:
        await self._record(
            action=AuditAction.PASSWORD_RESET_FAILED,
            resource_type="password",
            event_id=event.event_id,
            user_id=event.user_id,
            context={"reason": event.reason},
        )
