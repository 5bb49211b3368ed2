"""Logging event handler for authentication domain events.

Log Levels:
    - INFO: ATTEMPTED and SUCCEEDED events (normal operations)
    - WARNING: FAILED events
    - CRITICAL: refresh token reuse (possible token theft)

Structured Fields:
    - event_id / occurred_at on every entry
    - user_id, family_id, reason where the event carries them
    - Identifiers and IPs as published (IPs are already masked)

Usage:
    >>> handler = LoggingEventHandler(logger=get_logger())
    >>> event_bus.subscribe(UserLoginSucceeded, handler.handle_user_login_succeeded)
"""

from authcore.domain.events.auth_events import (
    PasswordResetCompleted,
    PasswordResetFailed,
    PasswordResetRequested,
    RefreshTokenReuseDetected,
    SessionsRevoked,
    TokenRefreshAttempted,
    TokenRefreshFailed,
    TokenRefreshSucceeded,
    UserDeleted,
    UserLoginAttempted,
    UserLoginFailed,
    UserLoginSucceeded,
    UserLogoutSucceeded,
)
from authcore.domain.events.base_event import DomainEvent
from authcore.domain.protocols.logger_protocol import LoggerProtocol


def _base(event: DomainEvent) -> dict[str, str]:
    return {
        "event_id": str(event.event_id),
        "occurred_at": event.occurred_at.isoformat(),
    }


class LoggingEventHandler:
    """Structured logging of authentication events.

    Attributes:
        _logger: Logger protocol implementation (from container).
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    # =========================================================================
    # Login
    # =========================================================================

    async def handle_user_login_attempted(self, event: UserLoginAttempted) -> None:
        """Log login attempt (INFO level)."""
        self._logger.info(
            "user_login_attempted",
            **_base(event),
            identifier=event.identifier,
            ip_address=event.ip_address,
        )

    async def handle_user_login_succeeded(self, event: UserLoginSucceeded) -> None:
        """Log successful login (INFO level)."""
        self._logger.info(
            "user_login_succeeded",
            **_base(event),
            user_id=str(event.user_id),
            family_id=str(event.family_id),
            device_id=event.device_id,
            ip_address=event.ip_address,
        )

    async def handle_user_login_failed(self, event: UserLoginFailed) -> None:
        """Log failed login (WARNING level)."""
        self._logger.warning(
            "user_login_failed",
            **_base(event),
            identifier=event.identifier,
            reason=event.reason,
            ip_address=event.ip_address,
        )

    # =========================================================================
    # Refresh
    # =========================================================================

    async def handle_token_refresh_attempted(
        self, event: TokenRefreshAttempted
    ) -> None:
        self._logger.info(
            "token_refresh_attempted", **_base(event), ip_address=event.ip_address
        )

    async def handle_token_refresh_succeeded(
        self, event: TokenRefreshSucceeded
    ) -> None:
        self._logger.info(
            "token_refresh_succeeded",
            **_base(event),
            user_id=str(event.user_id),
            family_id=str(event.family_id),
            old_record_id=str(event.old_record_id),
            new_record_id=str(event.new_record_id),
        )

    async def handle_token_refresh_failed(self, event: TokenRefreshFailed) -> None:
        self._logger.warning(
            "token_refresh_failed",
            **_base(event),
            reason=event.reason,
            user_id=str(event.user_id) if event.user_id else None,
        )

    async def handle_refresh_token_reuse_detected(
        self, event: RefreshTokenReuseDetected
    ) -> None:
        """Log refresh token reuse (CRITICAL level).

        A replayed refresh token means the token leaked; the whole family
        has already been revoked when this event is published.
        """
        self._logger.critical(
            "refresh_token_reuse_event",
            **_base(event),
            user_id=str(event.user_id),
            family_id=str(event.family_id),
            record_id=str(event.record_id),
            revoked_count=event.revoked_count,
            ip_address=event.ip_address,
        )

    # =========================================================================
    # Logout and revocation
    # =========================================================================

    async def handle_user_logout_succeeded(self, event: UserLogoutSucceeded) -> None:
        self._logger.info(
            "user_logout_succeeded",
            **_base(event),
            user_id=str(event.user_id) if event.user_id else None,
            all_devices=event.all_devices,
            revoked_count=event.revoked_count,
        )

    async def handle_sessions_revoked(self, event: SessionsRevoked) -> None:
        self._logger.info(
            "sessions_revoked",
            **_base(event),
            user_id=str(event.user_id),
            reason=event.reason,
            revoked_count=event.revoked_count,
            device_id=event.device_id,
        )

    async def handle_user_deleted(self, event: UserDeleted) -> None:
        self._logger.info("user_deleted", **_base(event), user_id=str(event.user_id))

    # =========================================================================
    # Password reset
    # =========================================================================

    async def handle_password_reset_requested(
        self, event: PasswordResetRequested
    ) -> None:
        """Log reset token issuance (INFO level). The token is never logged."""
        self._logger.info(
            "password_reset_requested_event",
            **_base(event),
            user_id=str(event.user_id),
            record_id=str(event.record_id),
            ip_address=event.ip_address,
        )

    async def handle_password_reset_completed(
        self, event: PasswordResetCompleted
    ) -> None:
        self._logger.info(
            "password_reset_completed_event",
            **_base(event),
            user_id=str(event.user_id),
            revoked_sessions=event.revoked_sessions,
        )

    async def handle_password_reset_failed(self, event: PasswordResetFailed) -> None:
        self._logger.warning(
            "password_reset_failed",
            **_base(event),
            reason=event.reason,
            user_id=str(event.user_id) if event.user_id else None,
        )
