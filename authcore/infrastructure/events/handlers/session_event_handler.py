"""Session event handler for domain events.

Subscriptions:
- UserDeleted → Revoke every refresh record of the user

Password resets revoke sessions inline (PasswordResetService), so only
user deletion, which happens outside the authentication core, is handled
here.
"""

from datetime import UTC, datetime

from authcore.domain.enums import RevocationReason
from authcore.domain.events.auth_events import UserDeleted
from authcore.domain.protocols.logger_protocol import LoggerProtocol
from authcore.domain.protocols.session_store import SessionStore


class SessionEventHandler:
    """Revokes refresh records in reaction to user lifecycle events.

    Attributes:
        _session_store: Refresh record store.
        _logger: Logger protocol implementation (from container).
    """

    def __init__(self, session_store: SessionStore, logger: LoggerProtocol) -> None:
        self._session_store = session_store
        self._logger = logger

    async def handle_user_deleted(self, event: UserDeleted) -> None:
        """Revoke all refresh records of a deleted user.

        Args:
            event: UserDeleted event with user_id.
        """
        revoked = await self._session_store.revoke_all_for_user(
            event.user_id, RevocationReason.USER_DELETED, datetime.now(UTC)
        )
        self._logger.info(
            "sessions_revoked_for_user_deletion",
            user_id=str(event.user_id),
            event_id=str(event.event_id),
            revoked_count=revoked,
        )
