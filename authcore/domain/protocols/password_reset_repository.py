"""PasswordResetRepository protocol (port) for reset record persistence.

Only the digest of a reset token is stored. A record is consumed at most
once: consume_if_unused() is a conditional update that fails when the
record is already consumed or expired.

Implementations:
    - SqlAlchemyPasswordResetRepository (persistence/repositories)
    - InMemoryPasswordResetRepository: authcore/infrastructure/persistence/memory/
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


@dataclass
class PasswordResetRecord:
    """Data transfer object for a password reset record."""

    id: UUID
    user_id: UUID
    token_hash: str
    expires_at: datetime
    created_at: datetime
    consumed_at: datetime | None = None
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def is_consumed(self) -> bool:
        """True once the token has been used."""
        return self.consumed_at is not None

    def is_expired(self, now: datetime) -> bool:
        """True when expires_at is at or before now."""
        return self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        """True when neither consumed nor expired."""
        return not self.is_consumed and not self.is_expired(now)


class PasswordResetRepository(Protocol):
    """Protocol for password reset record persistence operations.

    Record Lifecycle:
        1. Created on reset request (short expiry)
        2. Consumed once on successful password reset
        3. Purged after expiry
    """

    async def save(self, record: PasswordResetRecord) -> PasswordResetRecord:
        """Persist a new reset record."""
        ...

    async def find_by_token_hash(self, token_hash: str) -> PasswordResetRecord | None:
        """Find a record by token digest, consumed or not."""
        ...

    async def consume_if_unused(self, record_id: UUID, now: datetime) -> bool:
        """Mark a record consumed iff it is unconsumed and unexpired.

        Returns:
            True if this call consumed the record.
        """
        ...

    async def release_if_consumed(self, record_id: UUID, consumed_at: datetime) -> bool:
        """Undo a consumption made at `consumed_at` whose password write failed.

        Only clears consumed_at when it still equals the given timestamp.

        Returns:
            True if the record is usable again.
        """
        ...

    async def delete_unconsumed_for_user(self, user_id: UUID) -> int:
        """Delete every unconsumed record of a user.

        Returns:
            Number of records deleted.
        """
        ...

    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Delete records whose expires_at is before cutoff.

        Returns:
            Number of records deleted.
        """
        ...
