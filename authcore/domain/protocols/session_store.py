"""SessionStore protocol (port) for refresh record persistence.

The store holds one RefreshRecord per issued refresh token. Records are
never updated except to set revocation fields or `last_used_at`, and
expiry is never extended.

Atomicity contract:
    - rotate() revokes the old record iff it is not already revoked and
      inserts the successor in the same transaction. Exactly one of two
      concurrent rotations of the same record can win.
    - revoke_if_active() is a conditional update ("revoke iff not revoked").

Implementations:
    - SqlAlchemySessionStore: authcore/infrastructure/persistence/repositories/
    - InMemorySessionStore: authcore/infrastructure/persistence/memory/
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from authcore.domain.enums import RevocationReason
from authcore.domain.value_objects import DeviceFingerprint


@dataclass
class RefreshRecord:
    """Data transfer object for a persisted refresh token.

    Attributes:
        id: Record identifier (embedded in the refresh token).
        user_id: Owner of the record.
        token_hash: SHA-256 digest of the refresh secret (never the secret).
        family_id: Shared by every record descended from one login.
        device: Device fingerprint captured at issuance.
        issued_at: Issuance timestamp.
        expires_at: Fixed expiry, never extended.
        revoked_at: Set once when the record stops being usable.
        revoked_reason: Why the record was revoked.
        replaced_by_id: Successor record created by rotation.
        parent_id: Predecessor record in the rotation chain.
        last_used_at: When the record was presented for rotation.
    """

    id: UUID
    user_id: UUID
    token_hash: str
    family_id: UUID
    device: DeviceFingerprint
    issued_at: datetime
    expires_at: datetime
    revoked_at: datetime | None = None
    revoked_reason: RevocationReason | None = None
    replaced_by_id: UUID | None = None
    parent_id: UUID | None = None
    last_used_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        """True once revoked_at is set."""
        return self.revoked_at is not None

    def is_expired(self, now: datetime) -> bool:
        """True when expires_at is at or before now."""
        return self.expires_at <= now

    def is_active(self, now: datetime) -> bool:
        """True when neither revoked nor expired."""
        return not self.is_revoked and not self.is_expired(now)


class SessionStore(Protocol):
    """Protocol for refresh record persistence operations.

    Record Lifecycle:
        1. Created at login (new family) or at rotation (same family)
        2. Revoked on rotation, logout, reuse detection or password reset
        3. Deleted by cleanup after expiry plus a retention window
    """

    async def create(self, record: RefreshRecord) -> RefreshRecord:
        """Persist a new refresh record.

        Args:
            record: Record to insert.

        Returns:
            The stored record.
        """
        ...

    async def find_by_id(self, record_id: UUID) -> RefreshRecord | None:
        """Find a record by ID, revoked or not.

        Args:
            record_id: Record identifier.

        Returns:
            RefreshRecord if found, None otherwise.
        """
        ...

    async def rotate(
        self,
        old_record_id: UUID,
        successor: RefreshRecord,
        now: datetime,
    ) -> bool:
        """Atomically replace a record with its successor.

        Revokes the old record (reason TOKEN_ROTATION, replaced_by_id set to
        successor.id, last_used_at set to now) only if it is not already
        revoked, and inserts the successor in the same transaction.

        Args:
            old_record_id: Record being rotated.
            successor: New record in the same family.
            now: Revocation timestamp.

        Returns:
            True if this call won the rotation, False if the old record was
            already revoked (nothing is written in that case).
        """
        ...

    async def revoke_if_active(
        self,
        record_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> bool:
        """Revoke a record iff it is not already revoked.

        Returns:
            True if the record was revoked by this call.
        """
        ...

    async def revoke_family(
        self,
        family_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        """Revoke every non-revoked record of a token family.

        Returns:
            Number of records revoked.
        """
        ...

    async def revoke_all_for_user(
        self,
        user_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        """Revoke every non-revoked record of a user.

        Returns:
            Number of records revoked.
        """
        ...

    async def revoke_by_device(
        self,
        user_id: UUID,
        device_id: str,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        """Revoke a user's non-revoked records issued to one device.

        Returns:
            Number of records revoked.
        """
        ...

    async def revoke_oldest_beyond_limit(
        self,
        user_id: UUID,
        limit: int,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        """Keep only the `limit` newest active records of a user.

        Returns:
            Number of records revoked.
        """
        ...

    async def find_active_by_user(
        self, user_id: UUID, now: datetime
    ) -> list[RefreshRecord]:
        """List a user's non-revoked, non-expired records, newest first."""
        ...

    async def find_all_by_user(self, user_id: UUID) -> list[RefreshRecord]:
        """List every record of a user, newest first."""
        ...

    async def delete_expired_before(self, cutoff: datetime) -> int:
        """Delete records whose expires_at is before cutoff.

        Returns:
            Number of records deleted.
        """
        ...
