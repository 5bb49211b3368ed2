"""In-memory PasswordResetRepository."""

import asyncio
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from authcore.domain.protocols.password_reset_repository import PasswordResetRecord


class InMemoryPasswordResetRepository:
    """Dictionary-backed reset record store with atomic consumption."""

    def __init__(self) -> None:
        self._records: dict[UUID, PasswordResetRecord] = {}
        self._lock = asyncio.Lock()

    async def save(self, record: PasswordResetRecord) -> PasswordResetRecord:
        async with self._lock:
            self._records[record.id] = replace(record)
        return replace(record)

    async def find_by_token_hash(self, token_hash: str) -> PasswordResetRecord | None:
        for record in self._records.values():
            if record.token_hash == token_hash:
                return replace(record)
        return None

    async def consume_if_unused(self, record_id: UUID, now: datetime) -> bool:
        async with self._lock:
            record = self._records.get(record_id)
            if record is None or not record.is_usable(now):
                return False
            record.consumed_at = now
        return True

    async def release_if_consumed(self, record_id: UUID, consumed_at: datetime) -> bool:
        async with self._lock:
            record = self._records.get(record_id)
            if record is None or record.consumed_at != consumed_at:
                return False
            record.consumed_at = None
        return True

    async def delete_unconsumed_for_user(self, user_id: UUID) -> int:
        async with self._lock:
            stale = [
                record_id
                for record_id, record in self._records.items()
                if record.user_id == user_id and record.consumed_at is None
            ]
            for record_id in stale:
                del self._records[record_id]
        return len(stale)

    async def delete_expired_before(self, cutoff: datetime) -> int:
        async with self._lock:
            expired = [
                record_id
                for record_id, record in self._records.items()
                if record.expires_at < cutoff
            ]
            for record_id in expired:
                del self._records[record_id]
        return len(expired)

    def count_for_user(self, user_id: UUID) -> int:
        """Number of stored records for a user (consumed or not)."""
        return sum(1 for record in self._records.values() if record.user_id == user_id)
