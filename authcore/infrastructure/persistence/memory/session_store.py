"""In-memory SessionStore.

Records live in a dict keyed by id. Conditional updates run under an
asyncio.Lock with no await between check and write, which gives the same
"exactly one rotation wins" guarantee as the SQL adapter within one
event loop. Records are copied on the way in and out so callers cannot
mutate stored state.
"""

import asyncio
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from uuid import UUID

from authcore.domain.enums import RevocationReason
from authcore.domain.protocols.session_store import RefreshRecord


class InMemorySessionStore:
    """Dictionary-backed SessionStore.

    Thread Safety:
        NOT thread-safe (single event loop).
    """

    def __init__(self) -> None:
        self._records: dict[UUID, RefreshRecord] = {}
        self._lock = asyncio.Lock()

    async def create(self, record: RefreshRecord) -> RefreshRecord:
        async with self._lock:
            self._records[record.id] = replace(record)
        return replace(record)

    async def find_by_id(self, record_id: UUID) -> RefreshRecord | None:
        record = self._records.get(record_id)
        return replace(record) if record else None

    async def rotate(
        self,
        old_record_id: UUID,
        successor: RefreshRecord,
        now: datetime,
    ) -> bool:
        async with self._lock:
            current = self._records.get(old_record_id)
            if current is None or current.revoked_at is not None:
                return False

            current.revoked_at = now
            current.revoked_reason = RevocationReason.TOKEN_ROTATION
            current.replaced_by_id = successor.id
            current.last_used_at = now
            self._records[successor.id] = replace(successor)
        return True

    async def revoke_if_active(
        self,
        record_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> bool:
        async with self._lock:
            current = self._records.get(record_id)
            if current is None or current.revoked_at is not None:
                return False
            current.revoked_at = now
            current.revoked_reason = reason
        return True

    async def revoke_family(
        self,
        family_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        return await self._revoke_where(
            lambda r: r.family_id == family_id, reason, now
        )

    async def revoke_all_for_user(
        self,
        user_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        return await self._revoke_where(lambda r: r.user_id == user_id, reason, now)

    async def revoke_by_device(
        self,
        user_id: UUID,
        device_id: str,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        return await self._revoke_where(
            lambda r: r.user_id == user_id and r.device.device_id == device_id,
            reason,
            now,
        )

    async def revoke_oldest_beyond_limit(
        self,
        user_id: UUID,
        limit: int,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        async with self._lock:
            active = sorted(
                (
                    r
                    for r in self._records.values()
                    if r.user_id == user_id and r.is_active(now)
                ),
                key=lambda r: r.issued_at,
                reverse=True,
            )
            surplus = active[limit:]
            for record in surplus:
                record.revoked_at = now
                record.revoked_reason = reason
        return len(surplus)

    async def find_active_by_user(
        self, user_id: UUID, now: datetime
    ) -> list[RefreshRecord]:
        return [
            r for r in await self.find_all_by_user(user_id) if r.is_active(now)
        ]

    async def find_all_by_user(self, user_id: UUID) -> list[RefreshRecord]:
        records = [replace(r) for r in self._records.values() if r.user_id == user_id]
        return sorted(records, key=lambda r: r.issued_at, reverse=True)

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

    async def _revoke_where(
        self,
        predicate: Callable[[RefreshRecord], bool],
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        count = 0
        async with self._lock:
            for record in self._records.values():
                if record.revoked_at is None and predicate(record):
                    record.revoked_at = now
                    record.revoked_reason = reason
                    count += 1
        return count
