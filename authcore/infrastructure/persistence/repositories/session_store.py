"""SqlAlchemySessionStore - SQLAlchemy implementation of SessionStore.

Conditional updates (`... WHERE revoked_at IS NULL`) plus rowcount checks
give the "revoke iff not revoked" guarantee without row locks: of two
concurrent rotations of the same record, only one UPDATE matches a row.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authcore.domain.enums import RevocationReason
from authcore.domain.protocols.session_store import RefreshRecord
from authcore.domain.value_objects import DeviceFingerprint
from authcore.infrastructure.persistence.models.refresh_record import (
    RefreshRecordModel,
)


def _to_data(model: RefreshRecordModel) -> RefreshRecord:
    """Convert database model to domain DTO."""
    return RefreshRecord(
        id=model.id,
        user_id=model.user_id,
        token_hash=model.token_hash,
        family_id=model.family_id,
        device=DeviceFingerprint(
            ip_address=model.ip_address,
            user_agent_hash=model.user_agent_hash,
            device_name=model.device_name,
            device_id=model.device_id,
        ),
        issued_at=model.issued_at,
        expires_at=model.expires_at,
        revoked_at=model.revoked_at,
        revoked_reason=(
            RevocationReason(model.revoked_reason) if model.revoked_reason else None
        ),
        replaced_by_id=model.replaced_by_id,
        parent_id=model.parent_id,
        last_used_at=model.last_used_at,
    )


def _to_model(record: RefreshRecord) -> RefreshRecordModel:
    """Convert domain DTO to a new database model."""
    return RefreshRecordModel(
        id=record.id,
        user_id=record.user_id,
        token_hash=record.token_hash,
        family_id=record.family_id,
        ip_address=record.device.ip_address,
        user_agent_hash=record.device.user_agent_hash,
        device_name=record.device.device_name,
        device_id=record.device.device_id,
        issued_at=record.issued_at,
        expires_at=record.expires_at,
        revoked_at=record.revoked_at,
        revoked_reason=record.revoked_reason.value if record.revoked_reason else None,
        replaced_by_id=record.replaced_by_id,
        parent_id=record.parent_id,
        last_used_at=record.last_used_at,
    )


class SqlAlchemySessionStore:
    """SQLAlchemy implementation for refresh record persistence.

    Attributes:
        session: SQLAlchemy async session for database operations.

    Example:
        >>> async with db.get_session() as session:
        ...     store = SqlAlchemySessionStore(session)
        ...     record = await store.find_by_id(record_id)
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, record: RefreshRecord) -> RefreshRecord:
        self.session.add(_to_model(record))
        await self.session.commit()
        return record

    async def find_by_id(self, record_id: UUID) -> RefreshRecord | None:
        stmt = select(RefreshRecordModel).where(RefreshRecordModel.id == record_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_data(model) if model else None

    async def rotate(
        self,
        old_record_id: UUID,
        successor: RefreshRecord,
        now: datetime,
    ) -> bool:
        """Revoke the old record iff active and insert its successor.

        Both statements run in one transaction; a zero rowcount rolls the
        transaction back so nothing is written for the losing caller.
        """
        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.id == old_record_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(
                revoked_at=now,
                revoked_reason=RevocationReason.TOKEN_ROTATION.value,
                replaced_by_id=successor.id,
                last_used_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self.session.execute(stmt)
            if result.rowcount != 1:  # type: ignore[attr-defined]
                await self.session.rollback()
                return False

            self.session.add(_to_model(successor))
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return True

    async def revoke_if_active(
        self,
        record_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> bool:
        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.id == record_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return bool(result.rowcount == 1)  # type: ignore[attr-defined]

    async def revoke_family(
        self,
        family_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.family_id == family_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def revoke_all_for_user(
        self,
        user_id: UUID,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.user_id == user_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def revoke_by_device(
        self,
        user_id: UUID,
        device_id: str,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.user_id == user_id)
            .where(RefreshRecordModel.device_id == device_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def revoke_oldest_beyond_limit(
        self,
        user_id: UUID,
        limit: int,
        reason: RevocationReason,
        now: datetime,
    ) -> int:
        surplus = (
            select(RefreshRecordModel.id)
            .where(RefreshRecordModel.user_id == user_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .where(RefreshRecordModel.expires_at > now)
            .order_by(RefreshRecordModel.issued_at.desc())
            .offset(limit)
        )
        ids = list((await self.session.execute(surplus)).scalars().all())
        if not ids:
            return 0

        stmt = (
            update(RefreshRecordModel)
            .where(RefreshRecordModel.id.in_(ids))
            .where(RefreshRecordModel.revoked_at.is_(None))
            .values(revoked_at=now, revoked_reason=reason.value)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def find_active_by_user(
        self, user_id: UUID, now: datetime
    ) -> list[RefreshRecord]:
        stmt = (
            select(RefreshRecordModel)
            .where(RefreshRecordModel.user_id == user_id)
            .where(RefreshRecordModel.revoked_at.is_(None))
            .where(RefreshRecordModel.expires_at > now)
            .order_by(RefreshRecordModel.issued_at.desc())
        )
        result = await self.session.execute(stmt)
        return [_to_data(model) for model in result.scalars().all()]

    async def find_all_by_user(self, user_id: UUID) -> list[RefreshRecord]:
        stmt = (
            select(RefreshRecordModel)
            .where(RefreshRecordModel.user_id == user_id)
            .order_by(RefreshRecordModel.issued_at.desc())
        )
        result = await self.session.execute(stmt)
        return [_to_data(model) for model in result.scalars().all()]

    async def delete_expired_before(self, cutoff: datetime) -> int:
        stmt = (
            delete(RefreshRecordModel)
            .where(RefreshRecordModel.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]
