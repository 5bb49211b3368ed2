"""SqlAlchemyPasswordResetRepository - SQLAlchemy implementation.

consume_if_unused() is a single conditional UPDATE, so a reset token can
be consumed by at most one concurrent request.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authcore.domain.protocols.password_reset_repository import PasswordResetRecord
from authcore.infrastructure.persistence.models.password_reset_record import (
    PasswordResetRecordModel,
)


def _to_data(model: PasswordResetRecordModel) -> PasswordResetRecord:
    """Convert database model to domain DTO."""
    return PasswordResetRecord(
        id=model.id,
        user_id=model.user_id,
        token_hash=model.token_hash,
        expires_at=model.expires_at,
        created_at=model.created_at,
        consumed_at=model.consumed_at,
        ip_address=model.ip_address,
        user_agent=model.user_agent,
    )


class SqlAlchemyPasswordResetRepository:
    """SQLAlchemy implementation for password reset record persistence."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def save(self, record: PasswordResetRecord) -> PasswordResetRecord:
        model = PasswordResetRecordModel(
            id=record.id,
            user_id=record.user_id,
            token_hash=record.token_hash,
            expires_at=record.expires_at,
            created_at=record.created_at,
            consumed_at=record.consumed_at,
            ip_address=record.ip_address,
            user_agent=record.user_agent,
        )
        self.session.add(model)
        await self.session.commit()
        return record

    async def find_by_token_hash(self, token_hash: str) -> PasswordResetRecord | None:
        stmt = select(PasswordResetRecordModel).where(
            PasswordResetRecordModel.token_hash == token_hash
        )
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_data(model) if model else None

    async def consume_if_unused(self, record_id: UUID, now: datetime) -> bool:
        stmt = (
            update(PasswordResetRecordModel)
            .where(PasswordResetRecordModel.id == record_id)
            .where(PasswordResetRecordModel.consumed_at.is_(None))
            .where(PasswordResetRecordModel.expires_at > now)
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return bool(result.rowcount == 1)  # type: ignore[attr-defined]

    async def release_if_consumed(self, record_id: UUID, consumed_at: datetime) -> bool:
        stmt = (
            update(PasswordResetRecordModel)
            .where(PasswordResetRecordModel.id == record_id)
            .where(PasswordResetRecordModel.consumed_at == consumed_at)
            .values(consumed_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return bool(result.rowcount == 1)  # type: ignore[attr-defined]

    async def delete_unconsumed_for_user(self, user_id: UUID) -> int:
        stmt = (
            delete(PasswordResetRecordModel)
            .where(PasswordResetRecordModel.user_id == user_id)
            .where(PasswordResetRecordModel.consumed_at.is_(None))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]

    async def delete_expired_before(self, cutoff: datetime) -> int:
        stmt = (
            delete(PasswordResetRecordModel)
            .where(PasswordResetRecordModel.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return int(result.rowcount)  # type: ignore[attr-defined]
