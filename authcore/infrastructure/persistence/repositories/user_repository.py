"""SqlAlchemyUserRepository - SQLAlchemy implementation of UserRepository."""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authcore.domain.entities.user import User
from authcore.infrastructure.persistence.models.user import UserModel


def _to_entity(model: UserModel) -> User:
    """Convert database model to domain entity."""
    return User(
        id=model.id,
        email=model.email,
        password_hash=model.password_hash,
        is_active=model.is_active,
        failed_login_attempts=model.failed_login_attempts,
        locked_until=model.locked_until,
        password_changed_at=model.password_changed_at,
        created_at=model.created_at,
    )


class SqlAlchemyUserRepository:
    """SQLAlchemy implementation for the user columns the auth core uses."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserModel).where(UserModel.id == user_id)
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def find_by_email(self, email: str) -> User | None:
        stmt = select(UserModel).where(UserModel.email == email.strip().lower())
        result = await self.session.execute(stmt)
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def update(self, user: User) -> None:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id)
            .values(
                password_hash=user.password_hash,
                is_active=user.is_active,
                failed_login_attempts=user.failed_login_attempts,
                locked_until=user.locked_until,
                password_changed_at=user.password_changed_at,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def update_password(self, user_id: UUID, password_hash: str) -> None:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(
                password_hash=password_hash,
                password_changed_at=datetime.now(UTC),
                failed_login_attempts=0,
                locked_until=None,
            )
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        await self.session.commit()
