"""Async SQLAlchemy engine and unit-of-work scoping for the SQL stores.

One `Database` per process owns the connection pool. Each request opens a
session through `stores()`, which hands back the user repository, session
store and reset repository bound to that same session. The stores commit
their own conditional updates, so the scope only guarantees rollback on
error and closing the session.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from authcore.infrastructure.persistence.base import BaseModel
from authcore.infrastructure.persistence.repositories import (
    SqlAlchemyPasswordResetRepository,
    SqlAlchemySessionStore,
    SqlAlchemyUserRepository,
)


@dataclass(frozen=True, slots=True)
class SqlStores:
    """Stores sharing one AsyncSession."""

    users: SqlAlchemyUserRepository
    sessions: SqlAlchemySessionStore
    reset_tokens: SqlAlchemyPasswordResetRepository


class Database:
    """Connection pool plus per-request store scopes.

    Usage:
        db = Database("postgresql+asyncpg://auth:secret@db/auth")
        async with db.stores() as stores:
            service = build_authentication_service(
                user_repo=stores.users, session_store=stores.sessions
            )
            result = await service.refresh(command)
    """

    def __init__(
        self,
        database_url: str,
        *,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 5,
    ) -> None:
        self.engine: AsyncEngine = create_async_engine(
            database_url,
            echo=echo,
            pool_pre_ping=True,
            pool_size=pool_size,
            max_overflow=max_overflow,
        )
        self._sessions = async_sessionmaker(self.engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Open a session, rolling back if the block raises."""
        async with self._sessions() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    @asynccontextmanager
    async def stores(self) -> AsyncIterator[SqlStores]:
        """Open a session and bind all three SQL stores to it."""
        async with self.session() as session:
            yield SqlStores(
                users=SqlAlchemyUserRepository(session),
                sessions=SqlAlchemySessionStore(session),
                reset_tokens=SqlAlchemyPasswordResetRepository(session),
            )

    async def create_schema(self) -> None:
        """Create the users, refresh_records and password_reset_records tables."""
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.create_all)

    async def drop_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseModel.metadata.drop_all)

    async def ping(self) -> bool:
        """True if the database answers a trivial query."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError):
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
