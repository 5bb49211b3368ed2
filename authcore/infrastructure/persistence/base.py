"""Declarative base for the users, refresh_records and password_reset_records tables.

Repositories map between these models and the domain dataclasses; nothing
outside `authcore.infrastructure.persistence` imports them. Every datetime
column is timezone-aware, and constraint names follow one convention so
schema migrations produce stable names.
"""

from datetime import datetime
from uuid import UUID as PythonUUID

from sqlalchemy import DateTime, MetaData, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from uuid_extensions import uuid7

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class BaseModel(DeclarativeBase):
    """Abstract row with a UUIDv7 primary key and an insert timestamp."""

    __abstract__ = True

    metadata = MetaData(naming_convention=NAMING_CONVENTION)
    type_annotation_map = {datetime: DateTime(timezone=True)}

    id: Mapped[PythonUUID] = mapped_column(Uuid, primary_key=True, default=uuid7)
    created_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={self.id}>"


class BaseMutableModel(BaseModel):
    """Row that also records when it was last updated (users)."""

    __abstract__ = True

    updated_at: Mapped[datetime] = mapped_column(
        nullable=False, server_default=func.now(), onupdate=func.now()
    )
