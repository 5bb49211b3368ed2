"""User database model (authentication columns only)."""

from datetime import datetime

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from authcore.infrastructure.persistence.base import BaseMutableModel


class UserModel(BaseMutableModel):
    """User account row.

    Indexes:
        - email (unique, stored lower-case)
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier (lower-case)",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Hashed password (NEVER plaintext)",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        comment="Inactive users cannot login",
    )

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Consecutive failed logins",
    )

    locked_until: Mapped[datetime | None] = mapped_column(
        nullable=True,
        default=None,
        comment="Temporary lock expiry",
    )

    password_changed_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        default=None,
        comment="Last password change",
    )
