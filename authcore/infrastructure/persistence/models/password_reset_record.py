"""Password reset record database model."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from authcore.infrastructure.persistence.base import BaseModel


class PasswordResetRecordModel(BaseModel):
    """Single-use password reset token (digest only)."""

    __tablename__ = "password_reset_records"

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
        comment="User the reset was requested for",
    )

    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 digest of the reset token (NEVER plaintext)",
    )

    expires_at: Mapped[datetime] = mapped_column(
        nullable=False,
        index=True,
        comment="Token expiry",
    )

    consumed_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        default=None,
        comment="Set once when the token is used",
    )

    ip_address: Mapped[str | None] = mapped_column(
        String(45),
        nullable=True,
        comment="Requesting client IP",
    )

    user_agent: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Requesting client user agent",
    )
