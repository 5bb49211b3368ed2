"""Refresh record database model.

Security:
    - token_hash: SHA-256 digest of the refresh secret (NOT plaintext)
    - expires_at: fixed at issuance, never extended
    - revoked_at: set exactly once (conditional update)
    - replaced_by_id / parent_id: rotation chain for reuse forensics
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from authcore.infrastructure.persistence.base import BaseModel


class RefreshRecordModel(BaseModel):
    """One row per issued refresh token.

    Indexes:
        - user_id: user's active records, logout everywhere
        - family_id: family revocation on reuse detection
        - token_hash: unique
        - idx_refresh_records_cleanup: (expires_at, revoked_at) for cleanup
    """

    __tablename__ = "refresh_records"

    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
        comment="User who owns this refresh record",
    )

    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 digest of the refresh secret (NEVER plaintext)",
    )

    family_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
        comment="Token family (one per login)",
    )

    # Device fingerprint
    ip_address: Mapped[str] = mapped_column(
        String(45),
        nullable=False,
        comment="Client IP at issuance",
    )

    user_agent_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 of the client user agent",
    )

    device_name: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Human-readable device name",
    )

    device_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="Derived device identifier (dev_...)",
    )

    issued_at: Mapped[datetime] = mapped_column(
        nullable=False,
        comment="Issuance timestamp",
    )

    expires_at: Mapped[datetime] = mapped_column(
        nullable=False,
        comment="Fixed expiry (never extended)",
    )

    revoked_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        default=None,
        comment="Timestamp when revoked (nullable)",
    )

    revoked_reason: Mapped[str | None] = mapped_column(
        String(32),
        nullable=True,
        default=None,
        comment="RevocationReason value",
    )

    replaced_by_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        default=None,
        comment="Successor record created by rotation",
    )

    parent_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        default=None,
        comment="Predecessor record in the rotation chain",
    )

    last_used_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        default=None,
        comment="When the record was presented for rotation",
    )

    __table_args__ = (
        Index("idx_refresh_records_cleanup", "expires_at", "revoked_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<RefreshRecordModel("
            f"id={self.id}, "
            f"family_id={self.family_id}, "
            f"revoked={self.revoked_at is not None}"
            f")>"
        )
