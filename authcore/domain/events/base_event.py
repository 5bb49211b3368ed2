"""Common fields of every auth event.

Events are frozen past-tense facts (UserLoginSucceeded,
RefreshTokenReuseDetected, PasswordResetCompleted). event_id is a UUIDv7 so
audit rows sort by creation time without a separate sequence.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    event_id: UUID = field(default_factory=uuid7)
    occurred_at: datetime = field(default_factory=_utcnow)
