"""Authentication domain events.

Pattern: 3 events per workflow (ATTEMPTED → SUCCEEDED/FAILED)
- *Attempted: operation initiated (before business logic)
- *Succeeded: operation completed
- *Failed: operation failed, with a reason string

RefreshTokenReuseDetected and SessionsRevoked are standalone security
events. UserDeleted is published by the user store owner and consumed here.

Handlers:
- LoggingEventHandler: every event
- AuditEventHandler: succeeded/failed events and security events
- SessionRevocationHandler: UserDeleted
"""

from dataclasses import dataclass
from uuid import UUID

from authcore.domain.events.base_event import DomainEvent


# ═══════════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class UserLoginAttempted(DomainEvent):
    """Login attempt initiated.

    Attributes:
        identifier: Login identifier attempted.
        ip_address: Masked client IP.
    """

    identifier: str
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class UserLoginSucceeded(DomainEvent):
    """Login succeeded and a new token family was issued.

    Attributes:
        user_id: Authenticated user.
        family_id: New refresh token family.
        device_id: Device the family is bound to.
        ip_address: Masked client IP.
    """

    user_id: UUID
    family_id: UUID
    device_id: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class UserLoginFailed(DomainEvent):
    """Login failed.

    Attributes:
        identifier: Login identifier attempted.
        reason: Failure reason ("invalid_credentials", "account_locked", ...).
        ip_address: Masked client IP.
    """

    identifier: str
    reason: str
    ip_address: str | None = None


# ═══════════════════════════════════════════════════════════════
# Token Refresh
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class TokenRefreshAttempted(DomainEvent):
    """Refresh token presented for rotation.

    Attributes:
        ip_address: Masked client IP.
    """

    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class TokenRefreshSucceeded(DomainEvent):
    """Refresh token rotated.

    Attributes:
        user_id: Token owner.
        family_id: Token family.
        old_record_id: Rotated record.
        new_record_id: Successor record.
    """

    user_id: UUID
    family_id: UUID
    old_record_id: UUID
    new_record_id: UUID


@dataclass(frozen=True, kw_only=True)
class TokenRefreshFailed(DomainEvent):
    """Refresh failed.

    Attributes:
        reason: Failure reason ("token_invalid", "token_expired", ...).
        user_id: Token owner when the record was found.
    """

    reason: str
    user_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class RefreshTokenReuseDetected(DomainEvent):
    """A revoked refresh token was presented again (suspected theft).

    The whole family has already been revoked when this is published.

    Attributes:
        user_id: Token owner.
        family_id: Compromised family.
        record_id: Record that was replayed.
        revoked_count: Records revoked by the family revocation.
        ip_address: Masked IP of the replaying client.
    """

    user_id: UUID
    family_id: UUID
    record_id: UUID
    revoked_count: int
    ip_address: str | None = None


# ═══════════════════════════════════════════════════════════════
# Logout and Revocation
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class UserLogoutSucceeded(DomainEvent):
    """User logged out.

    Attributes:
        user_id: User, when it could be resolved from the presented token.
        all_devices: True for logout everywhere.
        revoked_count: Records revoked.
    """

    user_id: UUID | None
    all_devices: bool
    revoked_count: int


@dataclass(frozen=True, kw_only=True)
class SessionsRevoked(DomainEvent):
    """Refresh records revoked outside of login/refresh/logout.

    Attributes:
        user_id: Owner of the revoked records.
        reason: RevocationReason value.
        revoked_count: Records revoked.
        device_id: Device, for single-device revocation.
    """

    user_id: UUID
    reason: str
    revoked_count: int
    device_id: str | None = None


@dataclass(frozen=True, kw_only=True)
class UserDeleted(DomainEvent):
    """User removed from the user store.

    Attributes:
        user_id: Deleted user.
    """

    user_id: UUID


# ═══════════════════════════════════════════════════════════════
# Password Reset
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class PasswordResetRequested(DomainEvent):
    """Reset token issued for an existing user.

    Never published for unknown emails. The plaintext token is NOT part
    of the event.

    Attributes:
        user_id: User the token was issued for.
        record_id: Reset record.
        ip_address: Masked client IP.
    """

    user_id: UUID
    record_id: UUID
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class PasswordResetCompleted(DomainEvent):
    """Password replaced through a reset token.

    Attributes:
        user_id: User whose password changed.
        revoked_sessions: Refresh records revoked as a consequence.
    """

    user_id: UUID
    revoked_sessions: int


@dataclass(frozen=True, kw_only=True)
class PasswordResetFailed(DomainEvent):
    """Reset attempt rejected.

    Attributes:
        reason: Failure reason ("invalid_or_expired_token", "password_too_weak").
        user_id: User, when the token resolved to one.
    """

    reason: str
    user_id: UUID | None = None
