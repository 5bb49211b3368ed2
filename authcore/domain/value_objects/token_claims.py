"""Decoded token payloads.

Access and refresh tokens are compact signed strings; these value objects
are what the token codec hands back after verifying a signature.
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessTokenClaims:
    """Verified access token payload.

    Attributes:
        user_id: Subject of the token.
        issued_at: When the token was signed.
        expires_at: When the token stops being accepted.
        scopes: Granted scopes.
        token_id: Unique JWT ID (jti).
        family_id: Refresh family the token was issued with, if any.
    """

    user_id: UUID
    issued_at: datetime
    expires_at: datetime
    scopes: frozenset[str] = field(default_factory=frozenset)
    token_id: str | None = None
    family_id: UUID | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RefreshTokenClaims:
    """Verified refresh token payload.

    Attributes:
        record_id: RefreshRecord the token is bound to.
        family_id: Token family (one per login).
        user_id: Owner of the record.
        secret: Random secret whose digest is stored on the record.
        scopes: Scopes carried over to access tokens minted on rotation.
    """

    record_id: UUID
    family_id: UUID
    user_id: UUID
    secret: str
    scopes: frozenset[str] = field(default_factory=frozenset)
