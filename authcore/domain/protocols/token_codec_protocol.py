"""TokenCodec protocol (port) for signed access and refresh tokens.

Access tokens are stateless: validation is signature plus expiry, with no
store lookup. Refresh tokens carry the record id, family id and secret of
the RefreshRecord they are bound to.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from authcore.core.errors import AuthenticationError
from authcore.core.result import Result
from authcore.domain.value_objects import AccessTokenClaims, RefreshTokenClaims


class TokenCodecProtocol(Protocol):
    """Signing and verification of compact tokens.

    Implementations:
        - JwtTokenService: authcore/infrastructure/security/jwt_token_service.py
    """

    @property
    def access_token_ttl_seconds(self) -> int:
        """Lifetime of issued access tokens in seconds."""
        ...

    def issue_access_token(
        self,
        user_id: UUID,
        scopes: frozenset[str] = frozenset(),
        family_id: UUID | None = None,
    ) -> str:
        """Sign a new access token for a user."""
        ...

    def issue_refresh_token(
        self,
        *,
        record_id: UUID,
        family_id: UUID,
        user_id: UUID,
        secret: str,
        expires_at: datetime,
        scopes: frozenset[str] = frozenset(),
    ) -> str:
        """Sign a refresh token bound to a RefreshRecord."""
        ...

    def decode_refresh_token(
        self, token: str
    ) -> Result[RefreshTokenClaims, AuthenticationError]:
        """Verify a refresh token signature and decode its claims.

        Expiry is not checked here; the record's expires_at is authoritative.
        """
        ...

    def validate_access_token(
        self, token: str
    ) -> Result[AccessTokenClaims, AuthenticationError]:
        """Verify an access token signature and expiry, returning its claims."""
        ...
