"""JWT token service (adapter).

Implements TokenCodecProtocol using PyJWT with HMAC-SHA256.

Token types:
    - Access token: stateless, short-lived. Claims: sub, iat, exp, jti,
      typ="access", scope (space separated), fid (token family, optional).
    - Refresh token: bound to a RefreshRecord. Claims: sub, iat, exp,
      typ="refresh", rid (record id), fid (family id), sec (random secret
      whose SHA-256 digest is stored on the record).

Security:
    - HMAC-SHA256 (HS256) by default
    - 256-bit secret key minimum
    - Zero leeway: a token is rejected as soon as exp has passed
    - `typ` claim prevents using a refresh token as an access token

Performance:
    - Stateless validation (no database lookup)
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError, PyJWTError
from uuid_extensions import uuid7

from authcore.core.constants import (
    ACCESS_TOKEN_TYPE,
    MIN_SECRET_KEY_LENGTH,
    REFRESH_TOKEN_TYPE,
)
from authcore.core.enums import ErrorCode
from authcore.core.errors import AuthenticationError
from authcore.core.result import Failure, Result, Success
from authcore.domain.value_objects import AccessTokenClaims, RefreshTokenClaims

_ACCESS_REQUIRED_CLAIMS = ["sub", "iat", "exp", "typ"]
_REFRESH_REQUIRED_CLAIMS = ["sub", "iat", "exp", "typ", "rid", "fid", "sec"]


class JWTClaimError(InvalidTokenError):
    """Signature is valid but a claim has the wrong type or value."""


class JwtTokenService:
    """JWT token generation and validation service.

    Usage:
        token_service = JwtTokenService(secret_key=settings.secret_key)

        token = token_service.issue_access_token(user_id, scopes=frozenset({"read"}))
        result = token_service.validate_access_token(token)
        match result:
            case Success(value=claims):
                caller = claims.user_id
            case Failure(error=error):
                ...  # TOKEN_MALFORMED, TOKEN_EXPIRED or INTERNAL_ERROR
    """

    def __init__(
        self,
        secret_key: str,
        *,
        access_token_expire_minutes: int = 15,
        algorithm: str = "HS256",
    ) -> None:
        """Initialize JWT service.

        Args:
            secret_key: Secret key for HMAC signing. MUST be at least
                256 bits (32 bytes).
            access_token_expire_minutes: Access token lifetime.
            algorithm: JWT signing algorithm.

        Raises:
            ValueError: If secret_key is too short or the lifetime is not positive.
        """
        if len(secret_key) < MIN_SECRET_KEY_LENGTH:
            msg = "JWT secret key must be at least 32 bytes (256 bits)"
            raise ValueError(msg)
        if access_token_expire_minutes <= 0:
            msg = "Access token lifetime must be positive"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._expiration = timedelta(minutes=access_token_expire_minutes)
        self._algorithm = algorithm

    @property
    def access_token_ttl_seconds(self) -> int:
        """Lifetime of issued access tokens in seconds."""
        return int(self._expiration.total_seconds())

    def issue_access_token(
        self,
        user_id: UUID,
        scopes: frozenset[str] = frozenset(),
        family_id: UUID | None = None,
    ) -> str:
        """Generate a signed access token.

        Args:
            user_id: Subject of the token.
            scopes: Granted scopes.
            family_id: Refresh family the token belongs to (lets logout
                resolve the family from an access token).

        Returns:
            JWT string (header.payload.signature).
        """
        now = datetime.now(UTC)
        payload: dict[str, str | int] = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self._expiration).timestamp()),
            "jti": str(uuid7()),
            "typ": ACCESS_TOKEN_TYPE,
            "scope": " ".join(sorted(scopes)),
        }
        if family_id is not None:
            payload["fid"] = str(family_id)

        token: str = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return token

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
        """Generate a signed refresh token bound to a RefreshRecord.

        Args:
            record_id: Record the token is bound to.
            family_id: Token family.
            user_id: Record owner.
            secret: Random secret; only its digest is stored.
            expires_at: Record expiry (copied into exp for clients).
            scopes: Scopes to carry into access tokens minted on rotation.

        Returns:
            JWT string.
        """
        now = datetime.now(UTC)
        payload: dict[str, str | int] = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "typ": REFRESH_TOKEN_TYPE,
            "rid": str(record_id),
            "fid": str(family_id),
            "sec": secret,
            "scope": " ".join(sorted(scopes)),
        }
        token: str = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return token

    def validate_access_token(
        self, token: str
    ) -> Result[AccessTokenClaims, AuthenticationError]:
        """Validate an access token and extract its claims.

        Returns:
            Success(AccessTokenClaims) if the signature is valid and the
            token has not expired.
            Failure(AuthenticationError) with:
                - TOKEN_EXPIRED: signature valid, exp has passed
                - TOKEN_MALFORMED: unparsable, bad signature, bad claims,
                  or not an access token
                - INTERNAL_ERROR: signing key unusable
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": _ACCESS_REQUIRED_CLAIMS},
            )
            return Success(value=self._to_access_claims(payload))
        except ExpiredSignatureError:
            return Failure(
                error=AuthenticationError(
                    code=ErrorCode.TOKEN_EXPIRED,
                    message="Access token has expired",
                )
            )
        except InvalidTokenError:
            return Failure(
                error=AuthenticationError(
                    code=ErrorCode.TOKEN_MALFORMED,
                    message="Access token is invalid",
                )
            )
        except PyJWTError as e:
            return Failure(
                error=AuthenticationError(
                    code=ErrorCode.INTERNAL_ERROR,
                    message="Access token could not be verified",
                    details={"error_type": type(e).__name__},
                )
            )

    def decode_refresh_token(
        self, token: str
    ) -> Result[RefreshTokenClaims, AuthenticationError]:
        """Verify a refresh token signature and decode its claims.

        The exp claim is not enforced here: the RefreshRecord's expires_at
        is authoritative, and reuse of an expired-but-rotated token must
        still be detectable.

        Returns:
            Success(RefreshTokenClaims) or Failure with TOKEN_INVALID.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": _REFRESH_REQUIRED_CLAIMS, "verify_exp": False},
            )
            if payload["typ"] != REFRESH_TOKEN_TYPE:
                raise JWTClaimError("not a refresh token")
            claims = RefreshTokenClaims(
                record_id=_parse_uuid(payload["rid"]),
                family_id=_parse_uuid(payload["fid"]),
                user_id=_parse_uuid(payload["sub"]),
                secret=str(payload["sec"]),
                scopes=_parse_scopes(payload.get("scope")),
            )
            return Success(value=claims)
        except PyJWTError:
            return Failure(
                error=AuthenticationError(
                    code=ErrorCode.TOKEN_INVALID,
                    message="Invalid refresh token",
                )
            )

    def _to_access_claims(self, payload: dict[str, object]) -> AccessTokenClaims:
        if payload["typ"] != ACCESS_TOKEN_TYPE:
            raise JWTClaimError("not an access token")

        family = payload.get("fid")
        jti = payload.get("jti")
        return AccessTokenClaims(
            user_id=_parse_uuid(payload["sub"]),
            issued_at=_parse_timestamp(payload["iat"]),
            expires_at=_parse_timestamp(payload["exp"]),
            scopes=_parse_scopes(payload.get("scope")),
            token_id=str(jti) if jti is not None else None,
            family_id=_parse_uuid(family) if family is not None else None,
        )


def _parse_uuid(value: object) -> UUID:
    try:
        return UUID(str(value))
    except ValueError as e:
        raise JWTClaimError(f"invalid identifier claim: {e}") from e


def _parse_scopes(value: object) -> frozenset[str]:
    if value is None:
        return frozenset()
    if not isinstance(value, str):
        raise JWTClaimError("scope must be a string")
    return frozenset(value.split())


def _parse_timestamp(value: object) -> datetime:
    if not isinstance(value, (int, float)):
        raise JWTClaimError("timestamp claim must be numeric")
    return datetime.fromtimestamp(value, tz=UTC)
