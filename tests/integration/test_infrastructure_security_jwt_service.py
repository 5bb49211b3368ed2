"""Integration tests for JWT token service.

Tests the JwtTokenService implementation with real cryptographic operations.
Following testing architecture: NO unit tests for infrastructure adapters,
only integration tests.

Architecture:
- Tests against real PyJWT library (no mocking, except to force a key error)
- Verifies Result type error handling
- Tests security properties (expiration, tampering, token type confusion)
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import jwt
import pytest
from freezegun import freeze_time
from uuid_extensions import uuid7

from authcore.core.enums import ErrorCode
from authcore.core.result import Failure, Success
from authcore.infrastructure.security.jwt_token_service import JwtTokenService

SECRET = "x" * 32


def issue_refresh(service: JwtTokenService, **overrides) -> tuple[str, dict]:
    params = {
        "record_id": uuid7(),
        "family_id": uuid7(),
        "user_id": uuid7(),
        "secret": "plain_secret",
        "expires_at": datetime.now(UTC) + timedelta(days=30),
        "scopes": frozenset({"read"}),
    } | overrides
    return service.issue_refresh_token(**params), params


@pytest.mark.integration
class TestJwtTokenServiceConstruction:
    def test_short_secret_key_rejected(self):
        with pytest.raises(ValueError, match="at least 32"):
            JwtTokenService(secret_key="x" * 31)

    def test_non_positive_lifetime_rejected(self):
        with pytest.raises(ValueError):
            JwtTokenService(secret_key=SECRET, access_token_expire_minutes=0)

    def test_ttl_seconds(self):
        service = JwtTokenService(secret_key=SECRET, access_token_expire_minutes=15)

        assert service.access_token_ttl_seconds == 900


@pytest.mark.integration
class TestAccessTokens:
    """Access token issuance and validation."""

    # =========================================================================
    # Token Generation Tests
    # =========================================================================

    def test_issued_token_has_jwt_structure(self):
        token = JwtTokenService(secret_key=SECRET).issue_access_token(uuid7())

        parts = token.split(".")
        assert len(parts) == 3
        assert all(parts)

    def test_roundtrip_claims(self):
        # Arrange
        service = JwtTokenService(secret_key=SECRET)
        user_id = uuid7()
        family_id = uuid7()

        # Act
        token = service.issue_access_token(
            user_id, scopes=frozenset({"read", "write"}), family_id=family_id
        )
        result = service.validate_access_token(token)

        # Assert
        assert isinstance(result, Success)
        claims = result.value
        assert claims.user_id == user_id
        assert claims.family_id == family_id
        assert claims.scopes == frozenset({"read", "write"})
        assert claims.token_id is not None
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_each_token_has_unique_jti(self):
        service = JwtTokenService(secret_key=SECRET)
        user_id = uuid7()

        first = service.validate_access_token(service.issue_access_token(user_id))
        second = service.validate_access_token(service.issue_access_token(user_id))

        assert first.value.token_id != second.value.token_id

    # =========================================================================
    # Validation Tests
    # =========================================================================

    def test_token_valid_until_expiry(self):
        service = JwtTokenService(secret_key=SECRET, access_token_expire_minutes=15)

        with freeze_time("2026-03-01 12:00:00") as frozen:
            token = service.issue_access_token(uuid7())
            frozen.tick(timedelta(minutes=14, seconds=59))

            assert isinstance(service.validate_access_token(token), Success)

    def test_token_expired_one_second_after_expiry(self):
        service = JwtTokenService(secret_key=SECRET, access_token_expire_minutes=15)

        with freeze_time("2026-03-01 12:00:00") as frozen:
            token = service.issue_access_token(uuid7())
            frozen.tick(timedelta(minutes=15, seconds=1))

            result = service.validate_access_token(token)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TOKEN_EXPIRED

    def test_tampered_payload_is_malformed(self):
        service = JwtTokenService(secret_key=SECRET)
        header, payload, signature = service.issue_access_token(uuid7()).split(".")
        tampered = f"{header}.{payload[:-2]}xx.{signature}"

        result = service.validate_access_token(tampered)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_wrong_key_is_malformed(self):
        token = JwtTokenService(secret_key="y" * 32).issue_access_token(uuid7())

        result = JwtTokenService(secret_key=SECRET).validate_access_token(token)

        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_garbage_is_malformed(self):
        result = JwtTokenService(secret_key=SECRET).validate_access_token("not.a.jwt")

        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_refresh_token_rejected_as_access_token(self):
        service = JwtTokenService(secret_key=SECRET)
        token, _ = issue_refresh(service)

        result = service.validate_access_token(token)

        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_non_uuid_subject_is_malformed(self):
        now = int(datetime.now(UTC).timestamp())
        token = jwt.encode(
            {"sub": "admin", "iat": now, "exp": now + 60, "typ": "access"},
            SECRET,
            algorithm="HS256",
        )

        result = JwtTokenService(secret_key=SECRET).validate_access_token(token)

        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_missing_required_claim_is_malformed(self):
        now = int(datetime.now(UTC).timestamp())
        token = jwt.encode(
            {"sub": str(uuid7()), "iat": now, "exp": now + 60},
            SECRET,
            algorithm="HS256",
        )

        result = JwtTokenService(secret_key=SECRET).validate_access_token(token)

        assert result.error.code == ErrorCode.TOKEN_MALFORMED

    def test_key_failure_is_internal_error(self):
        service = JwtTokenService(secret_key=SECRET)
        token = service.issue_access_token(uuid7())

        with patch(
            "authcore.infrastructure.security.jwt_token_service.jwt.decode",
            side_effect=jwt.exceptions.InvalidKeyError("bad key"),
        ):
            result = service.validate_access_token(token)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INTERNAL_ERROR


@pytest.mark.integration
class TestRefreshTokens:
    """Refresh token issuance and decoding."""

    def test_roundtrip_claims(self):
        service = JwtTokenService(secret_key=SECRET)
        token, params = issue_refresh(service)

        result = service.decode_refresh_token(token)

        assert isinstance(result, Success)
        assert result.value.record_id == params["record_id"]
        assert result.value.family_id == params["family_id"]
        assert result.value.user_id == params["user_id"]
        assert result.value.secret == "plain_secret"
        assert result.value.scopes == frozenset({"read"})

    def test_expired_refresh_token_still_decodes(self):
        """Record expiry is authoritative; decoding ignores exp."""
        service = JwtTokenService(secret_key=SECRET)
        token, _ = issue_refresh(
            service, expires_at=datetime.now(UTC) - timedelta(days=1)
        )

        assert isinstance(service.decode_refresh_token(token), Success)

    def test_access_token_rejected_as_refresh_token(self):
        service = JwtTokenService(secret_key=SECRET)

        result = service.decode_refresh_token(service.issue_access_token(uuid7()))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TOKEN_INVALID

    def test_wrong_key_is_token_invalid(self):
        token, _ = issue_refresh(JwtTokenService(secret_key="y" * 32))

        result = JwtTokenService(secret_key=SECRET).decode_refresh_token(token)

        assert result.error.code == ErrorCode.TOKEN_INVALID
