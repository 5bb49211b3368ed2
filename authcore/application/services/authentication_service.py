"""Authentication service: login, refresh with rotation, logout.

Flows:
    login:   lockout check → credential verification → new token family
             → RefreshRecord persisted → access + refresh pair returned
    refresh: signature check → record lookup → reuse detection → expiry
             → atomic rotation (old revoked + linked, successor inserted)
    logout:  revoke one device's record (or family) or every record of
             the user

Refresh Token Reuse:
    A record is usable for rotation exactly once. Presenting a record that
    is already revoked means a copy of the token is in someone else's
    hands: the whole family is revoked before TOKEN_REUSE_DETECTED is
    returned, so neither the attacker nor the victim can continue the
    chain. The same happens to the loser of two concurrent rotations.

Access tokens are stateless and cannot be revoked. Logout only guarantees
that no future refresh succeeds; issued access tokens live until their
own short expiry.

Architecture:
    - Depends only on domain protocols (injected)
    - Every operation returns Result; store exceptions become INTERNAL_ERROR
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

from uuid_extensions import uuid7

from authcore.application.commands.auth_commands import (
    LoginUser,
    LogoutUser,
    RefreshTokens,
)
from authcore.core.constants import BEARER_TOKEN_TYPE
from authcore.core.enums import ErrorCode
from authcore.core.errors import AuthenticationError
from authcore.core.result import Failure, Result, Success
from authcore.domain.enums import RevocationReason
from authcore.domain.events.auth_events import (
    RefreshTokenReuseDetected,
    SessionsRevoked,
    TokenRefreshAttempted,
    TokenRefreshFailed,
    TokenRefreshSucceeded,
    UserLoginAttempted,
    UserLoginFailed,
    UserLoginSucceeded,
    UserLogoutSucceeded,
)
from authcore.domain.protocols import (
    CredentialVerifierProtocol,
    EventBusProtocol,
    LockoutPolicyProtocol,
    LoggerProtocol,
    RefreshRecord,
    SessionStore,
    TokenCodecProtocol,
    TokenSecretProtocol,
)
from authcore.domain.value_objects import DeviceInfo, RefreshTokenClaims


@dataclass(frozen=True, kw_only=True)
class LoginResult:
    """Token pair issued by a successful login."""

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expires_in: int
    refresh_expires_at: datetime
    user_id: UUID
    family_id: UUID
    token_type: str = BEARER_TOKEN_TYPE


@dataclass(frozen=True, kw_only=True)
class RefreshResult:
    """Token pair issued by a successful rotation."""

    access_token: str = field(repr=False)
    refresh_token: str = field(repr=False)
    expires_in: int
    refresh_expires_at: datetime
    user_id: UUID
    family_id: UUID
    token_type: str = BEARER_TOKEN_TYPE


@dataclass(frozen=True, kw_only=True)
class LogoutResult:
    """Outcome of a logout (always reported as success to the caller)."""

    revoked_count: int
    message: str = "Successfully logged out."


@dataclass(frozen=True, kw_only=True)
class SessionStats:
    """Refresh record counts for one user.

    Attributes:
        total: All stored records.
        active: Neither revoked nor expired.
        expired: Expired and never revoked.
        revoked: Revoked for any reason.
        by_device: Active records per device name.
        by_reason: Revoked records per revocation reason.
    """

    total: int
    active: int
    expired: int
    revoked: int
    by_device: dict[str, int] = field(default_factory=dict)
    by_reason: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class _IssuedPair:
    record: RefreshRecord
    access_token: str
    refresh_token: str


def _auth_failure(code: ErrorCode, message: str) -> Failure[AuthenticationError]:
    return Failure(error=AuthenticationError(code=code, message=message))


def _internal_failure() -> Failure[AuthenticationError]:
    return _auth_failure(
        ErrorCode.INTERNAL_ERROR, "Authentication service temporarily unavailable"
    )


class AuthenticationService:
    """Orchestrates login, refresh and logout.

    Usage:
        service = AuthenticationService(
            credential_verifier=verifier,
            lockout_policy=lockout_policy,
            session_store=session_store,
            token_codec=jwt_service,
            token_secrets=TokenSecretService(),
            event_bus=event_bus,
            logger=logger,
        )
        result = await service.login(LoginUser(identifier=email, secret=password))
    """

    def __init__(
        self,
        *,
        credential_verifier: CredentialVerifierProtocol,
        lockout_policy: LockoutPolicyProtocol,
        session_store: SessionStore,
        token_codec: TokenCodecProtocol,
        token_secrets: TokenSecretProtocol,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        refresh_token_expire_days: int = 30,
        max_refresh_tokens_per_user: int = 10,
        refresh_record_retention_days: int = 7,
        enforce_device_binding: bool = False,
    ) -> None:
        """Initialize authentication service with dependencies.

        Args:
            credential_verifier: Checks identifier + secret.
            lockout_policy: Consulted before credential verification.
            session_store: Refresh record persistence.
            token_codec: Signs and verifies access/refresh tokens.
            token_secrets: Generates refresh secrets and their digests.
            event_bus: Domain event publishing (audit, monitoring).
            logger: Structured logger.
            refresh_token_expire_days: Lifetime of each refresh record.
            max_refresh_tokens_per_user: Active records kept per user.
            refresh_record_retention_days: How long expired records are
                kept for reuse forensics before cleanup deletes them.
            enforce_device_binding: Reject rotation from a different user agent.

        Raises:
            ValueError: If a lifetime or limit is not positive, or the
                retention is negative.
        """
        if refresh_token_expire_days <= 0:
            msg = "refresh_token_expire_days must be positive"
            raise ValueError(msg)
        if max_refresh_tokens_per_user <= 0:
            msg = "max_refresh_tokens_per_user must be positive"
            raise ValueError(msg)
        if refresh_record_retention_days < 0:
            msg = "refresh_record_retention_days must not be negative"
            raise ValueError(msg)

        self._credential_verifier = credential_verifier
        self._lockout_policy = lockout_policy
        self._session_store = session_store
        self._token_codec = token_codec
        self._token_secrets = token_secrets
        self._event_bus = event_bus
        self._logger = logger
        self._refresh_ttl = timedelta(days=refresh_token_expire_days)
        self._max_tokens = max_refresh_tokens_per_user
        self._retention = timedelta(days=refresh_record_retention_days)
        self._enforce_device_binding = enforce_device_binding

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    async def login(self, cmd: LoginUser) -> Result[LoginResult, AuthenticationError]:
        """Verify credentials and issue a new token family.

        Returns:
            Success(LoginResult) with a fresh access + refresh pair.
            Failure(AuthenticationError) with INVALID_CREDENTIALS,
            ACCOUNT_LOCKED or INTERNAL_ERROR.

        Side Effects:
            - One RefreshRecord created (oldest records beyond the per-user
              limit revoked with reason token_limit)
            - Publishes UserLoginAttempted and UserLoginSucceeded/Failed
        """
        masked_ip = cmd.device.masked_ip

        # Step 1: Emit ATTEMPTED event
        await self._event_bus.publish(
            UserLoginAttempted(identifier=cmd.identifier, ip_address=masked_ip)
        )

        try:
            # Step 2: Lockout policy
            if await self._lockout_policy.is_locked(cmd.identifier):
                await self._publish_login_failed(cmd, ErrorCode.ACCOUNT_LOCKED)
                return _auth_failure(
                    ErrorCode.ACCOUNT_LOCKED,
                    "Account temporarily locked due to failed login attempts",
                )

            # Step 3: Verify credentials
            verification = await self._credential_verifier.verify(
                cmd.identifier, cmd.secret
            )
            if isinstance(verification, Failure):
                await self._lockout_policy.record_failure(cmd.identifier)
                await self._publish_login_failed(cmd, verification.error.code)
                return verification

            user = verification.value
            await self._lockout_policy.record_success(cmd.identifier)

            # Step 4: New family, first record
            now = datetime.now(UTC)
            family_id = uuid7()
            issued = self._issue_pair(
                user_id=user.id,
                family_id=family_id,
                device=cmd.device,
                scopes=cmd.scopes,
                now=now,
            )
            await self._session_store.create(issued.record)

            # Step 5: Enforce per-user token limit
            trimmed = await self._session_store.revoke_oldest_beyond_limit(
                user.id, self._max_tokens, RevocationReason.TOKEN_LIMIT, now
            )
            if trimmed:
                self._logger.info(
                    "refresh_token_limit_enforced",
                    user_id=str(user.id),
                    revoked_count=trimmed,
                )
        except Exception as e:
            self._logger.error("login_internal_error", error=e)
            await self._publish_login_failed(cmd, ErrorCode.INTERNAL_ERROR)
            return _internal_failure()

        # Step 6: Emit SUCCEEDED event
        await self._event_bus.publish(
            UserLoginSucceeded(
                user_id=user.id,
                family_id=family_id,
                device_id=cmd.device.device_id,
                ip_address=masked_ip,
            )
        )
        self._logger.info(
            "login_succeeded", user_id=str(user.id), family_id=str(family_id)
        )

        return Success(
            value=LoginResult(
                access_token=issued.access_token,
                refresh_token=issued.refresh_token,
                expires_in=self._token_codec.access_token_ttl_seconds,
                refresh_expires_at=issued.record.expires_at,
                user_id=user.id,
                family_id=family_id,
            )
        )

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    async def refresh(
        self, cmd: RefreshTokens
    ) -> Result[RefreshResult, AuthenticationError]:
        """Rotate a refresh token.

        Returns:
            Success(RefreshResult) with a new pair in the same family.
            Failure(AuthenticationError) with:
                - TOKEN_INVALID: bad signature, unknown record, secret mismatch
                - TOKEN_REUSE_DETECTED: record already revoked (family revoked)
                - TOKEN_EXPIRED: record past its expiry
                - INTERNAL_ERROR: store failure
        """
        # Step 1: Emit ATTEMPTED event
        await self._event_bus.publish(
            TokenRefreshAttempted(ip_address=cmd.device.masked_ip)
        )

        # Step 2: Verify signature and decode claims
        decoded = self._token_codec.decode_refresh_token(cmd.refresh_token)
        if isinstance(decoded, Failure):
            await self._publish_refresh_failed(ErrorCode.TOKEN_INVALID)
            return decoded
        claims = decoded.value

        try:
            # Step 3: Look up and authenticate the record
            record = await self._session_store.find_by_id(claims.record_id)
            if record is None or not self._matches(record, claims):
                await self._publish_refresh_failed(
                    ErrorCode.TOKEN_INVALID, claims.user_id
                )
                return _auth_failure(ErrorCode.TOKEN_INVALID, "Invalid refresh token")

            now = datetime.now(UTC)

            # Step 4: Reuse detection (before expiry, so replay of a rotated
            # token is caught even after it expired)
            if record.is_revoked:
                return await self._handle_reuse(record, cmd.device, now)

            # Step 5: Expiry
            if record.is_expired(now):
                await self._publish_refresh_failed(
                    ErrorCode.TOKEN_EXPIRED, record.user_id
                )
                return _auth_failure(
                    ErrorCode.TOKEN_EXPIRED, "Refresh token has expired"
                )

            # Step 6: Optional device binding
            if (
                self._enforce_device_binding
                and record.device.user_agent_hash != cmd.device.user_agent_hash
            ):
                revoked = await self._session_store.revoke_family(
                    record.family_id, RevocationReason.SECURITY_BREACH, now
                )
                self._logger.warning(
                    "refresh_device_mismatch",
                    user_id=str(record.user_id),
                    family_id=str(record.family_id),
                    revoked_count=revoked,
                )
                await self._publish_refresh_failed(
                    ErrorCode.TOKEN_INVALID, record.user_id
                )
                return _auth_failure(ErrorCode.TOKEN_INVALID, "Invalid refresh token")

            # Step 7: Atomic rotation
            issued = self._issue_pair(
                user_id=record.user_id,
                family_id=record.family_id,
                device=cmd.device,
                scopes=claims.scopes,
                now=now,
                parent_id=record.id,
            )
            if not await self._session_store.rotate(record.id, issued.record, now):
                # Lost a concurrent rotation: same treatment as a replay
                return await self._handle_reuse(record, cmd.device, now)
        except Exception as e:
            self._logger.error(
                "refresh_internal_error", error=e, record_id=str(claims.record_id)
            )
            await self._publish_refresh_failed(ErrorCode.INTERNAL_ERROR, claims.user_id)
            return _internal_failure()

        # Step 8: Emit SUCCEEDED event
        await self._event_bus.publish(
            TokenRefreshSucceeded(
                user_id=record.user_id,
                family_id=record.family_id,
                old_record_id=record.id,
                new_record_id=issued.record.id,
            )
        )

        return Success(
            value=RefreshResult(
                access_token=issued.access_token,
                refresh_token=issued.refresh_token,
                expires_in=self._token_codec.access_token_ttl_seconds,
                refresh_expires_at=issued.record.expires_at,
                user_id=record.user_id,
                family_id=record.family_id,
            )
        )

    # ------------------------------------------------------------------
    # Logout
    # ------------------------------------------------------------------

    async def logout(
        self, cmd: LogoutUser
    ) -> Result[LogoutResult, AuthenticationError]:
        """Revoke the presented device's chain, or every chain of the user.

        Idempotent: an unknown or already-revoked record is a successful
        logout with revoked_count=0.

        Returns:
            Success(LogoutResult).
            Failure(AuthenticationError) when no token is given or the
            given token cannot be verified, or INTERNAL_ERROR.
        """
        if cmd.refresh_token is None and cmd.access_token is None:
            return _auth_failure(
                ErrorCode.TOKEN_INVALID, "A refresh or access token is required"
            )

        refresh_claims: RefreshTokenClaims | None = None
        user_id: UUID
        family_id: UUID | None

        # Step 1: Resolve the caller from whichever token was presented
        if cmd.refresh_token is not None:
            decoded = self._token_codec.decode_refresh_token(cmd.refresh_token)
            if isinstance(decoded, Failure):
                return decoded
            refresh_claims = decoded.value
            user_id = refresh_claims.user_id
            family_id = refresh_claims.family_id
        else:
            validated = self._token_codec.validate_access_token(cmd.access_token or "")
            if isinstance(validated, Failure):
                return validated
            user_id = validated.value.user_id
            family_id = validated.value.family_id

        now = datetime.now(UTC)

        # Step 2: Revoke
        try:
            if refresh_claims is not None:
                record = await self._session_store.find_by_id(refresh_claims.record_id)
                if record is not None and not self._matches(record, refresh_claims):
                    return _auth_failure(
                        ErrorCode.TOKEN_INVALID, "Invalid refresh token"
                    )

            if cmd.revoke_all_devices:
                revoked = await self._session_store.revoke_all_for_user(
                    user_id, RevocationReason.LOGOUT_ALL_SESSIONS, now
                )
            elif refresh_claims is not None:
                revoked = int(
                    await self._session_store.revoke_if_active(
                        refresh_claims.record_id, RevocationReason.USER_LOGOUT, now
                    )
                )
            elif family_id is not None:
                revoked = await self._session_store.revoke_family(
                    family_id, RevocationReason.USER_LOGOUT, now
                )
            else:
                revoked = 0
        except Exception as e:
            self._logger.error("logout_internal_error", error=e, user_id=str(user_id))
            return _internal_failure()

        # Step 3: Emit SUCCEEDED event
        await self._event_bus.publish(
            UserLogoutSucceeded(
                user_id=user_id,
                all_devices=cmd.revoke_all_devices,
                revoked_count=revoked,
            )
        )
        self._logger.info(
            "logout_succeeded",
            user_id=str(user_id),
            all_devices=cmd.revoke_all_devices,
            revoked_count=revoked,
        )

        return Success(value=LogoutResult(revoked_count=revoked))

    # ------------------------------------------------------------------
    # Session management
    # ------------------------------------------------------------------

    async def revoke_device(
        self, user_id: UUID, device_id: str
    ) -> Result[int, AuthenticationError]:
        """Revoke a user's active records issued to one device.

        Returns:
            Success(number of records revoked).
        """
        try:
            revoked = await self._session_store.revoke_by_device(
                user_id,
                device_id,
                RevocationReason.MANUAL_REVOCATION,
                datetime.now(UTC),
            )
        except Exception as e:
            self._logger.error("revoke_device_internal_error", error=e)
            return _internal_failure()

        await self._event_bus.publish(
            SessionsRevoked(
                user_id=user_id,
                reason=RevocationReason.MANUAL_REVOCATION.value,
                revoked_count=revoked,
                device_id=device_id,
            )
        )
        return Success(value=revoked)

    async def revoke_all_sessions(
        self,
        user_id: UUID,
        reason: RevocationReason = RevocationReason.MANUAL_REVOCATION,
    ) -> Result[int, AuthenticationError]:
        """Revoke every active record of a user (user deletion, admin action).

        Returns:
            Success(number of records revoked).
        """
        try:
            revoked = await self._session_store.revoke_all_for_user(
                user_id, reason, datetime.now(UTC)
            )
        except Exception as e:
            self._logger.error("revoke_all_sessions_internal_error", error=e)
            return _internal_failure()

        await self._event_bus.publish(
            SessionsRevoked(user_id=user_id, reason=reason.value, revoked_count=revoked)
        )
        return Success(value=revoked)

    async def list_active_sessions(
        self, user_id: UUID
    ) -> Result[list[RefreshRecord], AuthenticationError]:
        """Active refresh records of a user, newest first."""
        try:
            records = await self._session_store.find_active_by_user(
                user_id, datetime.now(UTC)
            )
        except Exception as e:
            self._logger.error("list_sessions_internal_error", error=e)
            return _internal_failure()
        return Success(value=records)

    async def get_session_stats(
        self, user_id: UUID
    ) -> Result[SessionStats, AuthenticationError]:
        """Count a user's records by status, device and revocation reason."""
        try:
            records = await self._session_store.find_all_by_user(user_id)
        except Exception as e:
            self._logger.error("session_stats_internal_error", error=e)
            return _internal_failure()

        now = datetime.now(UTC)
        active = [r for r in records if r.is_active(now)]
        revoked = [r for r in records if r.is_revoked]
        expired = [r for r in records if not r.is_revoked and r.is_expired(now)]

        return Success(
            value=SessionStats(
                total=len(records),
                active=len(active),
                expired=len(expired),
                revoked=len(revoked),
                by_device=dict(
                    Counter(r.device.device_name or "Unknown Device" for r in active)
                ),
                by_reason=dict(
                    Counter(
                        r.revoked_reason.value if r.revoked_reason else "unknown"
                        for r in revoked
                    )
                ),
            )
        )

    async def cleanup_expired(
        self, retention: timedelta | None = None
    ) -> Result[int, AuthenticationError]:
        """Delete records that expired more than `retention` ago.

        Args:
            retention: Forensic window; defaults to the configured
                refresh_record_retention_days.

        Returns:
            Success(number of records deleted).

        Raises:
            ValueError: If retention is negative.
        """
        if retention is None:
            retention = self._retention
        if retention < timedelta(0):
            msg = "retention must not be negative"
            raise ValueError(msg)
        cutoff = datetime.now(UTC) - retention
        try:
            deleted = await self._session_store.delete_expired_before(cutoff)
        except Exception as e:
            self._logger.error("refresh_cleanup_internal_error", error=e)
            return _internal_failure()

        self._logger.info("refresh_records_cleaned", deleted_count=deleted)
        return Success(value=deleted)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _issue_pair(
        self,
        *,
        user_id: UUID,
        family_id: UUID,
        device: DeviceInfo,
        scopes: frozenset[str],
        now: datetime,
        parent_id: UUID | None = None,
    ) -> _IssuedPair:
        secret, token_hash = self._token_secrets.generate()
        record = RefreshRecord(
            id=uuid7(),
            user_id=user_id,
            token_hash=token_hash,
            family_id=family_id,
            device=device.to_fingerprint(),
            issued_at=now,
            expires_at=now + self._refresh_ttl,
            parent_id=parent_id,
        )
        access_token = self._token_codec.issue_access_token(
            user_id, scopes=scopes, family_id=family_id
        )
        refresh_token = self._token_codec.issue_refresh_token(
            record_id=record.id,
            family_id=family_id,
            user_id=user_id,
            secret=secret,
            expires_at=record.expires_at,
            scopes=scopes,
        )
        return _IssuedPair(
            record=record, access_token=access_token, refresh_token=refresh_token
        )

    def _matches(self, record: RefreshRecord, claims: RefreshTokenClaims) -> bool:
        return (
            record.family_id == claims.family_id
            and record.user_id == claims.user_id
            and self._token_secrets.verify(claims.secret, record.token_hash)
        )

    async def _handle_reuse(
        self, record: RefreshRecord, device: DeviceInfo, now: datetime
    ) -> Failure[AuthenticationError]:
        revoked = await self._session_store.revoke_family(
            record.family_id, RevocationReason.SECURITY_BREACH, now
        )
        self._logger.critical(
            "refresh_token_reuse_detected",
            user_id=str(record.user_id),
            family_id=str(record.family_id),
            record_id=str(record.id),
            revoked_count=revoked,
            ip_address=device.masked_ip,
        )
        await self._event_bus.publish(
            RefreshTokenReuseDetected(
                user_id=record.user_id,
                family_id=record.family_id,
                record_id=record.id,
                revoked_count=revoked,
                ip_address=device.masked_ip,
            )
        )
        await self._publish_refresh_failed(
            ErrorCode.TOKEN_REUSE_DETECTED, record.user_id
        )
        return _auth_failure(ErrorCode.TOKEN_REUSE_DETECTED, "Invalid refresh token")

    async def _publish_login_failed(self, cmd: LoginUser, code: ErrorCode) -> None:
        self._logger.info("login_failed", reason=code.value)
        await self._event_bus.publish(
            UserLoginFailed(
                identifier=cmd.identifier,
                reason=code.value,
                ip_address=cmd.device.masked_ip,
            )
        )

    async def _publish_refresh_failed(
        self, code: ErrorCode, user_id: UUID | None = None
    ) -> None:
        await self._event_bus.publish(
            TokenRefreshFailed(reason=code.value, user_id=user_id)
        )
