"""Password reset service: token issuance and single-use consumption.

Flow:
    request_reset: email → (user exists?) → reset record (digest only)
                   → plaintext token returned once for out-of-band delivery
    reset_password: token → record lookup → policy check → atomic consume
                    → password hash replaced → all refresh records revoked

Security:
    - Same response shape and the same token work whether or not the
      email belongs to an account (no enumeration)
    - Missing, consumed and expired tokens all fail with
      INVALID_OR_EXPIRED_TOKEN
    - A token is consumed at most once, even under concurrent use
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID

from uuid_extensions import uuid7

from authcore.application.commands.auth_commands import (
    RequestPasswordReset,
    ResetPassword,
)
from authcore.core.constants import GENERIC_RESET_MESSAGE
from authcore.core.enums import ErrorCode
from authcore.core.errors import AuthenticationError, DomainError
from authcore.core.result import Failure, Result, Success
from authcore.domain.enums import RevocationReason
from authcore.domain.events.auth_events import (
    PasswordResetCompleted,
    PasswordResetFailed,
    PasswordResetRequested,
)
from authcore.domain.protocols import (
    EventBusProtocol,
    LoggerProtocol,
    PasswordHashingProtocol,
    PasswordResetRecord,
    PasswordResetRepository,
    SessionStore,
    TokenSecretProtocol,
    UserRepository,
)
from authcore.domain.validators import PasswordPolicy
from authcore.domain.value_objects import DeviceInfo


@dataclass(frozen=True, kw_only=True)
class ResetRequestResult:
    """Response to a reset request.

    Attributes:
        message: Uniform message shown to the requester.
        plain_token: Reset token for delivery (None for unknown emails).
            Never persisted and never logged.
        expires_at: Token expiry (None for unknown emails).
    """

    message: str = GENERIC_RESET_MESSAGE
    plain_token: str | None = field(default=None, repr=False)
    expires_at: datetime | None = None


@dataclass(frozen=True, kw_only=True)
class ResetPasswordResult:
    """Outcome of a completed password reset."""

    user_id: UUID
    revoked_sessions: int


def _invalid_token() -> Failure[DomainError]:
    return Failure(
        error=AuthenticationError(
            code=ErrorCode.INVALID_OR_EXPIRED_TOKEN,
            message="Invalid or expired reset token",
        )
    )


def _internal_failure() -> Failure[DomainError]:
    return Failure(
        error=AuthenticationError(
            code=ErrorCode.INTERNAL_ERROR,
            message="Password reset temporarily unavailable",
        )
    )


class PasswordResetService:
    """Issues and consumes password reset tokens.

    Usage:
        service = PasswordResetService(
            user_repo=user_repo,
            reset_repo=reset_repo,
            session_store=session_store,
            password_service=password_service,
            password_policy=PasswordPolicy(),
            token_secrets=TokenSecretService(),
            event_bus=event_bus,
            logger=logger,
        )
        result = await service.request_reset(RequestPasswordReset(email=email))
    """

    def __init__(
        self,
        *,
        user_repo: UserRepository,
        reset_repo: PasswordResetRepository,
        session_store: SessionStore,
        password_service: PasswordHashingProtocol,
        password_policy: PasswordPolicy,
        token_secrets: TokenSecretProtocol,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        reset_token_expire_minutes: int = 60,
        invalidate_previous: bool = True,
    ) -> None:
        if reset_token_expire_minutes <= 0:
            msg = "reset_token_expire_minutes must be positive"
            raise ValueError(msg)

        self._user_repo = user_repo
        self._reset_repo = reset_repo
        self._session_store = session_store
        self._password_service = password_service
        self._password_policy = password_policy
        self._token_secrets = token_secrets
        self._event_bus = event_bus
        self._logger = logger
        self._expiration = timedelta(minutes=reset_token_expire_minutes)
        self._invalidate_previous = invalidate_previous

    async def request_reset(
        self, cmd: RequestPasswordReset
    ) -> Result[ResetRequestResult, DomainError]:
        """Issue a reset token if the email belongs to an active account.

        Returns:
            Success(ResetRequestResult) in every non-internal case. The
            plain_token is only set when a record was stored.
            Failure(INTERNAL_ERROR) on store failure.
        """
        masked_ip = (
            DeviceInfo(ip_address=cmd.client_ip).masked_ip if cmd.client_ip else None
        )

        # Step 1: Generate token up front so both branches do the same work
        plain_token, token_hash = self._token_secrets.generate()
        now = datetime.now(UTC)
        expires_at = now + self._expiration

        try:
            # Step 2: Resolve account
            user = await self._user_repo.find_by_email(cmd.email)
            if user is None or not user.is_active:
                # Equalize the store round trip of the real branch
                await self._reset_repo.find_by_token_hash(token_hash)
                self._logger.info(
                    "password_reset_requested_unknown", ip_address=masked_ip
                )
                return Success(value=ResetRequestResult())

            # Step 3: Invalidate older tokens, store the new digest
            if self._invalidate_previous:
                await self._reset_repo.delete_unconsumed_for_user(user.id)

            record = await self._reset_repo.save(
                PasswordResetRecord(
                    id=uuid7(),
                    user_id=user.id,
                    token_hash=token_hash,
                    expires_at=expires_at,
                    created_at=now,
                    ip_address=cmd.client_ip,
                    user_agent=cmd.user_agent,
                )
            )
        except Exception as e:
            self._logger.error("password_reset_request_internal_error", error=e)
            return _internal_failure()

        # Step 4: Emit event (token itself is never published)
        await self._event_bus.publish(
            PasswordResetRequested(
                user_id=user.id, record_id=record.id, ip_address=masked_ip
            )
        )
        self._logger.info(
            "password_reset_requested",
            user_id=str(user.id),
            expires_at=expires_at.isoformat(),
        )

        return Success(
            value=ResetRequestResult(plain_token=plain_token, expires_at=expires_at)
        )

    async def reset_password(
        self, cmd: ResetPassword
    ) -> Result[ResetPasswordResult, DomainError]:
        """Consume a reset token and replace the user's password.

        Returns:
            Success(ResetPasswordResult).
            Failure with:
                - INVALID_OR_EXPIRED_TOKEN (AuthenticationError): unknown,
                  consumed or expired token, or a lost consumption race
                - PASSWORD_TOO_WEAK (ValidationError): policy violations
                  listed in details["violations"]
                - INTERNAL_ERROR: store failure. A token consumed before
                  the failure is released so the caller can retry with it
        """
        token_hash = self._token_secrets.digest(cmd.token)
        consumed: PasswordResetRecord | None = None
        now = datetime.now(UTC)

        try:
            # Step 1: Resolve token
            record = await self._reset_repo.find_by_token_hash(token_hash)
            if record is None or not record.is_usable(now):
                await self._publish_failed(ErrorCode.INVALID_OR_EXPIRED_TOKEN)
                return _invalid_token()

            # Step 2: Password policy
            policy_result = self._password_policy.validate(cmd.new_password)
            if isinstance(policy_result, Failure):
                await self._publish_failed(
                    ErrorCode.PASSWORD_TOO_WEAK, record.user_id
                )
                return policy_result

            user = await self._user_repo.find_by_id(record.user_id)
            if user is None:
                await self._publish_failed(ErrorCode.INVALID_OR_EXPIRED_TOKEN)
                return _invalid_token()

            # Step 3: Single-use consumption
            if not await self._reset_repo.consume_if_unused(record.id, now):
                self._logger.warning(
                    "password_reset_token_race_lost", user_id=str(user.id)
                )
                await self._publish_failed(
                    ErrorCode.INVALID_OR_EXPIRED_TOKEN, user.id
                )
                return _invalid_token()
            consumed = record

            # Step 4: Replace password
            password_hash = self._password_service.hash_password(cmd.new_password)
            await self._user_repo.update_password(user.id, password_hash)

            # Step 5: Force re-login everywhere
            revoked = await self._session_store.revoke_all_for_user(
                user.id, RevocationReason.PASSWORD_RESET, now
            )
        except Exception as e:
            self._logger.error("password_reset_internal_error", error=e)
            if consumed is not None:
                await self._release(consumed, now)
            return _internal_failure()

        # Step 6: Emit SUCCEEDED event
        await self._event_bus.publish(
            PasswordResetCompleted(user_id=user.id, revoked_sessions=revoked)
        )
        self._logger.info(
            "password_reset_completed", user_id=str(user.id), revoked_sessions=revoked
        )

        return Success(
            value=ResetPasswordResult(user_id=user.id, revoked_sessions=revoked)
        )

    async def cleanup_expired(self) -> Result[int, DomainError]:
        """Delete reset records past their expiry."""
        try:
            deleted = await self._reset_repo.delete_expired_before(datetime.now(UTC))
        except Exception as e:
            self._logger.error("password_reset_cleanup_internal_error", error=e)
            return _internal_failure()

        self._logger.info("password_reset_records_cleaned", deleted_count=deleted)
        return Success(value=deleted)

    async def _release(
        self, record: PasswordResetRecord, consumed_at: datetime
    ) -> None:
        """Make a consumed token usable again after a failed password write."""
        try:
            released = await self._reset_repo.release_if_consumed(
                record.id, consumed_at
            )
        except Exception as e:
            self._logger.error(
                "password_reset_token_release_failed",
                error=e,
                user_id=str(record.user_id),
            )
            return
        self._logger.warning(
            "password_reset_token_released",
            user_id=str(record.user_id),
            released=released,
        )

    async def _publish_failed(
        self, code: ErrorCode, user_id: UUID | None = None
    ) -> None:
        await self._event_bus.publish(
            PasswordResetFailed(reason=code.value, user_id=user_id)
        )
