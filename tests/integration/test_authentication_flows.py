"""End-to-end authentication flows on in-memory stores and real crypto.

Covers the full token lifecycle through AuthenticationService and
PasswordResetService:
- login → refresh → replay of the rotated token revokes the family
- concurrent refresh of one token has exactly one winner
- logout (single device, all devices) and token limits
- lockout after repeated failures
- password reset round trip, single use and expiry
"""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from freezegun import freeze_time

from authcore.application.commands.auth_commands import (
    LoginUser,
    LogoutUser,
    RefreshTokens,
    RequestPasswordReset,
    ResetPassword,
)
from authcore.core.enums import ErrorCode
from authcore.core.result import Failure, Success
from authcore.domain.enums import RevocationReason
from authcore.domain.events.auth_events import (
    PasswordResetCompleted,
    PasswordResetRequested,
    RefreshTokenReuseDetected,
    UserLoginSucceeded,
)
from tests.conftest import TEST_PASSWORD, create_device

NEW_PASSWORD = "Fresh-Garden-47!"


def login_command(secret: str = TEST_PASSWORD, **overrides) -> LoginUser:
    return LoginUser(
        identifier=overrides.pop("identifier", "user@example.com"),
        secret=secret,
        device=overrides.pop("device", create_device()),
        **overrides,
    )


def collect(event_bus, *event_types) -> list:
    """Subscribe a recorder for the given event types."""
    received = []

    async def record(event):
        received.append(event)

    for event_type in event_types:
        event_bus.subscribe(event_type, record)
    return received


async def active_sessions(session_store, user_id) -> list:
    return await session_store.find_active_by_user(user_id, datetime.now(UTC))


@pytest.mark.integration
class TestLoginAndRefresh:
    @pytest.mark.asyncio
    async def test_login_issues_working_tokens(
        self, auth_service, token_service, user, event_bus
    ):
        # Arrange
        events = collect(event_bus, UserLoginSucceeded)

        # Act
        result = await auth_service.login(login_command(scopes=frozenset({"read"})))

        # Assert
        assert isinstance(result, Success)
        tokens = result.value
        assert tokens.user_id == user.id
        assert tokens.token_type == "bearer"
        assert tokens.expires_in == 900
        claims = token_service.validate_access_token(tokens.access_token).value
        assert claims.user_id == user.id
        assert claims.family_id == tokens.family_id
        assert claims.scopes == frozenset({"read"})
        assert [e.user_id for e in events] == [user.id]

    @pytest.mark.asyncio
    async def test_wrong_password_rejected(self, auth_service):
        result = await auth_service.login(login_command(secret="Wrong-Password-1!"))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_CREDENTIALS

    @pytest.mark.asyncio
    async def test_refresh_rotates_within_family(self, auth_service, session_store):
        login = (await auth_service.login(login_command())).value

        result = await auth_service.refresh(
            RefreshTokens(refresh_token=login.refresh_token, device=create_device())
        )

        assert isinstance(result, Success)
        assert result.value.family_id == login.family_id
        assert result.value.refresh_token != login.refresh_token
        records = await session_store.find_all_by_user(login.user_id)
        assert len(records) == 2
        newest, oldest = records
        assert oldest.revoked_reason == RevocationReason.TOKEN_ROTATION
        assert oldest.replaced_by_id == newest.id
        assert newest.parent_id == oldest.id

    @pytest.mark.asyncio
    async def test_replay_of_rotated_token_revokes_family(
        self, auth_service, session_store, event_bus
    ):
        # Arrange
        reuse_events = collect(event_bus, RefreshTokenReuseDetected)
        login = (await auth_service.login(login_command())).value
        rotated = (
            await auth_service.refresh(RefreshTokens(refresh_token=login.refresh_token))
        ).value

        # Act: attacker replays the original token
        replay = await auth_service.refresh(
            RefreshTokens(refresh_token=login.refresh_token)
        )

        # Assert: replay rejected and the legitimate successor is dead too
        assert isinstance(replay, Failure)
        assert replay.error.code == ErrorCode.TOKEN_REUSE_DETECTED
        assert len(reuse_events) == 1
        assert reuse_events[0].revoked_count == 1

        follow_up = await auth_service.refresh(
            RefreshTokens(refresh_token=rotated.refresh_token)
        )
        assert follow_up.error.code == ErrorCode.TOKEN_REUSE_DETECTED

        active = await active_sessions(session_store, login.user_id)
        assert active == []

    @pytest.mark.asyncio
    async def test_concurrent_refresh_has_single_winner(self, auth_service):
        login = (await auth_service.login(login_command())).value
        command = RefreshTokens(refresh_token=login.refresh_token)

        results = await asyncio.gather(
            auth_service.refresh(command), auth_service.refresh(command)
        )

        successes = [r for r in results if isinstance(r, Success)]
        failures = [r for r in results if isinstance(r, Failure)]
        assert len(successes) == 1
        assert failures[0].error.code == ErrorCode.TOKEN_REUSE_DETECTED

    @pytest.mark.asyncio
    async def test_other_families_survive_reuse(self, auth_service, session_store):
        laptop = (await auth_service.login(login_command())).value
        phone = (
            await auth_service.login(
                login_command(device=create_device(user_agent="PhoneAgent/1.0"))
            )
        ).value
        await auth_service.refresh(RefreshTokens(refresh_token=laptop.refresh_token))

        await auth_service.refresh(RefreshTokens(refresh_token=laptop.refresh_token))

        result = await auth_service.refresh(
            RefreshTokens(refresh_token=phone.refresh_token)
        )
        assert isinstance(result, Success)

    @pytest.mark.asyncio
    async def test_expired_refresh_token(self, auth_service):
        with freeze_time("2026-05-01 09:00:00") as frozen:
            login = (await auth_service.login(login_command())).value
            frozen.tick(timedelta(days=30, seconds=1))

            result = await auth_service.refresh(
                RefreshTokens(refresh_token=login.refresh_token)
            )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TOKEN_EXPIRED

    @pytest.mark.asyncio
    async def test_forged_secret_rejected_without_revocation(
        self, auth_service, token_service, session_store
    ):
        login = (await auth_service.login(login_command())).value
        claims = token_service.decode_refresh_token(login.refresh_token).value
        forged = token_service.issue_refresh_token(
            record_id=claims.record_id,
            family_id=claims.family_id,
            user_id=claims.user_id,
            secret="guessed-secret",
            expires_at=login.refresh_expires_at,
        )

        result = await auth_service.refresh(RefreshTokens(refresh_token=forged))

        assert result.error.code == ErrorCode.TOKEN_INVALID
        record = await session_store.find_by_id(claims.record_id)
        assert record.is_revoked is False


@pytest.mark.integration
class TestLogoutAndLimits:
    @pytest.mark.asyncio
    async def test_logout_revokes_presented_token(self, auth_service):
        login = (await auth_service.login(login_command())).value

        logout = await auth_service.logout(
            LogoutUser(refresh_token=login.refresh_token)
        )

        assert logout.value.revoked_count == 1
        refresh = await auth_service.refresh(
            RefreshTokens(refresh_token=login.refresh_token)
        )
        assert isinstance(refresh, Failure)

    @pytest.mark.asyncio
    async def test_list_active_sessions_excludes_logged_out(self, auth_service, user):
        first = (await auth_service.login(login_command())).value
        second = (await auth_service.login(login_command())).value
        await auth_service.logout(LogoutUser(refresh_token=first.refresh_token))

        result = await auth_service.list_active_sessions(user.id)

        assert isinstance(result, Success)
        assert [r.family_id for r in result.value] == [second.family_id]

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, auth_service):
        login = (await auth_service.login(login_command())).value
        await auth_service.logout(LogoutUser(refresh_token=login.refresh_token))

        again = await auth_service.logout(LogoutUser(refresh_token=login.refresh_token))

        assert isinstance(again, Success)
        assert again.value.revoked_count == 0

    @pytest.mark.asyncio
    async def test_logout_with_access_token_revokes_family(
        self, auth_service, session_store
    ):
        first = (await auth_service.login(login_command())).value
        second = (await auth_service.login(login_command())).value

        logout = await auth_service.logout(LogoutUser(access_token=first.access_token))

        assert logout.value.revoked_count == 1
        active = await active_sessions(session_store, first.user_id)
        assert [r.family_id for r in active] == [second.family_id]

    @pytest.mark.asyncio
    async def test_logout_all_devices(self, auth_service, session_store):
        logins = [(await auth_service.login(login_command())).value for _ in range(3)]

        logout = await auth_service.logout(
            LogoutUser(refresh_token=logins[0].refresh_token, revoke_all_devices=True)
        )

        assert logout.value.revoked_count == 3
        assert await active_sessions(session_store, logins[0].user_id) == []

    @pytest.mark.asyncio
    async def test_token_limit_revokes_oldest(self, auth_service, session_store):
        logins = [(await auth_service.login(login_command())).value for _ in range(6)]

        active = await active_sessions(session_store, logins[0].user_id)

        assert len(active) == 5
        assert logins[0].family_id not in {r.family_id for r in active}
        stats = (await auth_service.get_session_stats(logins[0].user_id)).value
        assert stats.by_reason == {RevocationReason.TOKEN_LIMIT.value: 1}

    @pytest.mark.asyncio
    async def test_lockout_after_failed_attempts(self, auth_service):
        for _ in range(3):
            await auth_service.login(login_command(secret="Wrong-Password-1!"))

        result = await auth_service.login(login_command())

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.ACCOUNT_LOCKED


@pytest.mark.integration
class TestPasswordResetFlow:
    @pytest.mark.asyncio
    async def test_reset_round_trip(
        self, auth_service, reset_service, session_store, event_bus
    ):
        # Arrange
        events = collect(event_bus, PasswordResetRequested, PasswordResetCompleted)
        login = (await auth_service.login(login_command())).value
        request = (
            await reset_service.request_reset(
                RequestPasswordReset(email="user@example.com", client_ip="203.0.113.7")
            )
        ).value

        # Act
        result = await reset_service.reset_password(
            ResetPassword(token=request.plain_token, new_password=NEW_PASSWORD)
        )

        # Assert
        assert isinstance(result, Success)
        assert result.value.revoked_sessions == 1
        assert [type(e) for e in events] == [
            PasswordResetRequested,
            PasswordResetCompleted,
        ]
        assert events[0].ip_address == "203.0.113.xxx"

        refresh = await auth_service.refresh(
            RefreshTokens(refresh_token=login.refresh_token)
        )
        assert isinstance(refresh, Failure)
        records = await session_store.find_all_by_user(login.user_id)
        assert records[0].revoked_reason == RevocationReason.PASSWORD_RESET

        old_password = await auth_service.login(login_command())
        assert old_password.error.code == ErrorCode.INVALID_CREDENTIALS
        new_password = await auth_service.login(login_command(secret=NEW_PASSWORD))
        assert isinstance(new_password, Success)

    @pytest.mark.asyncio
    async def test_reset_token_is_single_use(self, reset_service):
        request = (
            await reset_service.request_reset(
                RequestPasswordReset(email="user@example.com")
            )
        ).value
        command = ResetPassword(token=request.plain_token, new_password=NEW_PASSWORD)
        await reset_service.reset_password(command)

        again = await reset_service.reset_password(command)

        assert isinstance(again, Failure)
        assert again.error.code == ErrorCode.INVALID_OR_EXPIRED_TOKEN

    @pytest.mark.asyncio
    async def test_new_request_invalidates_previous_token(self, reset_service):
        first = (
            await reset_service.request_reset(
                RequestPasswordReset(email="user@example.com")
            )
        ).value
        await reset_service.request_reset(
            RequestPasswordReset(email="user@example.com")
        )

        result = await reset_service.reset_password(
            ResetPassword(token=first.plain_token, new_password=NEW_PASSWORD)
        )

        assert result.error.code == ErrorCode.INVALID_OR_EXPIRED_TOKEN

    @pytest.mark.asyncio
    async def test_reset_token_expires_after_an_hour(self, reset_service):
        with freeze_time("2026-05-01 09:00:00") as frozen:
            request = (
                await reset_service.request_reset(
                    RequestPasswordReset(email="user@example.com")
                )
            ).value
            frozen.tick(timedelta(minutes=61))

            result = await reset_service.reset_password(
                ResetPassword(token=request.plain_token, new_password=NEW_PASSWORD)
            )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_OR_EXPIRED_TOKEN

    @pytest.mark.asyncio
    async def test_weak_password_keeps_token_usable(self, reset_service):
        request = (
            await reset_service.request_reset(
                RequestPasswordReset(email="user@example.com")
            )
        ).value

        weak = await reset_service.reset_password(
            ResetPassword(token=request.plain_token, new_password="password")
        )
        strong = await reset_service.reset_password(
            ResetPassword(token=request.plain_token, new_password=NEW_PASSWORD)
        )

        assert weak.error.code == ErrorCode.PASSWORD_TOO_WEAK
        assert isinstance(strong, Success)

    @pytest.mark.asyncio
    async def test_unknown_email_response_matches_known_email(
        self, reset_service, event_bus
    ):
        events = collect(event_bus, PasswordResetRequested)

        unknown = await reset_service.request_reset(
            RequestPasswordReset(email="nobody@example.com")
        )
        known = await reset_service.request_reset(
            RequestPasswordReset(email="user@example.com")
        )

        assert isinstance(unknown, Success)
        assert unknown.value.message == known.value.message
        assert unknown.value.plain_token is None
        assert len(events) == 1
    @pytest.mark.asyncio
    async def test_failed_password_write_leaves_token_retryable(
        self, auth_service, reset_service, user_repo
    ):
        request = (
            await reset_service.request_reset(
                RequestPasswordReset(email="user@example.com")
            )
        ).value
        command = ResetPassword(token=request.plain_token, new_password=NEW_PASSWORD)

        with patch.object(
            user_repo, "update_password", side_effect=ConnectionError("db down")
        ):
            failed = await reset_service.reset_password(command)
        retried = await reset_service.reset_password(command)

        assert failed.error.code == ErrorCode.INTERNAL_ERROR
        assert isinstance(retried, Success)
        new_password = await auth_service.login(login_command(secret=NEW_PASSWORD))
        assert isinstance(new_password, Success)
