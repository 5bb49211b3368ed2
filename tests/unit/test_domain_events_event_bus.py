"""Unit tests for InMemoryEventBus.

Tests cover:
- Subscribe/publish basic flow
- Multiple handlers for same event
- Handler failure doesn't break others (fail-open)
- No handlers registered (no-op)
- Exact type matching
- Security event failures escalated to error level

Architecture:
- Unit tests with mocked logger
- Tests fail-open behavior (critical requirement)
"""

from unittest.mock import MagicMock

import pytest
from uuid_extensions import uuid7

from authcore.domain.events.auth_events import (
    RefreshTokenReuseDetected,
    UserDeleted,
    UserLoginAttempted,
    UserLogoutSucceeded,
)
from authcore.domain.events.base_event import DomainEvent
from authcore.infrastructure.events.in_memory_event_bus import InMemoryEventBus


@pytest.mark.unit
class TestInMemoryEventBusBasicFlow:
    """Test basic subscribe/publish flow."""

    @pytest.mark.asyncio
    async def test_subscribe_and_publish_single_handler(self):
        # Arrange
        event_bus = InMemoryEventBus(logger=MagicMock())
        received: list[DomainEvent] = []

        async def handler(event: DomainEvent) -> None:
            received.append(event)

        event = UserLoginAttempted(identifier="user@example.com")

        # Act
        event_bus.subscribe(UserLoginAttempted, handler)
        await event_bus.publish(event)

        # Assert
        assert received == [event]

    @pytest.mark.asyncio
    async def test_multiple_handlers_all_execute(self):
        event_bus = InMemoryEventBus(logger=MagicMock())
        calls: list[str] = []

        async def handler_1(event: DomainEvent) -> None:
            calls.append("handler_1")

        async def handler_2(event: DomainEvent) -> None:
            calls.append("handler_2")

        event_bus.subscribe(UserDeleted, handler_1)
        event_bus.subscribe(UserDeleted, handler_2)
        await event_bus.publish(UserDeleted(user_id=uuid7()))

        assert sorted(calls) == ["handler_1", "handler_2"]

    @pytest.mark.asyncio
    async def test_publish_without_handlers_is_noop(self):
        mock_logger = MagicMock()
        event_bus = InMemoryEventBus(logger=mock_logger)

        await event_bus.publish(UserDeleted(user_id=uuid7()))

        mock_logger.debug.assert_not_called()

    @pytest.mark.asyncio
    async def test_only_exact_event_type_is_delivered(self):
        event_bus = InMemoryEventBus(logger=MagicMock())
        received: list[DomainEvent] = []

        async def handler(event: DomainEvent) -> None:
            received.append(event)

        event_bus.subscribe(UserDeleted, handler)
        await event_bus.publish(
            UserLogoutSucceeded(user_id=uuid7(), all_devices=False, revoked_count=1)
        )

        assert received == []


@pytest.mark.unit
class TestInMemoryEventBusFailOpen:
    """Test handler failures never propagate."""

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self):
        # Arrange
        mock_logger = MagicMock()
        event_bus = InMemoryEventBus(logger=mock_logger)
        calls: list[str] = []

        async def failing_handler(event: DomainEvent) -> None:
            raise RuntimeError("audit sink down")

        async def working_handler(event: DomainEvent) -> None:
            calls.append("working")

        event_bus.subscribe(UserDeleted, failing_handler)
        event_bus.subscribe(UserDeleted, working_handler)

        # Act
        await event_bus.publish(UserDeleted(user_id=uuid7()))

        # Assert
        assert calls == ["working"]
        mock_logger.warning.assert_called_once()
        args, kwargs = mock_logger.warning.call_args
        assert args[0] == "event_handler_failed"
        assert kwargs["handler_name"] == "failing_handler"
        assert kwargs["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_security_event_failure_logged_at_error(self):
        mock_logger = MagicMock()
        event_bus = InMemoryEventBus(logger=mock_logger)

        async def failing_handler(event: DomainEvent) -> None:
            raise RuntimeError("alert channel down")

        event_bus.subscribe(RefreshTokenReuseDetected, failing_handler)
        await event_bus.publish(
            RefreshTokenReuseDetected(
                user_id=uuid7(), family_id=uuid7(), record_id=uuid7(), revoked_count=1
            )
        )

        mock_logger.error.assert_called_once()
        mock_logger.warning.assert_not_called()

    @pytest.mark.asyncio
    async def test_bound_method_failure_names_owner(self):
        mock_logger = MagicMock()
        event_bus = InMemoryEventBus(logger=mock_logger)

        class AuditSink:
            async def handle_user_deleted(self, event: DomainEvent) -> None:
                raise ValueError("bad row")

        event_bus.subscribe(UserDeleted, AuditSink().handle_user_deleted)
        await event_bus.publish(UserDeleted(user_id=uuid7()))

        kwargs = mock_logger.warning.call_args.kwargs
        assert kwargs["handler_name"] == "AuditSink.handle_user_deleted"


@pytest.mark.unit
class TestInMemoryEventBusRegistry:
    def test_handler_count(self):
        event_bus = InMemoryEventBus(logger=MagicMock())

        async def handler(event: DomainEvent) -> None:
            return None

        event_bus.subscribe(UserDeleted, handler)
        event_bus.subscribe(UserDeleted, handler)

        assert event_bus.handler_count(UserDeleted) == 2
        assert event_bus.handler_count(UserLoginAttempted) == 0
