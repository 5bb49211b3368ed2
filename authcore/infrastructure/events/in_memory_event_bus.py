"""In-memory event bus for auth events.

Handlers for one event run concurrently and fail open: a failing audit or
logging handler never fails the login, refresh or reset that published the
event. Failures are logged at warning level, except for security events
(refresh token reuse by default), whose handler failures are logged at
error level because a lost reuse alert needs operator attention.

Usage:
    >>> bus = InMemoryEventBus(logger=logger)
    >>> bus.subscribe(UserLoginSucceeded, audit_handler.handle_user_login_succeeded)
    >>> await bus.publish(UserLoginSucceeded(user_id=user_id, family_id=family_id))
"""

import asyncio
from collections import defaultdict
from collections.abc import Iterable

from authcore.domain.events.auth_events import RefreshTokenReuseDetected
from authcore.domain.events.base_event import DomainEvent
from authcore.domain.protocols.event_bus_protocol import EventHandler
from authcore.domain.protocols.logger_protocol import LoggerProtocol

DEFAULT_SECURITY_EVENTS: frozenset[type[DomainEvent]] = frozenset(
    {RefreshTokenReuseDetected}
)


def _handler_name(handler: EventHandler) -> str:
    name = getattr(handler, "__name__", repr(handler))
    owner = getattr(handler, "__self__", None)
    return f"{type(owner).__name__}.{name}" if owner is not None else name


class InMemoryEventBus:
    """Single-process EventBusProtocol implementation.

    Delivery is by exact event type (no subclass matching) and duplicate
    subscriptions are delivered twice. NOT thread-safe.
    """

    def __init__(
        self,
        logger: LoggerProtocol,
        security_events: Iterable[type[DomainEvent]] = DEFAULT_SECURITY_EVENTS,
    ) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)
        self._security_events = frozenset(security_events)
        self._logger = logger

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def handler_count(self, event_type: type[DomainEvent]) -> int:
        """Number of handlers subscribed to an event type."""
        return len(self._handlers.get(event_type, ()))

    async def publish(self, event: DomainEvent) -> None:
        """Run every handler for the event's type; never raises."""
        event_type = type(event)
        handlers = list(self._handlers.get(event_type, ()))
        if not handlers:
            return

        self._logger.debug(
            "event_publishing",
            event_type=event_type.__name__,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        outcomes = await asyncio.gather(
            *(handler(event) for handler in handlers), return_exceptions=True
        )

        log = (
            self._logger.error
            if event_type in self._security_events
            else self._logger.warning
        )
        for handler, outcome in zip(handlers, outcomes, strict=True):
            if isinstance(outcome, Exception):
                log(
                    "event_handler_failed",
                    event_type=event_type.__name__,
                    event_id=str(event.event_id),
                    handler_name=_handler_name(handler),
                    error_type=type(outcome).__name__,
                    error_message=str(outcome),
                )
