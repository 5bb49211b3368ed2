"""Event bus port.

Services publish auth events (login, rotation, reuse, logout, reset) after
the state change they describe has been committed. Delivery is fail-open:
a handler error is the bus's to log and never reaches the publishing
service.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from authcore.domain.events.base_event import DomainEvent

EventHandler = Callable[[Any], Awaitable[None]]


class EventBusProtocol(Protocol):
    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register `handler` for exactly `event_type` (subclasses excluded)."""
        ...

    async def publish(self, event: DomainEvent) -> None: ...
