"""Event handlers subscribed to the event bus at startup."""

from authcore.infrastructure.events.handlers.audit_event_handler import (
    AuditEventHandler,
)
from authcore.infrastructure.events.handlers.logging_event_handler import (
    LoggingEventHandler,
)
from authcore.infrastructure.events.handlers.session_event_handler import (
    SessionEventHandler,
)

__all__ = ["AuditEventHandler", "LoggingEventHandler", "SessionEventHandler"]
