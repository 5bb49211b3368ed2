"""In-memory persistence adapters (tests and single-process deployments)."""

from authcore.infrastructure.persistence.memory.password_reset_repository import (
    InMemoryPasswordResetRepository,
)
from authcore.infrastructure.persistence.memory.session_store import (
    InMemorySessionStore,
)
from authcore.infrastructure.persistence.memory.user_repository import (
    InMemoryUserRepository,
)

__all__ = [
    "InMemoryPasswordResetRepository",
    "InMemorySessionStore",
    "InMemoryUserRepository",
]
