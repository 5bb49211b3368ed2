"""SQLAlchemy repository implementations."""

from authcore.infrastructure.persistence.repositories.password_reset_repository import (
    SqlAlchemyPasswordResetRepository,
)
from authcore.infrastructure.persistence.repositories.session_store import (
    SqlAlchemySessionStore,
)
from authcore.infrastructure.persistence.repositories.user_repository import (
    SqlAlchemyUserRepository,
)

__all__ = [
    "SqlAlchemyPasswordResetRepository",
    "SqlAlchemySessionStore",
    "SqlAlchemyUserRepository",
]
