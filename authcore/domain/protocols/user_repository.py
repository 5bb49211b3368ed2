"""UserRepository protocol (port) for the user store.

The authentication core never creates users. It reads them for credential
verification and lockout, and replaces password hashes on reset.
"""

from typing import Protocol
from uuid import UUID

from authcore.domain.entities.user import User


class UserRepository(Protocol):
    """User persistence operations needed by the authentication core.

    Implementations:
        - SqlAlchemyUserRepository: authcore/infrastructure/persistence/repositories/
        - InMemoryUserRepository: authcore/infrastructure/persistence/memory/
    """

    async def find_by_id(self, user_id: UUID) -> User | None:
        """Find user by ID."""
        ...

    async def find_by_email(self, email: str) -> User | None:
        """Find user by email address (case-insensitive).

        Args:
            email: Email address to look up.

        Returns:
            User if found, None otherwise.
        """
        ...

    async def update(self, user: User) -> None:
        """Persist changes to lockout state and password fields.

        Args:
            user: User entity with updated fields.
        """
        ...

    async def update_password(self, user_id: UUID, password_hash: str) -> None:
        """Replace a user's password hash.

        Args:
            user_id: User identifier.
            password_hash: New hashed password.
        """
        ...
