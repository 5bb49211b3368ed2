"""In-memory UserRepository."""

from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from authcore.domain.entities.user import User


class InMemoryUserRepository:
    """Dictionary-backed user store keyed by id, looked up by email."""

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: dict[UUID, User] = {}
        for user in users or []:
            self.add(user)

    def add(self, user: User) -> None:
        """Insert or replace a user (emails are stored lower-case)."""
        self._users[user.id] = replace(user, email=user.email.strip().lower())

    async def find_by_id(self, user_id: UUID) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def find_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email == wanted:
                return replace(user)
        return None

    async def update(self, user: User) -> None:
        if user.id in self._users:
            self._users[user.id] = replace(user)

    async def update_password(self, user_id: UUID, password_hash: str) -> None:
        user = self._users.get(user_id)
        if user is None:
            return
        user.password_hash = password_hash
        user.password_changed_at = datetime.now(UTC)
        user.reset_failed_login()
