"""User domain entity as seen by the authentication core.

The user store owns user records; this core only reads them, tracks
failed-login lockout state and replaces the password hash on reset.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID


@dataclass
class User:
    """User account with lockout business rules.

    Business Rules:
        - Account locks after `max_attempts` failed logins (default 5)
        - Lockout lasts `lockout_minutes` (default 15)
        - Failed login counter resets on successful login
        - Inactive users cannot login

    Attributes:
        id: Unique user identifier.
        email: User email address (lookup identifier).
        password_hash: Hashed password (never plaintext).
        is_active: Account active status.
        failed_login_attempts: Counter for consecutive failed logins.
        locked_until: Timestamp until which the account is locked.
        password_changed_at: Last time the password hash was replaced.

    Example:
        >>> user = User(id=uuid7(), email="user@example.com", password_hash="$2b$...")
        >>> user.is_locked()
        False
        >>> for _ in range(5):
        ...     user.increment_failed_login()
        >>> user.is_locked()
        True
    """

    id: UUID
    email: str
    password_hash: str
    is_active: bool = True
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    password_changed_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def is_locked(self) -> bool:
        """Check if the account is currently locked.

        Returns:
            bool: True if locked_until is in the future.
        """
        if self.locked_until is None:
            return False
        return datetime.now(UTC) < self.locked_until

    def increment_failed_login(
        self, max_attempts: int = 5, lockout_minutes: int = 15
    ) -> None:
        """Increment failed login counter, locking the account at the threshold.

        Side Effects:
            - Increments failed_login_attempts by 1
            - Sets locked_until when attempts reach max_attempts
        """
        self.failed_login_attempts += 1

        if self.failed_login_attempts >= max_attempts:
            self.locked_until = datetime.now(UTC) + timedelta(minutes=lockout_minutes)

    def reset_failed_login(self) -> None:
        """Clear lockout state after a successful login."""
        self.failed_login_attempts = 0
        self.locked_until = None

    def change_password(self, password_hash: str) -> None:
        """Replace the password hash and clear any lockout.

        Args:
            password_hash: New hashed password.
        """
        self.password_hash = password_hash
        self.password_changed_at = datetime.now(UTC)
        self.reset_failed_login()
