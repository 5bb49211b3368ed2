"""Account lockout policy protocol (port).

Consulted before credential verification. A locked identifier short-circuits
login with ACCOUNT_LOCKED.
"""

from typing import Protocol


class LockoutPolicyProtocol(Protocol):
    """Failed-login tracking keyed by login identifier."""

    async def is_locked(self, identifier: str) -> bool:
        """True if login for this identifier is currently blocked."""
        ...

    async def record_failure(self, identifier: str) -> None:
        """Register a failed login attempt."""
        ...

    async def record_success(self, identifier: str) -> None:
        """Clear failure state after a successful login."""
        ...
