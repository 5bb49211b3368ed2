"""Protocol for opaque random secrets stored as digests.

Refresh secrets and password reset tokens share the same treatment: a
high-entropy random string is handed to the client once and only its
digest is persisted.
"""

from typing import Protocol


class TokenSecretProtocol(Protocol):
    """Random secret generation and digest verification."""

    def generate(self) -> tuple[str, str]:
        """Generate a secret and its digest.

        Returns:
            Tuple of (plain_secret, digest).
        """
        ...

    def digest(self, secret: str) -> str:
        """Deterministic digest of a secret (used for lookups)."""
        ...

    def verify(self, secret: str, digest: str) -> bool:
        """Constant-time check of a secret against a stored digest."""
        ...
