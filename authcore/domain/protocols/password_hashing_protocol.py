"""Password hashing port.

Used by the credential verifier on login and by the password reset service
when a new password is set. BcryptPasswordService is the production adapter.
"""

from typing import Protocol


class PasswordHashingProtocol(Protocol):
    """One-way salted hashing of user passwords."""

    def hash_password(self, password: str) -> str:
        """Return a salted hash; two calls with the same input differ."""
        ...

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Check a candidate password against a stored hash.

        Must not raise: a malformed or foreign hash is reported as False so
        a corrupted users row reads as a failed login, not a server error.
        """
        ...
