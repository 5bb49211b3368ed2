"""Credential verifier protocol (port).

Checks an identifier and secret pair against the user store. The login
flow depends only on this protocol, so alternative verifiers (LDAP, SSO
bridges) can be plugged in without touching the authentication service.
"""

from typing import Protocol

from authcore.core.errors import AuthenticationError
from authcore.core.result import Result
from authcore.domain.entities.user import User


class CredentialVerifierProtocol(Protocol):
    """Identifier + secret verification."""

    async def verify(
        self, identifier: str, secret: str
    ) -> Result[User, AuthenticationError]:
        """Verify credentials.

        Args:
            identifier: Login identifier (email address).
            secret: Plaintext password.

        Returns:
            Success(User) when the credentials match an active user.
            Failure(AuthenticationError) with INVALID_CREDENTIALS otherwise.
            Implementations must not reveal which part was wrong.
        """
        ...
