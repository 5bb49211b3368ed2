"""Password-based credential verifier.

Looks the user up by email and checks the password hash. Every failure
path costs one hash verification, so response time does not reveal
whether the email exists.
"""

import secrets

from authcore.core.enums import ErrorCode
from authcore.core.errors import AuthenticationError
from authcore.core.result import Failure, Result, Success
from authcore.domain.entities.user import User
from authcore.domain.protocols import PasswordHashingProtocol, UserRepository


def _invalid_credentials() -> Failure[AuthenticationError]:
    return Failure(
        error=AuthenticationError(
            code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid email or password",
        )
    )


class PasswordCredentialVerifier:
    """CredentialVerifierProtocol implementation over UserRepository.

    Usage:
        verifier = PasswordCredentialVerifier(user_repo, password_service)
        result = await verifier.verify("user@example.com", "SecurePass123!")
    """

    def __init__(
        self,
        user_repo: UserRepository,
        password_service: PasswordHashingProtocol,
    ) -> None:
        self._user_repo = user_repo
        self._password_service = password_service
        self._dummy_hash: str | None = None

    async def verify(
        self, identifier: str, secret: str
    ) -> Result[User, AuthenticationError]:
        """Verify email + password.

        Returns:
            Success(User) for an active user with a matching password.
            Failure(INVALID_CREDENTIALS) for unknown emails, wrong passwords
            and inactive accounts alike.
        """
        user = await self._user_repo.find_by_email(identifier)

        if user is None:
            # Burn the same hashing cost as a real check
            self._password_service.verify_password(secret, self._get_dummy_hash())
            return _invalid_credentials()

        if not self._password_service.verify_password(secret, user.password_hash):
            return _invalid_credentials()

        if not user.is_active:
            return _invalid_credentials()

        return Success(value=user)

    def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = self._password_service.hash_password(
                secrets.token_urlsafe(16)
            )
        return self._dummy_hash
