"""Failed-login lockout policy backed by the user store.

Business Rules:
    - After `max_attempts` consecutive failures the account is locked
      for `lockout_minutes`
    - A successful login clears the counter
    - Unknown identifiers are never reported as locked
"""

from authcore.domain.protocols import UserRepository


class UserLockoutPolicy:
    """LockoutPolicyProtocol implementation using User lockout fields."""

    def __init__(
        self,
        user_repo: UserRepository,
        *,
        max_attempts: int = 5,
        lockout_minutes: int = 15,
    ) -> None:
        self._user_repo = user_repo
        self._max_attempts = max_attempts
        self._lockout_minutes = lockout_minutes

    async def is_locked(self, identifier: str) -> bool:
        user = await self._user_repo.find_by_email(identifier)
        return user is not None and user.is_locked()

    async def record_failure(self, identifier: str) -> None:
        user = await self._user_repo.find_by_email(identifier)
        if user is None:
            return
        user.increment_failed_login(
            max_attempts=self._max_attempts,
            lockout_minutes=self._lockout_minutes,
        )
        await self._user_repo.update(user)

    async def record_success(self, identifier: str) -> None:
        user = await self._user_repo.find_by_email(identifier)
        if user is None:
            return
        if user.failed_login_attempts == 0 and user.locked_until is None:
            return
        user.reset_failed_login()
        await self._user_repo.update(user)
