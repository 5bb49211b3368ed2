"""Bcrypt adapter for PasswordHashingProtocol.

Hashes are stored in the users table and compared on every login and
password reset. bcrypt reads at most 72 bytes of input, so the encoded
password is cut to that length before hashing and before checking; current
bcrypt releases raise on longer input instead of truncating it themselves.
"""

import bcrypt

from authcore.core.constants import BCRYPT_ROUNDS_DEFAULT

MIN_COST_FACTOR = 10
MAX_COST_FACTOR = 20
_MAX_INPUT_BYTES = 72


def _to_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_MAX_INPUT_BYTES]


def _cost_of(password_hash: str) -> int | None:
    # $2b$<cost>$<22 char salt><31 char digest>
    parts = password_hash.split("$")
    if len(parts) != 4 or not parts[2].isdigit():
        return None
    return int(parts[2])


class BcryptPasswordService:
    """Salted bcrypt hashing with a fixed cost factor.

    Usage:
        passwords = BcryptPasswordService(cost_factor=settings.bcrypt_rounds)
        user.password_hash = passwords.hash_password(command.new_password)
        if not passwords.verify_password(command.secret, user.password_hash):
            ...
    """

    def __init__(self, cost_factor: int = BCRYPT_ROUNDS_DEFAULT) -> None:
        """
        Raises:
            ValueError: If cost_factor is outside MIN_COST_FACTOR..MAX_COST_FACTOR.
        """
        if not MIN_COST_FACTOR <= cost_factor <= MAX_COST_FACTOR:
            raise ValueError(
                f"bcrypt cost factor must be between {MIN_COST_FACTOR} and "
                f"{MAX_COST_FACTOR}, got {cost_factor}"
            )
        self._cost_factor = cost_factor

    @property
    def cost_factor(self) -> int:
        return self._cost_factor

    def hash_password(self, password: str) -> str:
        """Return a 60 character `$2b$<cost>$...` hash with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self._cost_factor)
        return bcrypt.hashpw(_to_bytes(password), salt).decode("ascii")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Constant-time check; a malformed hash counts as a mismatch."""
        try:
            return bcrypt.checkpw(_to_bytes(password), password_hash.encode("ascii"))
        except (ValueError, AttributeError):
            return False

    def needs_rehash(self, password_hash: str) -> bool:
        """True if the hash is not bcrypt or used a different cost factor."""
        return _cost_of(password_hash) != self._cost_factor
