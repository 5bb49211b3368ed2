"""Opaque token secret service.

Generates the random secrets behind refresh tokens and password reset
tokens and computes the digests that are persisted in their place.

Token Strategy:
    - 32 random bytes (256 bits), urlsafe base64 encoded
    - SHA-256 hex digest stored; the secret itself is never persisted
    - Deterministic digest so reset tokens can be looked up directly
    - Constant-time digest comparison
"""

import hashlib
import hmac
import secrets

from authcore.core.constants import TOKEN_BYTES


class TokenSecretService:
    """Random secret generation and digest verification.

    Usage:
        service = TokenSecretService()
        secret, digest = service.generate()
        # Persist digest, hand secret to the client once
        service.verify(presented_secret, stored_digest)
    """

    def __init__(self, token_bytes: int = TOKEN_BYTES) -> None:
        """Initialize secret service.

        Args:
            token_bytes: Entropy per secret in bytes (minimum 16 = 128 bits).

        Raises:
            ValueError: If token_bytes is below 16.
        """
        if token_bytes < 16:
            msg = "Token secrets need at least 128 bits of entropy"
            raise ValueError(msg)
        self._token_bytes = token_bytes

    def generate(self) -> tuple[str, str]:
        """Generate a secret and its digest.

        Returns:
            Tuple of (secret, digest).
        """
        secret = secrets.token_urlsafe(self._token_bytes)
        return secret, self.digest(secret)

    def digest(self, secret: str) -> str:
        """SHA-256 hex digest of a secret."""
        return hashlib.sha256(secret.encode("utf-8")).hexdigest()

    def verify(self, secret: str, digest: str) -> bool:
        """Constant-time comparison of a secret against a stored digest."""
        return hmac.compare_digest(self.digest(secret), digest)
