"""Centralized constants for internal implementation details.

These are fixed implementation details, NOT environment-specific
configuration. For tunable settings use `authcore.core.config`.

Example:
    >>> from authcore.core.constants import TOKEN_BYTES
    >>> secret = secrets.token_urlsafe(TOKEN_BYTES)
"""

# =============================================================================
# Token and Key Lengths
# =============================================================================

TOKEN_BYTES: int = 32
"""Number of random bytes in refresh and reset secrets (256 bits)."""

MIN_SECRET_KEY_LENGTH: int = 32
"""Minimum JWT signing key length (256 bits for HS256)."""

BCRYPT_ROUNDS_DEFAULT: int = 12
"""Default bcrypt work factor (cost parameter)."""

DEVICE_ID_PREFIX: str = "dev_"
"""Prefix of derived device identifiers."""

DEVICE_ID_HASH_LENGTH: int = 32
"""Number of hex characters of the device hash kept in device identifiers."""


# =============================================================================
# Token Types
# =============================================================================

ACCESS_TOKEN_TYPE: str = "access"
"""Value of the `typ` claim in access tokens."""

REFRESH_TOKEN_TYPE: str = "refresh"
"""Value of the `typ` claim in refresh tokens."""

BEARER_TOKEN_TYPE: str = "bearer"
"""OAuth2 token_type returned with issued token pairs."""


# =============================================================================
# Defaults
# =============================================================================

UNKNOWN_USER_AGENT: str = "Unknown"
"""User agent recorded when the client sends none."""

FALLBACK_IP_ADDRESS: str = "127.0.0.1"
"""IP address recorded when the client IP is missing or rejected."""

GENERIC_RESET_MESSAGE: str = (
    "If an account exists for this email, a password reset link has been sent."
)
"""Uniform password reset response (prevents account enumeration)."""
