"""Machine-readable error codes for the authentication core.

Categories:
- Validation errors (INVALID_*, PASSWORD_*)
- Credential errors (INVALID_CREDENTIALS, ACCOUNT_LOCKED)
- Token errors (TOKEN_*)
- Password reset errors (INVALID_OR_EXPIRED_TOKEN)
- Internal errors (store or key failures)
"""

from enum import Enum


class ErrorCode(Enum):
    """Error codes carried by every DomainError.

    Codes follow ENTITY_REASON naming convention.
    """

    # Validation errors
    INVALID_EMAIL = "invalid_email"
    INVALID_PASSWORD = "invalid_password"
    PASSWORD_TOO_WEAK = "password_too_weak"
    VALIDATION_FAILED = "validation_failed"

    # Credential errors
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"

    # Token errors
    TOKEN_INVALID = "token_invalid"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_MALFORMED = "token_malformed"
    TOKEN_REUSE_DETECTED = "token_reuse_detected"

    # Password reset errors
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"

    # Resource errors
    USER_NOT_FOUND = "user_not_found"

    # Internal errors (store unavailable, signing key unusable)
    INTERNAL_ERROR = "internal_error"
