"""Reasons recorded when a refresh record is revoked.

The reason is stored alongside `revoked_at` for forensics and for the
per-user session statistics.
"""

from enum import Enum


class RevocationReason(str, Enum):
    """Why a refresh record stopped being usable."""

    MANUAL_REVOCATION = "manual_revocation"
    USER_LOGOUT = "user_logout"
    LOGOUT_ALL_SESSIONS = "logout_all_sessions"
    SECURITY_BREACH = "security_breach"
    TOKEN_ROTATION = "token_rotation"
    TOKEN_LIMIT = "token_limit"
    PASSWORD_RESET = "password_reset"
    USER_DELETED = "user_deleted"
    EXPIRED = "expired"
