"""Audit action types for security-relevant authentication activity.

Usage:
    from authcore.domain.enums import AuditAction

    await audit.record(
        action=AuditAction.USER_LOGIN_SUCCESS,
        user_id=user_id,
        resource_type="session",
    )
"""

from enum import Enum


class AuditAction(str, Enum):
    """Auditable authentication events.

    String Enum:
        Inherits from str for easy serialization. Values are snake_case.
    """

    # Login
    USER_LOGIN_SUCCESS = "user_login_success"
    USER_LOGIN_FAILED = "user_login_failed"

    # Logout
    USER_LOGOUT = "user_logout"
    SESSION_REVOKED = "session_revoked"

    # Token lifecycle
    TOKEN_REFRESHED = "token_refreshed"
    TOKEN_REUSE_DETECTED = "token_reuse_detected"

    # Password
    PASSWORD_RESET_REQUESTED = "password_reset_requested"
    PASSWORD_RESET_COMPLETED = "password_reset_completed"
    PASSWORD_RESET_FAILED = "password_reset_failed"
