"""Application services."""

from authcore.application.services.authentication_service import (
    AuthenticationService,
    LoginResult,
    LogoutResult,
    RefreshResult,
    SessionStats,
)
from authcore.application.services.credential_verifier import (
    PasswordCredentialVerifier,
)
from authcore.application.services.lockout_policy import UserLockoutPolicy
from authcore.application.services.password_reset_service import (
    PasswordResetService,
    ResetPasswordResult,
    ResetRequestResult,
)

__all__ = [
    "AuthenticationService",
    "LoginResult",
    "LogoutResult",
    "PasswordCredentialVerifier",
    "PasswordResetService",
    "RefreshResult",
    "ResetPasswordResult",
    "ResetRequestResult",
    "SessionStats",
    "UserLockoutPolicy",
]
