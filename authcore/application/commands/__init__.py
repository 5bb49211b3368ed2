"""Authentication commands."""

from authcore.application.commands.auth_commands import (
    LoginUser,
    LogoutUser,
    RefreshTokens,
    RequestPasswordReset,
    ResetPassword,
)

__all__ = [
    "LoginUser",
    "LogoutUser",
    "RefreshTokens",
    "RequestPasswordReset",
    "ResetPassword",
]
