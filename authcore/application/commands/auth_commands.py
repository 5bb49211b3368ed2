"""Authentication commands.

Commands carry everything an operation needs as explicit data; no
operation reads ambient request or session state. All commands are
immutable and keyword-only. Secrets are excluded from repr.
"""

from dataclasses import dataclass, field

from authcore.domain.value_objects import DeviceInfo


@dataclass(frozen=True, kw_only=True)
class LoginUser:
    """Authenticate with identifier + secret and open a new token family.

    Attributes:
        identifier: Login identifier (email address).
        secret: Plaintext password.
        device: Requesting device.
        scopes: Scopes to grant in issued access tokens.

    Example:
        >>> command = LoginUser(
        ...     identifier="user@example.com",
        ...     secret="SecurePass123!",
        ...     device=enricher.build(client_ip, user_agent),
        ... )
        >>> result = await auth_service.login(command)
    """

    identifier: str
    secret: str = field(repr=False)
    device: DeviceInfo = field(default_factory=DeviceInfo)
    scopes: frozenset[str] = frozenset()


@dataclass(frozen=True, kw_only=True)
class RefreshTokens:
    """Rotate a refresh token into a new access + refresh pair.

    Attributes:
        refresh_token: Refresh token previously issued by login or refresh.
        device: Requesting device.
    """

    refresh_token: str = field(repr=False)
    device: DeviceInfo = field(default_factory=DeviceInfo)


@dataclass(frozen=True, kw_only=True)
class LogoutUser:
    """Revoke one device's refresh chain or every chain of the user.

    At least one of refresh_token / access_token must be provided.

    Attributes:
        refresh_token: Refresh token of the device logging out.
        access_token: Access token, used when no refresh token is at hand.
        revoke_all_devices: Revoke every refresh record of the user.
    """

    refresh_token: str | None = field(default=None, repr=False)
    access_token: str | None = field(default=None, repr=False)
    revoke_all_devices: bool = False


@dataclass(frozen=True, kw_only=True)
class RequestPasswordReset:
    """Request a password reset token.

    Attributes:
        email: Email address of the account.
        client_ip: Requesting client IP (stored for audit).
        user_agent: Requesting client user agent (stored for audit).
    """

    email: str
    client_ip: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True)
class ResetPassword:
    """Consume a reset token and set a new password.

    Attributes:
        token: Plaintext reset token from the reset request.
        new_password: New plaintext password (checked against the policy).
    """

    token: str = field(repr=False)
    new_password: str = field(repr=False)
