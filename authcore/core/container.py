"""Dependency container (composition root).

Application-scoped singletons (cached with lru_cache):
    - Logger (structlog console adapter)
    - Password hashing (bcrypt)
    - Token codec (JWT)
    - Token secrets (random secret + SHA-256 digest)
    - Device enricher (user-agents)
    - Database (SQLAlchemy async engine)

Per-unit-of-work factories take the stores they operate on, so the same
wiring serves both the SQLAlchemy repositories (one AsyncSession per
request) and the in-memory stores used in tests and single-process
deployments.

Usage:
    async with get_database().stores() as stores:
        auth = build_authentication_service(
            user_repo=stores.users, session_store=stores.sessions
        )
        result = await auth.login(LoginUser(identifier=email, secret=password))
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from authcore.core.config import get_settings

if TYPE_CHECKING:
    from authcore.application.services import (
        AuthenticationService,
        PasswordResetService,
    )
    from authcore.domain.protocols import (
        AuditProtocol,
        EventBusProtocol,
        LoggerProtocol,
        PasswordHashingProtocol,
        PasswordResetRepository,
        SessionStore,
        TokenCodecProtocol,
        TokenSecretProtocol,
        UserRepository,
    )
    from authcore.infrastructure.enrichers.device_enricher import DeviceEnricher
    from authcore.infrastructure.events.in_memory_event_bus import InMemoryEventBus
    from authcore.infrastructure.persistence.database import Database


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Get logger singleton (app-scoped).

    JSON output when LOG_JSON is set, console rendering otherwise.
    """
    from authcore.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(use_json=settings.log_json, level=settings.log_level)


@lru_cache()
def get_password_service() -> "PasswordHashingProtocol":
    """Get password hashing service singleton (app-scoped)."""
    from authcore.infrastructure.security.bcrypt_password_service import (
        BcryptPasswordService,
    )

    return BcryptPasswordService(cost_factor=get_settings().bcrypt_rounds)


@lru_cache()
def get_token_service() -> "TokenCodecProtocol":
    """Get JWT token service singleton (app-scoped).

    Raises:
        ValueError: If SECRET_KEY is shorter than 32 characters.
    """
    from authcore.infrastructure.security.jwt_token_service import JwtTokenService

    settings = get_settings()
    return JwtTokenService(
        secret_key=settings.secret_key,
        access_token_expire_minutes=settings.access_token_expire_minutes,
        algorithm=settings.algorithm,
    )


@lru_cache()
def get_token_secrets() -> "TokenSecretProtocol":
    """Get token secret service singleton (app-scoped)."""
    from authcore.infrastructure.security.token_secret_service import (
        TokenSecretService,
    )

    return TokenSecretService()


@lru_cache()
def get_device_enricher() -> "DeviceEnricher":
    """Get device enricher singleton (app-scoped)."""
    from authcore.infrastructure.enrichers.device_enricher import DeviceEnricher

    return DeviceEnricher(logger=get_logger())


@lru_cache()
def get_audit() -> "AuditProtocol":
    """Get audit sink singleton (app-scoped)."""
    from authcore.infrastructure.audit.logger_audit_adapter import LoggerAuditAdapter

    return LoggerAuditAdapter(logger=get_logger())


@lru_cache()
def get_database() -> "Database":
    """Get database singleton (app-scoped).

    Raises:
        ValueError: If DATABASE_URL is not configured.
    """
    from authcore.infrastructure.persistence.database import Database

    settings = get_settings()
    if not settings.database_url:
        raise ValueError("DATABASE_URL is required for SQL persistence")
    return Database(database_url=settings.database_url, echo=settings.db_echo)


# ============================================================================
# Event Bus
# ============================================================================


def create_event_bus(session_store: "SessionStore") -> "InMemoryEventBus":
    """Create an event bus with logging, audit and session handlers subscribed.

    Args:
        session_store: Store the session handler revokes records in
            (user deletion).

    Returns:
        InMemoryEventBus with every authentication event wired.
    """
    from authcore.domain.events import auth_events as ev
    from authcore.infrastructure.events.handlers import (
        AuditEventHandler,
        LoggingEventHandler,
        SessionEventHandler,
    )
    from authcore.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    logger = get_logger()
    event_bus = InMemoryEventBus(logger=logger)
    logging_handler = LoggingEventHandler(logger=logger)
    audit_handler = AuditEventHandler(audit=get_audit(), logger=logger)
    session_handler = SessionEventHandler(session_store=session_store, logger=logger)

    # Logging: every event
    for event_class, method_name in (
        (ev.UserLoginAttempted, "handle_user_login_attempted"),
        (ev.UserLoginSucceeded, "handle_user_login_succeeded"),
        (ev.UserLoginFailed, "handle_user_login_failed"),
        (ev.TokenRefreshAttempted, "handle_token_refresh_attempted"),
        (ev.TokenRefreshSucceeded, "handle_token_refresh_succeeded"),
        (ev.TokenRefreshFailed, "handle_token_refresh_failed"),
        (ev.RefreshTokenReuseDetected, "handle_refresh_token_reuse_detected"),
        (ev.UserLogoutSucceeded, "handle_user_logout_succeeded"),
        (ev.SessionsRevoked, "handle_sessions_revoked"),
        (ev.UserDeleted, "handle_user_deleted"),
        (ev.PasswordResetRequested, "handle_password_reset_requested"),
        (ev.PasswordResetCompleted, "handle_password_reset_completed"),
        (ev.PasswordResetFailed, "handle_password_reset_failed"),
    ):
        event_bus.subscribe(event_class, getattr(logging_handler, method_name))

    # Audit: outcomes and security events
    for event_class, method_name in (
        (ev.UserLoginSucceeded, "handle_user_login_succeeded"),
        (ev.UserLoginFailed, "handle_user_login_failed"),
        (ev.UserLogoutSucceeded, "handle_user_logout_succeeded"),
        (ev.SessionsRevoked, "handle_sessions_revoked"),
        (ev.TokenRefreshSucceeded, "handle_token_refresh_succeeded"),
        (ev.RefreshTokenReuseDetected, "handle_refresh_token_reuse_detected"),
        (ev.PasswordResetRequested, "handle_password_reset_requested"),
        (ev.PasswordResetCompleted, "handle_password_reset_completed"),
        (ev.PasswordResetFailed, "handle_password_reset_failed"),
    ):
        event_bus.subscribe(event_class, getattr(audit_handler, method_name))

    event_bus.subscribe(ev.UserDeleted, session_handler.handle_user_deleted)

    return event_bus


# ============================================================================
# Service Factories (per unit of work)
# ============================================================================


def build_authentication_service(
    *,
    user_repo: "UserRepository",
    session_store: "SessionStore",
    event_bus: "EventBusProtocol | None" = None,
) -> "AuthenticationService":
    """Wire an AuthenticationService from settings and the given stores."""
    from authcore.application.services import (
        AuthenticationService,
        PasswordCredentialVerifier,
        UserLockoutPolicy,
    )

    settings = get_settings()
    return AuthenticationService(
        credential_verifier=PasswordCredentialVerifier(
            user_repo=user_repo, password_service=get_password_service()
        ),
        lockout_policy=UserLockoutPolicy(
            user_repo=user_repo,
            max_attempts=settings.max_failed_login_attempts,
            lockout_minutes=settings.lockout_minutes,
        ),
        session_store=session_store,
        token_codec=get_token_service(),
        token_secrets=get_token_secrets(),
        event_bus=event_bus or create_event_bus(session_store),
        logger=get_logger(),
        refresh_token_expire_days=settings.refresh_token_expire_days,
        max_refresh_tokens_per_user=settings.max_refresh_tokens_per_user,
        refresh_record_retention_days=settings.refresh_record_retention_days,
        enforce_device_binding=settings.enforce_device_binding,
    )


def build_password_reset_service(
    *,
    user_repo: "UserRepository",
    reset_repo: "PasswordResetRepository",
    session_store: "SessionStore",
    event_bus: "EventBusProtocol | None" = None,
) -> "PasswordResetService":
    """Wire a PasswordResetService from settings and the given stores."""
    from authcore.application.services import PasswordResetService
    from authcore.domain.validators import PasswordPolicy

    settings = get_settings()
    return PasswordResetService(
        user_repo=user_repo,
        reset_repo=reset_repo,
        session_store=session_store,
        password_service=get_password_service(),
        password_policy=PasswordPolicy(),
        token_secrets=get_token_secrets(),
        event_bus=event_bus or create_event_bus(session_store),
        logger=get_logger(),
        reset_token_expire_minutes=settings.password_reset_expire_minutes,
    )
