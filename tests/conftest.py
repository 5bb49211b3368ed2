"""Pytest configuration and shared fixtures.

Provides:
1. Marker registration (unit, integration)
2. Automatic asyncio marking of coroutine tests
3. Test helpers for users, devices and fully wired services on
   in-memory stores
"""

import asyncio
from unittest.mock import Mock

import pytest
from uuid_extensions import uuid7

from authcore.application.services import (
    AuthenticationService,
    PasswordCredentialVerifier,
    PasswordResetService,
    UserLockoutPolicy,
)
from authcore.domain.entities.user import User
from authcore.domain.validators import PasswordPolicy
from authcore.domain.value_objects import DeviceInfo
from authcore.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from authcore.infrastructure.persistence.memory import (
    InMemoryPasswordResetRepository,
    InMemorySessionStore,
    InMemoryUserRepository,
)
from authcore.infrastructure.security.bcrypt_password_service import (
    BcryptPasswordService,
)
from authcore.infrastructure.security.jwt_token_service import JwtTokenService
from authcore.infrastructure.security.token_secret_service import TokenSecretService

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

TEST_SECRET_KEY = "test-secret-key-that-is-at-least-32-characters-long"
TEST_PASSWORD = "Correct-Horse-92!"


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests across real adapters"
    )
    config.addinivalue_line("markers", "asyncio: Async test that requires event loop")


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions."""
    for item in items:
        if asyncio.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# Helpers
# =============================================================================


def create_user(
    email: str = "user@example.com",
    password_hash: str = "hashed_password",
    is_active: bool = True,
) -> User:
    """Create a User entity for testing."""
    return User(
        id=uuid7(),
        email=email,
        password_hash=password_hash,
        is_active=is_active,
    )


def create_device(
    ip_address: str = "203.0.113.7",
    user_agent: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) Chrome/120.0",
    device_name: str | None = "Mac OS X Desktop (Chrome)",
) -> DeviceInfo:
    """Create a DeviceInfo for testing."""
    return DeviceInfo(
        ip_address=ip_address, user_agent=user_agent, device_name=device_name
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_logger():
    """Logger mock accepting every LoggerProtocol call."""
    logger = Mock()
    logger.bind.return_value = logger
    logger.with_context.return_value = logger
    return logger


@pytest.fixture(scope="session")
def password_service():
    """Real bcrypt service at the lowest accepted cost."""
    return BcryptPasswordService(cost_factor=10)


@pytest.fixture(scope="session")
def password_hash(password_service):
    """bcrypt hash of TEST_PASSWORD (computed once per session)."""
    return password_service.hash_password(TEST_PASSWORD)


@pytest.fixture
def token_service():
    return JwtTokenService(secret_key=TEST_SECRET_KEY, access_token_expire_minutes=15)


@pytest.fixture
def token_secrets():
    return TokenSecretService()


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def reset_repo():
    return InMemoryPasswordResetRepository()


@pytest.fixture
def user(password_hash):
    return create_user(password_hash=password_hash)


@pytest.fixture
def user_repo(user):
    return InMemoryUserRepository(users=[user])


@pytest.fixture
def event_bus(mock_logger):
    return InMemoryEventBus(logger=mock_logger)


@pytest.fixture
def auth_service(
    user_repo,
    session_store,
    token_service,
    token_secrets,
    password_service,
    event_bus,
    mock_logger,
):
    """AuthenticationService wired to in-memory stores and real crypto."""
    return AuthenticationService(
        credential_verifier=PasswordCredentialVerifier(
            user_repo=user_repo, password_service=password_service
        ),
        lockout_policy=UserLockoutPolicy(user_repo, max_attempts=3),
        session_store=session_store,
        token_codec=token_service,
        token_secrets=token_secrets,
        event_bus=event_bus,
        logger=mock_logger,
        max_refresh_tokens_per_user=5,
    )


@pytest.fixture
def reset_service(
    user_repo,
    reset_repo,
    session_store,
    token_secrets,
    password_service,
    event_bus,
    mock_logger,
):
    """PasswordResetService wired to in-memory stores and real crypto."""
    return PasswordResetService(
        user_repo=user_repo,
        reset_repo=reset_repo,
        session_store=session_store,
        password_service=password_service,
        password_policy=PasswordPolicy(),
        token_secrets=token_secrets,
        event_bus=event_bus,
        logger=mock_logger,
    )
