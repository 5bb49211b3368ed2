"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance.

Usage:
    from authcore.domain.protocols import SessionStore, RefreshRecord
    from authcore.domain.protocols import PasswordHashingProtocol
"""

# Service protocols
from authcore.domain.protocols.audit_protocol import AuditProtocol
from authcore.domain.protocols.credential_verifier_protocol import (
    CredentialVerifierProtocol,
)
from authcore.domain.protocols.event_bus_protocol import (
    EventBusProtocol,
    EventHandler,
)
from authcore.domain.protocols.lockout_policy_protocol import LockoutPolicyProtocol
from authcore.domain.protocols.logger_protocol import LoggerProtocol
from authcore.domain.protocols.password_hashing_protocol import PasswordHashingProtocol
from authcore.domain.protocols.token_codec_protocol import TokenCodecProtocol
from authcore.domain.protocols.token_secret_protocol import TokenSecretProtocol

# Repository protocols
from authcore.domain.protocols.password_reset_repository import (
    PasswordResetRecord,
    PasswordResetRepository,
)
from authcore.domain.protocols.session_store import RefreshRecord, SessionStore
from authcore.domain.protocols.user_repository import UserRepository

__all__ = [
    # Service protocols
    "AuditProtocol",
    "CredentialVerifierProtocol",
    "EventBusProtocol",
    "EventHandler",
    "LockoutPolicyProtocol",
    "LoggerProtocol",
    "PasswordHashingProtocol",
    "TokenCodecProtocol",
    "TokenSecretProtocol",
    # Repository protocols
    "PasswordResetRecord",
    "PasswordResetRepository",
    "RefreshRecord",
    "SessionStore",
    "UserRepository",
]
