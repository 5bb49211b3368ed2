"""Domain enums.

Usage:
    from authcore.domain.enums import AuditAction, DeviceType, RevocationReason
"""

from authcore.domain.enums.audit_action import AuditAction
from authcore.domain.enums.device_type import DeviceType
from authcore.domain.enums.revocation_reason import RevocationReason

__all__ = ["AuditAction", "DeviceType", "RevocationReason"]
