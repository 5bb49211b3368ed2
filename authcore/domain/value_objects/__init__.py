"""Domain value objects."""

from authcore.domain.value_objects.device_info import DeviceFingerprint, DeviceInfo
from authcore.domain.value_objects.token_claims import (
    AccessTokenClaims,
    RefreshTokenClaims,
)

__all__ = [
    "AccessTokenClaims",
    "DeviceFingerprint",
    "DeviceInfo",
    "RefreshTokenClaims",
]
