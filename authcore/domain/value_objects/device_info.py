"""Device information value objects.

DeviceInfo describes the client behind a request: its normalized IP
address, raw user agent and a coarse device descriptor. It is built per
request by the device enricher and attached to refresh records as a
DeviceFingerprint.

Privacy:
    - masked_ip hides the host part of the address for display and logs
    - Only a hash of the user agent is persisted with refresh records
"""

import hashlib
import ipaddress
from dataclasses import dataclass
from typing import Any

from authcore.core.constants import (
    DEVICE_ID_HASH_LENGTH,
    DEVICE_ID_PREFIX,
    FALLBACK_IP_ADDRESS,
    UNKNOWN_USER_AGENT,
)
from authcore.domain.enums import DeviceType


def hash_user_agent(user_agent: str) -> str:
    """Return the SHA-256 hex digest of a user agent string."""
    return hashlib.sha256(user_agent.encode("utf-8")).hexdigest()


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceFingerprint:
    """Device data persisted with a refresh record.

    Attributes:
        ip_address: Normalized client IP address.
        user_agent_hash: SHA-256 of the raw user agent.
        device_name: Human-readable device name (e.g., "Mac OS X Desktop (Chrome)").
        device_id: Stable device identifier ("dev_" + 32 hex chars).
    """

    ip_address: str
    user_agent_hash: str
    device_name: str | None = None
    device_id: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceInfo:
    """Immutable description of the requesting device.

    Attributes:
        ip_address: Normalized IP address (loopback when unknown).
        user_agent: Raw user agent string ("Unknown" when missing).
        device_name: Human-readable device name.
        browser: Browser family (e.g., "Chrome").
        os: Operating system family (e.g., "iOS").
        device_type: Coarse device class.

    Example:
        >>> device = DeviceInfo(ip_address="203.0.113.7", user_agent="Mozilla/5.0 ...")
        >>> device.masked_ip
        '203.0.113.xxx'
        >>> device.device_id.startswith("dev_")
        True
    """

    ip_address: str = FALLBACK_IP_ADDRESS
    user_agent: str = UNKNOWN_USER_AGENT
    device_name: str | None = None
    browser: str = "Unknown"
    os: str = "Unknown"
    device_type: DeviceType = DeviceType.UNKNOWN

    @property
    def user_agent_hash(self) -> str:
        """SHA-256 hex digest of the user agent."""
        return hash_user_agent(self.user_agent)

    @property
    def fingerprint(self) -> str:
        """SHA-256 hex digest of user agent and IP address."""
        raw = f"{self.user_agent}|{self.ip_address}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    @property
    def device_id(self) -> str:
        """Stable device identifier derived from the fingerprint."""
        return f"{DEVICE_ID_PREFIX}{self.fingerprint[:DEVICE_ID_HASH_LENGTH]}"

    @property
    def masked_ip(self) -> str:
        """IP address with the host part hidden.

        IPv4 keeps the first three octets ("203.0.113.xxx"); IPv6 keeps the
        first four groups ("2001:db8:85a3:0::xxxx").
        """
        try:
            address = ipaddress.ip_address(self.ip_address)
        except ValueError:
            return "unknown"

        if address.version == 4:
            octets = str(address).split(".")
            return ".".join(octets[:3] + ["xxx"])

        groups = address.exploded.split(":")[:4]
        prefix = ":".join(group.lstrip("0") or "0" for group in groups)
        return f"{prefix}::xxxx"

    @property
    def is_mobile(self) -> bool:
        """True for phones and tablets."""
        return self.device_type in (DeviceType.MOBILE, DeviceType.TABLET)

    def to_fingerprint(self) -> DeviceFingerprint:
        """Build the persisted fingerprint for a refresh record."""
        return DeviceFingerprint(
            ip_address=self.ip_address,
            user_agent_hash=self.user_agent_hash,
            device_name=self.device_name,
            device_id=self.device_id,
        )

    def to_summary(self) -> dict[str, Any]:
        """Privacy-safe summary for logs and session listings."""
        return {
            "device_id": self.device_id,
            "device_name": self.device_name,
            "device_type": self.device_type.value,
            "browser": self.browser,
            "os": self.os,
            "ip_address": self.masked_ip,
        }
