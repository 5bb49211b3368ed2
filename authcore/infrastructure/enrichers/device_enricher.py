"""Device enricher using the user-agents library.

Builds DeviceInfo value objects from raw request metadata (client IP and
User-Agent header).

Behavior:
    - Fail-open: never raises, falls back to "Unknown" / loopback defaults
    - Non-blocking: pure string parsing (<1ms)
    - IPv4-mapped IPv6 addresses are unwrapped to plain IPv4
"""

import ipaddress

from user_agents import parse as parse_user_agent  # type: ignore[import-untyped]
from user_agents.parsers import UserAgent  # type: ignore[import-untyped]

from authcore.core.constants import FALLBACK_IP_ADDRESS, UNKNOWN_USER_AGENT
from authcore.domain.enums import DeviceType
from authcore.domain.protocols.logger_protocol import LoggerProtocol
from authcore.domain.value_objects import DeviceInfo

_DEVICE_LABELS: dict[DeviceType, str] = {
    DeviceType.MOBILE: "Mobile",
    DeviceType.TABLET: "Tablet",
    DeviceType.DESKTOP: "Desktop",
}


class DeviceEnricher:
    """Builds DeviceInfo from client IP and user agent.

    Usage:
        enricher = DeviceEnricher(logger=get_logger())
        device = enricher.build(request.client.host, request.headers.get("User-Agent"))
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    def build(
        self,
        ip_address: str | None,
        user_agent: str | None,
        *,
        require_public_ip: bool = False,
    ) -> DeviceInfo:
        """Build a DeviceInfo, falling back to defaults on any bad input.

        Args:
            ip_address: Client IP as reported by the transport.
            user_agent: Raw User-Agent header.
            require_public_ip: Treat private, reserved, loopback and
                link-local addresses as unknown.

        Returns:
            DeviceInfo (never raises).
        """
        normalized_ip = self.normalize_ip(ip_address, require_public=require_public_ip)
        raw_agent = (user_agent or "").strip()

        if not raw_agent:
            return DeviceInfo(
                ip_address=normalized_ip,
                user_agent=UNKNOWN_USER_AGENT,
                device_name="Unknown Device",
            )

        try:
            ua: UserAgent = parse_user_agent(raw_agent)
            browser = ua.browser.family or "Unknown"
            os_name = ua.os.family or "Unknown"
            device_type = self._determine_device_type(ua)
        except Exception as e:
            self._logger.warning(
                "device_parse_failed",
                user_agent=raw_agent[:100],
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return DeviceInfo(
                ip_address=normalized_ip,
                user_agent=raw_agent,
                device_name="Unknown Device",
            )

        return DeviceInfo(
            ip_address=normalized_ip,
            user_agent=raw_agent,
            device_name=self._build_device_name(browser, os_name, device_type),
            browser=browser,
            os=os_name,
            device_type=device_type,
        )

    @staticmethod
    def normalize_ip(ip_address: str | None, *, require_public: bool = False) -> str:
        """Normalize an IP address string.

        Returns:
            Canonical textual form of the address, or 127.0.0.1 when the
            input is missing, unparsable or (with require_public) not
            globally routable.
        """
        if not ip_address:
            return FALLBACK_IP_ADDRESS

        try:
            address = ipaddress.ip_address(ip_address.strip())
        except ValueError:
            return FALLBACK_IP_ADDRESS

        if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped:
            address = address.ipv4_mapped

        if require_public and (
            address.is_private
            or address.is_reserved
            or address.is_loopback
            or address.is_link_local
            or address.is_multicast
            or address.is_unspecified
        ):
            return FALLBACK_IP_ADDRESS

        return str(address)

    @staticmethod
    def _determine_device_type(ua: UserAgent) -> DeviceType:
        if ua.is_bot:
            return DeviceType.BOT
        if ua.is_tablet:
            return DeviceType.TABLET
        if ua.is_mobile:
            return DeviceType.MOBILE
        if ua.is_pc:
            return DeviceType.DESKTOP
        return DeviceType.UNKNOWN

    @staticmethod
    def _build_device_name(browser: str, os_name: str, device_type: DeviceType) -> str:
        """Human-readable name like "Mac OS X Desktop (Chrome)"."""
        if device_type == DeviceType.BOT:
            return f"Bot ({browser})"
        label = _DEVICE_LABELS.get(device_type, "Device")
        return f"{os_name} {label} ({browser})"
