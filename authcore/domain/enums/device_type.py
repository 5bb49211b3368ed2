"""Coarse device classes derived from the user agent."""

from enum import Enum


class DeviceType(str, Enum):
    """Device class of a client."""

    MOBILE = "mobile"
    TABLET = "tablet"
    DESKTOP = "desktop"
    BOT = "bot"
    UNKNOWN = "unknown"
