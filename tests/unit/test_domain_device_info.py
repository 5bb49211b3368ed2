"""Unit tests for DeviceInfo value object.

Tests cover:
- Defaults for unknown clients
- Fingerprint / device_id derivation
- IP masking (IPv4, IPv6, unparsable)
- Conversion to the persisted fingerprint
"""

import hashlib

import pytest

from authcore.domain.enums import DeviceType
from authcore.domain.value_objects import DeviceInfo
from authcore.domain.value_objects.device_info import hash_user_agent


@pytest.mark.unit
class TestDeviceInfoDefaults:
    def test_default_device_is_unknown_loopback(self):
        device = DeviceInfo()

        assert device.ip_address == "127.0.0.1"
        assert device.user_agent == "Unknown"
        assert device.device_type == DeviceType.UNKNOWN
        assert device.is_mobile is False

    def test_device_info_is_immutable(self):
        device = DeviceInfo()

        with pytest.raises(AttributeError):
            device.ip_address = "10.0.0.1"  # type: ignore[misc]


@pytest.mark.unit
class TestDeviceInfoIdentity:
    def test_fingerprint_hashes_user_agent_and_ip(self):
        device = DeviceInfo(ip_address="203.0.113.7", user_agent="curl/8.0")

        expected = hashlib.sha256(b"curl/8.0|203.0.113.7").hexdigest()
        assert device.fingerprint == expected

    def test_device_id_is_prefixed_truncated_fingerprint(self):
        device = DeviceInfo(ip_address="203.0.113.7", user_agent="curl/8.0")

        assert device.device_id == "dev_" + device.fingerprint[:32]
        assert len(device.device_id) == 36

    def test_same_inputs_produce_same_device_id(self):
        a = DeviceInfo(ip_address="203.0.113.7", user_agent="curl/8.0")
        b = DeviceInfo(ip_address="203.0.113.7", user_agent="curl/8.0")

        assert a.device_id == b.device_id

    def test_different_ip_produces_different_device_id(self):
        a = DeviceInfo(ip_address="203.0.113.7", user_agent="curl/8.0")
        b = DeviceInfo(ip_address="203.0.113.8", user_agent="curl/8.0")

        assert a.device_id != b.device_id


@pytest.mark.unit
class TestDeviceInfoMaskedIp:
    def test_ipv4_hides_last_octet(self):
        assert DeviceInfo(ip_address="203.0.113.7").masked_ip == "203.0.113.xxx"

    def test_ipv6_keeps_first_four_groups(self):
        device = DeviceInfo(ip_address="2001:db8:85a3::8a2e:370:7334")

        assert device.masked_ip == "2001:db8:85a3:0::xxxx"

    def test_unparsable_ip_masks_to_unknown(self):
        assert DeviceInfo(ip_address="not-an-ip").masked_ip == "unknown"


@pytest.mark.unit
class TestDeviceInfoConversion:
    def test_to_fingerprint_stores_hash_not_user_agent(self):
        device = DeviceInfo(
            ip_address="203.0.113.7",
            user_agent="curl/8.0",
            device_name="Other Device (curl)",
        )

        fingerprint = device.to_fingerprint()

        assert fingerprint.ip_address == "203.0.113.7"
        assert fingerprint.user_agent_hash == hash_user_agent("curl/8.0")
        assert fingerprint.device_name == "Other Device (curl)"
        assert fingerprint.device_id == device.device_id

    def test_to_summary_uses_masked_ip(self):
        summary = DeviceInfo(ip_address="203.0.113.7").to_summary()

        assert summary["device_id"].startswith("dev_")
        assert "203.0.113.7" not in summary.values()

    @pytest.mark.parametrize(
        ("device_type", "expected"),
        [
            (DeviceType.MOBILE, True),
            (DeviceType.TABLET, True),
            (DeviceType.DESKTOP, False),
            (DeviceType.BOT, False),
        ],
    )
    def test_is_mobile(self, device_type, expected):
        assert DeviceInfo(device_type=device_type).is_mobile is expected
