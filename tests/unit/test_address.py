"""Unit tests for macvendor.address."""

from __future__ import annotations

import pytest

from macvendor.address import OUI_MASK, address_bits, format_address, oui_bits


class TestAddressBits:
    @pytest.mark.parametrize(
        "address",
        [
            "00:22:72:01:02:03",
            "00-22-72-01-02-03",
            "0022.7201.0203",
            "002272010203",
            "  00:22:72:01:02:03 ",
            bytes([0x00, 0x22, 0x72, 0x01, 0x02, 0x03]),
            0x002272010203,
        ],
    )
    def test_spellings(self, address: object) -> None:
        assert address_bits(address) == 0x002272010203  # type: ignore[arg-type]

    def test_lowercase_hex(self) -> None:
        assert address_bits("64:d1:a3:01:02:03") == 0x64D1A3010203

    @pytest.mark.parametrize(
        "address",
        ["", "00:22:72", "00:22:72:01:02:03:04", "GG:22:72:01:02:03", b"\x00\x22", -1, 1 << 48],
    )
    def test_invalid(self, address: object) -> None:
        with pytest.raises(ValueError):
            address_bits(address)  # type: ignore[arg-type]

    def test_bool_rejected(self) -> None:
        with pytest.raises(ValueError):
            address_bits(True)  # type: ignore[arg-type]

    def test_unsupported_type(self) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            address_bits(1.5)  # type: ignore[arg-type]


class TestOui:
    def test_mask_keeps_top_24_bits(self) -> None:
        assert OUI_MASK == 0xFFFFFF000000
        assert oui_bits("00:22:72:FF:FF:FF") == 0x002272000000

    def test_format_address(self) -> None:
        assert format_address(0x64D1A3000000) == "64-D1-A3-00-00-00"
        assert format_address(0x64D1A3000000, ":") == "64:D1:A3:00:00:00"
