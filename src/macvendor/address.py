"""Conversion between hardware address spellings and 48-bit integers."""

from __future__ import annotations

import re

# Top 24 bits of a 48-bit address: the OUI.
OUI_MASK = 0xFFFF_FF00_0000
ADDRESS_MASK = 0xFFFF_FFFF_FFFF

_SEPARATORS = re.compile(r"[:\-.\s]")
_HEX12 = re.compile(r"^[0-9a-fA-F]{12}$")

Address = int | str | bytes | bytearray


def address_bits(address: Address) -> int:
    """Return the 48-bit integer value of ``address``.

    Accepts an int, 6 raw octets, or a string such as ``00:22:72:01:02:03``,
    ``00-22-72-01-02-03``, ``0022.7201.0203`` or ``002272010203``.
    Raises ``ValueError`` for anything else.
    """
    if isinstance(address, bool):
        raise ValueError(f"Invalid hardware address: {address!r}")
    if isinstance(address, int):
        if not 0 <= address <= ADDRESS_MASK:
            raise ValueError(f"Hardware address out of range: {address:#x}")
        return address
    if isinstance(address, (bytes, bytearray)):
        if len(address) != 6:
            raise ValueError(f"Hardware address must be 6 bytes, got {len(address)}")
        return int.from_bytes(address, "big")
    if isinstance(address, str):
        digits = _SEPARATORS.sub("", address.strip())
        if not _HEX12.match(digits):
            raise ValueError(f"Invalid hardware address: {address!r}")
        return int(digits, 16)
    raise ValueError(f"Unsupported hardware address type: {type(address).__name__}")


def oui_bits(address: Address) -> int:
    """Return the prefix of ``address`` with the low 24 bits zeroed."""
    return address_bits(address) & OUI_MASK


def format_address(bits: int, separator: str = "-") -> str:
    """Render a 48-bit integer as six upper-case hex octets."""
    raw = f"{bits & ADDRESS_MASK:012X}"
    return separator.join(raw[i : i + 2] for i in range(0, 12, 2))
