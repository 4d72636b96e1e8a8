from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from macvendor.address import OUI_MASK, format_address


class VendorRecord(BaseModel):
    """Single MA-L assignment from the IEEE registry."""

    model_config = ConfigDict(frozen=True)

    prefix_bits: int  # 48-bit value, low 24 bits zero
    organization: str
    address: str = ""  # Postal address, lines joined with "\n"

    @field_validator("prefix_bits")
    @classmethod
    def validate_prefix_bits(cls, v: int) -> int:
        if v < 0 or v & ~OUI_MASK:
            raise ValueError(f"Invalid OUI prefix: {v:#x}")
        return v

    @property
    def prefix(self) -> str:
        """Prefix rendered as a full address, e.g. ``00-22-72-00-00-00``."""
        return format_address(self.prefix_bits)
