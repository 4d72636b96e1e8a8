"""Vendor lookup for hardware (MAC) addresses backed by the IEEE MA-L registry."""

from __future__ import annotations

__version__ = "0.1.0"

from macvendor.address import OUI_MASK, address_bits, format_address  # noqa: E402
from macvendor.config import Settings  # noqa: E402
from macvendor.database import VendorDatabase, get_default_database  # noqa: E402
from macvendor.errors import (  # noqa: E402
    ErrorCode,
    FormatError,
    LockUnavailableError,
    MacVendorError,
    NotFoundError,
    SnapshotLoadError,
    TransportError,
)
from macvendor.events import EventCode, EventLevel, EventSink, StructlogEventSink  # noqa: E402
from macvendor.models.registry import VendorRecord  # noqa: E402
from macvendor.registry import Snapshot  # noqa: E402

__all__ = [
    "OUI_MASK",
    "ErrorCode",
    "EventCode",
    "EventLevel",
    "EventSink",
    "FormatError",
    "LockUnavailableError",
    "MacVendorError",
    "NotFoundError",
    "Settings",
    "Snapshot",
    "SnapshotLoadError",
    "StructlogEventSink",
    "TransportError",
    "VendorDatabase",
    "VendorRecord",
    "__version__",
    "address_bits",
    "format_address",
    "get_default_database",
]
