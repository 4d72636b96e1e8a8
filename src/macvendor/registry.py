"""Vendor registry snapshots: one immutable, versioned copy of the registry.

A refresh never edits a Snapshot in place; it builds a new one and the
lookup index swaps its reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from macvendor.errors import FormatError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from macvendor.models.registry import VendorRecord


@dataclass(frozen=True)
class Snapshot:
    """In-memory index built from one registry dump."""

    version: datetime

    # OUI prefix bits → record  e.g. 0x002272000000 → American Micro-Fuel Device Corp.
    records: Mapping[int, VendorRecord] = field(default_factory=lambda: MappingProxyType({}))

    def __len__(self) -> int:
        return len(self.records)


def build_snapshot(records: Iterable[VendorRecord], version: datetime) -> Snapshot:
    """Build a Snapshot from parsed records.

    When two records share a prefix the first one wins. An empty result is
    a ``FormatError``: an empty registry is never a valid snapshot.
    """
    by_prefix: dict[int, VendorRecord] = {}
    for record in records:
        by_prefix.setdefault(record.prefix_bits, record)

    if not by_prefix:
        raise FormatError("Registry contains no records")

    return Snapshot(version=version, records=MappingProxyType(by_prefix))
