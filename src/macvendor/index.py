"""Read side: lookups against the currently published snapshot.

Readers take one reference to the current Snapshot and work against it.
Publishing a new snapshot is a single attribute assignment, so a reader
sees either the previous snapshot or the next one, never a mix, and never
waits on a refresh.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from macvendor.address import OUI_MASK, Address, address_bits, format_address

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime

    from macvendor.models.registry import VendorRecord
    from macvendor.registry import Snapshot

__all__ = ["OUI_MASK", "LookupIndex"]


class LookupIndex:
    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self._snapshot = snapshot

    @property
    def snapshot(self) -> Snapshot | None:
        return self._snapshot

    @property
    def version(self) -> datetime | None:
        snapshot = self._snapshot
        return snapshot.version if snapshot is not None else None

    def swap(self, snapshot: Snapshot) -> Snapshot | None:
        """Publish ``snapshot`` and return the one it replaced."""
        previous, self._snapshot = self._snapshot, snapshot
        return previous

    def lookup(self, address: Address) -> VendorRecord | None:
        """Return the record registered for the prefix of ``address``, or None."""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        return snapshot.records.get(address_bits(address) & OUI_MASK)

    def contains(self, address: Address) -> bool:
        return self.lookup(address) is not None

    def count(self) -> int:
        snapshot = self._snapshot
        return len(snapshot.records) if snapshot is not None else 0

    def items(self) -> Iterator[tuple[str, VendorRecord]]:
        """Iterate ``(prefix address, record)`` pairs of the snapshot current at call time."""
        return _iter_items(self._snapshot)


def _iter_items(snapshot: Snapshot | None) -> Iterator[tuple[str, VendorRecord]]:
    if snapshot is None:
        return
    for prefix_bits, record in snapshot.records.items():
        yield format_address(prefix_bits), record
