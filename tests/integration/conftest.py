"""Integration fixtures: fully wired VendorDatabase instances against a mocked source."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from macvendor.database import VendorDatabase

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from macvendor.config import Settings
    from tests.conftest import RecordingSink


@pytest.fixture()
def open_database(
    sink: RecordingSink, lock_dir: Path
) -> Iterator[Callable[[Settings], VendorDatabase]]:
    """Factory for databases that are closed when the test ends."""
    opened: list[VendorDatabase] = []

    def factory(settings: Settings) -> VendorDatabase:
        db = VendorDatabase(settings, sink=sink, lock_dir=lock_dir)
        opened.append(db)
        return db

    yield factory
    for db in opened:
        db.close()
