"""Unit tests for macvendor.cache."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from macvendor.cache import (
    TEMP_FILENAME,
    entry_path,
    latest_entry,
    list_entries,
    sequence_for,
    temp_path,
    version_for,
)

if TYPE_CHECKING:
    from pathlib import Path


def _touch(directory: Path, name: str) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("x")
    return path


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


class TestNaming:
    def test_sequence_roundtrip(self) -> None:
        version = datetime(2024, 6, 25, 12, 30, 15, 123456, tzinfo=UTC)
        assert version_for(sequence_for(version)) == version

    def test_sequence_is_microseconds_since_epoch(self) -> None:
        assert sequence_for(datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)) == 1_000_000

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert sequence_for(datetime(1970, 1, 1, 0, 0, 1)) == 1_000_000

    def test_entry_path(self, tmp_path: Path) -> None:
        version = version_for(1_719_273_600_000_000)
        assert entry_path(tmp_path, version) == tmp_path / "oui-1719273600000000.txt"

    def test_temp_path(self, tmp_path: Path) -> None:
        assert temp_path(tmp_path) == tmp_path / TEMP_FILENAME


# ---------------------------------------------------------------------------
# list_entries
# ---------------------------------------------------------------------------


class TestListEntries:
    def test_missing_directory(self, tmp_path: Path) -> None:
        assert list_entries(tmp_path / "absent") == []
        assert latest_entry(tmp_path / "absent") is None

    def test_none_directory(self) -> None:
        assert list_entries(None) == []

    def test_newest_first(self, tmp_path: Path) -> None:
        for sequence in (5, 300, 42):
            _touch(tmp_path, f"oui-{sequence}.txt")
        entries = list_entries(tmp_path)
        assert [e.sequence for e in entries] == [300, 42, 5]
        assert entries[0].version == version_for(300)
        assert entries[0].path == tmp_path / "oui-300.txt"

    def test_numeric_not_lexical_order(self, tmp_path: Path) -> None:
        _touch(tmp_path, "oui-9.txt")
        _touch(tmp_path, "oui-10.txt")
        assert [e.sequence for e in list_entries(tmp_path)] == [10, 9]

    def test_ignores_unrelated_files(self, tmp_path: Path) -> None:
        _touch(tmp_path, "oui-1.txt")
        _touch(tmp_path, TEMP_FILENAME)
        _touch(tmp_path, "oui-abc.txt")
        _touch(tmp_path, "oui-1.txt.bak")
        _touch(tmp_path, "oui-1234567890123456789.txt")  # 19 digits
        _touch(tmp_path, "readme.md")
        (tmp_path / "oui-2.txt").mkdir()
        assert [e.sequence for e in list_entries(tmp_path)] == [1]

    def test_skips_sequence_beyond_datetime_range(self, tmp_path: Path) -> None:
        _touch(tmp_path, "oui-638550000000000000.txt")
        _touch(tmp_path, "oui-999999999999999999.txt")
        _touch(tmp_path, "oui-12.txt")
        assert [e.sequence for e in list_entries(tmp_path)] == [12]

    def test_case_insensitive(self, tmp_path: Path) -> None:
        _touch(tmp_path, "OUI-7.TXT")
        assert [e.sequence for e in list_entries(tmp_path)] == [7]

    def test_does_not_create_directory(self, tmp_path: Path) -> None:
        target = tmp_path / "absent"
        list_entries(target)
        assert not target.exists()

    def test_latest_entry(self, tmp_path: Path) -> None:
        now = datetime.now(UTC)
        _touch(tmp_path, entry_path(tmp_path, now - timedelta(days=1)).name)
        _touch(tmp_path, entry_path(tmp_path, now).name)
        latest = latest_entry(tmp_path)
        assert latest is not None
        assert latest.sequence == sequence_for(now)
