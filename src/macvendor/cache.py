"""On-disk snapshot files and their naming convention.

Each snapshot lives in ``<cache dir>/oui-<sequence>.txt`` where ``sequence``
is the snapshot's version as microseconds since the Unix epoch (UTC). A
download in progress is written to ``oui.loading`` and renamed into place
only after it parsed successfully.

This module only lists and names files. Creating and deleting them is the
update coordinator's job.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta
from pathlib import Path

import structlog

from macvendor.models.cache import CacheEntry

log = structlog.get_logger()

TEMP_FILENAME = "oui.loading"

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_TICK = timedelta(microseconds=1)
_ENTRY_PATTERN = re.compile(r"^oui-(?P<sequence>\d{1,18})\.txt$", re.IGNORECASE)


def sequence_for(version: datetime) -> int:
    """Return the filename sequence number for ``version``."""
    if version.tzinfo is None:
        version = version.replace(tzinfo=UTC)
    return (version - _EPOCH) // _TICK


def version_for(sequence: int) -> datetime:
    """Inverse of ``sequence_for``."""
    return _EPOCH + sequence * _TICK


def entry_path(directory: str | Path, version: datetime) -> Path:
    return Path(directory) / f"oui-{sequence_for(version)}.txt"


def temp_path(directory: str | Path) -> Path:
    return Path(directory) / TEMP_FILENAME


def list_entries(directory: str | Path | None) -> list[CacheEntry]:
    """Return the snapshot files in ``directory``, newest first.

    A missing directory (or ``None``) yields an empty list. Files whose
    sequence is outside the datetime range are skipped.
    """
    if directory is None:
        return []
    root = Path(directory)
    if not root.is_dir():
        return []

    entries: list[CacheEntry] = []
    for path in root.iterdir():
        match = _ENTRY_PATTERN.match(path.name)
        if match is None or not path.is_file():
            continue
        sequence = int(match["sequence"])
        try:
            version = version_for(sequence)
        except OverflowError:
            log.warning("cache_entry_ignored", path=str(path), reason="sequence out of range")
            continue
        entries.append(CacheEntry(path=path, sequence=sequence, version=version))

    entries.sort(key=lambda entry: entry.sequence, reverse=True)
    return entries


def latest_entry(directory: str | Path | None) -> CacheEntry | None:
    entries = list_entries(directory)
    return entries[0] if entries else None
