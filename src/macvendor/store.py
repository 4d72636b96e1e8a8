"""Snapshot loading from the cache directory or the bundled fallback.

Loading never publishes anything: callers receive a Snapshot (or an error)
and decide whether to swap it in or fall back.
"""

from __future__ import annotations

import gzip
from datetime import UTC, datetime
from importlib.resources import files
from typing import IO, TYPE_CHECKING

import structlog

from macvendor.cache import latest_entry
from macvendor.errors import FormatError, NotFoundError, SnapshotLoadError
from macvendor.parser import parse_registry
from macvendor.registry import Snapshot, build_snapshot

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()

EMBEDDED_RESOURCE = "oui.txt.gz"

# Capture date of the full IEEE blocks in the bundled oui.txt.gz. The other
# blocks carry prefix and organization only. Bump together with the resource.
EMBEDDED_VERSION = datetime(2024, 6, 25, tzinfo=UTC)


def load_stream(stream: IO[bytes] | IO[str], version: datetime) -> Snapshot:
    return build_snapshot(parse_registry(stream), version)


def load_file(path: str | Path, version: datetime) -> Snapshot:
    with open(path, "rb") as stream:
        return load_stream(stream, version)


def load_latest(directory: str | Path | None) -> Snapshot:
    """Load the newest snapshot file in ``directory``.

    Raises ``NotFoundError`` when there is none and ``SnapshotLoadError``
    when the directory cannot be listed or the newest file cannot be read or
    parsed.
    """
    try:
        entry = latest_entry(directory)
    except OSError as exc:
        log.warning("snapshot_load_failed", source="disk", path=str(directory), exc_info=True)
        raise SnapshotLoadError(f"Could not list cache directory {directory}: {exc}") from exc
    if entry is None:
        raise NotFoundError(f"No cache entry in {directory}")

    try:
        snapshot = load_file(entry.path, entry.version)
    except (FormatError, OSError) as exc:
        log.warning("snapshot_load_failed", source="disk", path=str(entry.path), exc_info=True)
        raise SnapshotLoadError(f"Could not load cache entry {entry.path}: {exc}") from exc

    log.info(
        "snapshot_loaded",
        source="disk",
        path=str(entry.path),
        records=len(snapshot),
        version=snapshot.version.isoformat(),
    )
    return snapshot


def load_embedded() -> Snapshot:
    """Load the registry snapshot bundled inside the package."""
    resource = files("macvendor.data").joinpath(EMBEDDED_RESOURCE)
    with resource.open("rb") as raw, gzip.open(raw, "rb") as stream:
        snapshot = load_stream(stream, EMBEDDED_VERSION)

    log.info(
        "snapshot_loaded",
        source="bundled",
        records=len(snapshot),
        version=snapshot.version.isoformat(),
    )
    return snapshot
