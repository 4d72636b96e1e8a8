"""Refresh of the registry snapshot from its source.

A refresh decides whether a download is due, serialises writers of the
cache directory across processes, downloads into a temp file, validates it
by parsing, renames it into place, publishes the new snapshot and prunes
old cache entries.

Two independent gates keep the source from being hammered:

* refresh interval: a cache entry newer than the in-memory snapshot and
  younger than ``refresh_interval`` is adopted from disk instead of
  downloading;
* check interval: no download while the newest entry is younger than
  ``check_interval``, whatever the snapshot versions are.

Every failure emits exactly one event and re-raises, except a busy
cross-process lock, which skips the cycle. The previously published
snapshot and the retained cache entries are left untouched. Refreshes of
one coordinator are serialised; a refresh that waited while another one
published a snapshot returns without downloading.
"""

from __future__ import annotations

import io
import os
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from macvendor.cache import entry_path, latest_entry, list_entries, temp_path
from macvendor.errors import FormatError, LockUnavailableError, TransportError
from macvendor.events import EventCode, EventLevel
from macvendor.locking import directory_lock
from macvendor.store import load_file, load_stream

if TYPE_CHECKING:
    from collections.abc import Callable

    from macvendor.config import Settings
    from macvendor.events import EventSink
    from macvendor.fetcher import RegistryFetcher
    from macvendor.index import LookupIndex
    from macvendor.models.cache import CacheEntry

log = structlog.get_logger()

RETAINED_ENTRIES = 3

_TICK = timedelta(microseconds=1)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class UpdateCoordinator:
    def __init__(
        self,
        settings: Settings,
        index: LookupIndex,
        fetcher: RegistryFetcher,
        sink: EventSink,
        *,
        clock: Callable[[], datetime] = _utcnow,
        lock_dir: str | Path | None = None,
    ) -> None:
        self._settings = settings
        self._index = index
        self._fetcher = fetcher
        self._sink = sink
        self._clock = clock
        self._lock_dir = lock_dir
        self._refresh_lock = threading.Lock()

    def refresh(self, force: bool = False) -> bool:
        """Run one refresh cycle. Returns True if a new snapshot was published."""
        observed_version = self._index.version
        with self._refresh_lock:
            if self._index.version != observed_version:
                self._emit(
                    EventLevel.DEBUG,
                    EventCode.SKIPPED_AFTER_LOCK,
                    "A concurrent refresh published a snapshot while this one waited",
                )
                return False
            return self._refresh(force)

    def _refresh(self, force: bool) -> bool:
        settings = self._settings
        started_at = self._clock()

        self._emit(
            EventLevel.DEBUG, EventCode.CYCLE_STARTED, f"Refresh cycle started, forced={force}"
        )
        self._emit(EventLevel.DEBUG, EventCode.SOURCE_URL, f"Source URL is {settings.source_url}")

        if settings.cache_directory is None:
            return self._refresh_in_memory(force, started_at)

        directory = Path(settings.cache_directory)
        self._emit(
            EventLevel.DEBUG,
            EventCode.TARGET_PATH,
            f"Target path is {entry_path(directory, started_at)}",
        )

        try:
            entries = list_entries(directory)
        except OSError as exc:
            self._emit(EventLevel.ERROR, EventCode.IO_FAILED, f"Cannot list {directory}", exc)
            raise
        self._emit(
            EventLevel.DEBUG,
            EventCode.ENTRIES_FOUND,
            f"Found {len(entries)} cache entries: {', '.join(e.path.name for e in entries)}",
        )
        latest = entries[0] if entries else None
        self._emit(
            EventLevel.DEBUG,
            EventCode.LATEST_ENTRY,
            f"Most recent cache entry is {latest.path if latest else '<none>'}",
        )

        if not force and latest is not None:
            current = self._index.version
            if (current is None or latest.version > current) and (
                latest.version + settings.refresh_interval >= started_at
            ):
                self._emit(
                    EventLevel.DEBUG,
                    EventCode.SKIPPED_FRESH,
                    f"Cache entry {latest.path.name} is newer than the loaded snapshot and fresh",
                )
                adopted = self._adopt(latest)
                if adopted is not None:
                    return adopted

            if self._within_check_interval(latest, started_at):
                self._emit(
                    EventLevel.DEBUG,
                    EventCode.SKIPPED_CHECK_INTERVAL,
                    f"Cache entry {latest.path.name} is within the check interval",
                )
                return False

        return self._fetch(directory, force, latest, started_at)

    # ------------------------------------------------------------------
    # Gates
    # ------------------------------------------------------------------

    def _within_check_interval(self, entry: CacheEntry, now: datetime) -> bool:
        return entry.version + self._settings.check_interval >= now

    def _adopt(self, entry: CacheEntry) -> bool | None:
        """Publish ``entry`` if it is newer than the loaded snapshot.

        Returns None when the entry could not be loaded.
        """
        current = self._index.version
        if current is not None and entry.version <= current:
            return False
        try:
            snapshot = load_file(entry.path, entry.version)
        except (FormatError, OSError) as exc:
            self._emit(
                EventLevel.WARN,
                EventCode.PARSE_FAILED,
                f"Could not load cache entry {entry.path}",
                exc,
            )
            return None

        self._index.swap(snapshot)
        self._emit(
            EventLevel.INFO,
            EventCode.CACHE_ENTRY_LOADED,
            f"Loaded {len(snapshot)} records from {entry.path.name}",
        )
        return True

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def _fetch(
        self,
        directory: Path,
        force: bool,
        observed: CacheEntry | None,
        started_at: datetime,
    ) -> bool:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._emit(
                EventLevel.ERROR, EventCode.IO_FAILED, f"Cannot create {directory}", exc
            )
            raise

        timeout = self._settings.lock_timeout.total_seconds()
        try:
            with directory_lock(directory, timeout, lock_dir=self._lock_dir):
                return self._fetch_locked(directory, force, observed, started_at)
        except LockUnavailableError as exc:
            self._emit(
                EventLevel.ERROR,
                EventCode.LOCK_UNAVAILABLE,
                f"Update lock for {directory} unavailable, skipping this cycle",
                exc,
            )
            return False

    def _fetch_locked(
        self,
        directory: Path,
        force: bool,
        observed: CacheEntry | None,
        started_at: datetime,
    ) -> bool:
        # Another writer may have finished while this one waited for the lock.
        try:
            latest = latest_entry(directory)
        except OSError as exc:
            self._emit(EventLevel.ERROR, EventCode.IO_FAILED, f"Cannot list {directory}", exc)
            raise
        if latest is not None:
            if observed is None or latest.sequence > observed.sequence:
                self._emit(
                    EventLevel.DEBUG,
                    EventCode.SKIPPED_AFTER_LOCK,
                    f"Cache entry {latest.path.name} was written by another updater",
                )
                return bool(self._adopt(latest))
            if not force and self._within_check_interval(latest, started_at):
                self._emit(
                    EventLevel.DEBUG,
                    EventCode.SKIPPED_AFTER_LOCK,
                    f"Cache entry {latest.path.name} is within the check interval",
                )
                return False

        url = self._settings.source_url
        temp = temp_path(directory)
        try:
            self._fetcher.download(url, temp)
        except TransportError as exc:
            _discard(temp)
            self._emit(
                EventLevel.ERROR, EventCode.DOWNLOAD_FAILED, f"Download of {url} failed", exc
            )
            raise
        except OSError as exc:
            _discard(temp)
            self._emit(EventLevel.ERROR, EventCode.IO_FAILED, f"Cannot write {temp}", exc)
            raise

        version = self._clock()
        if latest is not None and version <= latest.version:
            version = latest.version + _TICK

        try:
            snapshot = load_file(temp, version)
        except (FormatError, OSError) as exc:
            _discard(temp)
            self._emit(
                EventLevel.ERROR,
                EventCode.PARSE_FAILED,
                f"Downloaded registry from {url} is invalid",
                exc,
            )
            raise

        target = entry_path(directory, version)
        try:
            os.replace(temp, target)
        except OSError as exc:
            _discard(temp)
            self._emit(
                EventLevel.ERROR, EventCode.IO_FAILED, f"Cannot move {temp} to {target}", exc
            )
            raise

        self._index.swap(snapshot)
        self._emit(
            EventLevel.INFO,
            EventCode.SNAPSHOT_PUBLISHED,
            f"Published {len(snapshot)} records from {target.name}",
        )
        self._prune(directory)
        return True

    def _refresh_in_memory(self, force: bool, started_at: datetime) -> bool:
        current = self._index.version
        within_check = current is not None and current + self._settings.check_interval >= started_at
        if not force and within_check:
            self._emit(
                EventLevel.DEBUG,
                EventCode.SKIPPED_CHECK_INTERVAL,
                "Loaded snapshot is within the check interval",
            )
            return False

        url = self._settings.source_url
        try:
            body = self._fetcher.fetch(url)
        except TransportError as exc:
            self._emit(
                EventLevel.ERROR, EventCode.DOWNLOAD_FAILED, f"Download of {url} failed", exc
            )
            raise

        try:
            snapshot = load_stream(io.BytesIO(body), self._clock())
        except FormatError as exc:
            self._emit(
                EventLevel.ERROR,
                EventCode.PARSE_FAILED,
                f"Downloaded registry from {url} is invalid",
                exc,
            )
            raise

        self._index.swap(snapshot)
        self._emit(
            EventLevel.INFO,
            EventCode.SNAPSHOT_PUBLISHED,
            f"Published {len(snapshot)} records (not persisted)",
        )
        return True

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    def _prune(self, directory: Path) -> None:
        """Delete all but the newest RETAINED_ENTRIES cache entries, oldest first."""
        try:
            entries = list_entries(directory)
        except OSError as exc:
            self._emit(EventLevel.WARN, EventCode.IO_FAILED, f"Cannot list {directory}", exc)
            return
        for entry in reversed(entries[RETAINED_ENTRIES:]):
            try:
                entry.path.unlink(missing_ok=True)
            except OSError as exc:
                self._emit(
                    EventLevel.WARN, EventCode.IO_FAILED, f"Cannot delete {entry.path}", exc
                )
                continue
            self._emit(EventLevel.DEBUG, EventCode.ENTRY_PRUNED, f"Deleted {entry.path.name}")

    def _emit(
        self,
        level: EventLevel,
        code: EventCode,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        self._sink.emit(level, code, message, cause)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        log.warning("temp_file_cleanup_failed", path=str(path), exc_info=True)
