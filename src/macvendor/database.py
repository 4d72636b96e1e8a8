"""VendorDatabase: the read-only address → vendor mapping applications use.

Construction order:
  1. optionally run one refresh synchronously,
  2. otherwise load the newest snapshot from the cache directory,
  3. fall back to the snapshot bundled with the package,
  4. start the background refresh timer.

Lookups never raise for network or staleness problems; a stale or failed
refresh is only visible through the event sink.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING

import structlog

from macvendor.config import Settings
from macvendor.errors import NotFoundError, SnapshotLoadError
from macvendor.events import EventCode, EventLevel, StructlogEventSink
from macvendor.fetcher import RegistryFetcher, build_http_client
from macvendor.index import LookupIndex
from macvendor.models.registry import VendorRecord
from macvendor.scheduler import RefreshScheduler
from macvendor.store import load_embedded, load_latest
from macvendor.updater import UpdateCoordinator

if TYPE_CHECKING:
    from collections.abc import Iterator
    from datetime import datetime
    from pathlib import Path

    import httpx

    from macvendor.address import Address
    from macvendor.events import EventSink
    from macvendor.registry import Snapshot

log = structlog.get_logger()


class VendorDatabase(Mapping[str, VendorRecord]):
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        sink: EventSink | None = None,
        client: httpx.Client | None = None,
        lock_dir: str | Path | None = None,
    ) -> None:
        self.settings = settings if settings is not None else Settings()
        self._sink: EventSink = sink if sink is not None else StructlogEventSink()
        self._owns_client = client is None
        self._client = client if client is not None else build_http_client(self.settings.fetcher)
        self._index = LookupIndex()
        self._updater = UpdateCoordinator(
            self.settings,
            self._index,
            RegistryFetcher(self._client),
            self._sink,
            lock_dir=lock_dir,
        )
        self._scheduler: RefreshScheduler | None = None
        self._closed = False

        try:
            force = self._initial_load()
        except BaseException:
            self._close_client()
            raise

        settings = self.settings
        if settings.auto_refresh and settings.refresh_interval.total_seconds() > 0:
            self._scheduler = RefreshScheduler(
                self.refresh,
                settings.refresh_interval,
                self._sink,
                immediate=not settings.synchronous_initial_load,
                force_first=force,
            )
            self._scheduler.start()

    def _initial_load(self) -> bool:
        """Publish the first snapshot. Returns True if the next refresh must be forced."""
        settings = self.settings
        force = False

        if settings.synchronous_initial_load:
            if settings.fail_initial_load_is_fatal:
                self._updater.refresh(False)
            else:
                try:
                    self._updater.refresh(False)
                except Exception as exc:
                    self._sink.emit(
                        EventLevel.ERROR, EventCode.LOAD_FAILED, "Initial database load failed", exc
                    )

        if self._index.snapshot is None and settings.cache_directory is not None:
            try:
                self._index.swap(load_latest(settings.cache_directory))
            except NotFoundError:
                log.debug("no_cache_entry", directory=settings.cache_directory)
            except SnapshotLoadError as exc:
                force = True
                self._sink.emit(
                    EventLevel.ERROR,
                    EventCode.LOAD_FAILED,
                    f"Initial database load from {settings.cache_directory} failed",
                    exc,
                )

        if self._index.snapshot is None:
            self._index.swap(load_embedded())

        return force

    # ------------------------------------------------------------------
    # Refresh lifecycle
    # ------------------------------------------------------------------

    def refresh(self, force: bool = False) -> bool:
        """Run one refresh cycle now. Failures are emitted and re-raised."""
        return self._updater.refresh(force)

    @property
    def scheduler(self) -> RefreshScheduler | None:
        return self._scheduler

    def close(self) -> None:
        """Stop the refresh timer and release the HTTP client. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._scheduler is not None:
            self._scheduler.stop()
        self._close_client()

    def _close_client(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> VendorDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Snapshot | None:
        return self._index.snapshot

    @property
    def version(self) -> datetime | None:
        return self._index.version

    def lookup(self, address: Address) -> VendorRecord | None:
        """Return the record for the OUI of ``address`` or None.

        Raises ``ValueError`` if ``address`` is not a hardware address.
        """
        return self._index.lookup(address)

    def contains(self, address: Address) -> bool:
        return self._index.contains(address)

    def __getitem__(self, key: Address) -> VendorRecord:  # type: ignore[override]
        try:
            record = self._index.lookup(key)
        except ValueError:
            raise KeyError(key) from None
        if record is None:
            raise KeyError(key)
        return record

    def __iter__(self) -> Iterator[str]:
        return (prefix for prefix, _ in self._index.items())

    def __len__(self) -> int:
        return self._index.count()

    def items(self) -> Iterator[tuple[str, VendorRecord]]:  # type: ignore[override]
        return self._index.items()

    def values(self) -> Iterator[VendorRecord]:  # type: ignore[override]
        return (record for _, record in self._index.items())


_default_lock = threading.Lock()
_default_database: VendorDatabase | None = None


def get_default_database() -> VendorDatabase:
    """Return a lazily constructed, process-wide VendorDatabase with default settings."""
    global _default_database
    with _default_lock:
        if _default_database is None:
            _default_database = VendorDatabase()
        return _default_database
