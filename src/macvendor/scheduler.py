"""Background timer driving periodic refreshes.

One daemon thread per database. A tick never raises and the next tick runs
on schedule. ``MacVendorError`` and ``OSError`` failures were already
reported by the refresh itself; anything else is emitted here.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import structlog

from macvendor.errors import MacVendorError
from macvendor.events import EventCode, EventLevel

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import timedelta

    from macvendor.events import EventSink

log = structlog.get_logger()


class RefreshScheduler:
    """Calls ``refresh(force)`` every ``interval``.

    ``force`` starts out as ``force_first`` (set when the initial load
    failed) and is cleared after the first successful forced cycle.
    """

    def __init__(
        self,
        refresh: Callable[[bool], object],
        interval: timedelta,
        sink: EventSink,
        *,
        immediate: bool = True,
        force_first: bool = False,
    ) -> None:
        self._refresh = refresh
        self._interval = interval.total_seconds()
        self._sink = sink
        self._immediate = immediate
        self._force = force_first
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self.ticks = 0

    @property
    def force(self) -> bool:
        return self._force

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self._thread is not None or self._stopped.is_set():
                return
            self._thread = threading.Thread(
                target=self._run, name="macvendor-refresh", daemon=True
            )
            self._thread.start()
        log.debug("refresh_scheduler_started", interval=self._interval, immediate=self._immediate)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the timer and wait for an in-flight tick to finish. Idempotent."""
        self._stopped.set()
        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def tick(self) -> None:
        """Run one refresh cycle, reporting instead of raising on failure."""
        force = self._force
        try:
            self._refresh(force)
        except (MacVendorError, OSError):
            log.debug("scheduled_refresh_failed", forced=force, exc_info=True)
        except Exception as exc:
            self._sink.emit(
                EventLevel.ERROR, EventCode.LOAD_FAILED, "Scheduled refresh failed", exc
            )
        else:
            if force:
                self._force = False
        finally:
            self.ticks += 1

    def _run(self) -> None:
        if not self._immediate and self._stopped.wait(self._interval):
            return
        while not self._stopped.is_set():
            self.tick()
            if self._stopped.wait(self._interval):
                return
