"""Diagnostic events emitted by the refresh machinery.

Collaborators receive events through any object with an ``emit`` method
(see ``EventSink``). The default sink forwards them to structlog so that an
application which never wires its own sink still gets them in its logs.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Protocol

import structlog

log = structlog.get_logger()


class EventLevel(IntEnum):
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


class EventCode(IntEnum):
    CYCLE_STARTED = 1000
    SOURCE_URL = 1001
    TARGET_PATH = 1002
    ENTRIES_FOUND = 1003
    LATEST_ENTRY = 1005
    SKIPPED_FRESH = 1006
    SKIPPED_CHECK_INTERVAL = 1007
    SKIPPED_AFTER_LOCK = 1008
    CACHE_ENTRY_LOADED = 1009
    SNAPSHOT_PUBLISHED = 1010
    ENTRY_PRUNED = 1011
    DOWNLOAD_FAILED = 2000
    PARSE_FAILED = 2001
    LOCK_UNAVAILABLE = 2002
    IO_FAILED = 2003
    LOAD_FAILED = 999999


class EventSink(Protocol):
    def emit(
        self,
        level: EventLevel,
        code: int,
        message: str,
        cause: BaseException | None = None,
    ) -> None: ...


class StructlogEventSink:
    """Forward events to a structlog logger."""

    _methods = {
        EventLevel.DEBUG: "debug",
        EventLevel.INFO: "info",
        EventLevel.WARN: "warning",
        EventLevel.ERROR: "error",
        EventLevel.FATAL: "critical",
    }

    def __init__(self, logger: structlog.typing.FilteringBoundLogger | None = None) -> None:
        self._log = logger if logger is not None else log

    def emit(
        self,
        level: EventLevel,
        code: int,
        message: str,
        cause: BaseException | None = None,
    ) -> None:
        method = getattr(self._log, self._methods[EventLevel(level)])
        if cause is not None:
            method("macvendor_event", code=int(code), detail=message, exc_info=cause)
        else:
            method("macvendor_event", code=int(code), detail=message)
