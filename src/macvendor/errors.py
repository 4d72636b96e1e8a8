"""Error types raised by macvendor.

Every error carries a stable ``code`` and a ``recoverable`` flag. None of
them is fatal to lookups: a failed load or refresh leaves the previously
published snapshot in place.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    FORMAT_ERROR = "FORMAT_ERROR"
    NOT_FOUND = "NOT_FOUND"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    LOCK_UNAVAILABLE = "LOCK_UNAVAILABLE"
    SNAPSHOT_LOAD_FAILED = "SNAPSHOT_LOAD_FAILED"


class MacVendorError(Exception):
    """Base class for all macvendor errors."""

    code: ErrorCode = ErrorCode.FORMAT_ERROR
    recoverable: bool = True

    def __init__(self, message: str, *, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return self.message


class FormatError(MacVendorError):
    """The registry text is malformed. Aborts the load or refresh that read it."""

    code = ErrorCode.FORMAT_ERROR
    recoverable = False


class NotFoundError(MacVendorError):
    """No usable cache entry exists."""

    code = ErrorCode.NOT_FOUND


class TransportError(MacVendorError):
    """Downloading the registry failed (network error or non-2xx status)."""

    code = ErrorCode.TRANSPORT_ERROR

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LockUnavailableError(MacVendorError):
    """The cross-process update lock could not be acquired in time."""

    code = ErrorCode.LOCK_UNAVAILABLE


class SnapshotLoadError(MacVendorError):
    """A cache entry exists but could not be read or parsed."""

    code = ErrorCode.SNAPSHOT_LOAD_FAILED
