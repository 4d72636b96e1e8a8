"""Cross-process lock serialising writers of one cache directory.

The lock is an ``flock`` on a file in the system temp directory whose name
is derived from the cache directory path, so every process pointed at the
same directory contends for the same lock. It is a best-effort guard: a
writer that cannot get the lock within the timeout skips its refresh.
Readers never take it.
"""

from __future__ import annotations

import fcntl
import hashlib
import os
import re
import tempfile
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from macvendor.errors import LockUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterator

log = structlog.get_logger()

LOCK_PREFIX = "macvendor_update_"
MAX_TAIL_LENGTH = 100

_UNSAFE = re.compile(r"[^A-Za-z0-9]")


def lock_name(directory: str | Path) -> str:
    """Return the lock file name for ``directory``.

    The last 100 characters of the absolute path, sanitised, keep the name
    readable; a digest of the full path keeps it unique.
    """
    path = str(Path(directory).expanduser().resolve())
    tail = _UNSAFE.sub("_", path[-MAX_TAIL_LENGTH:])
    digest = hashlib.sha256(path.encode("utf-8")).hexdigest()[:16]
    return f"{LOCK_PREFIX}{tail}_{digest}.lock"


@contextmanager
def directory_lock(
    directory: str | Path,
    timeout: float,
    *,
    poll_interval: float = 0.05,
    lock_dir: str | Path | None = None,
) -> Iterator[Path]:
    """Hold the update lock for ``directory`` for the duration of the block.

    Raises ``LockUnavailableError`` if the lock is not acquired within
    ``timeout`` seconds or the lock file cannot be opened.
    """
    path = Path(lock_dir if lock_dir is not None else tempfile.gettempdir()) / lock_name(directory)
    try:
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o666)
    except OSError as exc:
        raise LockUnavailableError(f"Cannot open lock file {path}: {exc}") from exc

    acquired = False
    start = time.monotonic()
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                acquired = True
                break
            except BlockingIOError:
                if time.monotonic() - start >= timeout:
                    raise LockUnavailableError(
                        f"Timed out after {timeout:g}s waiting for {path}"
                    ) from None
                time.sleep(poll_interval)

        log.debug("update_lock_acquired", path=str(path), waited=time.monotonic() - start)
        yield path
    finally:
        if acquired:
            fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
