from __future__ import annotations

from datetime import datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """One on-disk snapshot file (``oui-<sequence>.txt``)."""

    model_config = ConfigDict(frozen=True)

    path: Path
    sequence: int  # Microseconds since the Unix epoch
    version: datetime  # Derived 1:1 from sequence
