from __future__ import annotations

from macvendor.models.cache import CacheEntry
from macvendor.models.registry import VendorRecord

__all__ = [
    # registry
    "VendorRecord",
    # cache
    "CacheEntry",
]
