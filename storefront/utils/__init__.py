"""
Low-level building blocks used by the services: the temporal cache and
its typed regions, durable stores for cache persistence, and helpers
for sorting and paginating product lists.
"""

from __future__ import annotations

from .cache import CacheEntry, CacheRegion, FifoEviction, LruEviction, TemporalCache
from .storage import DurableStore, FileStore, MemoryStore

__all__ = [
    "CacheEntry",
    "CacheRegion",
    "DurableStore",
    "FifoEviction",
    "FileStore",
    "LruEviction",
    "MemoryStore",
    "TemporalCache",
]
