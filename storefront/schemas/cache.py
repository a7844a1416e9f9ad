"""
schemas/cache.py
-----------------

Response models describing the state of the product cache.
"""

from __future__ import annotations

from pydantic import BaseModel


class CacheStats(BaseModel):
    size: int
    max_entries: int
    default_ttl: float
    persistence_enabled: bool = False
    eviction_policy: str = "fifo"


class CleanupResult(BaseModel):
    removed: int
    stats: CacheStats
