"""
utils/cache.py
---------------

Bounded in‑process cache with per-entry TTL and optional persistence.
The storefront keeps a single instance for the lifetime of the process
and shares it between product pages, listings and search results.

Each entry records when it was stored and when it expires.  Expired
entries are never returned: they are dropped lazily when read, or in
bulk by :meth:`TemporalCache.cleanup`, which the application calls on
a timer.  When the cache is full, inserting a new key first evicts an
existing one as chosen by the configured eviction policy (insertion
order by default).

Persistence is best effort.  The whole mapping is serialised with
``orjson`` after every mutation and written to a :class:`DurableStore`;
any failure there is logged and otherwise ignored, so the cache keeps
working as a pure in-memory structure.

The cache is not thread-safe.  It is meant to be driven from a single
event loop; a multi-threaded host must serialise access itself.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Protocol, Type, TypeVar

import orjson
from pydantic import TypeAdapter, ValidationError

from storefront.core.config import Settings
from storefront.logging_config import log_event
from storefront.schemas.cache import CacheStats
from storefront.utils.storage import DurableStore, FileStore

T = TypeVar("T")


@dataclass
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at

    def to_record(self) -> Dict[str, Any]:
        return {"value": self.value, "createdAt": self.created_at, "expiresAt": self.expires_at}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CacheEntry":
        return cls(
            value=record["value"],
            created_at=float(record["createdAt"]),
            expires_at=float(record["expiresAt"]),
        )


# -----------------------------------------------------------------------------
# Eviction policies
# -----------------------------------------------------------------------------


class EvictionPolicy(Protocol):
    name: str

    def touch(self, entries: Dict[str, CacheEntry], key: str) -> None: ...

    def victim(self, entries: Dict[str, CacheEntry]) -> str: ...


class FifoEviction:
    """Evict the key that was inserted first.

    Reads do not change the order and overwriting a key keeps its
    original position.
    """

    name = "fifo"

    def touch(self, entries: Dict[str, CacheEntry], key: str) -> None:
        return None

    def victim(self, entries: Dict[str, CacheEntry]) -> str:
        return next(iter(entries))


class LruEviction(FifoEviction):
    """Evict the key that was used least recently."""

    name = "lru"

    def touch(self, entries: Dict[str, CacheEntry], key: str) -> None:
        entries[key] = entries.pop(key)


EVICTION_POLICIES: Dict[str, Type[FifoEviction]] = {
    FifoEviction.name: FifoEviction,
    LruEviction.name: LruEviction,
}


# -----------------------------------------------------------------------------
# Cache
# -----------------------------------------------------------------------------


class TemporalCache:
    """Bounded key/value cache with time to live.

    :param max_entries: maximum number of entries held at once
    :param default_ttl: lifetime in seconds used when ``set`` gets no ttl
    :param store: durable store; persistence is enabled iff one is given
    :param storage_key: record name the mapping is saved under
    :param eviction: eviction policy, :class:`FifoEviction` by default
    :param clock: returns the current time in seconds
    """

    def __init__(
        self,
        max_entries: int = 2000,
        default_ttl: float = 600.0,
        *,
        store: Optional[DurableStore] = None,
        storage_key: str = "productCache",
        eviction: Optional[EvictionPolicy] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self.default_ttl = default_ttl
        self.storage_key = storage_key
        self._store = store
        self._eviction: EvictionPolicy = eviction or FifoEviction()
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

        if self._store is not None:
            self._load()
            self.cleanup()

    @classmethod
    def from_settings(cls, settings: Settings, *, store: Optional[DurableStore] = None) -> "TemporalCache":
        """Build the process-wide cache from configuration.

        When persistence is enabled and no store is passed, a
        :class:`FileStore` rooted at ``settings.cache_storage_dir`` is used.
        """
        if settings.cache_persistence_enabled and store is None:
            store = FileStore(settings.cache_storage_dir)
        if not settings.cache_persistence_enabled:
            store = None
        return cls(
            max_entries=settings.cache_max_entries,
            default_ttl=settings.cache_default_ttl,
            store=store,
            storage_key=settings.cache_storage_key,
            eviction=EVICTION_POLICIES[settings.cache_eviction_policy](),
        )

    @property
    def persistence_enabled(self) -> bool:
        return self._store is not None

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds.

        Overwriting an existing key resets its expiry and never evicts.
        A new key evicts one existing entry first if the cache is full.
        """
        now = self._clock()
        entry = CacheEntry(
            value=value,
            created_at=now,
            expires_at=now + (self.default_ttl if ttl is None else ttl),
        )
        if key in self._entries:
            self._entries[key] = entry
            self._eviction.touch(self._entries, key)
        else:
            while len(self._entries) >= self.max_entries:
                victim = self._eviction.victim(self._entries)
                del self._entries[victim]
                log_event(logging.DEBUG, "cache_evicted", key=victim, policy=self._eviction.name)
            self._entries[key] = entry
        self._persist()

    def get(self, key: str) -> Any:
        """Return the value stored under ``key``, or ``None``.

        An expired entry is removed as a side effect.
        """
        entry = self._live_entry(key)
        return None if entry is None else entry.value

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
        self._persist()

    def delete_many(self, keys: Iterable[str]) -> int:
        """Remove several keys and persist once.  Returns how many existed."""
        removed = 0
        for key in keys:
            if self._entries.pop(key, None) is not None:
                removed += 1
        if removed:
            self._persist()
        return removed

    def clear(self) -> None:
        """Remove every entry.  The durable record is removed, not emptied."""
        self._entries.clear()
        if self._store is not None:
            try:
                self._store.remove(self.storage_key)
            except Exception as exc:
                log_event(logging.WARNING, "cache_persist_failed", operation="remove", detail=str(exc))

    def cleanup(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            self._persist()
        return len(expired)

    def keys(self) -> List[str]:
        """Snapshot of the keys currently held, expired or not."""
        return list(self._entries)

    def get_stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_entries=self.max_entries,
            default_ttl=self.default_ttl,
            persistence_enabled=self.persistence_enabled,
            eviction_policy=self._eviction.name,
        )

    def close(self) -> None:
        """Flush the mapping to the durable store.

        The cache stays usable afterwards; this only guarantees that the
        latest state is on disk when the process shuts down.
        """
        self._persist()

    # -------------------------------------------------------------------------
    # internals
    # -------------------------------------------------------------------------

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            self._persist()
            return None
        self._eviction.touch(self._entries, key)
        return entry

    def _persist(self) -> None:
        if self._store is None:
            return
        try:
            payload = orjson.dumps([[key, entry.to_record()] for key, entry in self._entries.items()])
            self._store.write(self.storage_key, payload.decode("utf-8"))
        except Exception as exc:
            log_event(logging.WARNING, "cache_persist_failed", operation="write", detail=str(exc))

    def _load(self) -> None:
        assert self._store is not None
        try:
            text = self._store.read(self.storage_key)
            if not text:
                return
            entries = {str(key): CacheEntry.from_record(record) for key, record in orjson.loads(text)}
        except Exception as exc:
            log_event(logging.WARNING, "cache_load_failed", detail=str(exc))
            self._entries = {}
            return
        # A smaller capacity than last run keeps only the newest entries.
        overflow = len(entries) - self.max_entries
        for key in list(entries)[:max(overflow, 0)]:
            del entries[key]
        self._entries = entries
        log_event(logging.INFO, "cache_loaded", size=len(entries))


# -----------------------------------------------------------------------------
# Typed regions
# -----------------------------------------------------------------------------


class CacheRegion(Generic[T]):
    """Typed view over a shared :class:`TemporalCache`.

    Keys are namespaced as ``"<prefix>:<key>"``.  Values are dumped to
    plain JSON data when stored and validated back to ``T`` when read,
    so a region survives the cache being persisted and reloaded.
    """

    def __init__(self, cache: TemporalCache, prefix: str, value_type: Any) -> None:
        self.cache = cache
        self.prefix = prefix
        self._adapter: TypeAdapter[T] = TypeAdapter(value_type)

    def full_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        data = self._adapter.dump_python(value, mode="json", by_alias=True)
        self.cache.set(self.full_key(key), data, ttl)

    def get(self, key: str) -> Optional[T]:
        full_key = self.full_key(key)
        raw = self.cache.get(full_key)
        if raw is None:
            return None
        try:
            return self._adapter.validate_python(raw)
        except ValidationError as exc:
            log_event(logging.WARNING, "cache_region_invalid", key=full_key, errors=exc.error_count())
            self.cache.delete(full_key)
            return None

    def has(self, key: str) -> bool:
        return self.cache.has(self.full_key(key))

    def delete(self, key: str) -> None:
        self.cache.delete(self.full_key(key))

    def keys(self) -> List[str]:
        marker = f"{self.prefix}:"
        return [key[len(marker):] for key in self.cache.keys() if key.startswith(marker)]

    def clear(self) -> int:
        return self.cache.delete_many(self.full_key(key) for key in self.keys())
