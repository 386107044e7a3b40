"""Authoritative owner of live cache entries.

Holds the key -> entry mapping together with the recency index and applies
both eviction rules: capacity (least recently used goes first) and TTL (lazy
check on every access, eager removal on sweep). All state changes happen
under one re-entrant lock so a sweep never interleaves with a foreground call.
"""

from __future__ import annotations

import threading
from time import monotonic
from typing import Callable, Dict, List, Optional, Tuple, TypeVar, Generic

from loguru import logger

from lru_ttl_cache.cache.entry import Entry
from lru_ttl_cache.cache.recency import RecencyIndex
from lru_ttl_cache.core.errors import CacheIntegrityError
from lru_ttl_cache.core.types import CacheStats, EvictionReason

V = TypeVar("V")

Clock = Callable[[], float]
EvictionCallback = Callable[[str, V, EvictionReason], None]
_Evicted = List[Tuple[Entry[V], EvictionReason]]


class CacheStore(Generic[V]):
    def __init__(
        self,
        *,
        ttl_seconds: float,
        item_limit: int,
        clock: Clock = monotonic,
        on_evict: Optional[EvictionCallback] = None,
    ) -> None:
        self._ttl = float(ttl_seconds)
        self._limit = int(item_limit)
        self._clock = clock
        self._on_evict = on_evict
        self._entries: Dict[str, Entry[V]] = {}
        self._recency: RecencyIndex[V] = RecencyIndex()
        self._lock = threading.RLock()

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expirations = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def item_limit(self) -> int:
        return self._limit

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def has(self, key: str) -> bool:
        evicted: _Evicted = []
        with self._lock:
            entry = self._lookup(key, self._clock(), evicted)
            self._count_lookup(entry)
            found = entry is not None
        self._notify(evicted)
        return found

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        evicted: _Evicted = []
        with self._lock:
            entry = self._lookup(key, self._clock(), evicted)
            self._count_lookup(entry)
            value = default if entry is None else entry.value
        self._notify(evicted)
        return value

    def set(self, key: str, value: V) -> None:
        evicted: _Evicted = []
        with self._lock:
            now = self._clock()
            entry = self._lookup(key, now, evicted)
            if entry is not None:
                # Same entry keeps its identity, _lookup already touched it.
                entry.value = value
            else:
                while len(self._entries) >= self._limit:
                    evicted.append(self._evict_oldest(now))
                entry = Entry(key=key, value=value, last_access=now)
                self._entries[key] = entry
                self._recency.append(entry)
        self._notify(evicted)

    def peek(self, key: str, default: Optional[V] = None) -> Optional[V]:
        """Return the value without refreshing its recency."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(self._clock(), self._ttl):
                return default
            return entry.value

    def delete(self, key: str) -> bool:
        evicted: _Evicted = []
        with self._lock:
            entry = self._lookup(key, self._clock(), evicted, touch=False)
            if entry is not None:
                self._discard(entry)
                evicted.append((entry, EvictionReason.DELETED))
        self._notify(evicted)
        return entry is not None

    def clear(self) -> None:
        with self._lock:
            evicted: _Evicted = [(entry, EvictionReason.CLEARED) for entry in self._recency]
            self._entries.clear()
            self._recency.clear()
        logger.debug(f"Cleared {len(evicted)} entries")
        self._notify(evicted)

    def keys(self) -> List[str]:
        """Live keys, least recently used first."""
        with self._lock:
            now = self._clock()
            return [entry.key for entry in self._recency if not entry.is_expired(now, self._ttl)]

    def sweep_expired(self) -> int:
        evicted: _Evicted = []
        with self._lock:
            now = self._clock()
            # Recency order is last_access order, so the first live entry ends the scan.
            while True:
                oldest = self._recency.oldest()
                if oldest is None or not oldest.is_expired(now, self._ttl):
                    break
                self._discard(oldest)
                self._expirations += 1
                evicted.append((oldest, EvictionReason.EXPIRED))
        if evicted:
            logger.debug(f"Swept {len(evicted)} expired entries")
        self._notify(evicted)
        return len(evicted)

    def time_to_next_expiry(self) -> Optional[float]:
        """Seconds until the least recently used entry expires, None if empty."""
        with self._lock:
            oldest = self._recency.oldest()
            if oldest is None:
                return None
            return max(0.0, oldest.expires_at(self._ttl) - self._clock())

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                expirations=self._expirations,
                size=len(self._entries),
            )

    def verify(self) -> None:
        """Check that the mapping and the recency index describe the same entries."""
        with self._lock:
            if len(self._entries) != len(self._recency):
                raise CacheIntegrityError(
                    f"mapping holds {len(self._entries)} entries, recency index {len(self._recency)}"
                )
            if len(self._entries) > self._limit:
                raise CacheIntegrityError(f"{len(self._entries)} entries exceed limit {self._limit}")
            previous = None
            for entry in self._recency:
                if self._entries.get(entry.key) is not entry:
                    raise CacheIntegrityError(f"entry {entry.key!r} is linked but not mapped")
                if previous is not None and previous.last_access > entry.last_access:
                    raise CacheIntegrityError(f"entry {entry.key!r} is out of recency order")
                previous = entry

    def _lookup(
        self, key: str, now: float, evicted: _Evicted, touch: bool = True
    ) -> Optional[Entry[V]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(now, self._ttl):
            self._discard(entry)
            self._expirations += 1
            evicted.append((entry, EvictionReason.EXPIRED))
            logger.debug(f"Entry {key!r} expired on access")
            return None
        if touch:
            entry.touch(now)
            self._recency.touch(entry)
        return entry

    def _evict_oldest(self, now: float) -> Tuple[Entry[V], EvictionReason]:
        oldest = self._recency.evict_oldest()
        if oldest is None:
            raise CacheIntegrityError("recency index is empty while the mapping is full")
        if self._entries.pop(oldest.key, None) is not oldest:
            raise CacheIntegrityError(f"evicted entry {oldest.key!r} was not mapped")
        if oldest.is_expired(now, self._ttl):
            self._expirations += 1
            return oldest, EvictionReason.EXPIRED
        self._evictions += 1
        logger.debug(f"Evicted least recently used entry {oldest.key!r}")
        return oldest, EvictionReason.CAPACITY

    def _discard(self, entry: Entry[V]) -> None:
        self._recency.remove(entry)
        del self._entries[entry.key]

    def _count_lookup(self, entry: Optional[Entry[V]]) -> None:
        if entry is None:
            self._misses += 1
        else:
            self._hits += 1

    def _notify(self, evicted: _Evicted) -> None:
        if self._on_evict is None:
            return
        # Every removed entry is reported; the first callback error is re-raised afterwards.
        first_error: Optional[BaseException] = None
        for entry, reason in evicted:
            try:
                self._on_evict(entry.key, entry.value, reason)
            except Exception as e:
                if first_error is None:
                    first_error = e
                else:
                    logger.opt(exception=e).warning(f"on_evict failed for {entry.key!r}")
        if first_error is not None:
            raise first_error
