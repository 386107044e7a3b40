"""Public LRU + TTL cache.

Example::

    cache: LRUCache[bytes] = LRUCache(ttl=1000, item_limit=2)
    cache.set("a", b"1")
    cache.get("a")
"""

from __future__ import annotations

import weakref
from time import monotonic
from typing import Any, Generic, List, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lru_ttl_cache.cache.store import CacheStore, Clock, EvictionCallback
from lru_ttl_cache.cache.sweeper import TTLSweeper
from lru_ttl_cache.core.errors import CacheConfigError
from lru_ttl_cache.core.settings import CacheSettings, get_settings
from lru_ttl_cache.core.types import CacheStats

V = TypeVar("V")


class CacheOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    ttl: int = Field(..., gt=0, strict=True, description="Milliseconds an entry may go unaccessed")
    item_limit: int = Field(..., gt=0, strict=True, description="Maximum number of live entries")

    @property
    def ttl_seconds(self) -> float:
        return self.ttl / 1000.0


class LRUCache(Generic[V]):
    """In-process cache bounded by item count (LRU) and idle time (TTL).

    ``has``, ``get`` and ``set`` all count as an access and refresh the
    entry. Expired entries are never returned, even before the background
    sweeper has reclaimed them.

    Parameters
    ----------
    ttl: int
        Milliseconds an entry may go unaccessed before it expires.
    item_limit: int
        Maximum number of live entries.
    clock:
        Zero-argument callable returning monotonic seconds.
    background_sweep: bool
        Start the sweeper thread. Without it expired entries are only dropped
        on access or by :meth:`purge_expired`.
    on_evict:
        Called as ``on_evict(key, value, reason)`` for every removed entry.
        It may close over the cache itself; the sweeper thread holds the
        store weakly, so such a cache is still collected and its sweeper
        cancelled. If a call raises, the remaining entries are still
        reported and the first error is re-raised.
    """

    def __init__(
        self,
        ttl: int,
        item_limit: int,
        *,
        clock: Clock = monotonic,
        background_sweep: bool = True,
        on_evict: Optional[EvictionCallback] = None,
    ) -> None:
        try:
            self.options = CacheOptions(ttl=ttl, item_limit=item_limit)
        except ValidationError as e:
            raise CacheConfigError(f"Invalid cache configuration: {e}") from e

        self._store: CacheStore[V] = CacheStore(
            ttl_seconds=self.options.ttl_seconds,
            item_limit=self.options.item_limit,
            clock=clock,
            on_evict=on_evict,
        )
        self._sweeper = TTLSweeper(self._store)
        # Finalizer holds the sweeper only, never self.
        self._finalizer = weakref.finalize(self, self._sweeper.cancel)
        if background_sweep:
            self._sweeper.start()
        logger.debug(f"Created cache (ttl={ttl}ms, item_limit={item_limit})")

    @classmethod
    def from_settings(cls, cache_settings: Optional[CacheSettings] = None, **kwargs: Any) -> "LRUCache[V]":
        cfg = cache_settings or get_settings().cache
        kwargs.setdefault("background_sweep", cfg.background_sweep)
        return cls(ttl=cfg.ttl_ms, item_limit=cfg.item_limit, **kwargs)

    def has(self, key: str) -> bool:
        return self._store.has(key)

    def get(self, key: str, default: Optional[V] = None) -> Optional[V]:
        return self._store.get(key, default)

    def set(self, key: str, value: V) -> None:
        self._store.set(key, value)

    def peek(self, key: str, default: Optional[V] = None) -> Optional[V]:
        return self._store.peek(key, default)

    def delete(self, key: str) -> bool:
        return self._store.delete(key)

    def clear(self) -> None:
        self._store.clear()

    def keys(self) -> List[str]:
        return self._store.keys()

    def purge_expired(self) -> int:
        return self._store.sweep_expired()

    def stats(self) -> CacheStats:
        return self._store.stats()

    def __len__(self) -> int:
        return len(self._store)

    @property
    def sweeping(self) -> bool:
        return self._sweeper.running

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self) -> None:
        """Cancel the background sweeper. The cache stays usable afterwards."""
        self._finalizer()
        self._sweeper.join(timeout=1.0)

    def __enter__(self) -> "LRUCache[V]":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"LRUCache(ttl={self.options.ttl}, item_limit={self.options.item_limit}, size={len(self)})"


def create_lru_cache(*, ttl: int, item_limit: int, **kwargs: Any) -> LRUCache[Any]:
    return LRUCache(ttl=ttl, item_limit=item_limit, **kwargs)
