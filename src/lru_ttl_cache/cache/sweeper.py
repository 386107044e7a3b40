"""Background reclamation of expired entries.

Runs on a daemon thread and sleeps on a cancellation event, so ``cancel()``
wakes it immediately. After every sweep it re-arms for the oldest entry's
expiry deadline (never longer than one ttl), which keeps unread entries from
lingering for a second full period.
"""

from __future__ import annotations

import threading
import weakref
from typing import Optional

from loguru import logger

from lru_ttl_cache.cache.store import CacheStore

MIN_DELAY_SECONDS = 0.001


class TTLSweeper:
    def __init__(self, store: CacheStore, *, name: str = "lru-ttl-sweeper") -> None:
        # Held weakly: the thread must not keep the store or its on_evict closure alive.
        self._store_ref = weakref.ref(store)
        self._period = store.ttl_seconds
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._name = name
        self._start_lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def start(self) -> None:
        with self._start_lock:
            if self._cancelled.is_set() or self._thread is not None:
                return
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
        logger.info(f"TTL sweeper started (period={self._period:.3f}s)")

    def cancel(self) -> None:
        """Stop the sweeper. Safe to call more than once, and from any thread."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        logger.info("TTL sweeper stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def next_delay(self) -> float:
        store = self._store_ref()
        if store is None:
            return self._period
        remaining = store.time_to_next_expiry()
        if remaining is None:
            return self._period
        return max(MIN_DELAY_SECONDS, min(remaining, self._period))

    def _run(self) -> None:
        delay = self._period
        while not self._cancelled.wait(delay):
            if not self._sweep_once():
                logger.debug("Cache store collected, sweeper exiting")
                break
            delay = self.next_delay()

    def _sweep_once(self) -> bool:
        store = self._store_ref()
        if store is None:
            return False
        try:
            store.sweep_expired()
        except Exception:
            logger.exception("TTL sweep failed")
        return True
