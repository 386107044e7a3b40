from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

V = TypeVar("V")


@dataclass(eq=False, slots=True)
class Entry(Generic[V]):
    """One stored value plus its last access time (monotonic seconds).

    ``prev``/``next`` are owned by :class:`RecencyIndex`; nothing else should
    rewrite them.
    """

    key: str
    value: V
    last_access: float
    prev: Optional[Entry[V]] = field(default=None, repr=False)
    next: Optional[Entry[V]] = field(default=None, repr=False)

    def touch(self, now: float) -> None:
        self.last_access = now

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        return now - self.last_access >= ttl_seconds

    def expires_at(self, ttl_seconds: float) -> float:
        return self.last_access + ttl_seconds
