from dataclasses import dataclass
from enum import Enum


class EvictionReason(str, Enum):
    CAPACITY = "capacity"
    EXPIRED = "expired"
    DELETED = "deleted"
    CLEARED = "cleared"


@dataclass(frozen=True)
class CacheStats:
    hits: int = 0
    misses: int = 0
    evictions: int = 0
    expirations: int = 0
    size: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0
