from loguru import logger

from lru_ttl_cache.cache.lru_cache import CacheOptions, LRUCache, create_lru_cache
from lru_ttl_cache.core.errors import CacheConfigError, CacheError, CacheIntegrityError
from lru_ttl_cache.core.types import CacheStats, EvictionReason

# Library code stays quiet until the host application opts in.
logger.disable("lru_ttl_cache")

__all__ = [
    "CacheConfigError",
    "CacheError",
    "CacheIntegrityError",
    "CacheOptions",
    "CacheStats",
    "EvictionReason",
    "LRUCache",
    "create_lru_cache",
]
