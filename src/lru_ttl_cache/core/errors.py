class CacheError(Exception):
    """Base error for the cache package."""


class CacheConfigError(CacheError, ValueError):
    """Raised when a cache is constructed with an invalid ttl or item limit."""


class CacheIntegrityError(CacheError, AssertionError):
    """Raised when the key mapping and the recency index disagree.

    This is a programming defect inside the cache, callers cannot recover from it.
    """
