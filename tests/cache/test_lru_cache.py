import time

import pytest
from pydantic import ValidationError
from lru_ttl_cache import (
    CacheConfigError,
    CacheError,
    CacheOptions,
    EvictionReason,
    LRUCache,
    create_lru_cache,
)
from lru_ttl_cache.core.settings import CacheSettings


@pytest.fixture
def cache(clock):
    return LRUCache(ttl=1000, item_limit=2, clock=clock, background_sweep=False)


def test_capacity_scenario(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    assert cache.has("a") is False
    assert cache.has("b") is True
    assert cache.has("c") is True


def test_recency_scenario(cache, clock):
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(1)
    cache.get("a")
    cache.set("c", 3)
    assert cache.has("b") is False
    assert cache.has("a") is True
    assert cache.has("c") is True


def test_expiry_scenario(cache, clock):
    cache.set("a", 1)
    clock.advance(1100)
    assert cache.get("a") is None


def test_update_scenario(cache):
    cache.set("a", 1)
    cache.set("a", 2)
    assert cache.get("a") == 2
    assert len(cache) == 1


def test_expiry_with_real_clock():
    with LRUCache(ttl=50, item_limit=2, background_sweep=False) as cache:
        cache.set("a", 1)
        time.sleep(0.08)
        assert cache.get("a") is None


@pytest.mark.parametrize(
    "ttl,item_limit",
    [
        (1000, 0),
        (0, 2),
        (-5, 2),
        (1000, -1),
        (1.5, 2),
        ("1000", 2),
        (True, 2),
        (1000, None),
    ],
)
def test_invalid_configuration_fails_fast(ttl, item_limit):
    with pytest.raises(CacheConfigError):
        LRUCache(ttl=ttl, item_limit=item_limit)


def test_config_error_is_value_error():
    with pytest.raises(ValueError) as excinfo:
        LRUCache(ttl=1000, item_limit=0)
    assert isinstance(excinfo.value, CacheError)
    assert "item_limit" in str(excinfo.value)


def test_options_are_frozen():
    options = CacheOptions(ttl=1000, item_limit=2)
    assert options.ttl_seconds == 1.0
    with pytest.raises(ValidationError):
        options.ttl = 5


def test_extra_operations(cache, clock):
    cache.set("a", 1)
    clock.advance(1)
    cache.set("b", 2)

    assert cache.keys() == ["a", "b"]
    assert cache.peek("a") == 1
    assert cache.keys() == ["a", "b"]
    assert cache.delete("a") is True
    assert cache.keys() == ["b"]

    clock.advance(1001)
    assert cache.keys() == []
    assert cache.purge_expired() == 1
    assert len(cache) == 0

    cache.set("c", 3)
    cache.clear()
    assert len(cache) == 0


def test_get_default(cache):
    assert cache.get("nope", 42) == 42
    cache.set("zero", 0)
    assert cache.get("zero", 42) == 0


def test_on_evict_receives_reasons(clock):
    events = []
    cache = LRUCache(
        ttl=1000,
        item_limit=1,
        clock=clock,
        background_sweep=False,
        on_evict=lambda key, value, reason: events.append((key, reason)),
    )
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(1500)
    cache.purge_expired()

    assert events == [("a", EvictionReason.CAPACITY), ("b", EvictionReason.EXPIRED)]


def test_stats(cache):
    cache.set("a", 1)
    cache.get("a")
    cache.get("missing")
    cache.set("b", 2)
    cache.set("c", 3)

    stats = cache.stats()
    assert stats.hits == 1
    assert stats.misses == 1
    assert stats.evictions == 1
    assert stats.size == 2


def test_from_settings(clock):
    cache = LRUCache.from_settings(
        CacheSettings(ttl_ms=500, item_limit=3, background_sweep=False), clock=clock
    )
    assert cache.options.ttl == 500
    assert cache.options.item_limit == 3
    assert not cache.sweeping


def test_factory():
    with create_lru_cache(ttl=1000, item_limit=4, background_sweep=False) as cache:
        cache.set("k", {"payload": True})
        assert cache.get("k") == {"payload": True}
        assert "item_limit=4" in repr(cache)
