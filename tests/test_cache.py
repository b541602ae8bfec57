"""Unit tests for the in-process TTL cache."""

import asyncio

import pytest

from constants import RESOURCES, CacheTTL, item_key, list_key, resource_prefix
from core.cache import MemoryCache


class TestGetSet:

    def test_set_and_get(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("key1", {"data": [1, 2, 3]}, ttl_ms=1000)
        assert cache.get("key1") == {"data": [1, 2, 3]}

    def test_get_missing_returns_default(self, clock):
        cache = MemoryCache(clock=clock)
        assert cache.get("nonexistent") is None
        assert cache.get("nonexistent", "fallback") == "fallback"

    def test_value_visible_until_ttl_elapses(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("k", "v", ttl_ms=1000)
        clock.advance(999)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None

    def test_expired_entry_is_purged_on_access(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("k", "v", ttl_ms=10)
        clock.advance(50)
        assert cache.stats()["size"] == 1
        cache.get("k")
        assert cache.stats()["size"] == 0

    def test_default_ttl_applies(self, clock):
        cache = MemoryCache(default_ttl_ms=5000, clock=clock)
        cache.set("k", "v")
        clock.advance(4999)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None

    def test_set_overwrites_and_restarts_ttl(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("k", "old", ttl_ms=1000)
        clock.advance(800)
        cache.set("k", "new", ttl_ms=1000)
        clock.advance(800)
        assert cache.get("k") == "new"

    def test_value_stored_by_reference(self, clock):
        cache = MemoryCache(clock=clock)
        payload = [1]
        cache.set("k", payload)
        payload.append(2)
        assert cache.get("k") is payload

    def test_empty_key_is_valid(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("", "empty")
        assert cache.get("") == "empty"

    def test_delete_and_clear(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert cache.get("a") is None
        cache.clear()
        assert cache.stats() == {"size": 0, "keys": []}


class TestCacheAside:

    def test_miss_fetches_and_stores(self, clock, run):
        cache = MemoryCache(clock=clock)
        calls = []

        async def fetcher():
            calls.append(1)
            return ["row"]

        assert run(cache.cache_aside("x", fetcher)) == ["row"]
        assert cache.get("x") == ["row"]
        assert len(calls) == 1

    def test_hit_skips_second_fetcher(self, clock, run):
        cache = MemoryCache(clock=clock)

        async def fetcher_a():
            return "A"

        async def fetcher_b():
            raise AssertionError("fetcher_b must not run")

        async def scenario():
            first = await cache.cache_aside("x", fetcher_a)
            second = await cache.cache_aside("x", fetcher_b)
            return first, second

        assert run(scenario()) == ("A", "A")

    def test_refetches_after_expiry(self, clock, run):
        cache = MemoryCache(clock=clock)
        values = iter(["first", "second"])

        async def fetcher():
            return next(values)

        assert run(cache.cache_aside("x", fetcher, ttl_ms=100)) == "first"
        clock.advance(100)
        assert run(cache.cache_aside("x", fetcher, ttl_ms=100)) == "second"

    def test_cached_none_counts_as_hit(self, clock, run):
        cache = MemoryCache(clock=clock)
        calls = []

        async def fetcher():
            calls.append(1)
            return None

        run(cache.cache_aside("x", fetcher))
        run(cache.cache_aside("x", fetcher))
        assert len(calls) == 1

    def test_failed_fetcher_leaves_no_trace(self, clock, run):
        cache = MemoryCache(clock=clock)

        async def failing():
            raise RuntimeError("backend down")

        with pytest.raises(RuntimeError, match="backend down"):
            run(cache.cache_aside("x", failing))
        assert cache.get("x") is None
        assert "x" not in cache.stats()["keys"]

    def test_concurrent_misses_are_not_coalesced(self, clock, run):
        cache = MemoryCache(clock=clock)
        calls = []

        async def fetcher():
            calls.append(1)
            await asyncio.sleep(0.01)
            return len(calls)

        async def scenario():
            return await asyncio.gather(
                cache.cache_aside("x", fetcher),
                cache.cache_aside("x", fetcher),
            )

        run(scenario())
        assert len(calls) == 2
        assert cache.get("x") in (1, 2)


class TestInvalidation:

    def test_invalidate_by_prefix(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("leads:1:10:asc", "v1")
        cache.set("leads:1:10:desc", "v2")
        cache.set("customers:1:10:asc", "v3")

        removed = cache.invalidate_by_prefix("leads:")

        assert removed == 2
        assert cache.get("leads:1:10:asc") is None
        assert cache.get("leads:1:10:desc") is None
        assert cache.get("customers:1:10:asc") == "v3"

    def test_invalidate_unknown_prefix_is_noop(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("leads:1", "v")
        assert cache.invalidate_by_prefix("orders:") == 0
        assert cache.get("leads:1") == "v"

    def test_resource_prefix_covers_lists_and_items(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set(list_key("leads", 1, 20, "created_at", "desc"), [])
        cache.set(item_key("leads", "42"), {})
        cache.set(item_key("leadsources", "1"), {})

        cache.invalidate_by_prefix(resource_prefix("leads"))

        assert cache.stats()["keys"] == ["leadsources:1"]


class TestCleanup:

    def test_cleanup_keeps_live_entries(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("long", "keep", ttl_ms=CacheTTL.VERY_LONG)
        cache.set("short", "drop", ttl_ms=0)

        removed = cache.cleanup()

        assert removed == 1
        assert cache.stats() == {"size": 1, "keys": ["long"]}
        assert cache.get("long") == "keep"

    def test_stats_include_unswept_expired_keys(self, clock):
        cache = MemoryCache(clock=clock)
        cache.set("a", 1, ttl_ms=10)
        clock.advance(20)
        assert cache.stats() == {"size": 1, "keys": ["a"]}
        cache.cleanup()
        assert cache.stats() == {"size": 0, "keys": []}


class TestKeys:

    def test_list_key_layout(self):
        assert list_key("leads", 2, 50, "created_at", "asc", "new") == "leads:2:50:created_at:asc:status=new"

    def test_list_key_without_filter(self):
        assert list_key("leads", 1, 20, "created_at", "desc") == "leads:1:20:created_at:desc:all"

    def test_status_all_filter_does_not_collide_with_unfiltered(self):
        filtered = list_key("leads", 1, 20, "created_at", "desc", "all")
        assert filtered == "leads:1:20:created_at:desc:status=all"
        assert filtered != list_key("leads", 1, 20, "created_at", "desc")

    def test_empty_status_is_unfiltered(self):
        assert list_key("leads", 1, 20, "created_at", "desc", "") == list_key("leads", 1, 20, "created_at", "desc")

    def test_reference_resources_keep_records_longer(self):
        assert RESOURCES["products"].item_ttl_ms == CacheTTL.LONG
        assert RESOURCES["leads"].item_ttl_ms == CacheTTL.MEDIUM
        assert all(r.list_ttl_ms == CacheTTL.SHORT for r in RESOURCES.values())

    def test_item_key_layout(self):
        assert item_key("customers", "abc") == "customers:abc"
