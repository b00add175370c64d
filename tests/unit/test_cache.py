"""
Unit Tests for TTLCache

These tests verify that the cache:
- Serves entries while fresh and treats them as missing once stale
- Runs the fetch at most once per key within the TTL
- Coalesces concurrent misses into a single fetch
- Never stores a failed fetch

A fake clock is injected so no test sleeps.

Run with:
    pytest tests/unit/test_cache.py -v
"""

import asyncio

import pytest

from core.cache import TTLCache, cache_key


# ============================================
# Fixtures
# ============================================

class FakeClock:
    """Manually advanced monotonic clock"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=1800, clock=clock)


# ============================================
# Tests for Keys and Basic Access
# ============================================

class TestCacheKey:
    """Tests for cache_key"""

    def test_symbol_is_lowercased(self):
        assert cache_key("coingecko", "price", "BTC") == "coingecko-price-btc"

    def test_provider_and_kind_are_kept(self):
        assert cache_key("fmp", "historical", "AAPL") == "fmp-historical-aapl"


class TestFreshness:
    """Tests for get/set and TTL expiry"""

    def test_missing_key_returns_none(self, cache):
        assert cache.get("nope") is None
        assert "nope" not in cache

    def test_fresh_entry_is_returned(self, cache, clock):
        cache.set("k", "43250")
        clock.advance(1799)
        assert cache.get("k") == "43250"
        assert "k" in cache

    def test_entry_expires_at_ttl(self, cache, clock):
        """Verify an entry exactly ttl seconds old is stale"""
        cache.set("k", "43250")
        clock.advance(1800)
        assert cache.get("k") is None

    def test_stale_entry_is_kept_until_overwritten(self, cache, clock):
        cache.set("k", "1")
        clock.advance(5000)
        assert len(cache) == 1
        assert cache.age("k") == 5000

        cache.set("k", "2")
        assert cache.get("k") == "2"
        assert cache.age("k") == 0

    def test_clear(self, cache):
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()
        assert len(cache) == 0

    def test_non_positive_ttl_rejected(self, clock):
        with pytest.raises(ValueError):
            TTLCache(ttl_seconds=0, clock=clock)


# ============================================
# Tests for get_or_fetch
# ============================================

class TestGetOrFetch:
    """Tests for the coalesced fetch path"""

    @pytest.mark.asyncio
    async def test_fetches_once_within_ttl(self, cache, clock):
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            return "43250"

        assert await cache.get_or_fetch("k", fetch) == "43250"
        clock.advance(60)
        assert await cache.get_or_fetch("k", fetch) == "43250"
        assert calls == 1

    @pytest.mark.asyncio
    async def test_refetches_after_ttl(self, cache, clock):
        values = iter(["100.0", "101.0"])

        async def fetch():
            return next(values)

        assert await cache.get_or_fetch("k", fetch) == "100.0"
        clock.advance(1801)
        assert await cache.get_or_fetch("k", fetch) == "101.0"

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, cache):
        """Verify three simultaneous callers trigger one upstream call"""
        calls = 0
        gate = asyncio.Event()

        async def fetch():
            nonlocal calls
            calls += 1
            await gate.wait()
            return "2291"

        tasks = [asyncio.create_task(cache.get_or_fetch("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        assert cache.inflight_count() == 1

        gate.set()
        results = await asyncio.gather(*tasks)

        assert results == ["2291", "2291", "2291"]
        assert calls == 1
        assert cache.inflight_count() == 0

    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self, cache):
        attempts = 0

        async def flaky():
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise RuntimeError("upstream down")
            return "1.08"

        with pytest.raises(RuntimeError):
            await cache.get_or_fetch("k", flaky)
        assert len(cache) == 0
        assert cache.inflight_count() == 0

        assert await cache.get_or_fetch("k", flaky) == "1.08"
        assert attempts == 2

    @pytest.mark.asyncio
    async def test_failure_reaches_every_waiter(self, cache):
        gate = asyncio.Event()

        async def failing():
            await gate.wait()
            raise RuntimeError("upstream down")

        tasks = [asyncio.create_task(cache.get_or_fetch("k", failing)) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_other_waiters(self, cache):
        """Verify a waiter still gets the value when the caller that started the fetch goes away"""
        gate = asyncio.Event()

        async def fetch():
            await gate.wait()
            return "1.00"

        first = asyncio.create_task(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        second = asyncio.create_task(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)

        first.cancel()
        gate.set()

        assert await second == "1.00"
        with pytest.raises(asyncio.CancelledError):
            await first
        assert cache.get("k") == "1.00"
        assert cache.inflight_count() == 0

    @pytest.mark.asyncio
    async def test_base_exception_reaches_waiters(self, cache):
        """Verify a non-Exception error still resolves every waiter instead of hanging"""

        class Aborted(BaseException):
            pass

        gate = asyncio.Event()

        async def fetch():
            await gate.wait()
            raise Aborted()

        first = asyncio.create_task(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        second = asyncio.create_task(cache.get_or_fetch("k", fetch))
        await asyncio.sleep(0)
        gate.set()

        for waiter in (first, second):
            with pytest.raises(Aborted):
                await asyncio.wait_for(waiter, timeout=1)
        assert len(cache) == 0
        assert cache.inflight_count() == 0
