"""
TTL Cache

In-memory key -> (value, timestamp) store consulted before any outbound call.

Semantics:
    - An entry is fresh while ``clock() - timestamp < ttl``; a stale entry is
      treated as a miss but stays stored until the next successful write
      overwrites it. There is no eviction thread and no capacity bound.
    - ``get_or_fetch`` coalesces concurrent misses: the first caller starts
      the fetch task, later callers for the same key await the same task. A
      failed fetch is raised to every waiter and nothing is cached.

The cache lives on the asyncio event loop. Reads and writes never await, so a
single entry cannot be torn by a concurrent writer. The fetch itself runs in
its own task, so a cancelled caller leaves it running for the other waiters.

Usage:
    cache = TTLCache(ttl_seconds=1800)
    price = await cache.get_or_fetch(cache_key("fmp", "price", "AAPL"), fetch)
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from core.logging import get_logger


logger = get_logger(__name__)

Clock = Callable[[], float]


def cache_key(provider: str, kind: str, symbol: str) -> str:
    """
    Build the cache key for a provider/kind/symbol triple.

    Example:
        >>> cache_key("coingecko", "price", "BTC")
        'coingecko-price-btc'
    """
    return f"{provider}-{kind}-{symbol.lower()}"


class TTLCache:
    """
    Time-to-live cache with an injectable clock.

    Attributes:
        ttl: Freshness window in seconds
        clock: Zero-argument callable returning the current time in seconds

    Example:
        >>> now = [0.0]
        >>> cache = TTLCache(ttl_seconds=60, clock=lambda: now[0])
        >>> cache.set("k", "v")
        >>> now[0] = 61
        >>> cache.get("k") is None
        True
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Clock = time.monotonic):
        if ttl_seconds is None:
            from core.config import settings
            ttl_seconds = settings.cache_ttl

        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")

        self.ttl = float(ttl_seconds)
        self.clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._inflight: Dict[str, asyncio.Future] = {}

    # ============================================
    # Basic Access
    # ============================================

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value if fresh, else None."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, stored_at = entry
        if self.clock() - stored_at < self.ttl:
            return value
        return None

    def set(self, key: str, value: Any) -> None:
        """Store or overwrite a value, stamped with the current clock."""
        self._entries[key] = (value, self.clock())

    def age(self, key: str) -> Optional[float]:
        """Seconds since the entry was written (fresh or stale), or None."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self.clock() - entry[1]

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        """Number of stored entries, stale ones included."""
        return len(self._entries)

    # ============================================
    # Coalesced Fetch
    # ============================================

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """
        Return the fresh cached value or run ``fetch`` once for the key.

        Args:
            key: Cache key (see cache_key)
            fetch: Zero-argument coroutine function producing the value

        Returns:
            The cached or freshly fetched value

        Raises:
            Whatever ``fetch`` raises; every concurrent waiter receives it
        """
        cached = self.get(key)
        if cached is not None:
            logger.debug(f"Cache hit: {key} (age {self.age(key):.0f}s)")
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.get_running_loop().create_task(self._fetch_and_store(key, fetch))
            task.add_done_callback(_consume_result)
            self._inflight[key] = task
        else:
            logger.debug(f"Joining in-flight fetch: {key}")

        # cancelling one caller must not cancel the fetch the others are waiting on
        return await asyncio.shield(task)

    async def _fetch_and_store(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        try:
            value = await fetch()
        finally:
            self._inflight.pop(key, None)
        self.set(key, value)
        return value

    def inflight_count(self) -> int:
        return len(self._inflight)


def _consume_result(task: "asyncio.Task") -> None:
    # a fetch whose callers were all cancelled must not log "exception was never retrieved"
    if not task.cancelled():
        task.exception()
