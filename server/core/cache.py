"""In-process TTL cache with cache-aside reads and prefix invalidation.

Single-process only: every worker keeps its own entries. Values are stored by
reference and never inspected. Expired entries are dropped lazily on access
and by a periodic sweep so keys nobody reads again do not pile up.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

from core.cleanup import PeriodicSweeper
from core.clock import Clock, now_ms
from core.logging import get_logger, log_cache_operation

logger = get_logger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry:
    """One cached value with its insertion time and lifetime (both in ms)."""
    value: Any
    stored_at: float
    ttl_ms: float

    @property
    def expires_at(self) -> float:
        return self.stored_at + self.ttl_ms

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class MemoryCache:
    """Key/value cache with per-entry TTL.

    Not thread-safe. All methods run to completion without suspending, so on
    a single event loop no two calls interleave. The one exception is
    ``cache_aside`` while it awaits the fetcher: concurrent misses for the
    same key each run their own fetch and the last one to finish wins.
    """

    def __init__(self, default_ttl_ms: float = 300_000, sweep_interval: float = 600,
                 clock: Clock = now_ms):
        self.default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self.sweeper = PeriodicSweeper("cache", self.cleanup, sweep_interval)

    # ------------------------------------------------------------------
    # Basic operations
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            log_cache_operation(logger, "get", key, hit=False)
            return default
        if entry.is_expired(self._clock()):
            del self._entries[key]
            log_cache_operation(logger, "get", key, hit=False, expired=True)
            return default
        log_cache_operation(logger, "get", key, hit=True)
        return entry.value

    def set(self, key: str, value: Any, ttl_ms: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry."""
        ttl_ms = self.default_ttl_ms if ttl_ms is None else ttl_ms
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock(), ttl_ms=ttl_ms)
        log_cache_operation(logger, "set", key, ttl_ms=ttl_ms)

    def delete(self, key: str) -> bool:
        """Remove ``key`` if present. Returns whether anything was removed."""
        deleted = self._entries.pop(key, None) is not None
        log_cache_operation(logger, "delete", key, deleted=deleted)
        return deleted

    def clear(self) -> None:
        self._entries.clear()

    def reset(self) -> None:
        """Drop all state. Used by tests and on shutdown."""
        self.clear()

    # ------------------------------------------------------------------
    # Cache-aside
    # ------------------------------------------------------------------

    async def cache_aside(self, key: str, fetcher: Callable[[], Awaitable[T]],
                          ttl_ms: Optional[float] = None) -> T:
        """Return the cached value for ``key`` or fetch, store and return it.

        Args:
            key: Cache key built by the caller (see ``constants.list_key``).
            fetcher: Zero-argument coroutine function producing the value.
                Only awaited on a miss.
            ttl_ms: Lifetime of the stored value; defaults to ``default_ttl_ms``.

        Raises:
            Whatever ``fetcher`` raises. Nothing is stored in that case.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            return cached

        value = await fetcher()
        self.set(key, value, ttl_ms)
        return value

    # ------------------------------------------------------------------
    # Invalidation and maintenance
    # ------------------------------------------------------------------

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``. Returns how many went."""
        keys = [k for k in list(self._entries) if k.startswith(prefix)]
        for key in keys:
            del self._entries[key]
        log_cache_operation(logger, "invalidate_prefix", prefix, deleted=len(keys))
        return len(keys)

    def cleanup(self) -> int:
        """Physically remove expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [k for k, entry in list(self._entries.items()) if entry.is_expired(now)]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def stats(self) -> Dict[str, Any]:
        """Entry count and key list. May include expired, unswept keys."""
        keys: List[str] = list(self._entries)
        return {"size": len(keys), "keys": keys}

    @property
    def size(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Background sweep
    # ------------------------------------------------------------------

    async def start(self) -> None:
        await self.sweeper.start()

    async def stop(self) -> None:
        await self.sweeper.stop()
