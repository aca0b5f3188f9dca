"""
TTL cache for assembled leaderboards.

Keys are (scope, limit) pairs, so the key space stays small (regions x a
handful of limits) and no size bound is needed. Expired entries are dropped
lazily on read; ``purge_expired`` is available for periodic housekeeping.
"""

import asyncio
import logging
import time
from typing import Callable, Dict, Iterable, Optional

from leaderboard.constants import CacheConstants
from leaderboard.data_models.leaderboard import CacheEntry, CacheKey, LeaderboardScope, RankedEntry

logger = logging.getLogger(__name__)


class ResultCache:
    """Async-safe TTL cache of ranked leaderboard results."""

    def __init__(self, ttl: float = CacheConstants.DEFAULT_CACHE_TTL,
                 clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl = ttl
        self._clock = clock
        self._cache: Dict[CacheKey, CacheEntry] = {}
        self._cache_lock = asyncio.Lock()

    async def get(self, key: CacheKey) -> Optional[CacheEntry]:
        """Return the live entry for ``key``, or None on a miss or expiry."""
        async with self._cache_lock:
            entry = self._cache.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock(), self.ttl):
                del self._cache[key]
                logger.debug(f"Cache entry expired for {key.scope} limit={key.limit}")
                return None
            return entry

    async def put(self, key: CacheKey, entries: Iterable[RankedEntry], total_available: int) -> CacheEntry:
        """Replace whatever is cached under ``key`` with a new entry."""
        entry = CacheEntry(
            entries=tuple(entries),
            total_available=total_available,
            created_at=self._clock(),
        )
        async with self._cache_lock:
            self._cache[key] = entry
        return entry

    async def invalidate(self, scope: Optional[LeaderboardScope] = None) -> int:
        """Drop cached entries for ``scope`` (all limits), or everything when None."""
        async with self._cache_lock:
            if scope is None:
                removed = len(self._cache)
                self._cache.clear()
            else:
                keys = [key for key in self._cache if key.scope == scope]
                for key in keys:
                    del self._cache[key]
                removed = len(keys)
        logger.info(f"Invalidated {removed} cached leaderboard(s) for {scope or 'all scopes'}")
        return removed

    async def purge_expired(self) -> int:
        """Remove expired entries."""
        async with self._cache_lock:
            now = self._clock()
            expired_keys = [
                key for key, entry in self._cache.items()
                if entry.is_expired(now, self.ttl)
            ]
            for key in expired_keys:
                del self._cache[key]
        return len(expired_keys)

    def __len__(self) -> int:
        return len(self._cache)
