"""Tests for the TTL result cache."""

import asyncio

import pytest

from leaderboard.constants import Region
from leaderboard.data_models.leaderboard import CacheKey, LeaderboardScope, RankedEntry
from leaderboard.services.result_cache import ResultCache

GLOBAL = LeaderboardScope.global_scope()
EU = LeaderboardScope.for_region("EU")


def _entry(rank, player_id, score):
    return RankedEntry(
        rank=rank, player_id=player_id, username=f"p{player_id}", display_name=None,
        avatar_url=None, score=score, region=Region.EU, country=None, level=1,
        is_premium=False, game_mode=None,
    )


class TestResultCache:
    @pytest.mark.asyncio
    async def test_miss_on_empty_cache(self, cache):
        assert await cache.get(CacheKey(GLOBAL, 10)) is None

    @pytest.mark.asyncio
    async def test_returns_stored_entry(self, cache):
        key = CacheKey(GLOBAL, 10)
        entries = [_entry(1, 1, 100)]

        await cache.put(key, entries, total_available=5)
        cached = await cache.get(key)

        assert cached.entries == tuple(entries)
        assert cached.total_available == 5

    @pytest.mark.asyncio
    async def test_keys_differ_by_scope_and_limit(self, cache):
        await cache.put(CacheKey(GLOBAL, 10), [_entry(1, 1, 100)], 1)

        assert await cache.get(CacheKey(GLOBAL, 5)) is None
        assert await cache.get(CacheKey(EU, 10)) is None
        assert await cache.get(CacheKey(LeaderboardScope.for_region("eu"), 10)) is None
        await cache.put(CacheKey(EU, 10), [], 0)
        assert await cache.get(CacheKey(LeaderboardScope.for_region("eu"), 10)) is not None

    @pytest.mark.asyncio
    async def test_entry_served_until_ttl_then_expires(self, cache, clock):
        key = CacheKey(GLOBAL, 10)
        await cache.put(key, [_entry(1, 1, 100)], 1)

        clock.advance(30)
        assert await cache.get(key) is not None

        clock.advance(0.001)
        assert await cache.get(key) is None
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_put_replaces_entry_wholesale(self, cache, clock):
        key = CacheKey(GLOBAL, 10)
        await cache.put(key, [_entry(1, 1, 100), _entry(2, 2, 90)], 2)
        clock.advance(10)

        await cache.put(key, [_entry(1, 3, 200)], 3)
        cached = await cache.get(key)

        assert [e.player_id for e in cached.entries] == [3]
        assert cached.total_available == 3
        assert cached.created_at == clock.now

    @pytest.mark.asyncio
    async def test_cached_entries_are_immutable_snapshot(self, cache):
        key = CacheKey(GLOBAL, 10)
        entries = [_entry(1, 1, 100)]
        await cache.put(key, entries, 1)

        entries.append(_entry(2, 2, 90))

        assert len((await cache.get(key)).entries) == 1

    @pytest.mark.asyncio
    async def test_invalidate_scope_drops_all_limits(self, cache):
        await cache.put(CacheKey(EU, 10), [], 0)
        await cache.put(CacheKey(EU, 50), [], 0)
        await cache.put(CacheKey(GLOBAL, 10), [], 0)

        removed = await cache.invalidate(EU)

        assert removed == 2
        assert await cache.get(CacheKey(GLOBAL, 10)) is not None

    @pytest.mark.asyncio
    async def test_invalidate_everything(self, cache):
        await cache.put(CacheKey(EU, 10), [], 0)
        await cache.put(CacheKey(GLOBAL, 10), [], 0)

        assert await cache.invalidate() == 2
        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_purge_expired_keeps_live_entries(self, cache, clock):
        await cache.put(CacheKey(GLOBAL, 10), [], 0)
        clock.advance(20)
        await cache.put(CacheKey(EU, 10), [], 0)
        clock.advance(15)

        assert await cache.purge_expired() == 1
        assert await cache.get(CacheKey(EU, 10)) is not None

    @pytest.mark.asyncio
    async def test_concurrent_puts_and_gets_never_see_partial_entry(self, cache):
        key = CacheKey(GLOBAL, 3)
        batches = [[_entry(r, n * 10 + r, 1000 - r) for r in range(1, 4)] for n in range(20)]

        async def writer(batch):
            await cache.put(key, batch, len(batch))

        async def reader():
            cached = await cache.get(key)
            if cached is not None:
                assert len(cached.entries) == 3
                assert cached.total_available == 3
                # all rows of an entry come from the same batch
                assert len({e.player_id // 10 for e in cached.entries}) == 1

        await asyncio.gather(*[writer(b) for b in batches], *[reader() for _ in range(50)])

    def test_rejects_non_positive_ttl(self):
        with pytest.raises(ValueError):
            ResultCache(ttl=0)
