"""Tests for bounded store access: score accessor, profile resolver and the call limiter."""

import asyncio

import pytest
from sqlalchemy.exc import OperationalError

from leaderboard.constants import Region
from leaderboard.repositories.memory import (
    InMemoryProfileRepository, InMemoryScoreRepository, fixed_delay,
)
from leaderboard.services.base import StoreCallLimiter
from leaderboard.services.profile_resolver import ProfileResolver
from leaderboard.services.score_accessor import ScoreStoreAccessor
from leaderboard.utils.exceptions import TransientStoreError
from tests.helpers import make_profile


class TestScoreStoreAccessor:
    @pytest.mark.asyncio
    async def test_returns_top_scores_best_first(self, score_repo):
        for pid, score in [(1, 100), (2, 300), (3, 200)]:
            score_repo.add_score(pid, score, "NA")
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        rows = await accessor.fetch_top_scores(2)

        assert [r.score for r in rows] == [300, 200]

    @pytest.mark.asyncio
    async def test_region_query_only_returns_region(self, score_repo):
        score_repo.add_score(1, 900, "EU")
        score_repo.add_score(2, 950, "NA")
        score_repo.add_score(3, 800, "EU")
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        rows = await accessor.fetch_top_scores_by_region(Region.EU, 10)

        assert [(r.player_id, r.region) for r in rows] == [(1, Region.EU), (3, Region.EU)]

    @pytest.mark.asyncio
    async def test_counts_overall_and_per_region(self, score_repo):
        score_repo.add_score(1, 900, "EU")
        score_repo.add_score(2, 950, "NA")
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        assert await accessor.count_scores() == 2
        assert await accessor.count_scores(Region.NA) == 1
        assert await accessor.count_scores(Region.OCE) == 0

    @pytest.mark.asyncio
    async def test_slow_store_times_out(self, metrics):
        repo = InMemoryScoreRepository(delay=fixed_delay(0.5))
        accessor = ScoreStoreAccessor(repo, timeout=0.05, metrics=metrics)

        with pytest.raises(TransientStoreError, match="timed out"):
            await accessor.fetch_top_scores(10)
        assert metrics.count("store.error", operation="fetch_top_scores") == 1

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_transient_error(self, score_repo):
        score_repo.fail_with(ConnectionRefusedError("connection refused"))
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        with pytest.raises(TransientStoreError) as exc_info:
            await accessor.fetch_top_scores_by_region(Region.SA, 10)

        assert exc_info.value.retryable is True
        assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    @pytest.mark.asyncio
    async def test_sqlalchemy_failure_becomes_transient_error(self, score_repo):
        score_repo.fail_with(OperationalError("SELECT 1", {}, Exception("database is locked")))
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        with pytest.raises(TransientStoreError):
            await accessor.count_scores()

    @pytest.mark.asyncio
    async def test_does_not_retry(self, score_repo):
        score_repo.fail_with(ConnectionError("down"))
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0)

        with pytest.raises(TransientStoreError):
            await accessor.fetch_top_scores(10)
        assert score_repo.calls["fetch_top_scores"] == 1

    def test_rejects_non_positive_timeout(self, score_repo):
        with pytest.raises(ValueError):
            ScoreStoreAccessor(score_repo, timeout=0)


class TestProfileResolver:
    @pytest.mark.asyncio
    async def test_resolves_many_ids_in_one_call(self, profile_repo):
        resolver = ProfileResolver(profile_repo, timeout=1.0)

        profiles = await resolver.resolve_many([1, 2, 3, 4, 5])

        assert sorted(profiles) == [1, 2, 3, 4, 5]
        assert profile_repo.calls["find_many"] == 1

    @pytest.mark.asyncio
    async def test_unknown_ids_are_absent(self, profile_repo):
        resolver = ProfileResolver(profile_repo, timeout=1.0)

        profiles = await resolver.resolve_many([1, 999])

        assert list(profiles) == [1]

    @pytest.mark.asyncio
    async def test_duplicate_ids_are_collapsed(self):
        seen = []

        class RecordingRepository(InMemoryProfileRepository):
            async def find_many(self, player_ids):
                seen.append(sorted(player_ids))
                return await super().find_many(player_ids)

        resolver = ProfileResolver(RecordingRepository([make_profile(1)]), timeout=1.0)

        await resolver.resolve_many([1, 1, 2, 1])

        assert seen == [[1, 2]]

    @pytest.mark.asyncio
    async def test_empty_input_skips_store(self, profile_repo):
        resolver = ProfileResolver(profile_repo, timeout=1.0)

        assert await resolver.resolve_many([]) == {}
        assert profile_repo.calls["find_many"] == 0

    @pytest.mark.asyncio
    async def test_slow_profile_store_times_out(self):
        repo = InMemoryProfileRepository([make_profile(1)], delay=fixed_delay(0.5))
        resolver = ProfileResolver(repo, timeout=0.05)

        with pytest.raises(TransientStoreError, match="resolve_profiles"):
            await resolver.resolve_many([1])


class TestStoreCallLimiter:
    @pytest.mark.asyncio
    async def test_in_flight_calls_never_exceed_capacity(self):
        limiter = StoreCallLimiter(max_in_flight=2, acquire_timeout=5.0)
        peak = 0

        async def call():
            nonlocal peak
            async with limiter.slot("fetch"):
                peak = max(peak, limiter.in_flight)
                await asyncio.sleep(0.01)

        await asyncio.gather(*[call() for _ in range(10)])

        assert peak == 2
        assert limiter.in_flight == 0

    @pytest.mark.asyncio
    async def test_rejects_after_bounded_wait(self):
        limiter = StoreCallLimiter(max_in_flight=1, acquire_timeout=0.05)
        acquired = asyncio.Event()
        release = asyncio.Event()

        async def holder():
            async with limiter.slot("fetch"):
                acquired.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await acquired.wait()

        with pytest.raises(TransientStoreError, match="no store connection free"):
            async with limiter.slot("fetch"):
                pass

        release.set()
        await task

    @pytest.mark.asyncio
    async def test_rejects_immediately_when_queue_full(self):
        limiter = StoreCallLimiter(max_in_flight=1, acquire_timeout=5.0, max_waiting=0)
        acquired = asyncio.Event()
        release = asyncio.Event()

        async def holder():
            async with limiter.slot("fetch"):
                acquired.set()
                await release.wait()

        task = asyncio.create_task(holder())
        await acquired.wait()

        with pytest.raises(TransientStoreError, match="queue is full"):
            async with limiter.slot("fetch"):
                pass

        release.set()
        await task

    @pytest.mark.asyncio
    async def test_slot_released_when_call_fails(self, score_repo):
        limiter = StoreCallLimiter(max_in_flight=1, acquire_timeout=0.05)
        score_repo.fail_with(ConnectionError("down"))
        accessor = ScoreStoreAccessor(score_repo, timeout=1.0, limiter=limiter)

        for _ in range(3):
            with pytest.raises(TransientStoreError):
                await accessor.fetch_top_scores(5)

        assert limiter.in_flight == 0

    def test_requires_capacity(self):
        with pytest.raises(ValueError):
            StoreCallLimiter(max_in_flight=0, acquire_timeout=1.0)
