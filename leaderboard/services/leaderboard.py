"""
Leaderboard query service.

Single entry point for top-N queries. Checks the result cache first; on a
miss it fetches the ranked score window, resolves every referenced profile
in one batch, assembles the ranked rows and caches them wholesale.
"""

import logging
from typing import Optional

from leaderboard.constants import LimitConstants, Region
from leaderboard.data_models.leaderboard import CacheKey, LeaderboardResult, LeaderboardScope
from leaderboard.services.assembler import RankingAssembler
from leaderboard.services.profile_resolver import ProfileResolver
from leaderboard.services.result_cache import ResultCache
from leaderboard.services.score_accessor import ScoreStoreAccessor
from leaderboard.utils.exceptions import LeaderboardUnavailableError, TransientStoreError, ValidationError
from leaderboard.utils.metrics import MetricsRecorder, NullMetrics

logger = logging.getLogger(__name__)


def validate_limit(limit) -> int:
    # bool is an int subclass but never a sensible limit
    if not isinstance(limit, int) or isinstance(limit, bool):
        raise ValidationError("limit", f"Limit must be an integer, got {type(limit).__name__}")
    if limit < LimitConstants.MIN_LIMIT or limit > LimitConstants.MAX_LIMIT:
        raise ValidationError(
            "limit",
            f"Limit must be between {LimitConstants.MIN_LIMIT} and {LimitConstants.MAX_LIMIT}"
        )
    return limit


def parse_scope(region: Optional[str] = None) -> LeaderboardScope:
    """Build a scope from an optional region code, rejecting unknown regions."""
    if region is None:
        return LeaderboardScope.global_scope()
    try:
        return LeaderboardScope.for_region(region)
    except ValueError as e:
        raise ValidationError("region", str(e)) from None


class LeaderboardService:
    """Query façade over the score store, profile store and result cache."""

    def __init__(self, score_accessor: ScoreStoreAccessor, profile_resolver: ProfileResolver,
                 assembler: RankingAssembler, cache: ResultCache,
                 metrics: Optional[MetricsRecorder] = None):
        self.score_accessor = score_accessor
        self.profile_resolver = profile_resolver
        self.assembler = assembler
        self.cache = cache
        self.metrics = metrics or NullMetrics()

    async def get_top_players(self, limit: int = LimitConstants.DEFAULT_LIMIT) -> LeaderboardResult:
        return await self.get_leaderboard(LeaderboardScope.global_scope(), limit)

    async def get_top_players_by_region(self, region, limit: int = LimitConstants.DEFAULT_LIMIT) -> LeaderboardResult:
        return await self.get_leaderboard(parse_scope(region), limit)

    async def get_leaderboard(self, scope: LeaderboardScope, limit: int) -> LeaderboardResult:
        """Return the top ``limit`` entries for ``scope``.

        Raises:
            ValidationError: scope or limit out of bounds (nothing was queried)
            LeaderboardUnavailableError: a store failed or timed out; no
                partial result is ever returned
        """
        if not isinstance(scope, LeaderboardScope):
            raise ValidationError("scope", f"Expected LeaderboardScope, got {type(scope).__name__}")
        if scope.region is not None and not isinstance(scope.region, Region):
            # LeaderboardScope(region="eu") is accepted and keyed like Region.EU
            scope = parse_scope(scope.region)
        validate_limit(limit)

        key = CacheKey(scope=scope, limit=limit)
        with self.metrics.timer("request.latency", scope=str(scope)):
            cached = await self.cache.get(key)
            if cached is not None:
                self.metrics.increment("cache.hit", scope=str(scope))
                return LeaderboardResult(scope, limit, cached.entries, cached.total_available)

            self.metrics.increment("cache.miss", scope=str(scope))
            try:
                result = await self._build(scope, limit)
            except TransientStoreError as e:
                logger.error(f"Error fetching leaderboard for {scope} (limit={limit}): {e}")
                raise LeaderboardUnavailableError(str(scope), e) from e

            await self.cache.put(key, result.entries, result.total_available)
            return result

    async def _build(self, scope: LeaderboardScope, limit: int) -> LeaderboardResult:
        with self.metrics.timer("stage.latency", stage="fetch_scores"):
            if scope.is_global:
                scores = await self.score_accessor.fetch_top_scores(limit)
            else:
                scores = await self.score_accessor.fetch_top_scores_by_region(scope.region, limit)

        # Separate query from the rows above; a write landing in between can
        # leave the count behind the window, so it never drops below it.
        with self.metrics.timer("stage.latency", stage="count_scores"):
            total_available = max(await self.score_accessor.count_scores(scope.region), len(scores))

        with self.metrics.timer("stage.latency", stage="resolve_profiles"):
            profiles = await self.profile_resolver.resolve_many(s.player_id for s in scores)

        with self.metrics.timer("stage.latency", stage="assemble"):
            entries = self.assembler.assemble(scores, profiles)

        logger.info(
            f"Built {scope} leaderboard with {len(entries)} entries "
            f"from {len(scores)} scores ({len(scores) - len(entries)} without profile)"
        )
        return LeaderboardResult(scope, limit, entries, total_available)

    async def invalidate(self, region: Optional[Region] = None, everything: bool = False) -> int:
        """Drop cached leaderboards so the next query is rebuilt from the stores.

        With ``everything`` every scope is dropped; otherwise only the global
        scope, or ``region`` when given.
        """
        if everything:
            return await self.cache.invalidate()
        return await self.cache.invalidate(parse_scope(region))
