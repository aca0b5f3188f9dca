"""
Score store accessor.

Issues the two top-K range queries (global and per region) plus the row
counts used for total-available metadata. Callers enforce the limit bounds.
"""

from typing import Optional, Tuple

from leaderboard.constants import Region
from leaderboard.data_models.leaderboard import ScoreRecord
from leaderboard.repositories.base import ScoreRepository
from leaderboard.services.base import BaseService, StoreCallLimiter
from leaderboard.utils.metrics import MetricsRecorder


class ScoreStoreAccessor(BaseService):
    """Bounded access to ranked score rows."""

    def __init__(self, repository: ScoreRepository, timeout: float,
                 limiter: Optional[StoreCallLimiter] = None,
                 metrics: Optional[MetricsRecorder] = None):
        super().__init__(timeout, limiter, metrics)
        self.repository = repository

    async def fetch_top_scores(self, limit: int) -> Tuple[ScoreRecord, ...]:
        rows = await self.call_store(
            "fetch_top_scores", lambda: self.repository.fetch_top_scores(limit)
        )
        return tuple(rows[:limit])

    async def fetch_top_scores_by_region(self, region: Region, limit: int) -> Tuple[ScoreRecord, ...]:
        rows = await self.call_store(
            "fetch_top_scores_by_region",
            lambda: self.repository.fetch_top_scores_by_region(region, limit),
        )
        return tuple(rows[:limit])

    async def count_scores(self, region: Optional[Region] = None) -> int:
        """Number of score rows overall, or in ``region`` when given."""
        if region is None:
            return await self.call_store("count_scores", self.repository.count_scores)
        return await self.call_store(
            "count_scores_by_region", lambda: self.repository.count_scores_by_region(region)
        )
