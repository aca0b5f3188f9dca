from typing import Dict, Iterable, Optional

from leaderboard.data_models.leaderboard import ProfileRecord
from leaderboard.repositories.base import ProfileRepository
from leaderboard.services.base import BaseService, StoreCallLimiter
from leaderboard.utils.metrics import MetricsRecorder


class ProfileResolver(BaseService):
    """Resolves a window of player ids to profiles in one batched lookup."""

    def __init__(self, repository: ProfileRepository, timeout: float,
                 limiter: Optional[StoreCallLimiter] = None,
                 metrics: Optional[MetricsRecorder] = None):
        super().__init__(timeout, limiter, metrics)
        self.repository = repository

    async def resolve_many(self, player_ids: Iterable[int]) -> Dict[int, ProfileRecord]:
        """Map each known id to its profile; unknown ids are simply absent."""
        ids = frozenset(player_ids)
        if not ids:
            return {}
        return await self.call_store("resolve_profiles", lambda: self.repository.find_many(ids))
