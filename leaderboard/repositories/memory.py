"""
In-memory implementation of the store contracts.

Used by tests and local experiments. Scores are kept in pre-sorted lists (one
global, one per region) so top-K reads are a slice, mirroring the index-backed
SQL queries. A pluggable delay strategy simulates slow or spiky stores.
"""

import asyncio
import bisect
import itertools
import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from leaderboard.constants import Region
from leaderboard.data_models.leaderboard import ProfileRecord, ScoreRecord
from leaderboard.repositories.base import ProfileRepository, ScoreRepository, ranking_sort_key

logger = logging.getLogger(__name__)

# Maps an operation name to the number of seconds to stall before serving it
DelayStrategy = Callable[[str], float]


def no_delay(operation: str) -> float:
    return 0.0


def fixed_delay(seconds: float) -> DelayStrategy:
    def strategy(operation: str) -> float:
        return seconds
    return strategy


def random_spike_delay(probability: float = 0.2, low: float = 0.1, high: float = 0.5,
                       rng: Optional[random.Random] = None) -> DelayStrategy:
    """Occasional latency spikes: ``probability`` of stalling between ``low`` and ``high`` seconds."""
    rng = rng or random.Random()

    def strategy(operation: str) -> float:
        if rng.random() < probability:
            delay = rng.uniform(low, high)
            logger.warning(f"Latency spike in {operation}: {delay * 1000:.0f}ms delay")
            return delay
        return 0.0
    return strategy


class _SimulatedStore:
    """Shared latency, failure and call accounting for the in-memory stores."""

    def __init__(self, delay: DelayStrategy = no_delay):
        self.delay = delay
        self.failure: Optional[Exception] = None
        self.calls: Counter = Counter()

    async def _round_trip(self, operation: str):
        self.calls[operation] += 1
        seconds = self.delay(operation)
        if seconds > 0:
            await asyncio.sleep(seconds)
        if self.failure is not None:
            raise self.failure

    def fail_with(self, error: Optional[Exception]):
        """Make every following call raise ``error``; pass None to recover."""
        self.failure = error


class InMemoryScoreRepository(_SimulatedStore, ScoreRepository):
    """Score store kept in sorted lists."""

    def __init__(self, delay: DelayStrategy = no_delay):
        super().__init__(delay)
        self._ids = itertools.count(1)
        self._global: List[Tuple[Tuple[int, int, int], ScoreRecord]] = []
        self._by_region: Dict[Region, List[Tuple[Tuple[int, int, int], ScoreRecord]]] = {
            region: [] for region in Region
        }

    def add_score(self, player_id: int, score: int, region, game_mode: Optional[str] = None,
                  created_at: Optional[datetime] = None) -> ScoreRecord:
        """Record a score. Setup helper for tests; not part of the read contract."""
        record = ScoreRecord(
            id=next(self._ids),
            player_id=player_id,
            score=score,
            region=Region.parse(region),
            game_mode=game_mode,
            created_at=created_at or datetime.now(timezone.utc),
        )
        item = (ranking_sort_key(record), record)
        bisect.insort(self._global, item)
        bisect.insort(self._by_region[record.region], item)
        return record

    async def fetch_top_scores(self, limit: int) -> List[ScoreRecord]:
        await self._round_trip("fetch_top_scores")
        return [record for _, record in self._global[:limit]]

    async def fetch_top_scores_by_region(self, region: Region, limit: int) -> List[ScoreRecord]:
        await self._round_trip("fetch_top_scores_by_region")
        return [record for _, record in self._by_region[Region.parse(region)][:limit]]

    async def count_scores(self) -> int:
        await self._round_trip("count_scores")
        return len(self._global)

    async def count_scores_by_region(self, region: Region) -> int:
        await self._round_trip("count_scores_by_region")
        return len(self._by_region[Region.parse(region)])


class InMemoryProfileRepository(_SimulatedStore, ProfileRepository):
    """Profile store kept in a dict keyed by player id."""

    def __init__(self, profiles: Iterable[ProfileRecord] = (), delay: DelayStrategy = no_delay):
        super().__init__(delay)
        self._profiles: Dict[int, ProfileRecord] = {p.id: p for p in profiles}

    def add_profile(self, profile: ProfileRecord) -> ProfileRecord:
        self._profiles[profile.id] = profile
        return profile

    async def find_many(self, player_ids: Iterable[int]) -> Dict[int, ProfileRecord]:
        await self._round_trip("find_many")
        return {pid: self._profiles[pid] for pid in set(player_ids) if pid in self._profiles}
