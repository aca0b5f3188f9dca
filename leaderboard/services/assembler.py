import logging
from typing import Iterable, List, Mapping, Optional, Tuple

from leaderboard.data_models.leaderboard import ProfileRecord, RankedEntry, ScoreRecord
from leaderboard.utils.metrics import MetricsRecorder, NullMetrics

logger = logging.getLogger(__name__)


class RankingAssembler:
    """Joins ranked scores with profiles and numbers the result."""

    def __init__(self, metrics: Optional[MetricsRecorder] = None):
        self.metrics = metrics or NullMetrics()

    def assemble(
        self,
        scores: Iterable[ScoreRecord],
        profiles: Mapping[int, ProfileRecord]
    ) -> Tuple[RankedEntry, ...]:
        """Build leaderboard rows from scores already sorted best first.

        Scores whose player has no profile are dropped. Ranks are dense over
        the rows that are kept, so a dropped score never leaves a gap.
        """
        entries: List[RankedEntry] = []
        for score in scores:
            profile = profiles.get(score.player_id)
            if profile is None:
                logger.debug(f"No profile for player {score.player_id}, dropping score {score.id}")
                self.metrics.increment("profile_miss")
                continue

            entries.append(RankedEntry(
                rank=len(entries) + 1,
                player_id=score.player_id,
                username=profile.username,
                display_name=profile.display_name,
                avatar_url=profile.avatar_url,
                score=score.score,
                region=score.region,
                country=profile.country,
                level=profile.level,
                is_premium=profile.is_premium,
                game_mode=score.game_mode,
            ))
        return tuple(entries)
