"""
SQLAlchemy implementation of the store contracts.

Each top-K query is a single ``ORDER BY ... LIMIT`` statement whose ordering
matches ``idx_score`` / ``idx_region_score`` so the database walks the index
instead of sorting the table.
"""

import logging
from typing import Dict, Iterable, List

from sqlalchemy import func, select
from sqlalchemy.sql import Select

from leaderboard.constants import Region
from leaderboard.data_models.leaderboard import ProfileRecord, ScoreRecord
from leaderboard.database.models import PlayerProfile, PlayerScore
from leaderboard.repositories.base import ProfileRepository, ScoreRepository, SessionRepository

logger = logging.getLogger(__name__)


def _to_score_record(row: PlayerScore) -> ScoreRecord:
    return ScoreRecord(
        id=row.id,
        player_id=row.player_id,
        score=row.score,
        region=Region(row.region),
        game_mode=row.game_mode,
        created_at=row.created_at,
    )


def _to_profile_record(row: PlayerProfile) -> ProfileRecord:
    return ProfileRecord(
        id=row.id,
        username=row.username,
        display_name=row.display_name,
        avatar_url=row.avatar_url,
        country=row.country,
        level=row.level if row.level is not None else 1,
        is_premium=bool(row.is_premium),
        created_at=row.created_at,
        last_login_at=row.last_login_at,
    )


class SqlScoreRepository(SessionRepository, ScoreRepository):
    """Score store backed by the ``player_scores`` table."""

    @staticmethod
    def _ranked(query: Select, limit: int) -> Select:
        return query.order_by(
            PlayerScore.score.desc(),
            PlayerScore.player_id.asc(),
            PlayerScore.id.asc(),
        ).limit(limit)

    async def _fetch(self, query: Select) -> List[ScoreRecord]:
        async with self.get_session() as session:
            result = await session.execute(query)
            return [_to_score_record(row) for row in result.scalars()]

    async def fetch_top_scores(self, limit: int) -> List[ScoreRecord]:
        return await self._fetch(self._ranked(select(PlayerScore), limit))

    async def fetch_top_scores_by_region(self, region: Region, limit: int) -> List[ScoreRecord]:
        query = select(PlayerScore).where(PlayerScore.region == Region(region).value)
        return await self._fetch(self._ranked(query, limit))

    async def count_scores(self) -> int:
        async with self.get_session() as session:
            return await session.scalar(select(func.count(PlayerScore.id))) or 0

    async def count_scores_by_region(self, region: Region) -> int:
        async with self.get_session() as session:
            return await session.scalar(
                select(func.count(PlayerScore.id)).where(PlayerScore.region == Region(region).value)
            ) or 0


class SqlProfileRepository(SessionRepository, ProfileRepository):
    """Profile store backed by the ``player_profiles`` table."""

    async def find_many(self, player_ids: Iterable[int]) -> Dict[int, ProfileRecord]:
        ids = set(player_ids)
        if not ids:
            return {}

        # Single IN (...) lookup for the whole window
        async with self.get_session() as session:
            result = await session.execute(
                select(PlayerProfile).where(PlayerProfile.id.in_(ids))
            )
            profiles = {row.id: _to_profile_record(row) for row in result.scalars()}

        logger.debug(f"Resolved {len(profiles)} of {len(ids)} profiles in one query")
        return profiles
