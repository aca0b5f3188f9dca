"""
Store contracts required by the ranking core.

The core needs exactly three things from persistence: two ordered top-K
range queries over scores and one batched profile lookup (plus row counts
for the total-available metadata). Any store that can serve them is
substitutable: the SQL store for production, the in-memory store for tests.

Ordering contract for both top-K queries: score descending, then player id
ascending, then score row id ascending.
"""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Iterable, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from leaderboard.constants import Region
from leaderboard.data_models.leaderboard import ProfileRecord, ScoreRecord


def ranking_sort_key(record: ScoreRecord) -> Tuple[int, int, int]:
    """Sort key that reproduces the top-K ordering contract."""
    return (-record.score, record.player_id, record.id)


class ScoreRepository(ABC):
    """Read access to ranked score rows."""

    @abstractmethod
    async def fetch_top_scores(self, limit: int) -> Sequence[ScoreRecord]:
        """Return at most ``limit`` scores across all regions, best first."""

    @abstractmethod
    async def fetch_top_scores_by_region(self, region: Region, limit: int) -> Sequence[ScoreRecord]:
        """Return at most ``limit`` scores recorded in ``region``, best first."""

    @abstractmethod
    async def count_scores(self) -> int:
        ...

    @abstractmethod
    async def count_scores_by_region(self, region: Region) -> int:
        ...


class ProfileRepository(ABC):
    """Read access to player profiles."""

    @abstractmethod
    async def find_many(self, player_ids: Iterable[int]) -> Dict[int, ProfileRecord]:
        """Look up every id in one round-trip. Unknown ids are left out."""


class SessionRepository:
    """Base class for repositories backed by an async SQLAlchemy session factory."""

    def __init__(self, session_factory):
        """
        Initialize repository with session factory.

        Args:
            session_factory: Async session factory from Database class
        """
        self.session_factory = session_factory

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a read scope for async database operations."""
        session = self.session_factory()
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
