"""
Leaderboard data models for the ranking query core.

Provides immutable data transfer objects passed between the stores, the
ranking pipeline and the result cache.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from leaderboard.constants import Region


@dataclass(frozen=True)
class ScoreRecord:
    """Single score event as read from the score store."""
    id: int
    player_id: int
    score: int
    region: Region
    game_mode: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProfileRecord:
    """Player identity and display metadata."""
    id: int
    username: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    country: Optional[str] = None
    level: int = 1
    is_premium: bool = False
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None


@dataclass(frozen=True)
class RankedEntry:
    """Single leaderboard row."""
    rank: int
    player_id: int
    username: str
    display_name: Optional[str]
    avatar_url: Optional[str]
    score: int
    region: Region
    country: Optional[str]
    level: int
    is_premium: bool
    game_mode: Optional[str]


@dataclass(frozen=True)
class LeaderboardScope:
    """Either the global leaderboard (region is None) or one region."""
    region: Optional[Region] = None

    @classmethod
    def global_scope(cls) -> "LeaderboardScope":
        return cls()

    @classmethod
    def for_region(cls, region) -> "LeaderboardScope":
        return cls(Region.parse(region))

    @property
    def is_global(self) -> bool:
        return self.region is None

    def __str__(self) -> str:
        return "global" if self.region is None else f"region:{self.region.value}"


@dataclass(frozen=True)
class CacheKey:
    scope: LeaderboardScope
    limit: int


@dataclass(frozen=True)
class CacheEntry:
    """Cached leaderboard. Replaced as a whole, never edited in place."""
    entries: Tuple[RankedEntry, ...]
    total_available: int
    created_at: float

    def is_expired(self, now: float, ttl: float) -> bool:
        return now - self.created_at > ttl


@dataclass(frozen=True)
class LeaderboardResult:
    """Ranked entries plus the count/total metadata returned to callers."""
    scope: LeaderboardScope
    limit: int
    entries: Tuple[RankedEntry, ...]
    total_available: int

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries
