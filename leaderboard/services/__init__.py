"""
Services package for the leaderboard ranking core.
"""

from .assembler import RankingAssembler
from .base import BaseService, StoreCallLimiter
from .leaderboard import LeaderboardService
from .profile_resolver import ProfileResolver
from .result_cache import ResultCache
from .score_accessor import ScoreStoreAccessor

__all__ = [
    'BaseService',
    'LeaderboardService',
    'ProfileResolver',
    'RankingAssembler',
    'ResultCache',
    'ScoreStoreAccessor',
    'StoreCallLimiter',
]
