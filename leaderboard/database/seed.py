"""
Demo data for local runs and load testing.

Creates a realistic spread of player profiles and scores: a thin band of top
scores (9000-10000), a wider middle band (5000-9000) and a long tail
(1000-5000), spread round-robin over the regions and game modes.
"""

import random
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func, select

from leaderboard.constants import Region, StoreConstants
from leaderboard.database.database import Database
from leaderboard.database.models import PlayerProfile, PlayerScore
from leaderboard.utils.logger import setup_logger

logger = setup_logger(__name__)

_NAME_PREFIXES = [
    "Pro", "Ninja", "Dragon", "Phoenix", "Shadow", "Storm", "Thunder", "Ice",
    "Fire", "Wind", "Earth", "Light", "Dark", "Crystal", "Iron", "Silver",
]
_NAME_SUFFIXES = [
    "Gamer", "Warrior", "Slayer", "Rising", "Hunter", "Breaker", "Strike", "Queen",
    "King", "Rider", "Shaker", "Bringer", "Mage", "Knight", "Fist", "Arrow",
]
_COUNTRIES = ["US", "JP", "CN", "KR", "GB", "DE", "CA", "AU", "BR", "MX", "FR", "IT", "ES", "SE", "IN"]

# (first score id, last score id, low score, high score)
_SCORE_BANDS = [
    (1, 500, 9000, 10000),
    (501, 2000, 5000, 9000),
    (2001, 5000, 1000, 5000),
]


async def seed_demo_data(database: Database, player_count: int = 500, scoring_players: int = 200,
                         rng: Optional[random.Random] = None) -> bool:
    """Populate an empty database with demo profiles and scores.

    Only the first ``scoring_players`` profiles receive scores; the rest exist
    so profile lookups run against a realistically sized table.

    Returns:
        False when the database already holds profiles and nothing was added
    """
    if player_count < 1 or scoring_players < 1:
        raise ValueError("player_count and scoring_players must be at least 1")
    rng = rng or random.Random()
    scoring_players = min(scoring_players, player_count)
    regions = list(Region)
    now = datetime.now()

    async with database.get_session() as session:
        existing = await session.scalar(select(func.count(PlayerProfile.id)))
        if existing:
            logger.info(f"Database already has {existing} profiles, skipping demo data")
            return False

        logger.info(f"Seeding {player_count} demo profiles...")
        for player_id in range(1, player_count + 1):
            prefix = _NAME_PREFIXES[(player_id - 1) % len(_NAME_PREFIXES)]
            suffix = _NAME_SUFFIXES[((player_id - 1) // len(_NAME_PREFIXES)) % len(_NAME_SUFFIXES)]
            session.add(PlayerProfile(
                id=player_id,
                username=f"{prefix}{suffix}{player_id}",
                display_name=f"{prefix} {suffix}",
                avatar_url=f"https://avatar.example.com/{player_id}.jpg",
                country=rng.choice(_COUNTRIES),
                level=rng.randint(1, 60),
                is_premium=rng.random() < 0.3,
                created_at=now - timedelta(days=rng.randint(30, 720)),
                last_login_at=now - timedelta(hours=rng.randint(0, 24 * 30)),
            ))
        await session.flush()

        score_count = 0
        for first, last, low, high in _SCORE_BANDS:
            for n in range(first, last + 1):
                session.add(PlayerScore(
                    player_id=(n % scoring_players) + 1,
                    score=rng.randint(low, high),
                    region=regions[n % len(regions)].value,
                    game_mode=StoreConstants.GAME_MODES[n % len(StoreConstants.GAME_MODES)],
                    created_at=now - timedelta(seconds=rng.randint(0, 30 * 24 * 3600)),
                ))
                score_count += 1

        await session.commit()

    logger.info(f"Added {player_count} profiles and {score_count} scores")
    return True
