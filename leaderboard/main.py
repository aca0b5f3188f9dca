import argparse
import asyncio
import sys
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from leaderboard.config import Config
from leaderboard.constants import LimitConstants, Region
from leaderboard.data_models.leaderboard import LeaderboardResult
from leaderboard.database.database import Database
from leaderboard.database.seed import seed_demo_data
from leaderboard.repositories.sql import SqlProfileRepository, SqlScoreRepository
from leaderboard.services import (
    LeaderboardService, ProfileResolver, RankingAssembler, ResultCache,
    ScoreStoreAccessor, StoreCallLimiter,
)
from leaderboard.utils.exceptions import LeaderboardException
from leaderboard.utils.logger import setup_logger
from leaderboard.utils.metrics import InMemoryMetrics, MetricsRecorder


def build_leaderboard_service(database: Database, metrics: Optional[MetricsRecorder] = None) -> LeaderboardService:
    """Wire the query pipeline on top of an initialized database."""
    limiter = StoreCallLimiter(
        max_in_flight=Config.STORE_MAX_IN_FLIGHT,
        acquire_timeout=Config.DB_POOL_TIMEOUT_SECONDS,
    )
    score_accessor = ScoreStoreAccessor(
        SqlScoreRepository(database.session_factory),
        timeout=Config.STORE_TIMEOUT_SECONDS,
        limiter=limiter,
        metrics=metrics,
    )
    profile_resolver = ProfileResolver(
        SqlProfileRepository(database.session_factory),
        timeout=Config.PROFILE_TIMEOUT_SECONDS,
        limiter=limiter,
        metrics=metrics,
    )
    return LeaderboardService(
        score_accessor,
        profile_resolver,
        RankingAssembler(metrics),
        ResultCache(ttl=Config.CACHE_TTL_SECONDS),
        metrics,
    )


class LeaderboardApp:
    """Owns the database and the wired query service for one process."""

    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.db = Database(database_url)
        self.metrics = InMemoryMetrics()
        self.service: Optional[LeaderboardService] = None

    async def setup(self, seed: bool = False):
        self.logger.info("Setting up leaderboard service...")
        await self.db.initialize()
        if seed:
            await seed_demo_data(self.db)
        self.service = build_leaderboard_service(self.db, self.metrics)

    async def close(self):
        self.logger.info("Shutting down leaderboard service...")
        await self.db.close()


def format_leaderboard(result: LeaderboardResult) -> str:
    lines = [f"Top {result.limit} ({result.scope}): {result.count} of {result.total_available} scores"]
    for entry in result.entries:
        premium = " *" if entry.is_premium else ""
        lines.append(
            f"{entry.rank:>4}. {entry.display_name or entry.username:<24} "
            f"{entry.score:>6}  {entry.region.value:<4} {entry.country or '--'}  "
            f"lvl {entry.level}{premium}"
        )
    return "\n".join(lines)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a leaderboard from the configured database")
    parser.add_argument('--region', choices=[r.value for r in Region], help="Regional leaderboard (default: global)")
    parser.add_argument('--limit', type=int, default=LimitConstants.DEFAULT_LIMIT)
    parser.add_argument('--seed', action='store_true', help="Load demo data into an empty database first")
    parser.add_argument('--database-url', help="Override DATABASE_URL")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    Config.validate()
    app = LeaderboardApp(args.database_url)
    try:
        await app.setup(seed=args.seed)
        if args.region:
            result = await app.service.get_top_players_by_region(args.region, args.limit)
        else:
            result = await app.service.get_top_players(args.limit)
        print(format_leaderboard(result))
        return 0
    except LeaderboardException as e:
        app.logger.error(f"Leaderboard query failed: {e}")
        print(f"Error: {e.user_message}", file=sys.stderr)
        return 1
    except SQLAlchemyError as e:
        app.logger.error(f"Database setup failed: {e}", exc_info=True)
        print(f"Error: could not open database: {e}", file=sys.stderr)
        return 1
    finally:
        await app.close()


def run():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
