from contextlib import asynccontextmanager
from typing import List, Optional

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from leaderboard.config import Config, to_async_url
from leaderboard.database.models import Base, PlayerScore, RANKING_INDEXES
from leaderboard.utils.logger import setup_logger

class Database:
    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = to_async_url(database_url) if database_url else Config.async_database_url()
        self.engine = None
        self.async_session = None

    def _engine_options(self) -> dict:
        """Pool sizing for the engine.

        Sqlite URLs keep SQLAlchemy's default pool (in-memory databases
        require a single shared connection); every other backend gets a
        bounded pool that queues for at most DB_POOL_TIMEOUT_SECONDS.
        """
        options = {'echo': Config.DEBUG}
        if not self.database_url.startswith('sqlite'):
            options.update(
                pool_size=Config.DB_POOL_SIZE,
                max_overflow=Config.DB_MAX_OVERFLOW,
                pool_timeout=Config.DB_POOL_TIMEOUT_SECONDS,
                pool_pre_ping=True,
            )
        return options

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        self.engine = create_async_engine(self.database_url, **self._engine_options())

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        # Create all tables (and their indexes)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

    @property
    def session_factory(self):
        if self.async_session is None:
            raise RuntimeError("Database.initialize() must be awaited before use")
        return self.async_session

    @asynccontextmanager
    async def get_session(self):
        """Get a database session"""
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def ensure_ranking_indexes(self) -> List[str]:
        """Create the ranking indexes if they are missing.

        Databases created before the indexes were declared still serve the
        top-K queries with a full scan and sort; this upgrades them in place.

        Returns:
            Names of the indexes that had to be created
        """
        def _create_missing(sync_conn) -> List[str]:
            existing = {ix['name'] for ix in inspect(sync_conn).get_indexes(PlayerScore.__tablename__)}
            created = []
            for index in PlayerScore.__table__.indexes:
                if index.name in RANKING_INDEXES and index.name not in existing:
                    index.create(sync_conn)
                    created.append(index.name)
            return created

        async with self.engine.begin() as conn:
            created = await conn.run_sync(_create_missing)

        for name in created:
            self.logger.info(f"Created ranking index {name}")
        return created

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")
