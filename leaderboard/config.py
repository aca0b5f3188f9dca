import os
from dotenv import load_dotenv

from leaderboard.constants import CacheConstants, StoreConstants

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got '{raw}'")


def to_async_url(url: str) -> str:
    """Swap the sync pysqlite driver for aiosqlite; other URLs pass through"""
    if url.startswith('sqlite:///'):
        return url.replace('sqlite:///', 'sqlite+aiosqlite:///', 1)
    return url


class Config:
    """Leaderboard service configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///leaderboard.db')
    DB_POOL_SIZE = _env_int('DB_POOL_SIZE', 10)
    DB_MAX_OVERFLOW = _env_int('DB_MAX_OVERFLOW', 5)
    DB_POOL_TIMEOUT_SECONDS = _env_float('DB_POOL_TIMEOUT_SECONDS', StoreConstants.DEFAULT_ACQUIRE_TIMEOUT)

    # Store call settings
    STORE_TIMEOUT_SECONDS = _env_float('STORE_TIMEOUT_SECONDS', StoreConstants.DEFAULT_STORE_TIMEOUT)
    PROFILE_TIMEOUT_SECONDS = _env_float('PROFILE_TIMEOUT_SECONDS', StoreConstants.DEFAULT_STORE_TIMEOUT)
    # Defaults to the full pool capacity so store calls never outnumber connections
    STORE_MAX_IN_FLIGHT = _env_int('STORE_MAX_IN_FLIGHT', DB_POOL_SIZE + DB_MAX_OVERFLOW)

    # Cache settings
    CACHE_TTL_SECONDS = _env_float('CACHE_TTL_SECONDS', CacheConstants.DEFAULT_CACHE_TTL)

    # Logging
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    @classmethod
    def async_database_url(cls) -> str:
        """Return DATABASE_URL with an async driver for sqlite URLs"""
        return to_async_url(cls.DATABASE_URL)

    @classmethod
    def validate(cls):
        """Validate that configured values are usable"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if cls.CACHE_TTL_SECONDS <= 0:
            raise ValueError("CACHE_TTL_SECONDS must be positive")
        if cls.STORE_TIMEOUT_SECONDS <= 0 or cls.PROFILE_TIMEOUT_SECONDS <= 0:
            raise ValueError("Store timeouts must be positive")
        if cls.DB_POOL_SIZE < 1 or cls.DB_MAX_OVERFLOW < 0:
            raise ValueError("DB_POOL_SIZE must be >= 1 and DB_MAX_OVERFLOW >= 0")
        if cls.STORE_MAX_IN_FLIGHT < 1:
            raise ValueError("STORE_MAX_IN_FLIGHT must be >= 1")
        if cls.STORE_MAX_IN_FLIGHT > cls.DB_POOL_SIZE + cls.DB_MAX_OVERFLOW:
            raise ValueError("STORE_MAX_IN_FLIGHT cannot exceed DB_POOL_SIZE + DB_MAX_OVERFLOW")
