"""
Service-wide constants for the leaderboard ranking core.

Bounds, enumerations and defaults shared by the query façade, the stores
and the configuration layer.
"""

from enum import Enum


class Region(str, Enum):
    """Regions a score can be recorded in."""
    NA = "NA"
    EU = "EU"
    ASIA = "ASIA"
    SA = "SA"
    OCE = "OCE"

    @classmethod
    def parse(cls, value) -> "Region":
        """Return the Region for a code such as 'eu' or 'EU'.

        Raises ValueError for unknown codes.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Region code must be a string, got {type(value).__name__}")
        try:
            return cls(value.strip().upper())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ValueError(f"Invalid region '{value}'. Valid regions: {valid}") from None


class LimitConstants:
    """Bounds for the number of entries a single query may request."""

    MIN_LIMIT = 1
    MAX_LIMIT = 1000

    # Used by the CLI when no limit is given
    DEFAULT_LIMIT = 100


class CacheConstants:
    """Constants for result caching behavior."""

    # Default TTL for cached leaderboards (seconds)
    DEFAULT_CACHE_TTL = 30


class StoreConstants:
    """Constants for store access."""

    # Per-call timeout for score and profile lookups (seconds)
    DEFAULT_STORE_TIMEOUT = 2.0

    # How long a call may wait for a free store slot before being rejected
    DEFAULT_ACQUIRE_TIMEOUT = 1.0

    # Game modes used by the demo data set
    GAME_MODES = ("ranked", "casual", "tournament")
