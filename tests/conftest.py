"""Shared fixtures for leaderboard tests."""

import os

# Keep test runs from writing dated log files into the working tree.
os.environ.setdefault("LOG_DIR", "")

import pytest

from leaderboard.repositories.memory import InMemoryProfileRepository, InMemoryScoreRepository
from leaderboard.services import (
    LeaderboardService, ProfileResolver, RankingAssembler, ResultCache, ScoreStoreAccessor,
)
from leaderboard.utils.metrics import InMemoryMetrics
from tests.helpers import FakeClock, make_profile


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def metrics():
    return InMemoryMetrics()


@pytest.fixture
def score_repo():
    return InMemoryScoreRepository()


@pytest.fixture
def profile_repo():
    return InMemoryProfileRepository(make_profile(pid) for pid in range(1, 11))


@pytest.fixture
def cache(clock):
    return ResultCache(ttl=30, clock=clock)


@pytest.fixture
def service(score_repo, profile_repo, cache, metrics):
    return LeaderboardService(
        ScoreStoreAccessor(score_repo, timeout=1.0, metrics=metrics),
        ProfileResolver(profile_repo, timeout=1.0, metrics=metrics),
        RankingAssembler(metrics),
        cache,
        metrics,
    )
