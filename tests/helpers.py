"""Test helpers shared across leaderboard test modules."""

from leaderboard.data_models.leaderboard import ProfileRecord


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_profile(player_id: int, **overrides) -> ProfileRecord:
    fields = dict(
        id=player_id,
        username=f"player{player_id}",
        display_name=f"Player {player_id}",
        avatar_url=f"https://avatar.example.com/{player_id}.jpg",
        country="US",
        level=10 + player_id,
        is_premium=player_id % 2 == 0,
    )
    fields.update(overrides)
    return ProfileRecord(**fields)
