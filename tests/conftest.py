from datetime import datetime
from typing import List, Optional

import pytest

from geimeribot.storage.database import Database
from geimeribot.storage.kv_store import KVStore
from geimeribot.storage.models import GameSnapshot, GoalEvent, TeamSnapshot
from geimeribot.utils.cache import TTLCache


class FakeClock:
    """Settable clock returning naive UTC datetimes"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeMonotonic:
    """Settable monotonic clock in seconds"""

    def __init__(self, value: float = 1000.0):
        self.value = value

    def advance(self, seconds: float):
        self.value += seconds

    def __call__(self) -> float:
        return self.value


def make_game(
    game_id: int = 1,
    start: datetime = datetime(2026, 10, 19, 16, 30),
    started: bool = False,
    ended: bool = False,
    home_goals: Optional[List[GoalEvent]] = None,
    away_goals: Optional[List[GoalEvent]] = None,
    game_time: int = 0,
    finished_type: str = "",
    home: str = "Tappara",
    away: str = "Ilves",
) -> GameSnapshot:
    home_goals = home_goals or []
    away_goals = away_goals or []
    return GameSnapshot(
        id=game_id,
        start=start,
        home_team=TeamSnapshot(team_name=home, goals=len(home_goals), goal_events=home_goals),
        away_team=TeamSnapshot(team_name=away, goals=len(away_goals), goal_events=away_goals),
        started=started,
        ended=ended,
        game_time=game_time,
        finished_type=finished_type,
    )


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0))


@pytest.fixture
def monotonic():
    return FakeMonotonic()


@pytest.fixture
def database(tmp_path):
    return Database(db_path=str(tmp_path / "bot.db"))


@pytest.fixture
def store(database, clock):
    return KVStore(database, clock=clock)


@pytest.fixture
def cache(monotonic):
    return TTLCache(clock=monotonic)
