from datetime import datetime

import pytest
import requests

from geimeribot.services.errors import ProviderError
from geimeribot.services.liiga_client import LiigaClient
from geimeribot.services.widget_client import WidgetClient

RAW_GAME = {
    "id": 2026123,
    "start": "2026-10-19T15:30:00.000Z",
    "started": True,
    "ended": False,
    "gameTime": 1825,
    "currentPeriod": 2,
    "homeTeam": {
        "teamName": "Tappara",
        "goals": 1,
        "goalEvents": [{
            "homeTeamScore": 1,
            "awayTeamScore": 0,
            "gameTime": 600,
            "period": 1,
            "scorerPlayer": {"firstName": "ANTTI", "lastName": "SUOMELA"},
            "goalTypes": ["YV"],
        }],
    },
    "awayTeam": {"teamName": "Ilves", "goals": 0, "goalEvents": []},
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200, error=None):
        self.payload = payload
        self.status_code = status_code
        self.error = error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if self.error:
            raise self.error
        return self.payload


def test_parse_game():
    game = LiigaClient().parse_games([RAW_GAME])[0]

    assert game.id == 2026123
    assert game.start == datetime(2026, 10, 19, 15, 30)
    assert game.in_progress is True
    assert game.game_time == 1825
    assert game.home_team.team_name == "Tappara"
    goal = game.home_team.goal_events[0]
    assert (goal.scorer_first_name, goal.scorer_last_name) == ("ANTTI", "SUOMELA")
    assert goal.goal_types == ["YV"]
    assert game.away_team.goal_events == []


def test_unparseable_game_is_skipped():
    broken = {"id": 1, "start": "huomenna", "homeTeam": {}, "awayTeam": {}}

    games = LiigaClient().parse_games([broken, RAW_GAME])

    assert [g.id for g in games] == [2026123]


def test_goal_without_scorer():
    raw = dict(RAW_GAME, homeTeam={"teamName": "Tappara", "goals": 1, "goalEvents": [{"gameTime": 10}]})

    goal = LiigaClient().parse_games([raw])[0].home_team.goal_events[0]

    assert goal.scorer_last_name is None
    assert goal.goal_types == []


def test_fetch_games(monkeypatch):
    calls = []

    def fake_get(url, params, timeout):
        calls.append((url, params))
        return FakeResponse({"games": [RAW_GAME]})

    monkeypatch.setattr(requests, "get", fake_get)

    games = LiigaClient(base_url="https://example.test/api/").fetch_games("2026-10-19")

    assert len(games) == 1
    assert calls == [("https://example.test/api/games", {"tournament": "runkosarja", "date": "2026-10-19"})]


def test_fetch_games_empty_day(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse({"games": []}))

    assert LiigaClient().fetch_games("2026-10-19") == []


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=503),
    FakeResponse(error=ValueError("not json")),
])
def test_fetch_games_failure_raises(monkeypatch, response):
    monkeypatch.setattr(requests, "get", lambda *a, **kw: response)

    with pytest.raises(ProviderError):
        LiigaClient().fetch_games("2026-10-19")


def test_widget_members(monkeypatch):
    payload = {"members": [
        {"username": "matti", "discriminator": "0001", "game": {"name": "X"}},
        {"username": "liisa", "discriminator": "0002"},
    ]}
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(payload))

    members = WidgetClient("123").fetch_members()

    assert [(m.tag, m.game_name) for m in members] == [("matti#0001", "X"), ("liisa#0002", "")]


def test_widget_failure_raises(monkeypatch):
    def unreachable(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(requests, "get", unreachable)

    with pytest.raises(ProviderError):
        WidgetClient("123").fetch_members()


def test_fetch_games_with_only_unparseable_games_raises(monkeypatch):
    payload = {"games": [{"id": 1, "homeTeam": {"teamName": "A"}, "awayTeam": {"teamName": "B"}}]}
    monkeypatch.setattr(requests, "get", lambda *a, **kw: FakeResponse(payload))

    with pytest.raises(ProviderError):
        LiigaClient().fetch_games("2026-10-19")


def test_game_with_malformed_goal_event_is_skipped():
    raw = dict(RAW_GAME, id=5, homeTeam={"teamName": "Tappara", "goals": 1, "goalEvents": ["1-0"]})

    games = LiigaClient().parse_games([raw, RAW_GAME])

    assert [g.id for g in games] == [2026123]
