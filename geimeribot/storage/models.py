"""Data models for playtime, score tracking, countdowns and lineups"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..utils.timezone import parse_iso_utc

STATUS_SCHEDULED = "SCHEDULED"
STATUS_LIVE = "LIVE"
STATUS_ENDED = "ENDED"


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return parse_iso_utc(value) if value else None


@dataclass
class PlaytimeSession:
    """One continuous stretch of a user playing a game, in whole minutes"""
    username: str
    game_name: str
    start_time: datetime
    last_seen: datetime
    total_minutes: int
    week: int
    year: int


@dataclass
class GoalEvent:
    """A single goal as reported by the score feed"""
    home_team_score: int
    away_team_score: int
    game_time: int  # seconds
    period: int = 0
    scorer_first_name: Optional[str] = None
    scorer_last_name: Optional[str] = None
    goal_types: List[str] = field(default_factory=list)


@dataclass
class TeamSnapshot:
    """One side of a game"""
    team_name: str
    goals: int
    goal_events: List[GoalEvent] = field(default_factory=list)


@dataclass
class GameSnapshot:
    """A game as seen on a single poll of the score feed"""
    id: int
    start: datetime  # naive UTC
    home_team: TeamSnapshot
    away_team: TeamSnapshot
    started: bool = False
    ended: bool = False
    game_time: int = 0  # seconds
    current_period: int = 0
    finished_type: str = ""

    @property
    def in_progress(self) -> bool:
        return self.started and not self.ended

    @property
    def status(self) -> str:
        """Finish state of the game: the feed's finish type once ended, otherwise LIVE or SCHEDULED"""
        if self.ended:
            return self.finished_type or STATUS_ENDED
        return STATUS_LIVE if self.started else STATUS_SCHEDULED


@dataclass
class GameDigest:
    """Combined score and finish state stored per game"""
    last_goal_count: int
    status: str

    @property
    def final(self) -> bool:
        return self.status not in (STATUS_LIVE, STATUS_SCHEDULED)


@dataclass
class DailyTrackingState:
    """Persisted decision state of the live score message for one date"""
    last_checked: datetime
    message_id: Optional[int] = None
    games: Dict[str, GameDigest] = field(default_factory=dict)
    no_games_today: bool = False
    next_notification_time: Optional[datetime] = None
    last_active_update_done: bool = False

    @property
    def finalized(self) -> bool:
        """The message got its final update and every game it shows has ended"""
        return (
            self.message_id is not None
            and self.last_active_update_done
            and bool(self.games)
            and all(d.final for d in self.games.values())
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message_id": self.message_id,
            "last_checked": _iso(self.last_checked),
            "games": {
                game_id: {"last_goal_count": d.last_goal_count, "status": d.status}
                for game_id, d in self.games.items()
            },
            "no_games_today": self.no_games_today,
            "next_notification_time": _iso(self.next_notification_time),
            "last_active_update_done": self.last_active_update_done,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyTrackingState":
        message_id = data.get("message_id")
        return cls(
            message_id=int(message_id) if message_id is not None else None,
            last_checked=_parse(data.get("last_checked")),
            games={
                str(game_id): GameDigest(
                    last_goal_count=int(d.get("last_goal_count", 0)),
                    status=d.get("status") or STATUS_SCHEDULED,
                )
                for game_id, d in (data.get("games") or {}).items()
            },
            no_games_today=bool(data.get("no_games_today", False)),
            next_notification_time=_parse(data.get("next_notification_time")),
            last_active_update_done=bool(data.get("last_active_update_done", False)),
        )


@dataclass
class CountdownRecord:
    """The single active countdown shown in the bot's nickname"""
    target_date: datetime  # naive UTC
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"target_date": _iso(self.target_date), "description": self.description}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CountdownRecord":
        return cls(target_date=parse_iso_utc(data["target_date"]), description=data["description"])


@dataclass
class LineupPlayer:
    name: str
    times: List[str] = field(default_factory=list)


@dataclass
class LineupState:
    """A lineup poll created by /ketälines"""
    slug: str
    message: str
    player_count: int
    times: List[str]
    players: List[LineupPlayer] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "slug": self.slug,
            "message": self.message,
            "player_count": self.player_count,
            "times": list(self.times),
            "players": [{"name": p.name, "times": list(p.times)} for p in self.players],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineupState":
        return cls(
            slug=data["slug"],
            message=data["message"],
            player_count=int(data["player_count"]),
            times=list(data["times"]),
            players=[LineupPlayer(name=p["name"], times=list(p["times"])) for p in data.get("players", [])],
        )
