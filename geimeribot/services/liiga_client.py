"""Client for the Liiga daily schedule and score feed"""
from typing import Any, Dict, List, Optional
import requests

from .errors import ProviderError
from ..storage.models import GameSnapshot, GoalEvent, TeamSnapshot
from ..utils.logger import setup_logger
from ..utils.timezone import parse_iso_utc

logger = setup_logger(__name__)


class LiigaClient:
    """Fetches and parses the games of a single day"""
    
    def __init__(
        self,
        base_url: str = "https://liiga.fi/api/v2",
        tournament: str = "runkosarja",
        timeout: int = 30
    ):
        """
        Initialize Liiga client
        
        Args:
            base_url: Base URL of the Liiga API
            tournament: Tournament identifier passed to the games endpoint
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.tournament = tournament
        self.timeout = timeout
    
    def fetch_games(self, date: str) -> List[GameSnapshot]:
        """
        Fetch all games of a date
        
        Args:
            date: Date as YYYY-MM-DD
        
        Returns:
            List of GameSnapshot objects (empty when there are no games)
        
        Raises:
            ProviderError: if the feed could not be fetched or decoded
        """
        url = f"{self.base_url}/games"
        params = {"tournament": self.tournament, "date": date}
        try:
            logger.debug(f"Fetching Liiga games for {date}")
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ProviderError(f"Failed to fetch Liiga games for {date}: {e}") from e
        except ValueError as e:
            raise ProviderError(f"Invalid JSON from Liiga API for {date}: {e}") from e
        
        raw_games = data.get("games") if isinstance(data, dict) else None
        games = self.parse_games(raw_games or [])
        if raw_games and not games:
            raise ProviderError(f"None of the {len(raw_games)} Liiga games for {date} could be parsed")
        return games
    
    def parse_games(self, raw_games: List[Dict[str, Any]]) -> List[GameSnapshot]:
        """Parse the games array of the feed, skipping entries that cannot be parsed"""
        games = []
        for raw in raw_games:
            game = self._parse_game(raw)
            if game:
                games.append(game)
        return games
    
    def _parse_game(self, raw: Dict[str, Any]) -> Optional[GameSnapshot]:
        """Parse a single game object"""
        try:
            return GameSnapshot(
                id=int(raw["id"]),
                start=parse_iso_utc(raw["start"]),
                home_team=self._parse_team(raw["homeTeam"]),
                away_team=self._parse_team(raw["awayTeam"]),
                started=bool(raw.get("started", False)),
                ended=bool(raw.get("ended", False)),
                game_time=int(raw.get("gameTime") or 0),
                current_period=int(raw.get("currentPeriod") or 0),
                finished_type=raw.get("finishedType") or ""
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping unparseable game {raw.get('id') if isinstance(raw, dict) else raw!r}: {e}")
            return None
    
    def _parse_team(self, raw: Dict[str, Any]) -> TeamSnapshot:
        return TeamSnapshot(
            team_name=raw["teamName"],
            goals=int(raw.get("goals") or 0),
            goal_events=[self._parse_goal(e) for e in raw.get("goalEvents") or []]
        )
    
    def _parse_goal(self, raw: Dict[str, Any]) -> GoalEvent:
        scorer = raw.get("scorerPlayer") or {}
        return GoalEvent(
            home_team_score=int(raw.get("homeTeamScore") or 0),
            away_team_score=int(raw.get("awayTeamScore") or 0),
            game_time=int(raw.get("gameTime") or 0),
            period=int(raw.get("period") or 0),
            scorer_first_name=scorer.get("firstName"),
            scorer_last_name=scorer.get("lastName"),
            goal_types=list(raw.get("goalTypes") or [])
        )
