"""Rendering of the live score embed"""
from datetime import datetime
from typing import List, Optional
import discord
import pytz

from ..storage.models import GameSnapshot, GoalEvent
from ..utils.timezone import to_local

SCORES_TITLE = "Liiga"
SCORES_COLOUR = 0x0099ff
UNKNOWN_SCORER = "Tuntematon"
EMPTY_VALUE = "\u200b"


def format_game_time(seconds: int) -> str:
    """Format elapsed game time as m:ss"""
    return f"{seconds // 60}:{seconds % 60:02d}"


def get_last_goal(game: GameSnapshot) -> Optional[GoalEvent]:
    """Return the goal with the greatest elapsed game time from either side"""
    goals = game.home_team.goal_events + game.away_team.goal_events
    if not goals:
        return None
    return max(goals, key=lambda g: g.game_time)


def is_home_goal(game: GameSnapshot, goal: GoalEvent) -> bool:
    """Attribute a goal to the home side by matching game time and scorer surname"""
    return any(
        e.game_time == goal.game_time and e.scorer_last_name == goal.scorer_last_name
        for e in game.home_team.goal_events
    )


def format_scorer(goal: GoalEvent) -> str:
    if not goal.scorer_first_name and not goal.scorer_last_name:
        return UNKNOWN_SCORER
    first = (goal.scorer_first_name or "").capitalize()
    last = (goal.scorer_last_name or "").capitalize()
    return f"{first} {last}".strip()


def format_last_goal(game: GameSnapshot, goal: GoalEvent) -> str:
    """Render a goal line with the scoring side's score in bold"""
    home_goal = is_home_goal(game, goal)
    home_score = f"**{goal.home_team_score}**" if home_goal else f"{goal.home_team_score}"
    away_score = f"{goal.away_team_score}" if home_goal else f"**{goal.away_team_score}**"
    goal_types = f" ({', '.join(goal.goal_types)})" if goal.goal_types else ""
    return (
        f"{home_score} - {away_score} {format_game_time(goal.game_time)} "
        f"{format_scorer(goal)}{goal_types}"
    )


def format_game_field(game: GameSnapshot, tz_name: str) -> tuple:
    """Return the (name, value) pair of a game's embed field"""
    home = game.home_team.team_name
    away = game.away_team.team_name

    if not game.started:
        start_local = to_local(game.start, tz_name)
        return f"{home} - {away}", f"klo {start_local.strftime('%H.%M')}"

    ongoing = "*" if not game.ended else ""
    name = (
        f"{home} {game.home_team.goals} - {game.away_team.goals} {away} "
        f"({format_game_time(game.game_time)}{ongoing})"
    )
    last_goal = get_last_goal(game)
    value = format_last_goal(game, last_goal) if last_goal else EMPTY_VALUE
    return name, value


def build_scores_embed(games: List[GameSnapshot], now: datetime, tz_name: str = "Europe/Helsinki") -> discord.Embed:
    """
    Build the score embed for all games of the day

    Args:
        games: Games in feed order
        now: Render time (naive UTC), shown as the embed timestamp
        tz_name: Timezone used for start times of games not yet started
    """
    embed = discord.Embed(
        title=SCORES_TITLE,
        colour=SCORES_COLOUR,
        timestamp=pytz.UTC.localize(now) if now.tzinfo is None else now
    )
    for game in games:
        name, value = format_game_field(game, tz_name)
        embed.add_field(name=name, value=value, inline=False)
    return embed
