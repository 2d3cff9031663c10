"""/viikongeimeri: weekly playtime statistics"""
import json
import sqlite3
import urllib.parse
from datetime import datetime
from typing import Any, Dict, List, Optional

import discord

from .base import SlashCommand, option
from ..services.interactions import CommandInteraction, embed_response, message_response
from ..storage.database import Database, iso_week_year
from ..utils.formatting import format_duration, medal
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)

CHART_URL = "https://quickchart.io/chart"
STATS_COLOUR = 0x00ff00


def _int_option(value: Any, default: int, low: int, high: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if low <= number <= high else default


def chart_url(week: int, labels: List[str], data_points: List[int]) -> str:
    """QuickChart bar chart of minutes per user"""
    chart_config = {
        "type": "bar",
        "data": {
            "labels": labels,
            "datasets": [{
                "label": "Pelitunnit (min)",
                "data": data_points,
                "backgroundColor": "rgba(54, 162, 235, 0.5)",
                "borderColor": "rgb(54, 162, 235)",
                "borderWidth": 1,
            }],
        },
        "options": {
            "title": {"display": True, "text": f"Viikon {week} huiput"},
        },
    }
    encoded = urllib.parse.quote(json.dumps(chart_config, separators=(",", ":")), safe="")
    return f"{CHART_URL}?c={encoded}&bkg=white&w=500&h=300"


class ViikonGeimeriCommand(SlashCommand):
    """Top players of a week with per-game breakdown and longest sessions"""

    name = "viikongeimeri"
    description = "Näyttää viikon kovimmat geimerit ja pelitunnit."
    options = [
        option("week", "Viikkonumero", discord.AppCommandOptionType.integer),
        option("year", "Vuosi", discord.AppCommandOptionType.integer),
    ]

    def __init__(self, database: Database):
        self.database = database

    async def execute(self, interaction: CommandInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        current_week, current_year = iso_week_year(now or now_utc())
        week = _int_option(interaction.option("week"), current_week, 1, 53)
        year = _int_option(interaction.option("year"), current_year, 2000, 9999)

        logger.info(f"Executing viikongeimeri for week {week}/{year}")

        try:
            top_players = self.database.get_top_players(week, year, limit=10)
            if not top_players:
                return message_response(f"Ei pelidataa viikolle {week}/{year}.")
            game_totals = self.database.get_game_totals(week, year)
            longest_sessions = {row['username']: row for row in self.database.get_longest_sessions(week, year)}
        except sqlite3.Error as e:
            logger.error(f"Error fetching stats: {e}")
            return message_response("Virhe haettaessa tilastoja.")

        description = f"### 🏆 Viikon Geimeri ({week}/{year})\n"
        labels: List[str] = []
        data_points: List[int] = []

        for i, player in enumerate(top_players):
            username = player['username']
            description += f"**{medal(i)} {username}**: {format_duration(player['total'])}\n"

            user_games = [g for g in game_totals if g['username'] == username]
            description += "> " + ", ".join(
                f"{g['game_name']} ({format_duration(g['total'])})" for g in user_games
            ) + "\n"

            longest = longest_sessions.get(username)
            if longest:
                description += (
                    f"> *Pisin sessio: {format_duration(longest['max_session'])} "
                    f"({longest['game_name']})*\n"
                )
            description += "\n"

            labels.append(username.split("#")[0])
            data_points.append(player['total'])

        embed = discord.Embed(
            title=f"Geimitilastot - Viikko {week}, {year}",
            description=description,
            colour=STATS_COLOUR
        )
        embed.set_image(url=chart_url(week, labels, data_points))
        return embed_response(embed)
