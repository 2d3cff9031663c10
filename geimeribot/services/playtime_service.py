"""Playtime tracking from the guild widget and the weekly summary post"""
import asyncio
from datetime import datetime
from typing import Optional

from .discord_client import DiscordClient
from .errors import ProviderError
from .widget_client import WidgetClient
from ..storage.database import Database, iso_week_year
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)


class PlaytimeService:
    """Accumulates minutes played per user and game"""

    def __init__(self, database: Database, widget_client: Optional[WidgetClient]):
        """
        Initialize playtime service

        Args:
            database: Database holding the playtimes table
            widget_client: Widget client, or None when no guild is configured
        """
        self.database = database
        self.widget_client = widget_client

    async def track(self, now: Optional[datetime] = None) -> int:
        """
        Record one minute for every member currently playing a game

        Returns:
            Number of members recorded
        """
        if not self.widget_client:
            return 0
        now = now or now_utc()

        try:
            members = await asyncio.to_thread(self.widget_client.fetch_members)
        except ProviderError as e:
            logger.error(f"Error tracking playtimes: {e}")
            return 0

        recorded = 0
        for member in members:
            if not member.game_name:
                continue
            extended = await asyncio.to_thread(
                self.database.record_playing, member.tag, member.game_name, now
            )
            logger.debug(
                f"{'Extended' if extended else 'Started'} session: {member.tag} playing {member.game_name}"
            )
            recorded += 1
        return recorded


def weekly_summary_message(winner_tag: str) -> str:
    winner_name = winner_tag.split('#')[0]
    return (
        f"**{winner_name} äiä o viikon geimeri, gz!!!**\n\n"
        f"Käytä `/viikongeimeri` nähdäksesi täydet tilastot!"
    )


async def send_weekly_summary(
    database: Database,
    discord_client: DiscordClient,
    now: Optional[datetime] = None
) -> bool:
    """
    Announce the user with the most playtime this week

    Returns:
        True if an announcement was sent
    """
    now = now or now_utc()
    week, year = iso_week_year(now)

    top = database.get_top_players(week, year, limit=1)
    if not top:
        logger.info(f"No playtime data for week {week}/{year}, skipping weekly summary")
        return False

    message_id = await discord_client.send_text(weekly_summary_message(top[0]['username']))
    if message_id:
        logger.info(f"Weekly summary sent for week {week}/{year}")
    return message_id is not None
