"""/countdown: set the countdown shown in the bot's nickname"""
from datetime import datetime
from typing import Any, Dict, Optional

import discord

from .base import SlashCommand, option
from ..services.countdown_service import CountdownService
from ..services.interactions import CommandInteraction, message_response
from ..storage.models import CountdownRecord
from ..utils.timezone import to_local, to_utc

TARGET_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d")


def parse_target(value: str, tz_name: str) -> Optional[datetime]:
    """
    Parse a countdown target to naive UTC

    Naive inputs are read as local time in tz_name; ISO-8601 strings with an
    offset keep their offset.
    """
    value = value.strip()
    for fmt in TARGET_FORMATS:
        try:
            return to_utc(datetime.strptime(value, fmt), tz_name)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return to_utc(parsed, tz_name)


class CountdownCommand(SlashCommand):
    name = "countdown"
    description = "Aseta uusi countdown."
    options = [
        option("target", "Kohdepäivämäärä (esim. 2026-12-24 18:00)", discord.AppCommandOptionType.string, required=True),
        option("description", "Kuvaus", discord.AppCommandOptionType.string, required=True),
    ]

    def __init__(self, countdown_service: CountdownService, tz_name: str = "Europe/Helsinki"):
        self.countdown_service = countdown_service
        self.tz_name = tz_name

    async def execute(self, interaction: CommandInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        target_str = interaction.option("target")
        description = interaction.option("description")

        if not target_str or not description:
            return message_response("Missing target or description.")

        target = parse_target(str(target_str), self.tz_name)
        if target is None:
            return message_response("Invalid date format. Use YYYY-MM-DD HH:mm.")

        self.countdown_service.set_countdown(CountdownRecord(target_date=target, description=str(description)))

        local = to_local(target, self.tz_name)
        return message_response(
            f"Countdown asetettu: **{description}** -> {local.strftime('%d.%m.%Y klo %H.%M')}"
        )
