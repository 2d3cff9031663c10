"""/ketälines: gather players for the next half-hour slots"""
import sqlite3
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import discord

from .base import SlashCommand, option
from ..services.interactions import (
    CommandInteraction,
    ComponentInteraction,
    CustomId,
    embed_response,
    message_response,
    update_message_response,
)
from ..storage.kv_store import KVStore
from ..storage.models import LineupPlayer, LineupState
from ..utils.cache import TTLCache
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc, to_local

logger = setup_logger(__name__)

NAMESPACE = "ketälines"
LINEUP_TTL = 24 * 60 * 60
SLOT_COUNT = 3
SLOT_MINUTES = 30
DEFAULT_MESSAGE = "lets game"
DEFAULT_PLAYER_COUNT = 5
LEAVE_ACTION = "leave"
LINEUP_COLOUR = 0x3498db
BLANK = "\u200b"
# Discord rejects embeds with more fields
MAX_EMBED_FIELDS = 25
UPDATE_ERROR = "Virhe lineä päivitettäessä."


def lineup_key(slug: str) -> str:
    return f"lineup:{slug}"


def slot_times(now: datetime, tz_name: str) -> List[str]:
    """Local HH:MM labels of the next half-hour boundaries"""
    first = now.replace(second=0, microsecond=0) + timedelta(minutes=SLOT_MINUTES - now.minute % SLOT_MINUTES)
    return [
        to_local(first + timedelta(minutes=SLOT_MINUTES * i), tz_name).strftime("%H:%M")
        for i in range(SLOT_COUNT)
    ]


def render_lineup(state: LineupState) -> discord.Embed:
    """One field per joined player followed by an 'x' per free slot"""
    embed = discord.Embed(title=state.message, colour=LINEUP_COLOUR)
    for player in state.players[:MAX_EMBED_FIELDS]:
        embed.add_field(name=BLANK, value=f"**{player.name}** ({', '.join(player.times)})", inline=False)
    for _ in range(max(0, state.player_count - len(state.players))):
        embed.add_field(name=BLANK, value="x", inline=False)
    return embed


def lineup_buttons(state: LineupState) -> List[Dict[str, Any]]:
    buttons = [
        {
            "type": discord.ComponentType.button.value,
            "style": discord.ButtonStyle.primary.value,
            "label": time,
            "custom_id": str(CustomId(NAMESPACE, state.slug, f"t{i + 1}")),
        }
        for i, time in enumerate(state.times)
    ]
    buttons.append({
        "type": discord.ComponentType.button.value,
        "style": discord.ButtonStyle.danger.value,
        "label": "OUT :(",
        "custom_id": str(CustomId(NAMESPACE, state.slug, LEAVE_ACTION)),
    })
    return [{"type": discord.ComponentType.action_row.value, "components": buttons}]


def apply_action(state: LineupState, player_name: str, action: str) -> bool:
    """
    Apply a button press to the lineup

    Returns:
        True if the lineup changed

    Raises:
        ValueError: for an unknown action
    """
    if action == LEAVE_ACTION:
        before = len(state.players)
        state.players = [p for p in state.players if p.name != player_name]
        return len(state.players) != before

    if not action.startswith("t") or not action[1:].isdigit():
        raise ValueError(f"Unknown lineup action: {action!r}")
    index = int(action[1:]) - 1
    if not 0 <= index < len(state.times):
        raise ValueError(f"Unknown lineup slot: {action!r}")
    chosen = state.times[index]

    player = next((p for p in state.players if p.name == player_name), None)
    if player is None:
        state.players.append(LineupPlayer(name=player_name, times=[chosen]))
        return True
    if chosen in player.times:
        return False
    player.times.append(chosen)
    player.times.sort()
    return True


class KetalinesCommand(SlashCommand):
    name = NAMESPACE
    description = "Ketä lines???"
    options = [
        option("message", "Viesti", discord.AppCommandOptionType.string),
        option("player_count", "Pelaajamäärä (oletus 5)", discord.AppCommandOptionType.integer),
    ]

    def __init__(
        self,
        store: KVStore,
        cache: TTLCache,
        tz_name: str = "Europe/Helsinki",
        cache_ttl: int = 300,
        slug_factory: Optional[Callable[[], str]] = None
    ):
        self.store = store
        self.cache = cache
        self.tz_name = tz_name
        self.cache_ttl = cache_ttl
        self.slug_factory = slug_factory or (lambda: uuid.uuid4().hex[:8])

    def _save(self, state: LineupState):
        key = lineup_key(state.slug)
        self.store.put(key, state.to_dict(), ttl_seconds=LINEUP_TTL)
        self.cache.set(key, state)

    def _load(self, slug: str) -> Optional[LineupState]:
        key = lineup_key(slug)
        entry = self.cache.get(key, self.cache_ttl)
        if entry is not None:
            return entry.value
        logger.debug(f"Fetching {key} from store")
        data = self.store.get(key)
        if data is None:
            return None
        state = LineupState.from_dict(data)
        self.cache.set(key, state)
        return state

    async def execute(self, interaction: CommandInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        message = str(interaction.option("message", DEFAULT_MESSAGE))
        try:
            player_count = int(interaction.option("player_count", DEFAULT_PLAYER_COUNT))
        except (TypeError, ValueError):
            player_count = DEFAULT_PLAYER_COUNT
        if player_count < 1:
            player_count = DEFAULT_PLAYER_COUNT
        player_count = min(player_count, MAX_EMBED_FIELDS)

        state = LineupState(
            slug=self.slug_factory(),
            message=message,
            player_count=player_count,
            times=slot_times(now or now_utc(), self.tz_name),
        )
        try:
            self._save(state)
        except sqlite3.Error as e:
            logger.error(f"Error saving lineup {state.slug}: {e}")
            return message_response("Virhe käynnistäessä lineä.", ephemeral=True)
        logger.info(f"Lineup {state.slug} created: {message} ({player_count} players)")
        return embed_response(render_lineup(state), components=lineup_buttons(state))

    async def handle_component(self, interaction: ComponentInteraction, now: Optional[datetime] = None) -> Dict[str, Any]:
        try:
            state = self._load(interaction.custom_id.instance_id)
        except sqlite3.Error as e:
            logger.error(f"Error loading lineup {interaction.custom_id.instance_id}: {e}")
            return message_response(UPDATE_ERROR, ephemeral=True)
        if state is None:
            return update_message_response({"content": "Lineä ei löytynyt, vanhentunut?", "components": []})

        try:
            changed = apply_action(state, interaction.user_name, interaction.custom_id.action)
        except ValueError as e:
            logger.warning(f"Lineup {state.slug}: {e}")
            return message_response(UPDATE_ERROR, ephemeral=True)

        if changed:
            logger.debug(f"Lineup {state.slug} changed, saving")
            try:
                self._save(state)
            except sqlite3.Error as e:
                logger.error(f"Error saving lineup {state.slug}: {e}")
                self.cache.delete(lineup_key(state.slug))
                return message_response(UPDATE_ERROR, ephemeral=True)
        else:
            logger.debug(f"Lineup {state.slug} unchanged, skipping write")

        return update_message_response({"embeds": [render_lineup(state).to_dict()]})
