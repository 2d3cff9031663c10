"""Live score message tracking for the day's Liiga games"""
import asyncio
from datetime import datetime, timedelta
from typing import List, Optional, Protocol

import discord

from .errors import ProviderError
from .score_embed import build_scores_embed
from ..storage.kv_store import KVStore
from ..storage.models import DailyTrackingState, GameDigest, GameSnapshot
from ..utils.cache import TTLCache
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)


class GamesProvider(Protocol):
    def fetch_games(self, date: str) -> List[GameSnapshot]: ...


class MessageSink(Protocol):
    async def send_embed(self, embed: discord.Embed) -> Optional[int]: ...

    async def edit_embed(self, message_id: int, embed: discord.Embed) -> bool: ...


def state_key(date_str: str) -> str:
    return f"liiga_state_{date_str}"


class ScoreTracker:
    """
    Keeps a single score message per day in sync with the score feed.

    Each call to update() is one poll. The stored state decides whether the
    message is still dormant, gets sent, gets edited, or is already final:

    - no games today: nothing is fetched for the rest of the date
    - before the notification time: nothing is fetched
    - notification time reached and no message yet: a message is sent
    - a message exists: it is edited on every poll while games run, and one
      last time after no game is in progress
    - the final update is done and every game has ended: nothing is fetched
    """

    def __init__(
        self,
        provider: GamesProvider,
        sink: MessageSink,
        store: KVStore,
        cache: TTLCache,
        notify_minutes_before: int = 15,
        cache_ttl: int = 300,
        tz_name: str = "Europe/Helsinki"
    ):
        self.provider = provider
        self.sink = sink
        self.store = store
        self.cache = cache
        self.notify_minutes_before = notify_minutes_before
        self.cache_ttl = cache_ttl
        self.tz_name = tz_name

    def _load_state(self, key: str) -> Optional[DailyTrackingState]:
        entry = self.cache.get(key, self.cache_ttl)
        if entry is not None:
            return entry.value
        data = self.store.get(key)
        if data is None:
            return None
        state = DailyTrackingState.from_dict(data)
        self.cache.set(key, state)
        return state

    def _save_state(self, key: str, state: DailyTrackingState):
        self.cache.set(key, state)
        self.store.put(key, state.to_dict())

    def _digests_changed(self, state: DailyTrackingState, games: List[GameSnapshot]) -> bool:
        for game in games:
            digest = state.games.get(str(game.id))
            if digest != self._digest(game):
                return True
        return False

    def _digest(self, game: GameSnapshot) -> GameDigest:
        return GameDigest(
            last_goal_count=game.home_team.goals + game.away_team.goals,
            status=game.status
        )

    async def _fetch_games(self, date_str: str) -> Optional[List[GameSnapshot]]:
        try:
            return await asyncio.to_thread(self.provider.fetch_games, date_str)
        except ProviderError as e:
            logger.error(f"Error fetching Liiga games: {e}")
            return None

    async def update(self, now: Optional[datetime] = None):
        """Run one poll of the score tracker"""
        now = now or now_utc()
        date_str = now.date().isoformat()
        key = state_key(date_str)
        logger.debug(f"Updating scores for {date_str}")

        state = self._load_state(key)

        if state and state.no_games_today:
            logger.debug("Skipped (no games today)")
            return

        if state and state.next_notification_time and now < state.next_notification_time:
            logger.debug(f"Skipped (notifications start at {state.next_notification_time})")
            return

        if state and state.finalized:
            logger.debug("Skipped (all games ended, final update done)")
            return

        games = await self._fetch_games(date_str)
        if games is None:
            return

        if not games:
            logger.info(f"No Liiga games for {date_str}")
            if state is None:
                state = DailyTrackingState(last_checked=now)
            state.no_games_today = True
            state.last_checked = now
            self._save_state(key, state)
            return

        earliest_start = min(g.start for g in games)
        notification_time = earliest_start - timedelta(minutes=self.notify_minutes_before)
        any_active = any(g.in_progress for g in games)
        should_start = now >= notification_time and not (state and state.message_id)

        if (
            state and state.message_id and state.last_active_update_done
            and not any_active and not self._digests_changed(state, games)
        ):
            # Final update already delivered
            if state.next_notification_time != notification_time:
                state.next_notification_time = notification_time
                self._save_state(key, state)
            return

        if state is None:
            state = DailyTrackingState(last_checked=now)

        final_update_ok = True
        if should_start:
            message_id = await self.sink.send_embed(build_scores_embed(games, now, self.tz_name))
            if message_id:
                logger.info(f"Sent new score message {message_id}")
                state.message_id = message_id
            else:
                logger.warning("Sending score message failed, retrying on next poll")
        elif state.message_id:
            logger.debug(f"Updating score message {state.message_id}")
            final_update_ok = await self.sink.edit_embed(
                state.message_id, build_scores_embed(games, now, self.tz_name)
            )

        for game in games:
            state.games[str(game.id)] = self._digest(game)
        state.last_checked = now
        state.next_notification_time = notification_time

        if any_active:
            state.last_active_update_done = False
        elif state.message_id and final_update_ok:
            state.last_active_update_done = True

        self._save_state(key, state)
