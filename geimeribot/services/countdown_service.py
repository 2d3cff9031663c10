"""Countdown shown in the bot's nickname"""
from datetime import datetime, timedelta
from typing import Optional, Protocol

from ..storage.kv_store import KVStore
from ..storage.models import CountdownRecord
from ..utils.cache import TTLCache
from ..utils.logger import setup_logger
from ..utils.timezone import now_utc

logger = setup_logger(__name__)

COUNTDOWN_KEY = "active_countdown"
NICKNAME_MAX_LENGTH = 32
ELLIPSIS = "..."
# Expired countdowns keep showing zeros this long before being removed
EXPIRED_DISPLAY_PERIOD = timedelta(hours=24)


class NicknameSink(Protocol):
    async def set_nickname(self, nick: Optional[str]) -> bool: ...


def render_countdown(now: datetime, record: CountdownRecord) -> str:
    """Render DD:HH:MM <description>, cut to fit a nickname"""
    remaining = max(int((record.target_date - now).total_seconds()), 0)
    days, rest = divmod(remaining, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    text = f"{days:02d}:{hours:02d}:{minutes:02d} {record.description}"
    if len(text) > NICKNAME_MAX_LENGTH:
        text = text[:NICKNAME_MAX_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return text


class CountdownService:
    """Stores the active countdown and keeps the nickname in sync with it"""

    def __init__(
        self,
        store: KVStore,
        cache: TTLCache,
        sink: NicknameSink,
        cache_ttl: int = 300
    ):
        self.store = store
        self.cache = cache
        self.sink = sink
        self.cache_ttl = cache_ttl
        self.last_nickname: Optional[str] = None

    def _load_record(self) -> Optional[CountdownRecord]:
        data = self.store.get(COUNTDOWN_KEY)
        return CountdownRecord.from_dict(data) if data else None

    def get_countdown(self) -> Optional[CountdownRecord]:
        return self.cache.get_or_set(COUNTDOWN_KEY, self.cache_ttl, self._load_record)

    def set_countdown(self, record: CountdownRecord):
        """Replace the active countdown"""
        self.store.put(COUNTDOWN_KEY, record.to_dict())
        self.cache.set(COUNTDOWN_KEY, record)
        logger.info(f"Countdown set: {record.description} -> {record.target_date.isoformat()}")

    def clear_countdown(self):
        self.store.delete(COUNTDOWN_KEY)
        self.cache.delete(COUNTDOWN_KEY)

    async def update_nickname(self, now: Optional[datetime] = None) -> bool:
        """
        Push the rendered countdown as nickname if it changed

        Returns:
            True if the nickname was changed
        """
        now = now or now_utc()
        record = self.get_countdown()
        if record is None:
            return False

        if now >= record.target_date + EXPIRED_DISPLAY_PERIOD:
            logger.info(f"Countdown '{record.description}' expired, resetting nickname")
            if not await self.sink.set_nickname(None):
                logger.warning("Resetting nickname failed, keeping countdown until the next tick")
                return False
            self.clear_countdown()
            self.last_nickname = None
            return True

        nickname = render_countdown(now, record)
        if nickname == self.last_nickname:
            return False
        if await self.sink.set_nickname(nickname):
            self.last_nickname = nickname
            return True
        return False
