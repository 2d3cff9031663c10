"""Main entry point for GeimeriBot"""
import argparse
import asyncio
import signal
import sys

from .config import Config
from .commands.countdown import CountdownCommand
from .commands.ketalines import KetalinesCommand
from .commands.registry import CommandRegistry
from .commands.viikongeimeri import ViikonGeimeriCommand
from .storage.database import Database
from .storage.kv_store import KVStore
from .services.countdown_service import CountdownService
from .services.discord_client import DiscordClient
from .services.liiga_client import LiigaClient
from .services.playtime_service import PlaytimeService, send_weekly_summary
from .services.scheduler import MinuteScheduler, weekly_summary_due
from .services.score_tracker import ScoreTracker
from .services.webhook_server import InteractionServer
from .services.widget_client import WidgetClient
from .utils.cache import TTLCache
from .utils.logger import setup_logger

logger = setup_logger(__name__)


class GeimeriBot:
    """Main bot orchestrator"""

    def __init__(self, config: Config):
        """Initialize bot components"""
        self.config = config
        self.database = Database(db_path=config.database_path)
        self.store = KVStore(self.database)
        self.cache = TTLCache()
        self.running = False

        # Initialize services
        self.discord_client = DiscordClient(
            token=config.discord_bot_token,
            channel_id=config.discord_channel_id,
            guild_id=config.discord_guild_id
        )
        widget_client = WidgetClient(config.discord_guild_id) if config.discord_guild_id else None
        self.playtime_service = PlaytimeService(self.database, widget_client)
        self.score_tracker = ScoreTracker(
            provider=LiigaClient(config.liiga_api_url, config.liiga_tournament),
            sink=self.discord_client,
            store=self.store,
            cache=self.cache,
            notify_minutes_before=config.notify_minutes_before,
            cache_ttl=config.cache_ttl_seconds,
            tz_name=config.local_timezone
        )
        self.countdown_service = CountdownService(
            store=self.store,
            cache=self.cache,
            sink=self.discord_client,
            cache_ttl=config.cache_ttl_seconds
        )

        self.registry = CommandRegistry([
            ViikonGeimeriCommand(self.database),
            CountdownCommand(self.countdown_service, tz_name=config.local_timezone),
            KetalinesCommand(
                self.store,
                self.cache,
                tz_name=config.local_timezone,
                cache_ttl=config.cache_ttl_seconds
            ),
        ])
        self.server = InteractionServer(self.registry, config.discord_public_key)

        self.scheduler = MinuteScheduler()
        self.scheduler.add_task("playtime", self.playtime_service.track)
        self.scheduler.add_task("liiga", self.score_tracker.update)
        if config.discord_guild_id:
            self.scheduler.add_task("countdown", self.countdown_service.update_nickname)
        self.scheduler.add_task(
            "weekly_summary",
            lambda now: send_weekly_summary(self.database, self.discord_client, now),
            when=weekly_summary_due
        )

    def _signal_handler(self, signum, frame):
        """Handle shutdown signals"""
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        self.running = False

    async def start(self):
        """Start the bot"""
        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.running = True
        logger.info("Starting GeimeriBot...")

        removed = self.store.prune_expired()
        if removed:
            logger.info(f"Pruned {removed} expired stored value(s)")

        # Start Discord client in background
        discord_task = asyncio.create_task(self.discord_client.start())

        # Wait a bit for Discord to connect
        await asyncio.sleep(2)

        await self.server.start(self.config.webhook_host, self.config.webhook_port)
        scheduler_task = asyncio.create_task(self.scheduler.start())

        try:
            while self.running:
                await asyncio.sleep(1)
        finally:
            logger.info("Stopping services...")
            self.scheduler.stop()
            scheduler_task.cancel()
            await self.server.stop()

            await self.discord_client.close()
            discord_task.cancel()

            logger.info("Bot stopped")

    async def tick_once(self):
        """Run a single scheduler tick, for use from an external cron"""
        await self.discord_client.login()
        try:
            results = await self.scheduler.run_tick()
            logger.info(f"Tick finished: {sum(results)}/{len(results)} task(s) succeeded")
        finally:
            await self.discord_client.close()


async def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="GeimeriBot Discord bot")
    parser.add_argument(
        "--tick",
        action="store_true",
        help="Run the minute tasks once and exit instead of running the bot"
    )
    args = parser.parse_args()

    try:
        bot = GeimeriBot(Config())
        if args.tick:
            await bot.tick_once()
        else:
            await bot.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
