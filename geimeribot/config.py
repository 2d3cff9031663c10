"""Configuration loading and validation"""
import os
from typing import Optional
from dotenv import load_dotenv
import pytz

from .utils.logger import setup_logger

logger = setup_logger(__name__)

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration"""

    def __init__(self, require_discord: bool = True):
        """
        Load and validate configuration

        Args:
            require_discord: Whether the Discord credentials must be present
        """
        # Discord configuration
        if require_discord:
            self.discord_bot_token = self._get_required("DISCORD_BOT_TOKEN")
            self.discord_application_id = self._get_required("DISCORD_APPLICATION_ID")
            self.discord_public_key = self._get_required("DISCORD_PUBLIC_KEY")
            self.discord_channel_id = self._get_required("DISCORD_CHANNEL_ID")
        else:
            self.discord_bot_token = os.getenv("DISCORD_BOT_TOKEN", "")
            self.discord_application_id = os.getenv("DISCORD_APPLICATION_ID", "")
            self.discord_public_key = os.getenv("DISCORD_PUBLIC_KEY", "")
            self.discord_channel_id = os.getenv("DISCORD_CHANNEL_ID", "0")
        self.discord_guild_id: Optional[str] = os.getenv("DISCORD_GUILD_ID") or None

        # Storage
        self.database_path = os.getenv("DATABASE_PATH", "data/bot.db")
        self.cache_ttl_seconds = int(os.getenv("CACHE_TTL_SECONDS", "300"))

        # Interactions endpoint
        self.webhook_host = os.getenv("WEBHOOK_HOST", "0.0.0.0")
        self.webhook_port = int(os.getenv("WEBHOOK_PORT", "8080"))

        # Score tracking
        self.notify_minutes_before = int(os.getenv("NOTIFY_MINUTES_BEFORE", "15"))
        self.liiga_api_url = os.getenv("LIIGA_API_URL", "https://liiga.fi/api/v2")
        self.liiga_tournament = os.getenv("LIIGA_TOURNAMENT", "runkosarja")
        self.local_timezone = os.getenv("LOCAL_TIMEZONE", "Europe/Helsinki")

        self._validate()
        logger.info("Configuration loaded successfully")

    def _get_required(self, key: str) -> str:
        """Get required environment variable"""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value

    def _validate(self):
        """Validate configuration values"""
        if self.notify_minutes_before < 0:
            raise ValueError("NOTIFY_MINUTES_BEFORE must be non-negative")

        if self.cache_ttl_seconds < 0:
            raise ValueError("CACHE_TTL_SECONDS must be non-negative")

        # Validate Discord IDs are numeric
        try:
            int(self.discord_channel_id)
        except ValueError:
            raise ValueError("DISCORD_CHANNEL_ID must be a numeric channel ID")
        if self.discord_guild_id:
            try:
                int(self.discord_guild_id)
            except ValueError:
                raise ValueError("DISCORD_GUILD_ID must be a numeric guild ID")

        if self.local_timezone not in pytz.all_timezones_set:
            raise ValueError(f"Unknown LOCAL_TIMEZONE: {self.local_timezone}")

        logger.info(f"Score notification lead time: {self.notify_minutes_before} minutes")
        if not self.discord_guild_id:
            logger.warning("DISCORD_GUILD_ID not set - playtime tracking and countdown nickname are disabled")
