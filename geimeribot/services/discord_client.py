"""Discord bot client for sending and editing messages and setting the nickname"""
from typing import Optional
import discord
from discord.ext import commands

from ..utils.logger import setup_logger

logger = setup_logger(__name__)


class DiscordClient:
    """Discord bot client for notifications"""

    def __init__(
        self,
        token: str,
        channel_id: str,
        guild_id: Optional[str] = None
    ):
        """
        Initialize Discord client

        Args:
            token: Discord bot token
            channel_id: Channel ID to send notifications to
            guild_id: Guild whose nickname the countdown updates
        """
        self.token = token
        self.channel_id = int(channel_id)
        self.guild_id = int(guild_id) if guild_id else None

        intents = discord.Intents.default()
        self.bot = commands.Bot(command_prefix='!', intents=intents)

        self._setup_events()

    def _setup_events(self):
        """Set up Discord bot events"""
        @self.bot.event
        async def on_ready():
            logger.info(f"Discord bot logged in as {self.bot.user}")
            logger.info(f"Bot is ready, posting to channel {self.channel_id}")

    async def start(self):
        """Start the Discord bot (gateway connection, runs until closed)"""
        await self.bot.start(self.token)

    async def login(self):
        """Log in over REST only, for one-shot runs without a gateway connection"""
        await self.bot.login(self.token)

    async def close(self):
        """Close the Discord bot connection"""
        await self.bot.close()

    def _channel(self) -> discord.PartialMessageable:
        return self.bot.get_partial_messageable(self.channel_id)

    async def send_embed(self, embed: discord.Embed) -> Optional[int]:
        """
        Send a new embed message to the channel

        Returns:
            ID of the created message, or None if sending failed
        """
        try:
            message = await self._channel().send(embed=embed)
            logger.info(f"Sent message {message.id} to channel {self.channel_id}")
            return message.id
        except discord.errors.Forbidden as e:
            logger.error(f"Permission denied: {e}")
            logger.error("The bot needs 'Send Messages' and 'Embed Links' permissions in the channel.")
            return None
        except discord.errors.HTTPException as e:
            logger.error(f"Discord API error sending message: {e}")
            return None

    async def edit_embed(self, message_id: int, embed: discord.Embed) -> bool:
        """
        Replace the embed of an existing message

        Returns:
            True if the message was edited
        """
        try:
            await self._channel().get_partial_message(message_id).edit(embed=embed)
            logger.debug(f"Edited message {message_id}")
            return True
        except discord.errors.NotFound:
            logger.error(f"Message {message_id} not found in channel {self.channel_id}")
            return False
        except discord.errors.HTTPException as e:
            logger.error(f"Discord API error editing message {message_id}: {e}")
            return False

    async def send_text(self, content: str) -> Optional[int]:
        """Send a plain text message, returning its ID or None on failure"""
        try:
            message = await self._channel().send(content)
            return message.id
        except discord.errors.HTTPException as e:
            logger.error(f"Discord API error sending text message: {e}")
            return None

    async def set_nickname(self, nick: Optional[str]) -> bool:
        """
        Set the bot's nickname in the configured guild

        Args:
            nick: New nickname, or None to reset it

        Returns:
            True if the nickname was updated
        """
        if not self.guild_id:
            logger.warning("No guild configured, cannot set nickname")
            return False
        try:
            guild = self.bot.get_guild(self.guild_id) or await self.bot.fetch_guild(self.guild_id)
            member = guild.me if guild.me else await guild.fetch_member(self.bot.user.id)
            await member.edit(nick=nick)
            logger.info(f"Nickname set to {nick!r}")
            return True
        except discord.errors.HTTPException as e:
            logger.error(f"Discord API error setting nickname: {e}")
            return False
