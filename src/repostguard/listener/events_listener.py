"""Event listener Cog for RepostGuard.

Handles bot lifecycle events. Message events live in MessageListenerCog.
"""

import discord
from discord.ext import commands

from repostguard.configuration.app_configuration import ModerationSettings
from repostguard.util.logger import get_logger

logger = get_logger("events_listener_cog")


class EventsListenerCog(commands.Cog):
    """Cog containing bot lifecycle handlers."""

    def __init__(self, discord_bot_instance, settings: ModerationSettings):
        self.bot = discord_bot_instance
        self._settings = settings
        logger.info("Events listener cog loaded")

    @commands.Cog.listener(name='on_ready')
    async def on_ready(self):
        """Log the connected identity and the moderation scope, then set presence."""
        if self.bot.user:
            logger.info(f"Bot connected as {self.bot.user} (ID: {self.bot.user.id})")
        else:
            logger.warning("Bot partially connected, but user information not yet available.")

        if self._settings.channel_filter_active:
            logger.info("Watching channel %s for reposted videos", self._settings.target_channel_id)
        else:
            logger.warning("CHANNEL_ID is 0: moderating every channel and logging all channel activity")

        logger.info("--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--==--")
        await self._update_presence()

    async def _update_presence(self) -> None:
        if not self.bot.user:
            return

        await self.bot.change_presence(
            status=discord.Status.online,
            activity=discord.Activity(
                type=discord.ActivityType.watching,
                name="for reposted videos",
            )
        )


def setup(discord_bot_instance, settings: ModerationSettings):
    """Register the EventsListenerCog with the bot."""
    discord_bot_instance.add_cog(EventsListenerCog(discord_bot_instance, settings))
