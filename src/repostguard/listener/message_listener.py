"""Message listener Cog for RepostGuard.

Feeds every new guild message into the repost moderation engine. Each
on_message event runs in its own task, so messages are handled
independently and one failing message never affects another.
"""

import discord
from discord.ext import commands

from repostguard.datatypes.moderation_datatypes import IncomingMessage, ModerationOutcome
from repostguard.moderation.moderation_engine import ModerationEngine
from repostguard.util import discord_utils
from repostguard.util.logger import get_logger

logger = get_logger("message_listener_cog")


class MessageListenerCog(commands.Cog):
    """Cog responsible for handling message creation events."""

    def __init__(self, discord_bot_instance, moderation_engine: ModerationEngine):
        """
        Initialize the message listener cog.

        Parameters
        ----------
        discord_bot_instance:
            The Discord bot instance to attach this cog to.
        moderation_engine:
            Engine that classifies and moderates each message.
        """
        self.bot = discord_bot_instance
        self._moderation_engine = moderation_engine
        logger.info("[MESSAGE LISTENER] Message listener cog loaded")

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message) -> ModerationOutcome | None:
        """
        Handle new messages.

        Bot and system authors are dropped here before any conversion; the
        engine applies the remaining filters.
        """
        if discord_utils.is_ignored_author(message.author):
            return None

        try:
            incoming = IncomingMessage.from_discord(message)
            outcome = await self._moderation_engine.handle_message(incoming)
        except Exception:
            logger.exception("[MESSAGE LISTENER] Unhandled error while moderating message %s", message.id)
            return None

        if outcome.error:
            logger.debug("[MESSAGE LISTENER] Message %s processed with error: %s", message.id, outcome.error)
        return outcome


def setup(discord_bot_instance, moderation_engine: ModerationEngine):
    """Register the MessageListenerCog with the bot."""
    discord_bot_instance.add_cog(MessageListenerCog(discord_bot_instance, moderation_engine))
