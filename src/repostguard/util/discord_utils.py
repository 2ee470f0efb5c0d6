"""
discord_utils.py
================

Discord-side moderation actions for RepostGuard.

``DiscordActionExecutor`` is the action executor the moderation engine
calls: timeout, kick, ban and message deletion by id. Every Discord failure
(permissions, unknown member, HTTP errors) is re-raised as
:class:`ExternalActionError` so the engine can log it and carry on.
"""

from __future__ import annotations

import datetime
from typing import Protocol

import discord

from repostguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from repostguard.errors import ExternalActionError
from repostguard.util.logger import get_logger

logger = get_logger("discord_utils")

SECONDS_PER_DAY = 24 * 60 * 60


class ActionExecutor(Protocol):
    """Moderation capabilities the engine needs from the chat platform."""

    async def timeout_user(self, guild_id: GuildID, user_id: UserID, until: datetime.datetime, reason: str) -> None: ...

    async def kick_user(self, guild_id: GuildID, user_id: UserID, reason: str) -> None: ...

    async def ban_user(self, guild_id: GuildID, user_id: UserID, reason: str, delete_message_days: int) -> None: ...

    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> bool: ...


def format_duration(seconds: int) -> str:
    """
    Convert seconds into a short human-readable string such as ``3 hours``.

    Args:
        seconds (int): Duration in seconds.

    Returns:
        str: The largest whole unit that fits, pluralised.
    """
    if seconds < 60:
        return f"{seconds} secs"
    if seconds < 3600:
        minutes = seconds // 60
        return f"{minutes} min{'s' if minutes != 1 else ''}"
    if seconds < SECONDS_PER_DAY:
        hours = seconds // 3600
        return f"{hours} hour{'s' if hours != 1 else ''}"
    days = seconds // SECONDS_PER_DAY
    return f"{days} day{'s' if days != 1 else ''}"


def is_ignored_author(author: discord.abc.User) -> bool:
    """
    Check whether an author should never be moderated (bots and system accounts).

    Args:
        author (discord.abc.User): The author of a message.

    Returns:
        bool: True if the author is a bot or a Discord system user.
    """
    return bool(author.bot or getattr(author, "system", False))


class DiscordActionExecutor:
    """Action executor backed by a py-cord bot."""

    def __init__(self, bot: discord.Bot) -> None:
        self._bot = bot

    @property
    def bot(self) -> discord.Bot:
        return self._bot

    async def _resolve_guild(self, guild_id: GuildID) -> discord.Guild:
        guild = self._bot.get_guild(guild_id.to_int())
        if guild is not None:
            return guild
        return await self._bot.fetch_guild(guild_id.to_int())

    async def _resolve_channel(self, channel_id: ChannelID):
        channel = self._bot.get_channel(channel_id.to_int())
        if channel is not None:
            return channel
        return await self._bot.fetch_channel(channel_id.to_int())

    async def timeout_user(self, guild_id: GuildID, user_id: UserID, until: datetime.datetime, reason: str) -> None:
        """Time the member out until ``until``."""
        try:
            guild = await self._resolve_guild(guild_id)
            member = guild.get_member(user_id.to_int()) or await guild.fetch_member(user_id.to_int())
            await member.timeout(until, reason=reason)
        except (discord.HTTPException, discord.ClientException) as exc:
            raise ExternalActionError("timeout", f"user {user_id} in guild {guild_id}: {exc}") from exc

    async def kick_user(self, guild_id: GuildID, user_id: UserID, reason: str) -> None:
        """Remove the member from the guild."""
        try:
            guild = await self._resolve_guild(guild_id)
            await guild.kick(discord.Object(id=user_id.to_int()), reason=reason)
        except (discord.HTTPException, discord.ClientException) as exc:
            raise ExternalActionError("kick", f"user {user_id} in guild {guild_id}: {exc}") from exc

    async def ban_user(self, guild_id: GuildID, user_id: UserID, reason: str, delete_message_days: int) -> None:
        """Ban the user, removing ``delete_message_days`` of their message history."""
        try:
            guild = await self._resolve_guild(guild_id)
            await guild.ban(
                discord.Object(id=user_id.to_int()),
                reason=reason,
                delete_message_seconds=delete_message_days * SECONDS_PER_DAY,
            )
        except (discord.HTTPException, discord.ClientException) as exc:
            raise ExternalActionError("ban", f"user {user_id} in guild {guild_id}: {exc}") from exc

    async def delete_message(self, channel_id: ChannelID, message_id: MessageID) -> bool:
        """
        Delete a message by id.

        Returns:
            bool: True if the message was deleted, False if it was already gone.
        """
        try:
            channel = await self._resolve_channel(channel_id)
            if not isinstance(channel, discord.abc.Messageable):
                raise ExternalActionError("delete message", f"channel {channel_id} does not hold messages")
            await channel.get_partial_message(message_id.to_int()).delete()
            return True
        except discord.NotFound:
            logger.debug("Message %s in channel %s was already deleted", message_id, channel_id)
            return False
        except (discord.HTTPException, discord.ClientException) as exc:
            raise ExternalActionError("delete message", f"message {message_id} in channel {channel_id}: {exc}") from exc
