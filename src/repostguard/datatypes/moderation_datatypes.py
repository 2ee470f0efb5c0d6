"""
Data structures flowing through the repost moderation pipeline.

IncomingMessage is the engine's view of a Discord message; the listener cog
builds it so the engine never touches py-cord objects. ModerationOutcome is
what the engine reports back for each message.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import discord

from repostguard.datatypes.action_datatypes import ActionType
from repostguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID


class MessageState(Enum):
    """Classification of a single message."""

    IGNORED = "ignored"
    FIRST_SIGHTING = "first_sighting"
    REPEAT_OFFENSE = "repeat_offense"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class IncomingMessage:
    """A chat message as delivered by the message source.

    Attributes:
        message_id: ID of the message, used for deletion and as SeenLink metadata
        author_id: ID of the author
        author_is_bot: True for bot and system accounts
        channel_id: Channel the message was posted in
        guild_id: Guild the message was posted in, None for DMs
        content: Raw message text
    """
    message_id: MessageID
    author_id: UserID
    author_is_bot: bool
    channel_id: ChannelID
    guild_id: GuildID | None
    content: str

    @classmethod
    def from_discord(cls, message: discord.Message) -> "IncomingMessage":
        """Build an IncomingMessage from a py-cord message."""
        author = message.author
        return cls(
            message_id=MessageID.from_message(message),
            author_id=UserID.from_user(author),
            author_is_bot=bool(author.bot or getattr(author, "system", False)),
            channel_id=ChannelID.from_channel(message.channel),
            guild_id=GuildID.from_guild(message.guild) if message.guild else None,
            content=message.content or "",
        )


@dataclass(slots=True)
class ModerationOutcome:
    """Result of handling one message.

    Attributes:
        state: How the message was classified
        video_id: Canonical video id extracted from the message, if any
        violation_count: Count after increment for repeat offenses
        action: Escalation action that was attempted
        action_applied: Whether Discord accepted the escalation action
        message_deleted: Whether the offending message was removed
        counter_reset: Whether reset-tier cleanup ran to completion
        error: Description of the failure that aborted processing, if any
    """
    state: MessageState
    video_id: str | None = None
    violation_count: int | None = None
    action: ActionType = ActionType.NULL
    action_applied: bool = False
    message_deleted: bool = False
    counter_reset: bool = False
    error: str | None = None

    @classmethod
    def ignored(cls, video_id: str | None = None, error: str | None = None) -> "ModerationOutcome":
        return cls(state=MessageState.IGNORED, video_id=video_id, error=error)
