import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from repostguard.datatypes.discord_datatypes import ChannelID, GuildID, MessageID, UserID
from repostguard.errors import ExternalActionError
from repostguard.util import discord_utils
from repostguard.util.discord_utils import DiscordActionExecutor

GUILD = GuildID(1)
USER = UserID(42)
CHANNEL = ChannelID(7)
MESSAGE = MessageID(101)


def http_error(cls, status: int, reason: str):
    return cls(SimpleNamespace(status=status, reason=reason), "request failed")


class FakeMember:
    def __init__(self) -> None:
        self.id = 42
        self.timeout = AsyncMock()


class FakeGuild:
    def __init__(self) -> None:
        self.id = 1
        self.member = FakeMember()
        self.kick = AsyncMock()
        self.ban = AsyncMock()
        self.fetch_member = AsyncMock(return_value=self.member)

    def get_member(self, user_id):
        return self.member if user_id == self.member.id else None


def make_channel():
    channel = MagicMock(spec=discord.TextChannel)
    partial = SimpleNamespace(delete=AsyncMock())
    channel.get_partial_message.return_value = partial
    return channel, partial


@pytest.fixture
def guild() -> FakeGuild:
    return FakeGuild()


@pytest.fixture
def bot(guild: FakeGuild) -> SimpleNamespace:
    return SimpleNamespace(
        get_guild=MagicMock(return_value=guild),
        fetch_guild=AsyncMock(return_value=guild),
        get_channel=MagicMock(return_value=None),
        fetch_channel=AsyncMock(),
    )


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (30, "30 secs"),
            (60, "1 min"),
            (600, "10 mins"),
            (3600, "1 hour"),
            (3 * 3600, "3 hours"),
            (86400, "1 day"),
            (7 * 86400, "7 days"),
        ],
    )
    def test_format_duration(self, seconds, expected):
        assert discord_utils.format_duration(seconds) == expected


class TestIsIgnoredAuthor:
    def test_bot_author(self):
        assert discord_utils.is_ignored_author(SimpleNamespace(bot=True, system=False))

    def test_system_author(self):
        assert discord_utils.is_ignored_author(SimpleNamespace(bot=False, system=True))

    def test_human_author(self):
        assert not discord_utils.is_ignored_author(SimpleNamespace(bot=False))


@pytest.mark.asyncio
async def test_timeout_user_times_out_cached_member(bot, guild):
    until = datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc)

    await DiscordActionExecutor(bot).timeout_user(GUILD, USER, until, "Reposting")

    guild.member.timeout.assert_awaited_once_with(until, reason="Reposting")
    guild.fetch_member.assert_not_awaited()


@pytest.mark.asyncio
async def test_timeout_user_fetches_uncached_guild_and_member(bot, guild):
    bot.get_guild.return_value = None
    guild.get_member = MagicMock(return_value=None)
    until = datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc)

    await DiscordActionExecutor(bot).timeout_user(GUILD, USER, until, "Reposting")

    bot.fetch_guild.assert_awaited_once_with(1)
    guild.fetch_member.assert_awaited_once_with(42)
    guild.member.timeout.assert_awaited_once()


@pytest.mark.asyncio
async def test_kick_user_passes_reason(bot, guild):
    await DiscordActionExecutor(bot).kick_user(GUILD, USER, "Bye")

    guild.kick.assert_awaited_once()
    target = guild.kick.await_args.args[0]
    assert target.id == 42
    assert guild.kick.await_args.kwargs == {"reason": "Bye"}


@pytest.mark.asyncio
async def test_ban_user_converts_days_to_seconds(bot, guild):
    await DiscordActionExecutor(bot).ban_user(GUILD, USER, "Spam", delete_message_days=7)

    kwargs = guild.ban.await_args.kwargs
    assert kwargs["reason"] == "Spam"
    assert kwargs["delete_message_seconds"] == 7 * 86400


@pytest.mark.asyncio
async def test_forbidden_is_reported_as_external_action_error(bot, guild):
    guild.kick.side_effect = http_error(discord.Forbidden, 403, "Forbidden")

    with pytest.raises(ExternalActionError) as excinfo:
        await DiscordActionExecutor(bot).kick_user(GUILD, USER, "Bye")

    assert excinfo.value.action == "kick"


@pytest.mark.asyncio
async def test_delete_message_deletes_by_id(bot):
    channel, partial = make_channel()
    bot.get_channel.return_value = channel

    assert await DiscordActionExecutor(bot).delete_message(CHANNEL, MESSAGE) is True

    channel.get_partial_message.assert_called_once_with(101)
    partial.delete.assert_awaited_once()
    bot.fetch_channel.assert_not_awaited()


@pytest.mark.asyncio
async def test_delete_message_fetches_uncached_channel(bot):
    channel, partial = make_channel()
    bot.fetch_channel.return_value = channel

    assert await DiscordActionExecutor(bot).delete_message(CHANNEL, MESSAGE) is True

    bot.fetch_channel.assert_awaited_once_with(7)
    partial.delete.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_message_already_gone_returns_false(bot):
    channel, partial = make_channel()
    partial.delete.side_effect = http_error(discord.NotFound, 404, "Not Found")
    bot.get_channel.return_value = channel

    assert await DiscordActionExecutor(bot).delete_message(CHANNEL, MESSAGE) is False


@pytest.mark.asyncio
async def test_delete_message_in_non_text_channel_raises(bot):
    bot.get_channel.return_value = SimpleNamespace(id=7)

    with pytest.raises(ExternalActionError):
        await DiscordActionExecutor(bot).delete_message(CHANNEL, MESSAGE)


@pytest.mark.asyncio
async def test_delete_message_http_failure_raises(bot):
    channel, partial = make_channel()
    partial.delete.side_effect = http_error(discord.Forbidden, 403, "Forbidden")
    bot.get_channel.return_value = channel

    with pytest.raises(ExternalActionError) as excinfo:
        await DiscordActionExecutor(bot).delete_message(CHANNEL, MESSAGE)

    assert excinfo.value.action == "delete message"
