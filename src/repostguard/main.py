"""
RepostGuard Discord Bot
=======================

A Discord bot that watches a channel for users reposting the same video and
escalates from a timeout to a kick to a ban as the reposts pile up.
"""

import asyncio
import os
import sys
from pathlib import Path

import discord
from dotenv import load_dotenv

from repostguard.configuration.app_configuration import CONFIG_PATH, AppConfig
from repostguard.database.database import Database
from repostguard.moderation.moderation_engine import ModerationEngine
from repostguard.services.seen_link_store import SeenLinkStore
from repostguard.services.violation_store import ViolationStore
from repostguard.util.discord_utils import DiscordActionExecutor
from repostguard.util.logger import get_logger, handle_exception, set_log_level


logger = get_logger("main")


def load_environment(env_path: Path | None = None) -> str:
    """Load ``.env`` and return the Discord bot token.

    Raises
    ------
    SystemExit
        If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=env_path or Path(".env").resolve())
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents for reading guild message content."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def create_bot(config: AppConfig, database: Database) -> discord.Bot:
    """Instantiate the Discord bot, wire the moderation engine, and register all cogs."""
    from repostguard.listener import events_listener, message_listener

    bot = discord.Bot(intents=build_intents())
    settings = config.moderation_settings()

    engine = ModerationEngine(
        settings=settings,
        violation_store=ViolationStore(database.connection_manager),
        seen_link_store=SeenLinkStore(database.connection_manager),
        executor=DiscordActionExecutor(bot),
    )

    events_listener.setup(bot, settings)
    message_listener.setup(bot, engine)
    logger.info("All cogs loaded successfully.")
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    """Connect to Discord and run until the connection closes."""
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(bot: discord.Bot | None, database: Database) -> None:
    """Close the Discord connection and the database."""
    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing Discord bot: %s", exc)

    await database.shutdown()
    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap configuration, database and bot, returning an exit code."""
    token = load_environment()

    config = AppConfig(CONFIG_PATH)
    set_log_level(config.log_level)

    database = Database(config.database_path)
    if not await database.initialize():
        logger.critical("Failed to initialize database at %s", config.database_path)
        return 1

    try:
        bot = create_bot(config, database)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await database.shutdown()
        return 1

    exit_code = 0
    try:
        await start_bot(bot, token)
    except discord.LoginFailure as exc:
        logger.critical("Discord rejected the bot token: %s", exc)
        exit_code = 1
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, database)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting RepostGuard…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 0 if code is None else 1


if __name__ == "__main__":
    sys.exit(main())
