"""
Database lifecycle coordination.

The Database class opens the shared aiosqlite connection, creates the schema,
and closes everything at shutdown. Repositories and stores never open
connections themselves; they go through the ConnectionManager held here.
"""

from __future__ import annotations

from pathlib import Path

import aiosqlite

from repostguard.database.db_connection import ConnectionManager, db_connection
from repostguard.database.db_schema import SchemaManager
from repostguard.util.logger import get_logger

logger = get_logger("database")

DB_PATH = Path("./data/repostguard.db").resolve()


class Database:
    """
    Central coordinator for the bot's SQLite database.

    Lifecycle:
        1. ``await initialize()`` at startup
        2. Hand ``connection_manager`` to the stores
        3. ``await shutdown()`` at program end
    """

    def __init__(self, db_path: Path = DB_PATH, connection_manager: ConnectionManager | None = None):
        self.db_path = db_path
        self.connection_manager = connection_manager or db_connection
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> bool:
        """
        Open the connection and create the schema.

        Returns:
            True if initialization succeeded, False otherwise
        """
        if self._initialized:
            logger.debug("[DATABASE] Already initialized, skipping")
            return True

        try:
            await self.connection_manager.open(self.db_path)
            async with self.connection_manager.transaction() as conn:
                await SchemaManager.initialize_schema(conn)
        except (aiosqlite.Error, OSError) as e:
            logger.error("[DATABASE] Database initialization failed: %s", e)
            await self.connection_manager.close()
            return False

        self._initialized = True
        logger.info("[DATABASE] Database initialized at %s", self.db_path)
        return True

    async def shutdown(self) -> None:
        """Close the connection if it was opened."""
        if not self._initialized:
            return

        await self.connection_manager.close()
        self._initialized = False
        logger.info("[DATABASE] Database shutdown complete")
