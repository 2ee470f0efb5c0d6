"""
SeenLinkStore: which videos each user has already posted.

``create`` is the authoritative dedup check. The UNIQUE (user_id, url)
constraint turns a second insert of the same pair into
:class:`SeenLinkConflictError` even when two messages race.
"""

from __future__ import annotations

import sqlite3
from typing import List

import aiosqlite

from repostguard.database.db_connection import ConnectionManager, db_connection
from repostguard.datatypes.discord_datatypes import MessageID, UserID
from repostguard.errors import PersistenceError, SeenLinkConflictError, SeenLinkNotFoundError
from repostguard.repositories.seen_links_repo import SeenLinkRecord, SeenLinksRepository
from repostguard.util.logger import get_logger

logger = get_logger("seen_link_store")


class SeenLinkStore:
    """Orchestrates the seen_links repository; no SQL lives here."""

    def __init__(self, connection_manager: ConnectionManager | None = None) -> None:
        self._db = connection_manager or db_connection
        self._seen_links_repo = SeenLinksRepository()

    async def exists(self, user_id: UserID, url: str) -> SeenLinkRecord | None:
        """Return the stored record when ``user_id`` has posted ``url`` before, else None."""
        uid = user_id.to_int()
        try:
            async with self._db.read() as conn:
                return await self._seen_links_repo.get(conn, uid, url)
        except aiosqlite.Error as exc:
            logger.error("[SEEN LINK STORE] Failed to get seen link for user %s url %s: %s", uid, url, exc)
            raise PersistenceError(f"failed to read seen link {url!r} for user {uid}") from exc

    async def create(self, user_id: UserID, url: str, message_id: MessageID | None = None) -> SeenLinkRecord:
        """Record the first sighting of ``url`` by ``user_id``.

        Raises:
            SeenLinkConflictError: The pair was already recorded (a repost).
            PersistenceError: Storage failure, including a missing user record.
        """
        uid = user_id.to_int()
        mid = message_id.to_int() if message_id is not None else None
        try:
            async with self._db.transaction() as conn:
                await self._seen_links_repo.insert(conn, uid, url, mid)
                record = await self._seen_links_repo.get(conn, uid, url)
        except sqlite3.IntegrityError as exc:
            if "UNIQUE" in str(exc).upper():
                raise SeenLinkConflictError(uid, url) from exc
            logger.error("[SEEN LINK STORE] Constraint violation creating %s for user %s: %s", url, uid, exc)
            raise PersistenceError(f"failed to create seen link {url!r} for user {uid}") from exc
        except aiosqlite.Error as exc:
            logger.error("[SEEN LINK STORE] Failed to create seen link %s for user %s: %s", url, uid, exc)
            raise PersistenceError(f"failed to create seen link {url!r} for user {uid}") from exc

        logger.debug("[SEEN LINK STORE] Recorded %s for user %s", url, uid)
        return record or SeenLinkRecord(user_id=uid, url=url, message_id=mid, created_at=None)

    async def delete(self, url: str) -> int:
        """Remove every record of ``url`` and return how many were removed.

        Raises:
            SeenLinkNotFoundError: Nothing was recorded for ``url``.
            PersistenceError: Storage failure.
        """
        try:
            async with self._db.transaction() as conn:
                removed = await self._seen_links_repo.delete_by_url(conn, url)
        except aiosqlite.Error as exc:
            logger.error("[SEEN LINK STORE] Failed to delete seen links for %s: %s", url, exc)
            raise PersistenceError(f"failed to delete seen links for {url!r}") from exc

        if removed == 0:
            raise SeenLinkNotFoundError(url)
        logger.debug("[SEEN LINK STORE] Deleted %d record(s) for %s", removed, url)
        return removed

    async def list_for_user(self, user_id: UserID) -> List[SeenLinkRecord]:
        """All links ``user_id`` has posted since their last reset, oldest first."""
        uid = user_id.to_int()
        try:
            async with self._db.read() as conn:
                return await self._seen_links_repo.get_for_user(conn, uid)
        except aiosqlite.Error as exc:
            logger.error("[SEEN LINK STORE] Failed to list seen links for user %s: %s", uid, exc)
            raise PersistenceError(f"failed to list seen links for user {uid}") from exc
