"""
Repository for the ``seen_links`` table.

Uniqueness of (user_id, url) is enforced by the table itself, so ``insert``
is the atomic check-and-insert: a duplicate surfaces as
``sqlite3.IntegrityError``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import aiosqlite


@dataclass
class SeenLinkRecord:
    """A single row from the ``seen_links`` table."""
    user_id: int
    url: str
    message_id: int | None
    created_at: str | None


_COLUMNS = "user_id, url, message_id, created_at"


def _row_to_record(row) -> SeenLinkRecord:
    return SeenLinkRecord(
        user_id=row[0],
        url=row[1],
        message_id=row[2],
        created_at=row[3],
    )


class SeenLinksRepository:
    """Low-level CRUD for the ``seen_links`` table."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, conn: aiosqlite.Connection, user_id: int, url: str) -> SeenLinkRecord | None:
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM seen_links WHERE user_id = ? AND url = ? LIMIT 1",
            (user_id, url),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_record(row) if row is not None else None

    async def get_for_user(self, conn: aiosqlite.Connection, user_id: int) -> List[SeenLinkRecord]:
        async with conn.execute(
            f"SELECT {_COLUMNS} FROM seen_links WHERE user_id = ? ORDER BY id",
            (user_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_record(row) for row in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(
        self,
        conn: aiosqlite.Connection,
        user_id: int,
        url: str,
        message_id: int | None,
    ) -> None:
        """Insert a sighting. Raises sqlite3.IntegrityError if the pair already exists."""
        await conn.execute(
            "INSERT INTO seen_links (user_id, url, message_id) VALUES (?, ?, ?)",
            (user_id, url, message_id),
        )

    async def delete_by_url(self, conn: aiosqlite.Connection, url: str) -> int:
        """Delete every sighting of ``url``. Returns the number of rows removed."""
        cursor = await conn.execute(
            "DELETE FROM seen_links WHERE url = ?",
            (url,),
        )
        return cursor.rowcount
