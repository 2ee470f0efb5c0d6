"""
Repository for the ``users`` table.

Plain SQL against a connection handed in by the caller; transactions and
error translation live in :mod:`repostguard.services.violation_store`.
"""

from __future__ import annotations

from dataclasses import dataclass

import aiosqlite


@dataclass
class UserRow:
    """A single row from the ``users`` table."""
    user_id: int
    violations: int


class UsersRepository:
    """Low-level CRUD for the ``users`` table."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get(self, conn: aiosqlite.Connection, user_id: int) -> UserRow | None:
        async with conn.execute(
            "SELECT id, violations FROM users WHERE id = ?",
            (user_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None
        return UserRow(user_id=row[0], violations=row[1])

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(self, conn: aiosqlite.Connection, user_id: int) -> None:
        """Insert a user with zero violations. Raises sqlite3.IntegrityError on a duplicate id."""
        await conn.execute(
            "INSERT INTO users (id, violations) VALUES (?, 0)",
            (user_id,),
        )

    async def increment_violations(self, conn: aiosqlite.Connection, user_id: int) -> int:
        """Add one to the stored count in a single statement. Returns the affected row count."""
        cursor = await conn.execute(
            "UPDATE users SET violations = violations + 1 WHERE id = ?",
            (user_id,),
        )
        return cursor.rowcount

    async def reset_violations(self, conn: aiosqlite.Connection, user_id: int) -> int:
        """Set the stored count to zero. Returns the affected row count."""
        cursor = await conn.execute(
            "UPDATE users SET violations = 0 WHERE id = ?",
            (user_id,),
        )
        return cursor.rowcount
