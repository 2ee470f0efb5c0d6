"""
ViolationStore: persistent per-user repeat-offense counter.

Increment and reset are single conditional UPDATE statements executed inside
a serialised write transaction, so concurrent repeat offenses from the same
user never lose an increment. Missing users surface as
:class:`UserNotFoundError`; duplicate creation as
:class:`UserAlreadyExistsError`. Any other storage failure becomes
:class:`PersistenceError`.
"""

from __future__ import annotations

import sqlite3

import aiosqlite

from repostguard.database.db_connection import ConnectionManager, db_connection
from repostguard.datatypes.discord_datatypes import UserID
from repostguard.errors import PersistenceError, UserAlreadyExistsError, UserNotFoundError
from repostguard.repositories.users_repo import UsersRepository
from repostguard.util.logger import get_logger

logger = get_logger("violation_store")


class ViolationStore:
    """Orchestrates the users repository; no SQL lives here."""

    def __init__(self, connection_manager: ConnectionManager | None = None) -> None:
        self._db = connection_manager or db_connection
        self._users_repo = UsersRepository()

    async def get_violations(self, user_id: UserID) -> int:
        """Return the user's current count.

        Raises:
            UserNotFoundError: The user has never been seen; the caller creates it.
            PersistenceError: Storage failure.
        """
        uid = user_id.to_int()
        try:
            async with self._db.read() as conn:
                row = await self._users_repo.get(conn, uid)
        except aiosqlite.Error as exc:
            logger.error("[VIOLATION STORE] Failed to get violations for user %s: %s", uid, exc)
            raise PersistenceError(f"failed to read violations for user {uid}") from exc

        if row is None:
            raise UserNotFoundError(uid)
        return row.violations

    async def create(self, user_id: UserID) -> None:
        """Initialise a user record with a count of zero.

        Raises:
            UserAlreadyExistsError: A record already exists (benign when racing).
            PersistenceError: Storage failure.
        """
        uid = user_id.to_int()
        try:
            async with self._db.transaction() as conn:
                await self._users_repo.insert(conn, uid)
        except sqlite3.IntegrityError as exc:
            raise UserAlreadyExistsError(uid) from exc
        except aiosqlite.Error as exc:
            logger.error("[VIOLATION STORE] Failed to create user %s: %s", uid, exc)
            raise PersistenceError(f"failed to create user {uid}") from exc

        logger.debug("[VIOLATION STORE] Created user %s", uid)

    async def get_or_create(self, user_id: UserID) -> int:
        """Return the user's count, creating the record first if it does not exist."""
        try:
            return await self.get_violations(user_id)
        except UserNotFoundError:
            logger.debug("[VIOLATION STORE] User %s not found, creating new entry", user_id)

        try:
            await self.create(user_id)
        except UserAlreadyExistsError:
            # Another message from the same user created it first
            return await self.get_violations(user_id)
        return 0

    async def increment(self, user_id: UserID) -> int:
        """Atomically add one to the user's count and return the new value.

        Raises:
            UserNotFoundError: No record for the user.
            PersistenceError: Storage failure.
        """
        uid = user_id.to_int()
        try:
            async with self._db.transaction() as conn:
                affected = await self._users_repo.increment_violations(conn, uid)
                row = await self._users_repo.get(conn, uid) if affected else None
        except aiosqlite.Error as exc:
            logger.error("[VIOLATION STORE] Failed to increment violations for user %s: %s", uid, exc)
            raise PersistenceError(f"failed to increment violations for user {uid}") from exc

        if row is None:
            raise UserNotFoundError(uid)
        return row.violations

    async def reset(self, user_id: UserID) -> None:
        """Atomically set the user's count back to zero.

        Raises:
            UserNotFoundError: No record for the user.
            PersistenceError: Storage failure.
        """
        uid = user_id.to_int()
        try:
            async with self._db.transaction() as conn:
                affected = await self._users_repo.reset_violations(conn, uid)
        except aiosqlite.Error as exc:
            logger.error("[VIOLATION STORE] Failed to reset violations for user %s: %s", uid, exc)
            raise PersistenceError(f"failed to reset violations for user {uid}") from exc

        if affected == 0:
            raise UserNotFoundError(uid)
        logger.debug("[VIOLATION STORE] Reset violations for user %s", uid)
