"""
Exception hierarchy for RepostGuard.

Stores raise these instead of leaking sqlite or Discord exceptions so the
moderation engine can decide locally which failures are control flow
(NotFound, Conflict) and which abort the current message.
"""

from __future__ import annotations


class RepostGuardError(Exception):
    """Base class for every error raised by the package."""


class NotFoundError(RepostGuardError):
    """A lookup, update or delete matched no record."""


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"user {user_id} has no violation record")
        self.user_id = user_id


class SeenLinkNotFoundError(NotFoundError):
    def __init__(self, url: str) -> None:
        super().__init__(f"no seen-link records for url {url!r}")
        self.url = url


class ConflictError(RepostGuardError):
    """An insert collided with an existing record."""


class UserAlreadyExistsError(ConflictError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"user {user_id} already has a violation record")
        self.user_id = user_id


class SeenLinkConflictError(ConflictError):
    """The (user, url) pair was already recorded; this is the repost signal."""

    def __init__(self, user_id: int, url: str) -> None:
        super().__init__(f"user {user_id} already posted {url!r}")
        self.user_id = user_id
        self.url = url


class PersistenceError(RepostGuardError):
    """Storage is unavailable or rejected a write for a reason other than a conflict."""


class ExternalActionError(RepostGuardError):
    """Discord refused or failed a moderation action (permissions, HTTP, network)."""

    def __init__(self, action: str, detail: str) -> None:
        super().__init__(f"{action} failed: {detail}")
        self.action = action
        self.detail = detail
