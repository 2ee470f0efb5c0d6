"""Repository layer for users and seen_links database access."""
from repostguard.repositories.seen_links_repo import SeenLinkRecord, SeenLinksRepository
from repostguard.repositories.users_repo import UserRow, UsersRepository

__all__ = [
    "SeenLinkRecord",
    "SeenLinksRepository",
    "UserRow",
    "UsersRepository",
]
