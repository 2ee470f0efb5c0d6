"""
Pytest configuration and fixtures for RepostGuard tests.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from repostguard.database.database import Database  # noqa: E402
from repostguard.database.db_connection import ConnectionManager  # noqa: E402
from repostguard.services.seen_link_store import SeenLinkStore  # noqa: E402
from repostguard.services.violation_store import ViolationStore  # noqa: E402


@pytest_asyncio.fixture
async def db_manager(tmp_path: Path):
    """An initialised ConnectionManager backed by a throwaway database file."""
    manager = ConnectionManager()
    database = Database(tmp_path / "repostguard.db", manager)
    assert await database.initialize()
    yield manager
    await database.shutdown()


@pytest.fixture
def violation_store(db_manager: ConnectionManager) -> ViolationStore:
    return ViolationStore(db_manager)


@pytest.fixture
def seen_link_store(db_manager: ConnectionManager) -> SeenLinkStore:
    return SeenLinkStore(db_manager)


@pytest.fixture
def fake_executor() -> SimpleNamespace:
    """Action executor whose every Discord call succeeds."""
    return SimpleNamespace(
        timeout_user=AsyncMock(),
        kick_user=AsyncMock(),
        ban_user=AsyncMock(),
        delete_message=AsyncMock(return_value=True),
    )
