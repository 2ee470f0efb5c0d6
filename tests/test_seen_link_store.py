"""Tests for the seen-link store."""

import asyncio

import pytest
import pytest_asyncio

from repostguard.datatypes.discord_datatypes import MessageID, UserID
from repostguard.errors import SeenLinkConflictError, SeenLinkNotFoundError

ALICE = UserID(1001)
BOB = UserID(1002)


@pytest_asyncio.fixture
async def users(violation_store):
    await violation_store.create(ALICE)
    await violation_store.create(BOB)


@pytest.mark.asyncio
async def test_exists_is_none_before_create(seen_link_store, users):
    assert await seen_link_store.exists(ALICE, "abc123") is None


@pytest.mark.asyncio
async def test_create_then_exists_returns_record(seen_link_store, users):
    created = await seen_link_store.create(ALICE, "abc123", MessageID(555))

    record = await seen_link_store.exists(ALICE, "abc123")
    assert record is not None
    assert record.user_id == 1001
    assert record.url == "abc123"
    assert record.message_id == 555
    assert record.created_at is not None
    assert created.url == "abc123"


@pytest.mark.asyncio
async def test_duplicate_pair_raises_conflict(seen_link_store, users):
    await seen_link_store.create(ALICE, "abc123")
    with pytest.raises(SeenLinkConflictError) as excinfo:
        await seen_link_store.create(ALICE, "abc123")
    assert excinfo.value.url == "abc123"


@pytest.mark.asyncio
async def test_same_url_for_different_users_is_allowed(seen_link_store, users):
    await seen_link_store.create(ALICE, "abc123")
    await seen_link_store.create(BOB, "abc123")

    assert await seen_link_store.exists(BOB, "abc123") is not None


@pytest.mark.asyncio
async def test_concurrent_creates_yield_exactly_one_winner(seen_link_store, users):
    results = await asyncio.gather(
        *(seen_link_store.create(ALICE, "abc123") for _ in range(5)),
        return_exceptions=True,
    )

    conflicts = [r for r in results if isinstance(r, SeenLinkConflictError)]
    assert len(conflicts) == 4
    assert len(results) - len(conflicts) == 1


@pytest.mark.asyncio
async def test_delete_removes_all_rows_for_url(seen_link_store, users):
    await seen_link_store.create(ALICE, "abc123")
    await seen_link_store.create(BOB, "abc123")
    await seen_link_store.create(ALICE, "other")

    removed = await seen_link_store.delete("abc123")

    assert removed == 2
    assert await seen_link_store.exists(ALICE, "abc123") is None
    assert await seen_link_store.exists(BOB, "abc123") is None
    assert await seen_link_store.exists(ALICE, "other") is not None


@pytest.mark.asyncio
async def test_delete_unknown_url_raises_not_found(seen_link_store, users):
    with pytest.raises(SeenLinkNotFoundError):
        await seen_link_store.delete("missing")


@pytest.mark.asyncio
async def test_list_for_user_returns_oldest_first(seen_link_store, users):
    await seen_link_store.create(ALICE, "first")
    await seen_link_store.create(ALICE, "second")
    await seen_link_store.create(BOB, "third")

    records = await seen_link_store.list_for_user(ALICE)

    assert [r.url for r in records] == ["first", "second"]
