"""Tests for the violation store."""

import asyncio

import pytest

from repostguard.datatypes.discord_datatypes import UserID
from repostguard.errors import UserAlreadyExistsError, UserNotFoundError

USER = UserID(123456789012345678)


@pytest.mark.asyncio
async def test_get_violations_unknown_user_raises_not_found(violation_store):
    with pytest.raises(UserNotFoundError):
        await violation_store.get_violations(USER)


@pytest.mark.asyncio
async def test_create_starts_at_zero(violation_store):
    await violation_store.create(USER)
    assert await violation_store.get_violations(USER) == 0


@pytest.mark.asyncio
async def test_create_twice_raises_already_exists(violation_store):
    await violation_store.create(USER)
    with pytest.raises(UserAlreadyExistsError):
        await violation_store.create(USER)


@pytest.mark.asyncio
async def test_get_or_create_initialises_once(violation_store):
    assert await violation_store.get_or_create(USER) == 0
    await violation_store.increment(USER)
    assert await violation_store.get_or_create(USER) == 1


@pytest.mark.asyncio
async def test_increment_returns_new_count(violation_store):
    await violation_store.create(USER)
    assert await violation_store.increment(USER) == 1
    assert await violation_store.increment(USER) == 2
    assert await violation_store.get_violations(USER) == 2


@pytest.mark.asyncio
async def test_increment_unknown_user_raises_not_found(violation_store):
    with pytest.raises(UserNotFoundError):
        await violation_store.increment(USER)


@pytest.mark.asyncio
async def test_reset_sets_zero(violation_store):
    await violation_store.create(USER)
    await violation_store.increment(USER)
    await violation_store.increment(USER)

    await violation_store.reset(USER)

    assert await violation_store.get_violations(USER) == 0


@pytest.mark.asyncio
async def test_reset_unknown_user_raises_not_found(violation_store):
    with pytest.raises(UserNotFoundError):
        await violation_store.reset(USER)


@pytest.mark.asyncio
async def test_concurrent_increments_are_not_lost(violation_store):
    await violation_store.create(USER)

    results = await asyncio.gather(*(violation_store.increment(USER) for _ in range(10)))

    assert sorted(results) == list(range(1, 11))
    assert await violation_store.get_violations(USER) == 10


@pytest.mark.asyncio
async def test_concurrent_get_or_create_is_benign(violation_store):
    results = await asyncio.gather(*(violation_store.get_or_create(USER) for _ in range(5)))
    assert results == [0] * 5
