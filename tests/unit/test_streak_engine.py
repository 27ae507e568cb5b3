from __future__ import annotations

from datetime import date, timedelta
from unittest.mock import AsyncMock

import pytest

from backend.app.core.errors import StoreError
from backend.app.services.storage import StorageService
from backend.app.services.streaks import StreakEngine, StreakState


@pytest.mark.anyio
async def test_login_after_yesterday_extends_streak(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    today = clock().date()
    await storage.write_profile("alice", streak=5, last_activity_date=today - timedelta(days=1))
    engine = StreakEngine(storage, clock=clock)

    assert await engine.update_user_streak("alice") == 6

    state = await storage.read_profile("alice")
    assert state.streak == 6
    assert state.last_activity_day == today


@pytest.mark.anyio
async def test_login_after_gap_resets_streak(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    today = clock().date()
    await storage.write_profile("bob", streak=12, last_activity_date=today - timedelta(days=3))
    engine = StreakEngine(storage, clock=clock)

    assert await engine.update_user_streak("bob") == 1
    assert (await storage.read_profile("bob")).last_activity_day == today


@pytest.mark.anyio
async def test_repeated_logins_same_day_are_idempotent(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    await storage.write_profile(
        "carol", streak=3, last_activity_date=clock().date() - timedelta(days=1)
    )
    engine = StreakEngine(storage, clock=clock)

    first = await engine.update_user_streak("carol")
    clock.advance(hours=8)
    second = await engine.update_user_streak("carol")
    third = await engine.update_user_streak("carol")

    assert first == second == third == 4


@pytest.mark.anyio
async def test_streak_continues_across_midnight(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    engine = StreakEngine(storage, clock=clock)

    assert await engine.update_user_streak("dave") == 1
    clock.advance(days=1)
    assert await engine.update_user_streak("dave") == 2
    clock.advance(days=1)
    assert await engine.update_user_streak("dave") == 3
    clock.advance(days=2)
    assert await engine.update_user_streak("dave") == 1


@pytest.mark.anyio
async def test_first_activity_creates_profile(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    engine = StreakEngine(storage, clock=clock)

    assert await storage.get_profile("newcomer") is None
    assert await engine.update_user_streak("newcomer") == 1

    state = await storage.read_profile("newcomer")
    assert state.streak == 1
    assert state.last_activity_day == clock().date()


@pytest.mark.anyio
async def test_get_user_streak_is_read_only(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    stale_day = clock().date() - timedelta(days=10)
    await storage.write_profile("erin", streak=8, last_activity_date=stale_day)
    engine = StreakEngine(storage, clock=clock)

    assert await engine.get_user_streak("erin") == 8
    assert await engine.get_user_streak("ghost") == 0

    state = await storage.read_profile("erin")
    assert state.streak == 8
    assert state.last_activity_day == stale_day
    assert await storage.get_profile("ghost") is None


@pytest.mark.anyio
async def test_initialize_always_returns_one(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    engine = StreakEngine(storage, clock=clock)

    assert await engine.initialize_user_streak("frank") == 1
    state = await storage.read_profile("frank")
    assert state.streak == 1
    assert state.last_activity_day == clock().date()


@pytest.mark.anyio
async def test_read_failure_falls_back_to_initialize(clock) -> None:
    store = AsyncMock()
    store.read_profile.side_effect = StoreError("db down")
    store.write_profile.return_value = StreakState("gina", 1, clock().date())
    engine = StreakEngine(store, clock=clock)

    assert await engine.update_user_streak("gina") == 1
    store.write_profile.assert_awaited_once_with(
        "gina", streak=1, last_activity_date=date(2024, 7, 10)
    )


@pytest.mark.anyio
async def test_failures_never_propagate(clock) -> None:
    store = AsyncMock()
    store.read_profile.side_effect = StoreError("db down")
    store.write_profile.side_effect = StoreError("still down")
    engine = StreakEngine(store, clock=clock)

    assert await engine.update_user_streak("hank") == 1
    assert await engine.initialize_user_streak("hank") == 1
    assert await engine.get_user_streak("hank") == 0


@pytest.mark.anyio
async def test_write_failure_keeps_previous_streak(clock) -> None:
    store = AsyncMock()
    store.read_profile.return_value = StreakState(
        "ivy", 7, clock().date() - timedelta(days=1)
    )
    store.write_profile.side_effect = StoreError("write failed")
    engine = StreakEngine(store, clock=clock)

    assert await engine.update_user_streak("ivy") == 7


@pytest.mark.anyio
async def test_empty_user_id_is_rejected_without_store_calls(clock) -> None:
    store = AsyncMock()
    engine = StreakEngine(store, clock=clock)

    assert await engine.update_user_streak("") == 0
    store.read_profile.assert_not_awaited()
    store.write_profile.assert_not_awaited()


@pytest.mark.anyio
async def test_reset_inactive_streaks(temp_session_factory, clock) -> None:
    storage = StorageService(temp_session_factory)
    today = clock().date()
    await storage.write_profile("active", streak=4, last_activity_date=today)
    await storage.write_profile("yesterday", streak=2, last_activity_date=today - timedelta(days=1))
    await storage.write_profile("lapsed", streak=9, last_activity_date=today - timedelta(days=2))
    engine = StreakEngine(storage, clock=clock)

    assert await engine.reset_inactive_streaks() == 1

    assert (await storage.read_profile("active")).streak == 4
    assert (await storage.read_profile("yesterday")).streak == 2
    assert (await storage.read_profile("lapsed")).streak == 0
    assert await engine.update_user_streak("lapsed") == 1
