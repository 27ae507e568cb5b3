from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import Protocol, runtime_checkable

from ..core.errors import MoodStreakError
from ..metrics import STREAK_UPDATES
from ..utils.days import ONE_DAY, calendar_day, day_difference

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreakState:
    user_id: str
    streak: int
    last_activity_day: date | None


@dataclass(frozen=True)
class StreakPet:
    streak: int
    emoji: str
    label: str


STREAK_PETS: tuple[StreakPet, ...] = (
    StreakPet(10, "🐣", "Hatchling Pet (10 Days!)"),
    StreakPet(20, "🐥", "Chick Pet (20 Days!)"),
    StreakPet(30, "🐦", "Bird Pet (30 Days!)"),
    StreakPet(50, "🦄", "Unicorn Pet (50 Days!)"),
    StreakPet(60, "🐉", "Dragon Pet (60 Days!)"),
    StreakPet(100, "🦚", "Legendary Pet (100 Days!)"),
)


@runtime_checkable
class ProfileStore(Protocol):  # pragma: no cover - structural typing helper
    async def read_profile(self, user_id: str) -> StreakState: ...

    async def write_profile(
        self,
        user_id: str,
        *,
        streak: int,
        last_activity_date: date,
    ) -> StreakState: ...

    async def reset_inactive_profiles(self, before: date) -> int: ...


def next_streak(current: int, last_activity_day: date | None, today: date) -> int:
    """Apply the day-continuity rules to a stored streak."""

    if last_activity_day is None:
        return 1
    day_diff = day_difference(today, last_activity_day)
    if day_diff == 0:
        return max(current, 1)
    if day_diff == 1:
        return max(current, 0) + 1
    # missed days, or a last activity in the future
    return 1


def streak_pet(streak: int) -> StreakPet | None:
    reached = [pet for pet in STREAK_PETS if streak >= pet.streak]
    return reached[-1] if reached else None


class StreakEngine:
    """Track consecutive days of activity per user.

    Streak tracking is an enhancement to login and never blocks it: store
    failures are logged and absorbed, and every mutating call returns a usable
    streak value.
    """

    def __init__(
        self,
        store: ProfileStore,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or datetime.now

    def _today(self) -> date:
        return calendar_day(self._clock())

    async def get_user_streak(self, user_id: str) -> int:
        try:
            state = await self._store.read_profile(user_id)
        except MoodStreakError as exc:
            logger.warning("Unable to read streak for %s: %s", user_id, exc)
            return 0
        return max(state.streak, 0)

    async def update_user_streak(self, user_id: str) -> int:
        if not user_id:
            logger.error("Invalid user id provided for streak update: %r", user_id)
            STREAK_UPDATES.labels(outcome="invalid").inc()
            return 0

        try:
            state = await self._store.read_profile(user_id)
        except MoodStreakError as exc:
            logger.warning(
                "Streak state unavailable for %s, initializing: %s",
                user_id,
                exc,
            )
            return await self.initialize_user_streak(user_id)

        today = self._today()
        new_streak = next_streak(state.streak, state.last_activity_day, today)

        try:
            saved = await self._store.write_profile(
                user_id,
                streak=new_streak,
                last_activity_date=today,
            )
        except MoodStreakError as exc:
            logger.warning("Failed to persist streak for %s: %s", user_id, exc)
            STREAK_UPDATES.labels(outcome="write_failed").inc()
            return max(state.streak, 1)

        STREAK_UPDATES.labels(outcome=_outcome(state, saved.streak, today)).inc()
        logger.info(
            "Streak updated",
            extra={
                "extra_fields": {
                    "user_id": user_id,
                    "previous": state.streak,
                    "streak": saved.streak,
                }
            },
        )
        return saved.streak

    async def initialize_user_streak(self, user_id: str) -> int:
        today = self._today()
        try:
            await self._store.write_profile(user_id, streak=1, last_activity_date=today)
        except MoodStreakError as exc:
            logger.warning("Failed to initialize streak for %s: %s", user_id, exc)
            STREAK_UPDATES.labels(outcome="write_failed").inc()
        else:
            STREAK_UPDATES.labels(outcome="initialized").inc()
        return 1

    async def reset_inactive_streaks(self) -> int:
        """Zero the streak of every profile inactive since before yesterday."""

        yesterday = self._today() - ONE_DAY
        reset = await self._store.reset_inactive_profiles(yesterday)
        logger.info("Reset %s inactive streaks", reset)
        return reset


def _outcome(state: StreakState, new_streak: int, today: date) -> str:
    if state.last_activity_day is None:
        return "started"
    if state.last_activity_day == today:
        return "unchanged"
    if new_streak > 1:
        return "extended"
    return "reset"


__all__ = [
    "STREAK_PETS",
    "ProfileStore",
    "StreakEngine",
    "StreakPet",
    "StreakState",
    "next_streak",
    "streak_pet",
]
