from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Any

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..core.errors import ConflictError, NotFoundError, StoreError
from ..db.models import MoodEntry, Profile
from ..metrics import STORE_ERRORS
from .streaks import StreakState

logger = logging.getLogger(__name__)

_UPDATABLE_ENTRY_FIELDS = frozenset(
    {"mood_level", "mood_emoji", "mood_label", "notes", "updated_at"}
)


class StorageService:
    """Persist profiles and mood entries.

    Implements both the profile store used by the streak engine and the mood
    entry store used by the mood journal. SQLAlchemy failures surface as
    ``StoreError``; unique-key violations surface as ``ConflictError``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker,
        *,
        timeout: float | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            async with asyncio.timeout(self._timeout):
                yield
        except IntegrityError as exc:
            STORE_ERRORS.labels(operation=operation, kind="conflict").inc()
            raise ConflictError(f"{operation}: unique key violated") from exc
        except SQLAlchemyError as exc:
            STORE_ERRORS.labels(operation=operation, kind="database").inc()
            logger.warning("Store operation %s failed: %s", operation, exc)
            raise StoreError(f"{operation} failed") from exc
        except TimeoutError as exc:
            STORE_ERRORS.labels(operation=operation, kind="timeout").inc()
            logger.warning("Store operation %s timed out after %ss", operation, self._timeout)
            raise StoreError(f"{operation} timed out") from exc

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    # -- profiles ----------------------------------------------------------
    async def ensure_profile(self, user_id: str) -> Profile:
        try:
            async with self._guard("ensure_profile"):
                async with self._session_factory() as session:
                    profile = await session.scalar(
                        select(Profile).where(Profile.user_id == user_id)
                    )
                    if profile:
                        return profile
                    profile = Profile(user_id=user_id, streak=0)
                    session.add(profile)
                    await session.commit()
                    await session.refresh(profile)
                    return profile
        except ConflictError:
            # another request created the profile first
            profile = await self.get_profile(user_id)
            if profile is None:
                raise StoreError(f"profile {user_id!r} vanished after conflict") from None
            return profile

    async def get_profile(self, user_id: str) -> Profile | None:
        async with self._guard("get_profile"):
            async with self._session_factory() as session:
                return await session.scalar(select(Profile).where(Profile.user_id == user_id))

    async def read_profile(self, user_id: str) -> StreakState:
        async with self._guard("read_profile"):
            async with self._session_factory() as session:
                profile = await session.scalar(select(Profile).where(Profile.user_id == user_id))
        if profile is None:
            raise NotFoundError(f"profile {user_id!r} not found")
        return StreakState(
            user_id=profile.user_id,
            streak=profile.streak or 0,
            last_activity_day=profile.last_activity_date,
        )

    async def write_profile(
        self,
        user_id: str,
        *,
        streak: int,
        last_activity_date: date,
    ) -> StreakState:
        async with self._guard("write_profile"):
            async with self._session_factory() as session:
                profile = await session.scalar(select(Profile).where(Profile.user_id == user_id))
                if profile is None:
                    profile = Profile(user_id=user_id)
                    session.add(profile)
                profile.streak = streak
                profile.last_activity_date = last_activity_date
                await session.commit()
        return StreakState(
            user_id=user_id,
            streak=streak,
            last_activity_day=last_activity_date,
        )

    async def reset_inactive_profiles(self, before: date) -> int:
        async with self._guard("reset_inactive_profiles"):
            async with self._session_factory() as session:
                result = await session.execute(
                    update(Profile)
                    .where(Profile.last_activity_date < before)
                    .where(Profile.streak > 0)
                    .values(streak=0)
                )
                await session.commit()
                return int(result.rowcount or 0)

    # -- mood entries --------------------------------------------------------
    async def query_entry(self, profile_id: int, entry_date: date) -> MoodEntry | None:
        async with self._guard("query_entry"):
            async with self._session_factory() as session:
                return await session.scalar(
                    select(MoodEntry)
                    .where(MoodEntry.profile_id == profile_id)
                    .where(MoodEntry.entry_date == entry_date)
                )

    async def insert_entry(
        self,
        *,
        profile_id: int,
        entry_date: date,
        mood_level: int,
        mood_emoji: str,
        mood_label: str,
        notes: str | None,
        created_at: datetime,
    ) -> MoodEntry:
        async with self._guard("insert_entry"):
            async with self._session_factory() as session:
                entry = MoodEntry(
                    profile_id=profile_id,
                    entry_date=entry_date,
                    mood_level=mood_level,
                    mood_emoji=mood_emoji,
                    mood_label=mood_label,
                    notes=notes,
                    created_at=created_at,
                    updated_at=created_at,
                )
                session.add(entry)
                await session.commit()
                await session.refresh(entry)
                return entry

    async def update_entry(self, entry_id: int, **fields: Any) -> MoodEntry:
        unknown = set(fields) - _UPDATABLE_ENTRY_FIELDS
        if unknown:
            raise ValueError(f"cannot update mood entry fields: {sorted(unknown)}")
        async with self._guard("update_entry"):
            async with self._session_factory() as session:
                entry = await session.get(MoodEntry, entry_id)
                if entry is None:
                    raise NotFoundError(f"mood entry {entry_id} not found")
                for key, value in fields.items():
                    setattr(entry, key, value)
                await session.commit()
                await session.refresh(entry)
                return entry

    async def query_range(
        self,
        profile_id: int,
        start: date,
        end: date,
    ) -> Sequence[MoodEntry]:
        async with self._guard("query_range"):
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MoodEntry)
                    .where(MoodEntry.profile_id == profile_id)
                    .where(MoodEntry.entry_date >= start)
                    .where(MoodEntry.entry_date <= end)
                    .order_by(MoodEntry.entry_date.asc())
                )
                return list(result.scalars().all())


__all__ = ["StorageService"]
