from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime, timedelta
from typing import Any, Protocol, runtime_checkable

from ..core.errors import ConflictError, NotFoundError, StoreError, ValidationError
from ..db.models import MoodEntry
from ..metrics import MOOD_SAVES
from ..utils.days import calendar_day, day_key, month_bounds
from .options import mood_option
from .stats import (
    CURRENT_STREAK_WINDOW_DAYS,
    MoodStatsSnapshot,
    build_snapshot,
    empty_snapshot,
)

logger = logging.getLogger(__name__)

NOTES_MAX_LENGTH = 500


@runtime_checkable
class MoodEntryStore(Protocol):  # pragma: no cover - structural typing helper
    async def query_entry(self, profile_id: int, entry_date: date) -> MoodEntry | None: ...

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
    ) -> MoodEntry: ...

    async def update_entry(self, entry_id: int, **fields: Any) -> MoodEntry: ...

    async def query_range(
        self, profile_id: int, start: date, end: date
    ) -> Sequence[MoodEntry]: ...


class MoodJournal:
    """Keep one mood entry per profile and calendar day and report on them."""

    def __init__(
        self,
        store: MoodEntryStore,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._clock = clock or datetime.now

    def _today(self) -> date:
        return calendar_day(self._clock())

    def current_mood_date(self) -> str:
        return day_key(self._clock())

    def is_current_mood_date(self, value: str) -> bool:
        return value == self.current_mood_date()

    async def get_todays_mood(self, profile_id: int) -> MoodEntry | None:
        try:
            return await self._store.query_entry(profile_id, self._today())
        except StoreError as exc:
            logger.warning("Failed to fetch today's mood for %s: %s", profile_id, exc)
            return None

    async def set_todays_mood(
        self,
        profile_id: int,
        mood_level: int,
        notes: str | None = None,
    ) -> MoodEntry | None:
        """Create or update today's entry.

        Raises ``ValidationError`` for an unknown level or oversized notes.
        Store failures are logged and reported as ``None`` so callers can
        offer a retry.
        """

        option = mood_option(mood_level)
        if notes is not None and len(notes) > NOTES_MAX_LENGTH:
            raise ValidationError(f"notes exceed {NOTES_MAX_LENGTH} characters")

        now = self._clock()
        today = calendar_day(now)
        fields = {
            "mood_level": option.level,
            "mood_emoji": option.emoji,
            "mood_label": option.label,
            "notes": notes or None,
            "updated_at": now,
        }

        try:
            existing = await self._store.query_entry(profile_id, today)
            if existing is not None:
                entry = await self._store.update_entry(existing.id, **fields)
                outcome = "updated"
            else:
                entry, outcome = await self._insert_or_update(profile_id, today, now, fields)
        except (StoreError, NotFoundError) as exc:
            logger.error(
                "Failed to save mood for %s: %s",
                profile_id,
                exc,
                extra={"operation": "set_todays_mood"},
            )
            MOOD_SAVES.labels(outcome="failed").inc()
            return None

        MOOD_SAVES.labels(outcome=outcome).inc()
        return entry

    async def _insert_or_update(
        self,
        profile_id: int,
        today: date,
        now: datetime,
        fields: dict[str, Any],
    ) -> tuple[MoodEntry, str]:
        try:
            entry = await self._store.insert_entry(
                profile_id=profile_id,
                entry_date=today,
                mood_level=fields["mood_level"],
                mood_emoji=fields["mood_emoji"],
                mood_label=fields["mood_label"],
                notes=fields["notes"],
                created_at=now,
            )
            return entry, "created"
        except ConflictError:
            logger.info("Concurrent mood insert for %s on %s, retrying as update", profile_id, today)

        try:
            existing = await self._store.query_entry(profile_id, today)
            if existing is None:
                raise StoreError("conflicting mood entry disappeared")
            entry = await self._store.update_entry(existing.id, **fields)
        except (ConflictError, NotFoundError) as exc:
            raise StoreError("mood update after conflict failed") from exc
        return entry, "retried"

    async def get_monthly_moods(self, profile_id: int, year: int, month: int) -> list[MoodEntry]:
        start, end = month_bounds(year, month)
        entries = await self._store.query_range(profile_id, start, end)
        return list(entries)

    async def get_recent_moods(self, profile_id: int, days: int = 7) -> list[MoodEntry]:
        today = self._today()
        try:
            entries = await self._store.query_range(
                profile_id, today - timedelta(days=days), today
            )
        except StoreError as exc:
            logger.warning("Failed to fetch recent moods for %s: %s", profile_id, exc)
            return []
        return sorted(entries, key=lambda entry: entry.entry_date, reverse=True)

    async def get_monthly_stats(self, profile_id: int, year: int, month: int) -> MoodStatsSnapshot:
        today = self._today()
        try:
            period_entries = await self.get_monthly_moods(profile_id, year, month)
            if not period_entries:
                return empty_snapshot()
            recent_entries = await self._store.query_range(
                profile_id,
                today - timedelta(days=CURRENT_STREAK_WINDOW_DAYS - 1),
                today,
            )
        except StoreError as exc:
            logger.warning("Failed to compute mood stats for %s: %s", profile_id, exc)
            return empty_snapshot()
        return build_snapshot(period_entries, recent_entries, today)


__all__ = ["NOTES_MAX_LENGTH", "MoodEntryStore", "MoodJournal"]
