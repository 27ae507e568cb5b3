"""Calendar-day helpers.

Every day boundary in MoodStreak is the local wall-clock midnight. Instants are
truncated to their calendar date and dates are rendered as ``YYYY-MM-DD`` keys.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from ..core.errors import ValidationError

ONE_DAY = timedelta(days=1)


def calendar_day(instant: datetime | date) -> date:
    if isinstance(instant, datetime):
        return instant.date()
    return instant


def day_key(instant: datetime | date) -> str:
    """Return the canonical ``YYYY-MM-DD`` key for the instant's calendar day."""

    return calendar_day(instant).isoformat()


def parse_day_key(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"invalid day key: {value!r}") from exc


def start_of_day(instant: datetime | date) -> datetime:
    return datetime.combine(calendar_day(instant), time.min)


def day_difference(later: datetime | date, earlier: datetime | date) -> int:
    """Whole days between the two midnights, floored."""

    delta = start_of_day(later) - start_of_day(earlier)
    return delta // ONE_DAY


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise ValidationError(f"invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"invalid year: {year}")
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


__all__ = [
    "ONE_DAY",
    "calendar_day",
    "day_difference",
    "day_key",
    "month_bounds",
    "parse_day_key",
    "start_of_day",
]
