"""Read-only mood statistics.

``current_streak`` counts calendar days backward from today, while
``longest_streak`` compares raw ``created_at`` deltas between consecutive
entries. The two methods differ: a period can report a longest streak that is
shorter than the current one.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from itertools import pairwise

from ..db.models import MoodEntry
from ..utils.days import ONE_DAY
from .options import MOOD_OPTIONS

CURRENT_STREAK_WINDOW_DAYS = 30


@dataclass(frozen=True)
class DistributionBucket:
    level: int
    emoji: str
    label: str
    count: int
    percentage: int


@dataclass(frozen=True)
class MoodStatsSnapshot:
    total_entries: int
    average_mood: float
    distribution: list[DistributionBucket] = field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0


def round_half_up(value: float, digits: int = 0) -> float:
    # quantizes the shortest decimal repr: 1.15 rounds to 1.2
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def average_mood(entries: Sequence[MoodEntry]) -> float:
    if not entries:
        return 0.0
    total = sum(entry.mood_level for entry in entries)
    return round_half_up(total / len(entries), 1)


def mood_distribution(entries: Sequence[MoodEntry]) -> list[DistributionBucket]:
    """Count entries per mood level.

    Percentages are rounded per bucket and are not adjusted to add up to 100.
    """

    counts = Counter(entry.mood_level for entry in entries)
    total = len(entries)
    buckets = []
    for option in MOOD_OPTIONS:
        count = counts.get(option.level, 0)
        percentage = int(round_half_up(count / total * 100)) if total else 0
        buckets.append(
            DistributionBucket(
                level=option.level,
                emoji=option.emoji,
                label=option.label,
                count=count,
                percentage=percentage,
            )
        )
    return buckets


def current_streak(
    entry_days: Iterable[date],
    today: date,
    *,
    window_days: int = CURRENT_STREAK_WINDOW_DAYS,
) -> int:
    days = set(entry_days)
    streak = 0
    for offset in range(window_days):
        if today - timedelta(days=offset) not in days:
            break
        streak += 1
    return streak


def longest_streak(entries: Sequence[MoodEntry]) -> int:
    if not entries:
        return 0
    streak = 1
    longest = 1
    for previous, current in pairwise(entries):
        if current.created_at - previous.created_at == ONE_DAY:
            streak += 1
            longest = max(longest, streak)
        else:
            streak = 1
    return longest


def empty_snapshot() -> MoodStatsSnapshot:
    return MoodStatsSnapshot(
        total_entries=0,
        average_mood=0.0,
        distribution=mood_distribution([]),
        current_streak=0,
        longest_streak=0,
    )


def build_snapshot(
    period_entries: Sequence[MoodEntry],
    recent_entries: Sequence[MoodEntry],
    today: date,
) -> MoodStatsSnapshot:
    """Aggregate a period's entries; ``recent_entries`` feed the current streak."""

    if not period_entries:
        return empty_snapshot()
    return MoodStatsSnapshot(
        total_entries=len(period_entries),
        average_mood=average_mood(period_entries),
        distribution=mood_distribution(period_entries),
        current_streak=current_streak((entry.entry_date for entry in recent_entries), today),
        longest_streak=longest_streak(period_entries),
    )


__all__ = [
    "CURRENT_STREAK_WINDOW_DAYS",
    "DistributionBucket",
    "MoodStatsSnapshot",
    "average_mood",
    "build_snapshot",
    "current_streak",
    "empty_snapshot",
    "longest_streak",
    "mood_distribution",
    "round_half_up",
]
