"""Error taxonomy shared by the streak and mood services."""

from __future__ import annotations


class MoodStreakError(Exception):
    """Base class for domain errors raised by MoodStreak services."""


class ValidationError(MoodStreakError):
    """Input rejected before any write happens (e.g. unknown mood level)."""


class NotFoundError(MoodStreakError):
    """A profile or mood entry does not exist."""


class StoreError(MoodStreakError):
    """A read or write against the persistent store failed or timed out."""


class ConflictError(MoodStreakError):
    """A concurrent insert already claimed the unique (profile, day) key."""


__all__ = [
    "ConflictError",
    "MoodStreakError",
    "NotFoundError",
    "StoreError",
    "ValidationError",
]
