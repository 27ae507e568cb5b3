"""Database utilities for MoodStreak."""

from .models import (
    Base,
    MoodEntry,
    Profile,
    SettingEntry,
)

__all__ = [
    "Base",
    "MoodEntry",
    "Profile",
    "SettingEntry",
]
