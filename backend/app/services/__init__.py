"""Streak, mood journal and storage services."""

from .moods import MoodJournal
from .storage import StorageService
from .streaks import StreakEngine

__all__ = ["MoodJournal", "StorageService", "StreakEngine"]
