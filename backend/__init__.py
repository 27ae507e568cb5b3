"""MoodStreak backend package."""
