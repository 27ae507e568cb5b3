"""MoodStreak application: daily activity streaks and mood journal."""
