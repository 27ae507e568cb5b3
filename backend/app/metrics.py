from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "moodstreak_requests_total",
    "Total HTTP requests processed by MoodStreak",
    ("method", "path", "status"),
)

REQUEST_LATENCY = Histogram(
    "moodstreak_request_latency_seconds",
    "HTTP request latency in seconds",
    ("method", "path"),
)

REQUEST_ERRORS = Counter(
    "moodstreak_request_errors_total",
    "HTTP requests resulting in server errors",
    ("method", "path", "status"),
)

USER_API_COUNTER = Counter(
    "moodstreak_user_api_hits_total",
    "Authenticated API hits per endpoint",
    ("endpoint",),
)

STREAK_UPDATES = Counter(
    "moodstreak_streak_updates_total",
    "Streak engine updates by outcome",
    ("outcome",),
)

MOOD_SAVES = Counter(
    "moodstreak_mood_saves_total",
    "Mood journal saves by outcome",
    ("outcome",),
)

STORE_ERRORS = Counter(
    "moodstreak_store_errors_total",
    "Failed store operations",
    ("operation", "kind"),
)

__all__ = [
    "MOOD_SAVES",
    "REQUEST_COUNT",
    "REQUEST_ERRORS",
    "REQUEST_LATENCY",
    "STORE_ERRORS",
    "STREAK_UPDATES",
    "USER_API_COUNTER",
]
