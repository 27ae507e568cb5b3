from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from ..services.moods import NOTES_MAX_LENGTH


class MoodUpsert(BaseModel):
    mood_level: StrictInt
    notes: str | None = Field(default=None, max_length=NOTES_MAX_LENGTH)


class MoodOptionModel(BaseModel):
    level: int
    emoji: str
    label: str
    color: str

    model_config = ConfigDict(from_attributes=True)


class MoodOptionsResponse(BaseModel):
    items: list[MoodOptionModel]


class MoodEntryModel(BaseModel):
    id: int
    profile_id: int
    entry_date: date
    mood_level: int
    mood_emoji: str
    mood_label: str
    notes: str | None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TodaysMoodResponse(BaseModel):
    entry_date: date
    entry: MoodEntryModel | None = None


class MoodListResponse(BaseModel):
    items: list[MoodEntryModel]


class DistributionBucketModel(BaseModel):
    level: int
    emoji: str
    label: str
    count: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


class MoodStatsResponse(BaseModel):
    year: int
    month: int
    total_entries: int
    average_mood: float
    distribution: list[DistributionBucketModel]
    current_streak: int
    longest_streak: int
