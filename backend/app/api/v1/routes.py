from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ...core.errors import StoreError, ValidationError
from ...core.security import (
    require_admin_token,
    resolve_current_profile,
    resolve_current_user,
    resolve_existing_profile,
)
from ...metrics import USER_API_COUNTER
from ...schemas.mood import (
    DistributionBucketModel,
    MoodEntryModel,
    MoodListResponse,
    MoodOptionModel,
    MoodOptionsResponse,
    MoodStatsResponse,
    MoodUpsert,
    TodaysMoodResponse,
)
from ...schemas.streak import StreakPetModel, StreakResetResponse, StreakResponse
from ...services.moods import MoodJournal
from ...services.options import MOOD_OPTIONS
from ...services.stats import empty_snapshot
from ...services.streaks import StreakEngine, streak_pet
from ...utils.days import month_bounds

router = APIRouter(prefix="/api/v1", tags=["core"])


def get_streak_engine(request: Request) -> StreakEngine:
    return request.app.state.streak_engine


def get_mood_journal(request: Request) -> MoodJournal:
    return request.app.state.mood_journal


def _streak_response(streak: int) -> StreakResponse:
    pet = streak_pet(streak)
    return StreakResponse(
        streak=streak,
        pet=StreakPetModel.model_validate(pet, from_attributes=True) if pet else None,
    )


def _unprocessable(exc: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=str(exc),
    )


# -- streak ------------------------------------------------------------------
@router.get("/streak", response_model=StreakResponse)
async def read_streak(
    engine: StreakEngine = Depends(get_streak_engine),
    user_id: str = Depends(resolve_current_user),
) -> StreakResponse:
    streak = await engine.get_user_streak(user_id)
    USER_API_COUNTER.labels(endpoint="streak_get").inc()
    return _streak_response(streak)


@router.post("/streak/activity", response_model=StreakResponse)
async def record_activity(
    engine: StreakEngine = Depends(get_streak_engine),
    user_id: str = Depends(resolve_current_user),
) -> StreakResponse:
    streak = await engine.update_user_streak(user_id)
    USER_API_COUNTER.labels(endpoint="streak_activity").inc()
    return _streak_response(streak)


@router.post("/streak/initialize", response_model=StreakResponse)
async def initialize_streak(
    engine: StreakEngine = Depends(get_streak_engine),
    user_id: str = Depends(resolve_current_user),
) -> StreakResponse:
    streak = await engine.initialize_user_streak(user_id)
    USER_API_COUNTER.labels(endpoint="streak_initialize").inc()
    return _streak_response(streak)


@router.post("/admin/streaks/reset-inactive", response_model=StreakResetResponse)
async def reset_inactive_streaks(
    engine: StreakEngine = Depends(get_streak_engine),
    _: None = Depends(require_admin_token),
) -> StreakResetResponse:
    try:
        reset = await engine.reset_inactive_streaks()
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="store unavailable",
        ) from exc
    return StreakResetResponse(reset=reset)


# -- moods -------------------------------------------------------------------
@router.get("/moods/options", response_model=MoodOptionsResponse)
async def list_mood_options() -> MoodOptionsResponse:
    items = [MoodOptionModel.model_validate(option) for option in MOOD_OPTIONS]
    return MoodOptionsResponse(items=items)


@router.get("/moods/today", response_model=TodaysMoodResponse)
async def read_todays_mood(
    journal: MoodJournal = Depends(get_mood_journal),
    profile_id: int | None = Depends(resolve_existing_profile),
) -> TodaysMoodResponse:
    entry = await journal.get_todays_mood(profile_id) if profile_id is not None else None
    USER_API_COUNTER.labels(endpoint="moods_today_get").inc()
    return TodaysMoodResponse(
        entry_date=journal.current_mood_date(),
        entry=MoodEntryModel.model_validate(entry) if entry else None,
    )


@router.put("/moods/today", response_model=MoodEntryModel)
async def save_todays_mood(
    payload: MoodUpsert,
    journal: MoodJournal = Depends(get_mood_journal),
    profile_id: int = Depends(resolve_current_profile),
) -> MoodEntryModel:
    try:
        entry = await journal.set_todays_mood(profile_id, payload.mood_level, payload.notes)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="mood could not be saved, please retry",
        )
    USER_API_COUNTER.labels(endpoint="moods_today_put").inc()
    return MoodEntryModel.model_validate(entry)


@router.get("/moods/recent", response_model=MoodListResponse)
async def list_recent_moods(
    request: Request,
    journal: MoodJournal = Depends(get_mood_journal),
    profile_id: int | None = Depends(resolve_existing_profile),
    days: int | None = Query(default=None, ge=1, le=90),
) -> MoodListResponse:
    window = days or request.app.state.settings.recent_moods_days
    entries = []
    if profile_id is not None:
        entries = await journal.get_recent_moods(profile_id, window)
    USER_API_COUNTER.labels(endpoint="moods_recent").inc()
    return MoodListResponse(items=[MoodEntryModel.model_validate(e) for e in entries])


@router.get("/moods/month", response_model=MoodListResponse)
async def list_monthly_moods(
    journal: MoodJournal = Depends(get_mood_journal),
    profile_id: int | None = Depends(resolve_existing_profile),
    year: int = Query(...),
    month: int = Query(...),
) -> MoodListResponse:
    try:
        month_bounds(year, month)
        entries = []
        if profile_id is not None:
            entries = await journal.get_monthly_moods(profile_id, year, month)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="store unavailable",
        ) from exc
    USER_API_COUNTER.labels(endpoint="moods_month").inc()
    return MoodListResponse(items=[MoodEntryModel.model_validate(e) for e in entries])


@router.get("/moods/stats", response_model=MoodStatsResponse)
async def read_monthly_stats(
    journal: MoodJournal = Depends(get_mood_journal),
    profile_id: int | None = Depends(resolve_existing_profile),
    year: int = Query(...),
    month: int = Query(...),
) -> MoodStatsResponse:
    try:
        month_bounds(year, month)
        snapshot = empty_snapshot()
        if profile_id is not None:
            snapshot = await journal.get_monthly_stats(profile_id, year, month)
    except ValidationError as exc:
        raise _unprocessable(exc) from exc
    USER_API_COUNTER.labels(endpoint="moods_stats").inc()
    return MoodStatsResponse(
        year=year,
        month=month,
        total_entries=snapshot.total_entries,
        average_mood=snapshot.average_mood,
        distribution=[
            DistributionBucketModel.model_validate(bucket) for bucket in snapshot.distribution
        ],
        current_streak=snapshot.current_streak,
        longest_streak=snapshot.longest_streak,
    )
