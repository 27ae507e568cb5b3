from __future__ import annotations

from pydantic import BaseModel, Field


class StreakPetModel(BaseModel):
    streak: int
    emoji: str
    label: str

    model_config = {
        "from_attributes": True,
    }


class StreakResponse(BaseModel):
    streak: int = Field(..., ge=0)
    pet: StreakPetModel | None = None


class StreakResetResponse(BaseModel):
    ok: bool = True
    reset: int = Field(..., ge=0)
