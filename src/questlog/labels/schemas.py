"""Pydantic models for label endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from questlog.achievements.schemas import AchievementResponse


class LabelCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Label name is required"
            raise ValueError(msg)
        return v


class LabelResponse(BaseModel):
    id: int
    name: str
    created_at: datetime | None = None


class LabelListResponse(BaseModel):
    labels: list[LabelResponse]


class LabelCreateResponse(LabelResponse):
    new_achievements: list[AchievementResponse] = []
