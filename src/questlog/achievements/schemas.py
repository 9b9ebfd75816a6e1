"""Pydantic response models for achievement endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from questlog.db.models import Achievement, UserAchievement


class AchievementResponse(BaseModel):
    id: int
    slug: str
    name: str
    description: str
    xp_bonus: int


class AchievementCatalogEntry(AchievementResponse):
    earned: bool = False
    earned_at: datetime | None = None


class AchievementCatalogResponse(BaseModel):
    achievements: list[AchievementCatalogEntry]


class EarnedAchievementResponse(BaseModel):
    achievement_id: int
    earned_at: datetime
    achievements: AchievementResponse


class EarnedAchievementsResponse(BaseModel):
    achievements: list[EarnedAchievementResponse]


def achievement_response(achievement: Achievement) -> AchievementResponse:
    return AchievementResponse(
        id=achievement.id,
        slug=achievement.slug,
        name=achievement.name,
        description=achievement.description,
        xp_bonus=achievement.xp_bonus,
    )


def earned_response(earned: UserAchievement) -> EarnedAchievementResponse:
    return EarnedAchievementResponse(
        achievement_id=earned.achievement_id,
        earned_at=earned.earned_at,
        achievements=achievement_response(earned.achievement),
    )


def achievements_payload(achievements: list[Achievement]) -> list[AchievementResponse]:
    return [achievement_response(a) for a in achievements]
