"""Achievement API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.achievements.schemas import (
    AchievementCatalogEntry,
    AchievementCatalogResponse,
    EarnedAchievementsResponse,
    earned_response,
)
from questlog.achievements.service import list_catalog_for_user, list_earned
from questlog.auth.dependencies import get_current_user
from questlog.database import get_session
from questlog.db.models import UserProfile

router = APIRouter(prefix="/achievements", tags=["Achievements"])


@router.get("", response_model=AchievementCatalogResponse)
async def list_achievements(
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Full catalog, each entry flagged with whether the caller earned it."""
    entries = await list_catalog_for_user(db, user.id)
    return AchievementCatalogResponse(
        achievements=[AchievementCatalogEntry(**entry) for entry in entries],
    )


@router.get("/earned", response_model=EarnedAchievementsResponse)
async def list_earned_achievements(
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Achievements the caller has earned, newest first."""
    earned = await list_earned(db, user.id)
    return EarnedAchievementsResponse(achievements=[earned_response(ua) for ua in earned])
