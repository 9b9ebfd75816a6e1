"""Gamification API endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from questlog.gamification.level_thresholds import LEVEL_THRESHOLDS
from questlog.gamification.schemas import AllLevelsResponse, LevelEntry

router = APIRouter(tags=["Gamification"])


@router.get("/levels", response_model=AllLevelsResponse)
async def list_levels():
    """Get the level curve."""
    return AllLevelsResponse(
        levels=[
            LevelEntry(level=t["level"], title=t["title"], cumulative=t["cumulative"])
            for t in LEVEL_THRESHOLDS
        ]
    )
