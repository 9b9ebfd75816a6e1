"""Pydantic models for profile endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from questlog.db.models import UserProfile
from questlog.gamification.level_thresholds import compute_level


class ProfileResponse(BaseModel):
    id: str
    username: str
    email: str | None = None
    current_level: int
    total_xp: int
    level_title: str
    xp_into_level: int
    xp_for_level: int
    bio: str | None = None
    profile_picture_url: str | None = None
    role: str
    created_at: datetime | None = None


class ProfileEnvelope(BaseModel):
    user: ProfileResponse


class ProfileUpdateRequest(BaseModel):
    """Only username and bio are editable; XP and level are never client-settable."""

    username: str | None = Field(default=None, min_length=3, max_length=32, pattern=r"^[A-Za-z0-9_.-]+$")
    bio: str | None = Field(default=None, max_length=280)


def profile_response(profile: UserProfile) -> ProfileResponse:
    """Build a ProfileResponse from a UserProfile model."""
    level_info = compute_level(profile.total_xp)
    return ProfileResponse(
        id=profile.id,
        username=profile.username,
        email=profile.email,
        current_level=profile.current_level,
        total_xp=profile.total_xp,
        level_title=level_info["title"],
        xp_into_level=level_info["xp_into_level"],
        xp_for_level=level_info["xp_for_level"],
        bio=profile.bio,
        profile_picture_url=profile.profile_picture_url,
        role=profile.role,
        created_at=profile.created_at,
    )
