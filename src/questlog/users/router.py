"""Profile router: GET/PUT /profile."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.auth.dependencies import get_current_user
from questlog.database import get_session
from questlog.db.models import UserProfile
from questlog.users.schemas import ProfileEnvelope, ProfileUpdateRequest, profile_response
from questlog.users.service import update_profile

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=ProfileEnvelope)
async def get_profile(
    user: UserProfile = Depends(get_current_user),
) -> ProfileEnvelope:
    """Get own full profile with level progress."""
    return ProfileEnvelope(user=profile_response(user))


@router.put("", response_model=ProfileEnvelope)
async def update_my_profile(
    body: ProfileUpdateRequest,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
) -> ProfileEnvelope:
    """Update username and/or bio."""
    user = await update_profile(db, user, username=body.username, bio=body.bio)
    await db.commit()
    return ProfileEnvelope(user=profile_response(user))
