"""Label API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.achievements.schemas import achievements_payload
from questlog.auth.dependencies import get_current_user
from questlog.database import get_session
from questlog.db.models import UserProfile
from questlog.dependencies import get_redis_or_none
from questlog.gamification.events import publish_achievements
from questlog.labels.schemas import LabelCreateRequest, LabelCreateResponse, LabelListResponse, LabelResponse
from questlog.labels.service import create_label, list_labels

router = APIRouter(prefix="/labels", tags=["Labels"])


@router.get("", response_model=LabelListResponse)
async def get_labels(
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    labels = await list_labels(db, user.id)
    return LabelListResponse(
        labels=[LabelResponse(id=lb.id, name=lb.name, created_at=lb.created_at) for lb in labels],
    )


@router.post("", response_model=LabelCreateResponse, status_code=201)
async def post_label(
    body: LabelCreateRequest,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_or_none),
):
    """Create a label. May unlock label achievements."""
    try:
        label, new_achievements = await create_label(db, user.id, body.name)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await publish_achievements(redis, user.id, new_achievements)
    return LabelCreateResponse(
        id=label.id,
        name=label.name,
        created_at=label.created_at,
        new_achievements=achievements_payload(new_achievements),
    )
