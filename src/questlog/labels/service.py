"""Label listing and creation."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from questlog.achievements.service import evaluate_achievements
from questlog.db.models import Achievement, Label
from questlog.exceptions import ConflictError
from questlog.gamification.reward_pipeline import lock_profile

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_labels(db: AsyncSession, user_id: str) -> list[Label]:
    result = await db.execute(
        select(Label).where(Label.user_id == user_id).order_by(Label.name)
    )
    return list(result.scalars())


async def label_exists(db: AsyncSession, user_id: str, name: str) -> bool:
    result = await db.execute(
        select(Label.id).where(Label.user_id == user_id, func.lower(Label.name) == name.lower())
    )
    return result.first() is not None


async def create_label(db: AsyncSession, user_id: str, name: str) -> tuple[Label, list[Achievement]]:
    """
    Create a label and evaluate label achievements.

    Raises:
        ConflictError: If the user already has a label with this name (case-insensitive).
    """
    if await label_exists(db, user_id, name):
        msg = "Label already exists"
        raise ConflictError(msg)

    now = datetime.now(timezone.utc)
    label = Label(user_id=user_id, name=name, created_at=now)
    db.add(label)
    try:
        await db.flush()
    except IntegrityError:
        # Race condition: a concurrent request created the same name
        await db.rollback()
        msg = "Label already exists"
        raise ConflictError(msg) from None

    profile = await lock_profile(db, user_id)
    new_achievements = await evaluate_achievements(db, profile, now=now)

    logger.info("label_created", user_id=user_id, label_id=label.id)
    return label, new_achievements
