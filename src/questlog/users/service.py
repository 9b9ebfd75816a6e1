"""Profile editing business logic."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog

from questlog.auth.service import username_taken
from questlog.exceptions import ConflictError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from questlog.db.models import UserProfile

logger = structlog.get_logger()


async def update_profile(
    db: AsyncSession,
    profile: UserProfile,
    username: str | None = None,
    bio: str | None = None,
) -> UserProfile:
    """
    Update the editable profile fields.

    Raises:
        ConflictError: If the username is already taken (case-insensitive).
    """
    if username is not None and username != profile.username:
        if await username_taken(db, username, exclude_user_id=profile.id):
            msg = "Username already taken"
            raise ConflictError(msg)
        profile.username = username

    if bio is not None:
        profile.bio = bio

    profile.updated_at = datetime.now(timezone.utc)
    await db.flush()
    logger.info("profile_updated", user_id=profile.id)
    return profile
