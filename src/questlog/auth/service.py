"""Profile lookup and creation for authenticated identities."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import func, select

from questlog.db.models import UserProfile
from questlog.exceptions import ConflictError, DomainValidationError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
_USERNAME_RE = re.compile(rf"^[A-Za-z0-9_.-]{{{USERNAME_MIN_LENGTH},{USERNAME_MAX_LENGTH}}}$")
_USERNAME_DISALLOWED = re.compile(r"[^A-Za-z0-9_.-]")


def username_from_email(email: str) -> str:
    """Derive a username from the email's local part: allowed characters only, truncated."""
    local = email.split("@", 1)[0]
    return _USERNAME_DISALLOWED.sub("", local)[:USERNAME_MAX_LENGTH]


async def get_profile_by_id(db: AsyncSession, user_id: str) -> UserProfile | None:
    """Fetch a profile by the identity provider's user id."""
    result = await db.execute(select(UserProfile).where(UserProfile.id == user_id))
    return result.scalar_one_or_none()


async def username_taken(db: AsyncSession, username: str, exclude_user_id: str | None = None) -> bool:
    """Case-insensitive username uniqueness check."""
    query = select(UserProfile.id).where(func.lower(UserProfile.username) == username.lower())
    if exclude_user_id is not None:
        query = query.where(UserProfile.id != exclude_user_id)
    result = await db.execute(query)
    return result.first() is not None


async def create_profile(
    db: AsyncSession,
    user_id: str,
    username: str | None,
    email: str | None,
) -> tuple[UserProfile, bool]:
    """
    Create the profile for a user if it does not exist yet.

    Returns:
        Tuple of (profile, created). An existing profile is returned as is,
        which makes the fallback safe to retry.

    Raises:
        DomainValidationError: If no valid username can be determined.
        ConflictError: If the username belongs to another user.
    """
    existing = await get_profile_by_id(db, user_id)
    if existing is not None:
        return existing, False

    if not username and email:
        username = username_from_email(email)
    if not username:
        msg = "A username is required to create a profile"
        raise DomainValidationError(msg)
    if not _USERNAME_RE.fullmatch(username):
        msg = (
            f"Username must be {USERNAME_MIN_LENGTH}-{USERNAME_MAX_LENGTH} characters"
            " of letters, digits, '_', '.' or '-'"
        )
        raise DomainValidationError(msg)

    if await username_taken(db, username):
        msg = "Username already taken"
        raise ConflictError(msg)

    profile = UserProfile(
        id=user_id,
        username=username,
        email=email,
        current_level=1,
        total_xp=0,
        role="user",
        created_at=datetime.now(timezone.utc),
    )
    db.add(profile)
    await db.flush()

    logger.info("profile_created", user_id=user_id, username=username)
    return profile, True
