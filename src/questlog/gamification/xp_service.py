"""XP rules and idempotent XP grants."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.db.models import UserProfile, XPLedger
from questlog.exceptions import DomainValidationError
from questlog.gamification.level_thresholds import level_for_xp

logger = logging.getLogger(__name__)

XP_BY_PRIORITY: dict[str, int] = {
    "High": 100,
    "Medium": 50,
    "Low": 25,
}


def xp_for_priority(priority: str) -> int:
    """Fixed XP award for completing a task of the given priority."""
    try:
        return XP_BY_PRIORITY[priority]
    except KeyError:
        msg = f"Invalid priority: {priority!r}"
        raise DomainValidationError(msg) from None


async def has_ledger_entry(db: AsyncSession, idempotency_key: str) -> bool:
    result = await db.execute(
        select(XPLedger.id).where(XPLedger.idempotency_key == idempotency_key)
    )
    return result.scalar_one_or_none() is not None


async def grant_xp(
    db: AsyncSession,
    profile: UserProfile,
    amount: int,
    source: str,
    source_id: str,
    description: str,
    idempotency_key: str,
    now: datetime | None = None,
) -> bool:
    """Grant XP to a user. Returns True if granted, False if duplicate.

    After granting:
    1. Insert into xp_ledger
    2. Update user_profiles.total_xp
    3. Recompute current_level from total_xp (never lowered)
    """
    if amount < 0:
        msg = "XP grants must be non-negative"
        raise DomainValidationError(msg)

    if await has_ledger_entry(db, idempotency_key):
        logger.info("Duplicate XP grant ignored: %s", idempotency_key)
        return False

    now = now or datetime.now(timezone.utc)

    db.add(XPLedger(
        user_id=profile.id,
        amount=amount,
        source=source,
        source_id=source_id,
        description=description,
        idempotency_key=idempotency_key,
        created_at=now,
    ))

    profile.total_xp += amount
    profile.current_level = max(profile.current_level, level_for_xp(profile.total_xp))
    profile.updated_at = now

    await db.flush()
    return True
