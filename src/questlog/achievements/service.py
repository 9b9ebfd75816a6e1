"""Achievement predicates and idempotent, fixed-point awarding."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.db.models import Achievement, Label, Task, UserAchievement, UserProfile
from questlog.gamification.xp_service import grant_xp

logger = logging.getLogger(__name__)


async def load_catalog(db: AsyncSession) -> list[Achievement]:
    result = await db.execute(select(Achievement).order_by(Achievement.sort_order, Achievement.id))
    return list(result.scalars())


async def earned_achievement_ids(db: AsyncSession, user_id: str) -> set[int]:
    result = await db.execute(
        select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
    )
    return set(result.scalars())


async def has_achievement(db: AsyncSession, user_id: str, achievement_id: int) -> bool:
    """Check if user already earned a specific achievement."""
    result = await db.execute(
        select(UserAchievement.id).where(
            UserAchievement.user_id == user_id,
            UserAchievement.achievement_id == achievement_id,
        )
    )
    return result.scalar_one_or_none() is not None


async def collect_counters(db: AsyncSession, profile: UserProfile) -> dict[str, int]:
    """Cumulative counters that achievement predicates are evaluated against."""
    tasks_created = await db.scalar(
        select(func.count()).select_from(Task).where(Task.user_id == profile.id)
    )
    tasks_completed = await db.scalar(
        select(func.count()).select_from(Task).where(
            Task.user_id == profile.id, Task.is_complete.is_(True)
        )
    )
    high_priority_completed = await db.scalar(
        select(func.count()).select_from(Task).where(
            Task.user_id == profile.id,
            Task.is_complete.is_(True),
            Task.priority == "High",
        )
    )
    labels_created = await db.scalar(
        select(func.count()).select_from(Label).where(Label.user_id == profile.id)
    )
    return {
        "tasks_created": tasks_created or 0,
        "tasks_completed": tasks_completed or 0,
        "high_priority_completed": high_priority_completed or 0,
        "labels_created": labels_created or 0,
        "level_reached": profile.current_level,
        "total_xp": profile.total_xp,
    }


def is_satisfied(achievement: Achievement, counters: dict[str, int]) -> bool:
    return counters.get(achievement.trigger_type, 0) >= achievement.threshold


async def award_achievement(
    db: AsyncSession,
    profile: UserProfile,
    achievement: Achievement,
    now: datetime | None = None,
) -> bool:
    """Award an achievement to a user.

    Returns True if awarded, False if already earned. The XP bonus goes
    through the ledger under its own key, separate from task XP.
    """
    if await has_achievement(db, profile.id, achievement.id):
        return False

    now = now or datetime.now(timezone.utc)
    db.add(UserAchievement(
        user_id=profile.id,
        achievement_id=achievement.id,
        earned_at=now,
    ))
    await db.flush()

    if achievement.xp_bonus > 0:
        await grant_xp(
            db,
            profile,
            amount=achievement.xp_bonus,
            source="achievement",
            source_id=achievement.slug,
            description=f'Earned achievement: "{achievement.name}"',
            idempotency_key=f"achievement:{achievement.slug}:{profile.id}",
            now=now,
        )

    logger.info("Achievement %s awarded to %s", achievement.slug, profile.id)
    return True


async def evaluate_achievements(
    db: AsyncSession,
    profile: UserProfile,
    now: datetime | None = None,
    catalog: Sequence[Achievement] | None = None,
) -> list[Achievement]:
    """Award every satisfied, unearned achievement until nothing new unlocks.

    Bonus XP can raise the level or total XP, which can satisfy further
    predicates, so passes repeat until one awards nothing. Each pass earns at
    least one catalog entry, which bounds the loop by the catalog size.
    """
    if catalog is None:
        catalog = await load_catalog(db)
    earned = await earned_achievement_ids(db, profile.id)
    counters = await collect_counters(db, profile)
    awarded: list[Achievement] = []

    while True:
        counters["level_reached"] = profile.current_level
        counters["total_xp"] = profile.total_xp
        pending = [a for a in catalog if a.id not in earned and is_satisfied(a, counters)]
        if not pending:
            break
        for achievement in pending:
            if await award_achievement(db, profile, achievement, now=now):
                awarded.append(achievement)
            earned.add(achievement.id)

    return awarded


async def list_catalog_for_user(db: AsyncSession, user_id: str) -> list[dict]:
    """Full catalog with each entry's earned flag and timestamp for this user."""
    catalog = await load_catalog(db)
    result = await db.execute(
        select(UserAchievement).where(UserAchievement.user_id == user_id)
    )
    earned_at = {ua.achievement_id: ua.earned_at for ua in result.scalars()}
    return [
        {
            "id": a.id,
            "slug": a.slug,
            "name": a.name,
            "description": a.description,
            "xp_bonus": a.xp_bonus,
            "earned": a.id in earned_at,
            "earned_at": earned_at.get(a.id),
        }
        for a in catalog
    ]


async def list_earned(db: AsyncSession, user_id: str) -> list[UserAchievement]:
    result = await db.execute(
        select(UserAchievement)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.earned_at.desc(), UserAchievement.id.desc())
    )
    return list(result.scalars())
