"""Task completion reward pipeline.

Completing a task runs as one unit of work on the caller's session:

1. Claim the task with a conditional UPDATE (``is_complete = false`` guard),
   stamping ``xp_earned`` and ``completed_at``. Only one concurrent request
   can win the claim; the loser sees ``TaskAlreadyCompleteError``.
2. Grant the priority XP through the ledger (key ``task:<id>``).
3. Recompute the level (inside ``grant_xp``).
4. Evaluate achievements to a fixed point; bonuses feed back into the level.

Nothing is committed here. The caller commits on success and rolls back on
any exception, so a failure at any step leaves the task and profile untouched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.achievements.service import evaluate_achievements
from questlog.db.models import Achievement, Task, UserProfile
from questlog.exceptions import NotFoundError, TaskAlreadyCompleteError
from questlog.gamification.xp_service import grant_xp, xp_for_priority

logger = logging.getLogger(__name__)


@dataclass
class RewardResult:
    task: Task
    xp_awarded: int
    bonus_xp: int
    total_xp: int
    previous_level: int
    current_level: int
    new_achievements: list[Achievement] = field(default_factory=list)

    @property
    def leveled_up(self) -> bool:
        return self.current_level > self.previous_level


async def lock_profile(db: AsyncSession, user_id: str) -> UserProfile:
    """Load the profile row FOR UPDATE so concurrent grants for one user serialize."""
    result = await db.execute(
        select(UserProfile)
        .where(UserProfile.id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        msg = "Profile not found"
        raise NotFoundError(msg)
    return profile


async def complete_task(
    db: AsyncSession,
    user_id: str,
    task_id: int,
    now: datetime | None = None,
) -> RewardResult:
    """Complete a task and apply every reward it triggers."""
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.user_id == user_id)
    )
    task = result.scalar_one_or_none()
    if task is None:
        msg = "Task not found"
        raise NotFoundError(msg)
    if task.is_complete:
        raise TaskAlreadyCompleteError(task_id)

    now = now or datetime.now(timezone.utc)
    xp = xp_for_priority(task.priority)

    claim = await db.execute(
        update(Task)
        .where(
            Task.id == task_id,
            Task.user_id == user_id,
            Task.is_complete.is_(False),
        )
        .values(is_complete=True, xp_earned=xp, completed_at=now)
        .execution_options(synchronize_session=False)
    )
    if claim.rowcount != 1:
        raise TaskAlreadyCompleteError(task_id)
    await db.refresh(task)

    profile = await lock_profile(db, user_id)
    previous_level = profile.current_level

    granted = await grant_xp(
        db,
        profile,
        amount=xp,
        source="task",
        source_id=str(task.id),
        description=f'Completed task: "{task.title}"',
        idempotency_key=f"task:{task.id}",
        now=now,
    )
    if not granted:
        # Ledger already holds this task's XP: a completion was recorded before
        raise TaskAlreadyCompleteError(task_id)

    new_achievements = await evaluate_achievements(db, profile, now=now)
    bonus_xp = sum(a.xp_bonus for a in new_achievements)

    await db.flush()

    logger.info(
        "Task %s completed by %s: +%d XP (+%d bonus), level %d -> %d",
        task.id, user_id, xp, bonus_xp, previous_level, profile.current_level,
    )

    return RewardResult(
        task=task,
        xp_awarded=xp,
        bonus_xp=bonus_xp,
        total_xp=profile.total_xp,
        previous_level=previous_level,
        current_level=profile.current_level,
        new_achievements=new_achievements,
    )
