"""Task creation and listing."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from questlog.achievements.service import evaluate_achievements
from questlog.db.models import Achievement, Label, Task, TaskLabel
from questlog.exceptions import DomainValidationError
from questlog.gamification.reward_pipeline import lock_profile
from questlog.gamification.xp_service import XP_BY_PRIORITY

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_tasks(
    db: AsyncSession,
    user_id: str,
    is_complete: bool | None = None,
) -> list[Task]:
    """List the user's tasks, optionally filtered by completion state, newest first."""
    query = select(Task).where(Task.user_id == user_id)
    if is_complete is not None:
        query = query.where(Task.is_complete.is_(is_complete))
    result = await db.execute(query.order_by(Task.created_at.desc(), Task.id.desc()))
    return list(result.scalars())


async def list_history(db: AsyncSession, user_id: str) -> list[Task]:
    """Completed tasks, most recently completed first."""
    result = await db.execute(
        select(Task)
        .where(Task.user_id == user_id, Task.is_complete.is_(True))
        .order_by(Task.completed_at.desc(), Task.id.desc())
    )
    return list(result.scalars())


async def _resolve_labels(db: AsyncSession, user_id: str, label_ids: list[int]) -> list[Label]:
    wanted = list(dict.fromkeys(label_ids))
    if not wanted:
        return []
    result = await db.execute(
        select(Label).where(Label.user_id == user_id, Label.id.in_(wanted))
    )
    labels = {label.id: label for label in result.scalars()}
    missing = [label_id for label_id in wanted if label_id not in labels]
    if missing:
        msg = f"Unknown label ids: {missing}"
        raise DomainValidationError(msg)
    return [labels[label_id] for label_id in wanted]


async def create_task(
    db: AsyncSession,
    user_id: str,
    title: str,
    description: str | None = None,
    priority: str = "Medium",
    due_date: date | None = None,
    label_ids: list[int] | None = None,
) -> tuple[Task, list[Achievement]]:
    """
    Create a task and evaluate creation-driven achievements.

    Returns:
        Tuple of (task, newly earned achievements).

    Raises:
        DomainValidationError: On an invalid priority or label ids the user does not own.
    """
    if priority not in XP_BY_PRIORITY:
        msg = f"Invalid priority: {priority!r}"
        raise DomainValidationError(msg)

    labels = await _resolve_labels(db, user_id, label_ids or [])
    now = datetime.now(timezone.utc)

    task = Task(
        user_id=user_id,
        title=title,
        description=description,
        priority=priority,
        due_date=due_date,
        is_complete=False,
        xp_earned=None,
        completed_at=None,
        created_at=now,
        task_labels=[TaskLabel(label=label) for label in labels],
    )
    db.add(task)
    await db.flush()

    profile = await lock_profile(db, user_id)
    new_achievements = await evaluate_achievements(db, profile, now=now)

    logger.info("task_created", user_id=user_id, task_id=task.id, priority=priority)
    return task, new_achievements
