"""Task API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from questlog.achievements.schemas import achievements_payload
from questlog.auth.dependencies import get_current_user
from questlog.database import get_session
from questlog.db.models import UserProfile
from questlog.dependencies import get_redis_or_none
from questlog.gamification.events import publish_achievements, publish_reward_events
from questlog.gamification.reward_pipeline import complete_task
from questlog.tasks.schemas import (
    TaskCompleteResponse,
    TaskCreateRequest,
    TaskCreateResponse,
    TaskListResponse,
    task_response,
)
from questlog.tasks.service import create_task, list_history, list_tasks

router = APIRouter(prefix="/tasks", tags=["Tasks"])


@router.get("", response_model=TaskListResponse)
async def get_tasks(
    is_complete: bool | None = Query(None),
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """List the caller's tasks, optionally filtered by completion state."""
    tasks = await list_tasks(db, user.id, is_complete=is_complete)
    return TaskListResponse(tasks=[task_response(t) for t in tasks])


@router.get("/history", response_model=TaskListResponse)
async def get_history(
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Completed tasks only."""
    tasks = await list_history(db, user.id)
    return TaskListResponse(tasks=[task_response(t) for t in tasks])


@router.post("", response_model=TaskCreateResponse, status_code=201)
async def post_task(
    body: TaskCreateRequest,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_or_none),
):
    """Create a task. May unlock creation achievements."""
    try:
        task, new_achievements = await create_task(
            db,
            user.id,
            title=body.title,
            description=body.description,
            priority=body.priority,
            due_date=body.due_date,
            label_ids=body.label_ids,
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await publish_achievements(redis, user.id, new_achievements)
    return TaskCreateResponse(
        **task_response(task).model_dump(),
        new_achievements=achievements_payload(new_achievements),
    )


@router.post("/{task_id}/complete", response_model=TaskCompleteResponse)
async def post_complete_task(
    task_id: int,
    user: UserProfile = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_or_none),
):
    """Complete a task: award XP, recompute level, unlock achievements. All or nothing."""
    try:
        result = await complete_task(db, user.id, task_id)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await publish_reward_events(redis, user.id, result)
    return TaskCompleteResponse(
        task=task_response(result.task),
        xp_awarded=result.xp_awarded,
        bonus_xp=result.bonus_xp,
        total_xp=result.total_xp,
        previous_level=result.previous_level,
        current_level=result.current_level,
        leveled_up=result.leveled_up,
        new_achievements=achievements_payload(result.new_achievements),
    )
