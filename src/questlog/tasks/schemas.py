"""Pydantic models for task endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from questlog.achievements.schemas import AchievementResponse
from questlog.db.models import Task

Priority = Literal["Low", "Medium", "High"]


class TaskCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    priority: Priority = "Medium"
    due_date: date | None = None
    label_ids: list[int] = []

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Title is required"
            raise ValueError(msg)
        return v


class LabelRef(BaseModel):
    id: int
    name: str


class TaskLabelResponse(BaseModel):
    label_id: int
    labels: LabelRef


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    priority: Priority
    due_date: date | None = None
    is_complete: bool
    xp_earned: int | None = None
    completed_at: datetime | None = None
    created_at: datetime | None = None
    task_labels: list[TaskLabelResponse] = []


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]


class TaskCreateResponse(TaskResponse):
    new_achievements: list[AchievementResponse] = []


class TaskCompleteResponse(BaseModel):
    task: TaskResponse
    xp_awarded: int
    bonus_xp: int
    total_xp: int
    previous_level: int
    current_level: int
    leveled_up: bool
    new_achievements: list[AchievementResponse] = []


def task_response(task: Task) -> TaskResponse:
    """Build a TaskResponse from a Task model (labels must be loaded)."""
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description,
        priority=task.priority,
        due_date=task.due_date,
        is_complete=task.is_complete,
        xp_earned=task.xp_earned,
        completed_at=task.completed_at,
        created_at=task.created_at,
        task_labels=[
            TaskLabelResponse(
                label_id=tl.label_id,
                labels=LabelRef(id=tl.label.id, name=tl.label.name),
            )
            for tl in task.task_labels
        ],
    )
