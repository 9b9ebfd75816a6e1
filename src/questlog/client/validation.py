"""Local validation and ordering of task data."""

from __future__ import annotations

from datetime import date
from typing import Any

from questlog.client.errors import TaskValidationError

PRIORITIES = ("Low", "Medium", "High")
PRIORITY_ORDER = {"High": 3, "Medium": 2, "Low": 1}
MAX_TITLE_LENGTH = 200


def build_task_payload(
    title: str,
    description: str | None = None,
    priority: str = "Medium",
    due_date: date | str | None = None,
    label_ids: list[int] | None = None,
) -> dict[str, Any]:
    """Validate task input and return the request body for POST /tasks."""
    title = (title or "").strip()
    if not title:
        msg = "Title is required"
        raise TaskValidationError(msg)
    if len(title) > MAX_TITLE_LENGTH:
        msg = f"Title must be at most {MAX_TITLE_LENGTH} characters"
        raise TaskValidationError(msg)
    if priority not in PRIORITIES:
        msg = f"Priority must be one of {', '.join(PRIORITIES)}"
        raise TaskValidationError(msg)

    if isinstance(due_date, date):
        due_date = due_date.isoformat()
    elif due_date:
        try:
            date.fromisoformat(due_date)
        except ValueError:
            msg = f"Invalid due date: {due_date!r}"
            raise TaskValidationError(msg) from None
    else:
        due_date = None

    return {
        "title": title,
        "description": description or None,
        "priority": priority,
        "due_date": due_date,
        "label_ids": list(label_ids or []),
    }


def task_label_ids(task: dict[str, Any]) -> list[int]:
    return [tl["label_id"] for tl in task.get("task_labels") or []]


def filter_by_labels(tasks: list[dict[str, Any]], label_ids: list[int] | None) -> list[dict[str, Any]]:
    """Tasks carrying any of the selected labels. No selection keeps everything."""
    if not label_ids:
        return list(tasks)
    selected = set(label_ids)
    return [t for t in tasks if selected.intersection(task_label_ids(t))]


def sort_by_priority(tasks: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """High first, then Medium, then Low. Stable within a priority."""
    return sorted(tasks, key=lambda t: PRIORITY_ORDER.get(t.get("priority", ""), 0), reverse=True)
