"""Local task validation and ordering tests."""

from __future__ import annotations

from datetime import date

import pytest

from questlog.client.errors import TaskValidationError
from questlog.client.validation import build_task_payload, filter_by_labels, sort_by_priority


class TestBuildTaskPayload:
    def test_normalizes(self):
        payload = build_task_payload("  Plan trip ", description="", priority="High", due_date=date(2026, 12, 1))
        assert payload == {
            "title": "Plan trip",
            "description": None,
            "priority": "High",
            "due_date": "2026-12-01",
            "label_ids": [],
        }

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"title": ""},
            {"title": "   "},
            {"title": "x" * 201},
            {"title": "ok", "priority": "urgent"},
            {"title": "ok", "due_date": "31/12/2026"},
        ],
        ids=["empty", "blank", "too_long", "bad_priority", "bad_date"],
    )
    def test_rejects(self, kwargs):
        with pytest.raises(TaskValidationError):
            build_task_payload(**kwargs)

    def test_title_at_max_length(self):
        assert len(build_task_payload("x" * 200)["title"]) == 200


def _task(task_id: int, priority: str, labels: tuple[int, ...] = ()) -> dict:
    return {"id": task_id, "priority": priority, "task_labels": [{"label_id": i} for i in labels]}


class TestOrdering:
    def test_high_first_stable(self):
        tasks = [_task(1, "Low"), _task(2, "High"), _task(3, "Medium"), _task(4, "High")]
        assert [t["id"] for t in sort_by_priority(tasks)] == [2, 4, 3, 1]

    def test_filter_any_label(self):
        tasks = [_task(1, "Low", [10]), _task(2, "Low", [20]), _task(3, "Low")]
        assert [t["id"] for t in filter_by_labels(tasks, [10, 20])] == [1, 2]

    def test_no_filter_keeps_all(self):
        tasks = [_task(1, "Low"), _task(2, "High")]
        assert filter_by_labels(tasks, []) == tasks
