"""Client and server together: the store driving the real app in-process."""

from __future__ import annotations

import httpx
import pytest

from questlog.auth.jwt import create_access_token
from questlog.client import APIClient, ClientSettings, StaticSession, TaskAlreadyComplete, TaskStore
from questlog.main import create_app
from tests.conftest import TEST_USER_ID


@pytest.mark.asyncio
async def test_dashboard_flow(db_session):
    token = create_access_token(TEST_USER_ID, email="runner@example.com")
    settings = ClientSettings(base_url="http://test/api", retry_backoff_seconds=0)
    transport = httpx.ASGITransport(app=create_app())

    async with APIClient(StaticSession(token), settings=settings, transport=transport) as api:
        store = TaskStore(api)

        profile = await store.load_profile(email="runner@example.com")
        assert profile["username"] == "runner"
        assert profile["total_xp"] == 0

        label = await store.create_label("errands")
        await store.create_task("Buy groceries", priority="High", label_ids=[label["id"]])
        await store.create_task("Call plumber", priority="Low")

        assert [t["title"] for t in store.visible_tasks()] == ["Buy groceries", "Call plumber"]
        assert [t["title"] for t in store.visible_tasks([label["id"]])] == ["Buy groceries"]
        assert {a["slug"] for a in store.pop_new_achievements()} == {"first_label", "first_task_created"}

        high = store.visible_tasks()[0]
        result = await store.complete_task(high["id"])

        # 10 (label) + 10 (created) + 100 (High) + 25 (first completion)
        assert result["total_xp"] == 145
        assert result["current_level"] == 2
        assert store.profile["total_xp"] == 145
        assert store.profile["current_level"] == 2
        assert {a["slug"] for a in store.pop_new_achievements()} == {"first_task", "level_2"}
        assert [t["title"] for t in store.tasks] == ["Call plumber"]
        assert {a["achievements"]["slug"] for a in store.achievements} == {
            "first_label", "first_task_created", "first_task", "level_2",
        }

        with pytest.raises(TaskAlreadyComplete):
            await api.complete_task(high["id"])

        history = await api.task_history()
        assert [t["id"] for t in history["tasks"]] == [high["id"]]
