"""Client-side task state with optimistic completion and server reconciliation."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any, Optional

from questlog.client.api import APIClient
from questlog.client.errors import (
    AuthenticationRequired,
    ClientError,
    ProfileNotFound,
    TaskAlreadyComplete,
)
from questlog.client.validation import filter_by_labels, sort_by_priority

logger = logging.getLogger(__name__)


class TaskStore:
    """Local view of the dashboard: open tasks, earned achievements, labels, profile.

    Completion of one task is serialized through ``completing``: a second
    request for a task that is in flight is a no-op. Different tasks can
    complete concurrently.
    """

    def __init__(self, api: APIClient, loading_timeout: Optional[float] = None):
        self.api = api
        self.loading_timeout = (
            loading_timeout if loading_timeout is not None else api.settings.loading_timeout_seconds
        )
        self.tasks: list[dict[str, Any]] = []
        self.achievements: list[dict[str, Any]] = []
        self.labels: list[dict[str, Any]] = []
        self.profile: Optional[dict[str, Any]] = None
        self.completing: set[int] = set()
        self.new_achievements: list[dict[str, Any]] = []
        self.loading = False
        self.authenticated = True

    # -- Loading -------------------------------------------------------------

    async def _load(self, attr: str, call: Awaitable[dict], key: str) -> None:
        """Apply one fetch as soon as it lands; failures leave the slot empty."""
        try:
            data = await call
        except AuthenticationRequired:
            self.authenticated = False
            setattr(self, attr, [])
            return
        except ClientError as e:
            logger.error("Error fetching %s: %s", key, e)
            setattr(self, attr, [])
            return
        setattr(self, attr, data.get(key) or [])

    async def refresh(self) -> None:
        """Fetch tasks, earned achievements and labels concurrently.

        Each result is applied independently of the others. The whole refresh
        is bounded by ``loading_timeout``; on timeout loading stops and
        whatever already arrived stays applied.

        Raises:
            AuthenticationRequired: When the session is gone, after applying
                whatever else succeeded.
        """
        self.loading = True
        self.authenticated = True
        try:
            await asyncio.wait_for(
                asyncio.gather(
                    self._load("tasks", self.api.list_tasks(is_complete=False), "tasks"),
                    self._load("achievements", self.api.earned_achievements(), "achievements"),
                    self._load("labels", self.api.list_labels(), "labels"),
                ),
                timeout=self.loading_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Dashboard loading timed out after %.1fs", self.loading_timeout)
        finally:
            self.loading = False

        if not self.authenticated:
            raise AuthenticationRequired("Session expired")

    async def load_profile(self, *, username: Optional[str] = None, email: Optional[str] = None) -> dict[str, Any]:
        """Fetch the profile, creating it when provider-side creation has not propagated."""
        try:
            data = await self.api.get_profile()
        except ProfileNotFound:
            logger.info("Profile missing, creating it")
            data = await self.api.create_profile(username=username, email=email)
        self.profile = data["user"]
        return self.profile

    async def update_profile(self, *, username: Optional[str] = None, bio: Optional[str] = None) -> dict[str, Any]:
        data = await self.api.update_profile(username=username, bio=bio)
        self.profile = data["user"]
        return self.profile

    # -- Mutations -----------------------------------------------------------

    def _find_task(self, task_id: int) -> Optional[dict[str, Any]]:
        return next((t for t in self.tasks if t.get("id") == task_id), None)

    def _set_complete_flag(self, task_id: int, value: bool) -> None:
        task = self._find_task(task_id)
        if task is not None:
            task["is_complete"] = value

    def _reconcile(self, result: dict[str, Any]) -> None:
        """Overwrite optimistic guesses with the server's authoritative result."""
        server_task = result.get("task") or {}
        for i, task in enumerate(self.tasks):
            if task.get("id") == server_task.get("id"):
                self.tasks[i] = server_task
                break

        if self.profile is not None:
            self.profile["total_xp"] = result["total_xp"]
            self.profile["current_level"] = result["current_level"]

        self.new_achievements.extend(result.get("new_achievements") or [])

    async def complete_task(self, task_id: int) -> Optional[dict[str, Any]]:
        """Complete a task optimistically.

        Returns the server's reward result, or None when the call was a
        no-op (already in flight, or the server had already completed it).
        On any other failure, cancellation included, the optimistic flag is
        rolled back and the error re-raised. The in-flight entry is always
        cleared.
        """
        if task_id in self.completing:
            logger.debug("Task %s already being completed, ignoring duplicate", task_id)
            return None

        self.completing.add(task_id)
        task = self._find_task(task_id)
        previous = bool(task.get("is_complete")) if task is not None else False
        self._set_complete_flag(task_id, True)

        try:
            result = await self.api.complete_task(task_id)
        except TaskAlreadyComplete:
            # Another request won the completion; nothing more to award here
            logger.info("Task %s was already complete on the server", task_id)
            self.completing.discard(task_id)
            await self.refresh()
            return None
        except BaseException:
            # Cancellation included
            self._set_complete_flag(task_id, previous)
            raise
        finally:
            self.completing.discard(task_id)

        self._reconcile(result)
        for achievement in result.get("new_achievements") or []:
            logger.info("Achievement earned: %s", achievement.get("name"))
        await self.refresh()
        return result

    async def create_task(self, title: str, **fields: Any) -> dict[str, Any]:
        """Validate and create a task, then refresh the dashboard."""
        created = await self.api.create_task(title, **fields)
        self.new_achievements.extend(created.get("new_achievements") or [])
        await self.refresh()
        return created

    async def create_label(self, name: str) -> dict[str, Any]:
        created = await self.api.create_label(name)
        self.new_achievements.extend(created.get("new_achievements") or [])
        await self.refresh()
        return created

    def pop_new_achievements(self) -> list[dict[str, Any]]:
        """Achievements earned since the last call, for one-time notifications."""
        earned, self.new_achievements = self.new_achievements, []
        return earned

    # -- Views ---------------------------------------------------------------

    def visible_tasks(self, label_ids: Optional[list[int]] = None) -> list[dict[str, Any]]:
        """Open tasks filtered by any of ``label_ids``, highest priority first."""
        return sort_by_priority(filter_by_labels(self.tasks, label_ids))
