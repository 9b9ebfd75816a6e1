"""HTTP client for the Questlog API."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Any, Optional, Protocol

import httpx

from questlog.client.config import ClientSettings
from questlog.client.errors import (
    APIError,
    AuthenticationRequired,
    NetworkError,
    ProfileNotFound,
    TaskAlreadyComplete,
)
from questlog.client.validation import build_task_payload

logger = logging.getLogger(__name__)


class SessionProvider(Protocol):
    """Source of the identity provider's access token."""

    async def get_access_token(self) -> Optional[str]: ...


class StaticSession:
    """Session holding a fixed token; ``None`` means logged out."""

    def __init__(self, token: Optional[str] = None):
        self.token = token

    async def get_access_token(self) -> Optional[str]:
        return self.token


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


class APIClient:
    """Async HTTP client that attaches the session's bearer token to every call."""

    def __init__(
        self,
        session: SessionProvider,
        settings: Optional[ClientSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.session = session
        self.settings = settings or ClientSettings()
        self.base_url = self.settings.base_url.rstrip("/")
        self.timeout = self.settings.timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers with authentication. No session means no request."""
        token = await self.session.get_access_token()
        if not token:
            raise AuthenticationRequired("No active session")
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, Any]] = None,
        retry: Optional[int] = None,
    ) -> httpx.Response:
        """Make an HTTP request, retrying transport failures and 5xx responses.

        Only GET is retried by default. A POST or PUT whose response was lost
        may already have been applied, so a retry could create a duplicate.

        Raises:
            AuthenticationRequired: No session, or the server answered 401.
            ProfileNotFound: 404 for a missing profile.
            APIError: Any other 4xx.
            NetworkError: Transport failure or 5xx after all retries.
        """
        if retry is None:
            retry = self.settings.retries if method == "GET" else 0

        headers = await self._get_headers()
        client = self._get_client()
        url = path if path.startswith("/") else f"/{path}"

        last_exception: Optional[Exception] = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                    headers=headers,
                )
            except httpx.RequestError as e:
                logger.warning("%s %s failed (attempt %d): %s", method, url, attempt + 1, e)
                last_exception = e
            else:
                if response.status_code < 400:
                    return response
                if response.status_code == 401:
                    raise AuthenticationRequired(_detail(response))
                if 400 <= response.status_code < 500:
                    detail = _detail(response)
                    if response.status_code == 404 and detail == "Profile not found":
                        raise ProfileNotFound(404, detail)
                    raise APIError(response.status_code, detail)
                logger.warning("%s %s returned %d (attempt %d)", method, url, response.status_code, attempt + 1)
                last_exception = APIError(response.status_code, _detail(response))

            if attempt < retry:
                await asyncio.sleep(self.settings.retry_backoff_seconds * 2**attempt)

        logger.error("%s %s failed after %d attempts", method, url, retry + 1)
        raise NetworkError(f"{method} {url} failed: {last_exception}") from last_exception

    async def get(self, path: str, *, params: Optional[dict[str, Any]] = None) -> httpx.Response:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Optional[dict[str, Any]] = None) -> httpx.Response:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, *, json: Optional[dict[str, Any]] = None) -> httpx.Response:
        return await self.request("PUT", path, json=json)

    # -- Tasks ---------------------------------------------------------------

    async def list_tasks(self, *, is_complete: Optional[bool] = None) -> dict:
        """List tasks, optionally filtered by completion state."""
        params: dict[str, Any] = {}
        if is_complete is not None:
            params["is_complete"] = "true" if is_complete else "false"
        response = await self.get("/tasks", params=params)
        return response.json()

    async def task_history(self) -> dict:
        """Completed tasks."""
        response = await self.get("/tasks/history")
        return response.json()

    async def create_task(
        self,
        title: str,
        *,
        description: Optional[str] = None,
        priority: str = "Medium",
        due_date: date | str | None = None,
        label_ids: Optional[list[int]] = None,
    ) -> dict:
        """Create a task. Input is validated before anything is sent."""
        payload = build_task_payload(
            title,
            description=description,
            priority=priority,
            due_date=due_date,
            label_ids=label_ids,
        )
        response = await self.post("/tasks", json=payload)
        return response.json()

    async def complete_task(self, task_id: int) -> dict:
        """Complete a task. A repeat completion raises TaskAlreadyComplete."""
        try:
            response = await self.post(f"/tasks/{task_id}/complete")
        except APIError as e:
            if e.status_code == 409:
                raise TaskAlreadyComplete(task_id, e.detail) from e
            raise
        return response.json()

    # -- Achievements & labels ----------------------------------------------

    async def list_achievements(self) -> dict:
        """Full catalog with earned flags."""
        response = await self.get("/achievements")
        return response.json()

    async def earned_achievements(self) -> dict:
        response = await self.get("/achievements/earned")
        return response.json()

    async def list_labels(self) -> dict:
        response = await self.get("/labels")
        return response.json()

    async def create_label(self, name: str) -> dict:
        response = await self.post("/labels", json={"name": name})
        return response.json()

    # -- Profile -------------------------------------------------------------

    async def get_profile(self) -> dict:
        response = await self.get("/profile")
        return response.json()

    async def update_profile(self, *, username: Optional[str] = None, bio: Optional[str] = None) -> dict:
        """Update username and/or bio. XP and level are not editable."""
        data: dict[str, Any] = {}
        if username is not None:
            data["username"] = username
        if bio is not None:
            data["bio"] = bio
        response = await self.put("/profile", json=data)
        return response.json()

    async def create_profile(self, *, username: Optional[str] = None, email: Optional[str] = None) -> dict:
        """Create the profile when the identity provider's trigger has not done it yet."""
        data: dict[str, Any] = {}
        if username:
            data["username"] = username
        if email:
            data["email"] = email
        response = await self.post("/auth/create-profile", json=data)
        return response.json()
