"""Client test helpers: an APIClient wired to an in-process handler."""

from __future__ import annotations

from collections.abc import Callable

import httpx

from questlog.client import APIClient, ClientSettings, StaticSession


def make_api(handler: Callable, token: str | None = "test-token", **overrides) -> APIClient:
    settings = ClientSettings(
        base_url="http://test/api",
        retry_backoff_seconds=0,
        **overrides,
    )
    return APIClient(StaticSession(token), settings=settings, transport=httpx.MockTransport(handler))


def json_response(status_code: int = 200, data: dict | None = None) -> httpx.Response:
    return httpx.Response(status_code, json=data if data is not None else {})
