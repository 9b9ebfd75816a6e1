"""APIClient tests. All networking goes through httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from questlog.client import (
    APIError,
    AuthenticationRequired,
    NetworkError,
    ProfileNotFound,
    TaskAlreadyComplete,
    TaskValidationError,
)
from tests.client.conftest import json_response, make_api


class TestHeaders:
    @pytest.mark.asyncio
    async def test_bearer_token_attached(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"tasks": []})

        async with make_api(handler) as api:
            await api.list_tasks()

        assert seen[0].headers["Authorization"] == "Bearer test-token"
        assert seen[0].url.path == "/api/tasks"

    @pytest.mark.asyncio
    async def test_no_session_sends_nothing(self):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response()

        api = make_api(handler, token=None)
        with pytest.raises(AuthenticationRequired):
            await api.list_tasks()
        assert calls == []


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_401(self):
        api = make_api(lambda r: json_response(401, {"detail": "Token has expired"}))
        with pytest.raises(AuthenticationRequired, match="expired"):
            await api.get_profile()

    @pytest.mark.asyncio
    async def test_missing_profile(self):
        api = make_api(lambda r: json_response(404, {"detail": "Profile not found"}))
        with pytest.raises(ProfileNotFound):
            await api.get_profile()

    @pytest.mark.asyncio
    async def test_other_404_is_api_error(self):
        api = make_api(lambda r: json_response(404, {"detail": "Task not found"}))
        with pytest.raises(APIError) as exc_info:
            await api.complete_task(7)
        assert not isinstance(exc_info.value, ProfileNotFound)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_409_on_completion(self):
        api = make_api(lambda r: json_response(409, {"detail": "Task is already complete", "task_id": 7}))
        with pytest.raises(TaskAlreadyComplete) as exc_info:
            await api.complete_task(7)
        assert exc_info.value.task_id == 7
        assert exc_info.value.status_code == 409

    @pytest.mark.asyncio
    async def test_4xx_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(400, {"detail": "Unknown label ids: [9]"})

        api = make_api(handler, retries=3)
        with pytest.raises(APIError):
            await api.list_labels()
        assert len(calls) == 1


class TestRetries:
    @pytest.mark.asyncio
    async def test_5xx_retried_then_succeeds(self):
        responses = iter([json_response(503), json_response(200, {"labels": []})])
        api = make_api(lambda r: next(responses), retries=2)
        assert await api.list_labels() == {"labels": []}

    @pytest.mark.asyncio
    async def test_transport_error_exhausts_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        api = make_api(handler, retries=2)
        with pytest.raises(NetworkError):
            await api.list_tasks()
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_completion_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(502)

        api = make_api(handler, retries=3)
        with pytest.raises(NetworkError):
            await api.complete_task(1)
        assert len(calls) == 1


class TestRequests:
    @pytest.mark.asyncio
    async def test_list_tasks_filter_param(self):
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"tasks": []})

        api = make_api(handler)
        await api.list_tasks(is_complete=False)
        assert seen[0].url.params["is_complete"] == "false"

    @pytest.mark.asyncio
    async def test_invalid_task_not_sent(self):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(201)

        api = make_api(handler)
        with pytest.raises(TaskValidationError):
            await api.create_task("   ")
        assert calls == []

    @pytest.mark.asyncio
    async def test_update_profile_sends_only_given_fields(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return json_response(200, {"user": {}})

        api = make_api(handler)
        await api.update_profile(bio="hi")
        assert bodies == [{"bio": "hi"}]


class TestMutationsNotRetried:
    @pytest.mark.asyncio
    async def test_lost_create_response_sent_once(self):
        """A timed-out POST may have been applied; it is surfaced, never resent."""
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("response lost", request=request)
            return json_response(201, {"id": 1, "title": "Plan trip"})

        api = make_api(handler, retries=3)
        with pytest.raises(NetworkError):
            await api.create_task("Plan trip")
        assert len(calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("call", ["create_label", "create_profile", "update_profile"])
    async def test_other_mutations_sent_once(self, call):
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(503)

        api = make_api(handler, retries=3)
        with pytest.raises(NetworkError):
            if call == "create_label":
                await api.create_label("home")
            elif call == "create_profile":
                await api.create_profile(username="hero")
            else:
                await api.update_profile(bio="hi")
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_explicit_retry_still_honored(self):
        responses = iter([json_response(503), json_response(201, {"id": 2})])
        api = make_api(lambda r: next(responses))
        response = await api.request("POST", "/labels", json={"name": "work"}, retry=1)
        assert response.json() == {"id": 2}
