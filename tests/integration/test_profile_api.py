"""Profile and profile-creation endpoint tests."""

from __future__ import annotations

import pytest

from questlog.auth.jwt import create_access_token
from tests.conftest import OTHER_USER_ID, TEST_USER_ID, auth_headers, make_profile


class TestGetProfile:
    @pytest.mark.asyncio
    async def test_get_profile(self, authed_client):
        response = await authed_client.get("/api/profile")
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["id"] == TEST_USER_ID
        assert user["username"] == "hero"
        assert user["total_xp"] == 0
        assert user["current_level"] == 1
        assert user["level_title"] == "Novice"
        assert user["xp_into_level"] == 0
        assert user["xp_for_level"] == 100

    @pytest.mark.asyncio
    async def test_unauthenticated(self, client):
        response = await client.get("/api/profile")
        assert response.status_code == 401


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_update_username_and_bio(self, authed_client):
        response = await authed_client.put("/api/profile", json={"username": "hero_2", "bio": "Finishing things"})
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["username"] == "hero_2"
        assert user["bio"] == "Finishing things"

    @pytest.mark.asyncio
    async def test_xp_not_client_settable(self, authed_client):
        response = await authed_client.put("/api/profile", json={"total_xp": 99999, "current_level": 20})
        assert response.status_code == 200
        user = response.json()["user"]
        assert user["total_xp"] == 0
        assert user["current_level"] == 1

    @pytest.mark.asyncio
    async def test_username_taken(self, authed_client, db_session):
        await make_profile(db_session, user_id=OTHER_USER_ID, username="rival")
        response = await authed_client.put("/api/profile", json={"username": "RIVAL"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_invalid_username(self, authed_client):
        response = await authed_client.put("/api/profile", json={"username": "a"})
        assert response.status_code == 422


class TestCreateProfile:
    @pytest.mark.asyncio
    async def test_creates_from_email(self, client, db_session):
        response = await client.post("/api/auth/create-profile", json={}, headers=auth_headers(email="quester@example.com"))
        assert response.status_code == 201
        user = response.json()["user"]
        assert user["id"] == TEST_USER_ID
        assert user["username"] == "quester"
        assert user["total_xp"] == 0
        assert user["current_level"] == 1

        follow_up = await client.get("/api/profile", headers=auth_headers())
        assert follow_up.status_code == 200

    @pytest.mark.asyncio
    async def test_explicit_username(self, client, db_session):
        response = await client.post(
            "/api/auth/create-profile", json={"username": "chosen_one"}, headers=auth_headers()
        )
        assert response.status_code == 201
        assert response.json()["user"]["username"] == "chosen_one"

    @pytest.mark.asyncio
    async def test_existing_profile_returned(self, authed_client):
        response = await authed_client.post("/api/auth/create-profile", json={"username": "someone_else"})
        assert response.status_code == 200
        assert response.json()["user"]["username"] == "hero"

    @pytest.mark.asyncio
    async def test_requires_token(self, client, db_session):
        response = await client.post("/api/auth/create-profile", json={})
        assert response.status_code == 401


class TestCreateProfileUsernameRules:
    @pytest.mark.asyncio
    async def test_email_local_part_cleaned(self, client, db_session):
        response = await client.post(
            "/api/auth/create-profile", json={}, headers=auth_headers(email="first.last+todo@example.com")
        )
        assert response.status_code == 201
        assert response.json()["user"]["username"] == "first.lasttodo"

    @pytest.mark.asyncio
    async def test_invalid_token_username_rejected(self, client, db_session):
        token = create_access_token(TEST_USER_ID, email=None, username="not valid!")
        response = await client.post(
            "/api/auth/create-profile", json={}, headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 400
        assert "Username must be" in response.json()["detail"]
