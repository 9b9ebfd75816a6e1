"""Label service tests: case-insensitive uniqueness down to the database."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from questlog.db.models import Label
from questlog.exceptions import ConflictError
from questlog.labels import service as label_service
from questlog.labels.service import create_label
from tests.conftest import OTHER_USER_ID, TEST_USER_ID, make_profile


async def _label_count(db) -> int:
    return await db.scalar(select(func.count()).select_from(Label).where(Label.user_id == TEST_USER_ID))


class TestCreateLabel:
    @pytest.mark.asyncio
    async def test_creates_and_awards(self, db_session, profile):
        label, achievements = await create_label(db_session, TEST_USER_ID, "Work")
        await db_session.commit()
        assert label.id is not None
        assert [a.slug for a in achievements] == ["first_label"]

    @pytest.mark.asyncio
    async def test_duplicate_ignoring_case(self, db_session, profile):
        await create_label(db_session, TEST_USER_ID, "Work")
        await db_session.commit()
        with pytest.raises(ConflictError):
            await create_label(db_session, TEST_USER_ID, "WORK")

    @pytest.mark.asyncio
    async def test_same_name_for_different_users(self, db_session, profile):
        await make_profile(db_session, user_id=OTHER_USER_ID, username="rival")
        await create_label(db_session, TEST_USER_ID, "Work")
        await create_label(db_session, OTHER_USER_ID, "work")
        await db_session.commit()

    @pytest.mark.asyncio
    async def test_concurrent_insert_maps_to_conflict(self, db_session, profile, monkeypatch):
        """A create that passed the existence check but lost the insert race is a conflict, not a crash."""
        await create_label(db_session, TEST_USER_ID, "Work")
        await db_session.commit()

        async def not_seen(*args, **kwargs):
            return False

        monkeypatch.setattr(label_service, "label_exists", not_seen)
        with pytest.raises(ConflictError):
            await create_label(db_session, TEST_USER_ID, "work")

        assert await _label_count(db_session) == 1


class TestLabelIndex:
    @pytest.mark.asyncio
    async def test_database_rejects_case_variant(self, db_session, profile):
        now = datetime.now(timezone.utc)
        db_session.add(Label(user_id=TEST_USER_ID, name="Home", created_at=now))
        await db_session.commit()

        db_session.add(Label(user_id=TEST_USER_ID, name="home", created_at=now))
        with pytest.raises(IntegrityError):
            await db_session.flush()
        await db_session.rollback()
