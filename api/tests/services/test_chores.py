"""
Tests for ChoreService: completions, points and the completion window.
"""
from datetime import datetime, timedelta, timezone

import pytest

from harmony.core.errors import NotFoundError
from harmony.models.chore import Chore
from harmony.schemas.chore import ChoreCompletionCreate, ChoreCreate
from harmony.services.chores import ChoreService


def _chore(**overrides) -> ChoreCreate:
    fields = {"household_id": "house-1", "title": "Take out trash", "points": 10, "assigned_to": "user1"}
    return ChoreCreate(**{**fields, **overrides})


class TestChoreService:
    async def test_create_with_recurrence(self, session):
        chore = await ChoreService(session).create(_chore(recurring={"frequency": "weekly"}))
        assert chore.recurring == {"frequency": "weekly", "interval": 1}
        assert chore.status == "pending"

    async def test_complete_defaults_to_chore_points(self, session):
        service = ChoreService(session)
        chore = await service.create(_chore())

        completion = await service.complete_chore(chore.id, ChoreCompletionCreate(user_id="user2"))

        assert completion.points_earned == 10
        assert completion.household_id == "house-1"
        refreshed = await session.get(Chore, chore.id)
        assert refreshed.status == "completed"
        assert refreshed.completed_date is not None

    async def test_complete_with_explicit_points(self, session):
        service = ChoreService(session)
        chore = await service.create(_chore())
        completion = await service.complete_chore(
            chore.id, ChoreCompletionCreate(user_id="user2", points_earned=3, notes="quick one")
        )
        assert completion.points_earned == 3
        assert completion.notes == "quick one"

    async def test_complete_missing_chore(self, session):
        with pytest.raises(NotFoundError, match="Chore not found"):
            await ChoreService(session).complete_chore("nope", ChoreCompletionCreate(user_id="user1"))

    async def test_list_completions_window(self, session):
        service = ChoreService(session)
        now = datetime.now(timezone.utc)
        await service.completions.create(
            household_id="house-1", chore_id="c1", user_id="user1", completed_at=now - timedelta(days=2)
        )
        await service.completions.create(
            household_id="house-1", chore_id="c2", user_id="user1", completed_at=now - timedelta(days=20)
        )

        assert len(await service.list_completions("house-1")) == 2
        recent = await service.list_completions("house-1", days=7, now=now)
        assert [c.chore_id for c in recent] == ["c1"]
