"""Household nudges: gentle reminders shown to some or all members.

Besides CRUD this module owns the time-of-day templates (morning / evening /
weekend) that the beat schedule posts to every household.
"""

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from harmony.core.errors import NotFoundError
from harmony.models.household import Household
from harmony.models.nudge import Nudge
from harmony.repositories.store import json_list_contains
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)

NUDGE_LIMIT = 20

# ─── Time-based templates ───────────────────────────────────────────────────────

MORNING_HOURS = range(6, 11)
EVENING_HOURS = range(18, 23)
WEEKEND_HOUR = 10

MORNING_NUDGE = {
    "title": "Good morning! ☀️",
    "message": "Start your day right by checking today's chores and responsibilities.",
    "type": "chore_reminder",
    "priority": "low",
}
EVENING_NUDGE = {
    "title": "Evening wrap-up 🌙",
    "message": "Time to check if all daily chores are completed and prepare for tomorrow.",
    "type": "chore_reminder",
    "priority": "medium",
}
WEEKEND_NUDGE = {
    "title": "Weekend household check 📋",
    "message": "Weekends are perfect for tackling bigger chores and organizing shared spaces.",
    "type": "chore_reminder",
    "priority": "medium",
}


def time_based_templates(now: datetime) -> list[dict[str, Any]]:
    """Templates due at ``now`` (household local time)."""
    templates = []
    if now.hour in MORNING_HOURS:
        templates.append(MORNING_NUDGE)
    if now.hour in EVENING_HOURS:
        templates.append(EVENING_NUDGE)
    if now.weekday() >= 5 and now.hour == WEEKEND_HOUR:
        templates.append(WEEKEND_NUDGE)
    return templates


# ─── Service ────────────────────────────────────────────────────────────────────

class NudgeService(EntityService[Nudge]):
    model = Nudge
    label = "nudge"
    default_limit = NUDGE_LIMIT

    async def list_nudges(
        self,
        household_id: str,
        user_id: str | None = None,
        limit: int | None = None,
    ) -> Sequence[Nudge]:
        """Non-dismissed nudges, optionally only those targeting ``user_id``."""
        filters = [Nudge.is_dismissed.is_(False)]
        if user_id:
            filters.append(json_list_contains(Nudge.target_users, user_id))
        return await self.list_for_household(household_id, limit=limit, filters=filters)

    async def mark_read(self, nudge_id: str) -> Nudge:
        async with write_guard("mark nudge as read"):
            nudge = await self.store.update(nudge_id, {"is_read": True})
        if nudge is None:
            raise NotFoundError("Nudge not found")
        return nudge

    async def dismiss(self, nudge_id: str) -> Nudge:
        async with write_guard("dismiss nudge"):
            nudge = await self.store.update(nudge_id, {"is_dismissed": True})
        if nudge is None:
            raise NotFoundError("Nudge not found")
        return nudge

    async def notify_household(
        self,
        household_id: str,
        template: dict[str, Any],
        target_users: list[str] | None = None,
    ) -> Nudge:
        """Create a nudge from a template; targets every member unless given."""
        if target_users is None:
            household = await self.session.get(Household, household_id)
            target_users = list(household.members) if household else []
        return await self.create({**template, "household_id": household_id, "target_users": target_users})

    async def create_time_based_nudges(self, household_id: str, now: datetime | None = None) -> list[Nudge]:
        """Post the templates due at ``now``, at most once per title per day."""
        now = now or datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        created = []
        for template in time_based_templates(now):
            try:
                existing = await self.store.list_for_household(
                    household_id,
                    limit=1,
                    filters=[Nudge.title == template["title"], Nudge.created_at >= start_of_day],
                )
            except SQLAlchemyError:
                logger.exception("Error checking existing nudges for household %s", household_id)
                continue
            if existing:
                continue
            created.append(await self.notify_household(household_id, template))
        return created
