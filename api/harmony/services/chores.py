import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from harmony.models.chore import Chore, ChoreCompletion
from harmony.repositories.store import SqlStore
from harmony.schemas.chore import ChoreCompletionCreate
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)

COMPLETION_LIMIT = 100


class ChoreService(EntityService[Chore]):
    model = Chore
    label = "chore"
    default_limit = 100

    def __init__(self, session):
        super().__init__(session)
        self.completions: SqlStore[ChoreCompletion] = SqlStore(session, ChoreCompletion)

    async def complete_chore(self, chore_id: str, payload: ChoreCompletionCreate) -> ChoreCompletion:
        """Record a completion and mark the chore completed, in the caller's transaction.

        ``points_earned`` defaults to the chore's points.
        """
        chore = await self._require(chore_id)
        now = datetime.now(timezone.utc)
        points = payload.points_earned if payload.points_earned is not None else chore.points

        async with write_guard("complete chore"):
            completion = await self.completions.create(
                household_id=chore.household_id,
                chore_id=chore.id,
                user_id=payload.user_id,
                completed_at=now,
                points_earned=points,
                verified_by=payload.verified_by,
                notes=payload.notes,
            )
            await self.store.update(chore.id, {"status": "completed", "completed_date": now.date()})

        logger.info("Chore %s completed by %s (+%d points)", chore.id, payload.user_id, points)
        return completion

    async def list_completions(
        self,
        household_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> Sequence[ChoreCompletion]:
        """Completions newest first; ``days`` keeps only the last N days."""
        filters = []
        if days is not None:
            since = (now or datetime.now(timezone.utc)) - timedelta(days=days)
            filters.append(ChoreCompletion.completed_at >= since)
        try:
            return await self.completions.list_for_household(
                household_id,
                order_by=ChoreCompletion.completed_at,
                limit=COMPLETION_LIMIT,
                filters=filters,
            )
        except SQLAlchemyError:
            logger.exception("Error fetching chore completions for household %s", household_id)
            return []

