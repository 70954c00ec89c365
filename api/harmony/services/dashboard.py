"""Dashboard aggregation.

``DashboardService.get_dashboard_stats`` loads the household, fetches the six
entity collections concurrently (one session per fetch, since an AsyncSession
cannot be shared between concurrent tasks) and folds them with the pure
``build_dashboard_stats``.  A collection that cannot be read counts as empty,
as with every entity read.  A missing household or any other failure returns
``fallback_stats`` so the dashboard always renders; ``is_fallback`` tells the
two apart.

Sensor ``active_count`` / ``recent_events`` and the conflict
``average_sentiment`` are fixed placeholders until sensor ingestion and
sentiment roll-ups exist.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime, timedelta
from decimal import Decimal
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harmony.core.database import as_utc, utcnow
from harmony.core.errors import NotFoundError
from harmony.models.bill import Bill
from harmony.models.chore import Chore, ChoreCompletion
from harmony.models.conflict import ConflictCoachSession
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.rent import RentPayment
from harmony.repositories.store import SqlStore
from harmony.schemas.dashboard import (
    BillSummary,
    ChoreSummary,
    ConflictSummary,
    DashboardStats,
    LeaderboardEntry,
    RentSummary,
    SensorSummary,
)
from harmony.services.nudges import NudgeService
from harmony.services.notifications import NotificationService
from harmony.services.rent import FALLBACK_OVERDUE, FALLBACK_TOTAL_DUE, FALLBACK_TOTAL_PAID, first_of_next_month

logger = logging.getLogger(__name__)

R = TypeVar("R")

WEEK = timedelta(days=7)
LEADERBOARD_SIZE = 5
UPCOMING_BILLS = 3

# Placeholders (see module docstring)
SENSOR_ACTIVE_COUNT = 6
SENSOR_RECENT_EVENTS = 24
AVERAGE_SENTIMENT = "positive"


# ─── Pure aggregation ───────────────────────────────────────────────────────────

def build_leaderboard(completions: Sequence[ChoreCompletion], size: int = LEADERBOARD_SIZE) -> list[LeaderboardEntry]:
    """Fold completions into per-user totals, highest points first."""
    totals: dict[str, list[int]] = {}
    for c in completions:
        entry = totals.setdefault(c.user_id, [0, 0])
        entry[0] += c.points_earned or 0
        entry[1] += 1
    ranked = sorted(totals.items(), key=lambda item: item[1][0], reverse=True)
    return [
        LeaderboardEntry(user_id=user_id, points=points, completed_chores=count)
        for user_id, (points, count) in ranked[:size]
    ]


def build_dashboard_stats(
    household_id: str,
    now: datetime,
    rent_payments: Sequence[RentPayment],
    bills: Sequence[Bill],
    chores: Sequence[Chore],
    completions: Sequence[ChoreCompletion],
    sessions: Sequence[ConflictCoachSession],
    nudges: Sequence[Nudge],
) -> DashboardStats:
    week_ago = now - WEEK
    zero = Decimal(0)

    current_rent = [p for p in rent_payments if (p.due_date.year, p.due_date.month) == (now.year, now.month)]
    rent = RentSummary(
        total_due=sum((p.amount for p in current_rent), zero),
        total_paid=sum((p.amount for p in current_rent if p.status == "paid"), zero),
        overdue_amount=sum((p.amount for p in current_rent if p.status == "overdue"), zero),
        next_due_date=first_of_next_month(now.date()),
    )

    pending_bills = [b for b in bills if b.status == "pending"]
    bill_summary = BillSummary(
        total_due=sum((b.amount for b in pending_bills), zero),
        total_paid=sum((b.amount for b in bills if b.status == "paid"), zero),
        overdue_count=sum(1 for b in bills if b.status == "overdue"),
        upcoming_due=sorted(b.due_date for b in pending_bills)[:UPCOMING_BILLS],
    )

    chore_summary = ChoreSummary(
        pending_count=sum(1 for c in chores if c.status != "completed"),
        completed_this_week=sum(1 for c in completions if as_utc(c.completed_at) >= week_ago),
        # Potential points across all chores, not points earned
        total_points=sum(c.points or 0 for c in chores),
        leaderboard=build_leaderboard(completions),
    )

    conflicts = ConflictSummary(
        active_sessions=sum(1 for s in sessions if s.status == "active"),
        resolved_this_week=sum(
            1 for s in sessions
            if s.status == "completed" and s.ended_at is not None and as_utc(s.ended_at) >= week_ago
        ),
        average_sentiment=AVERAGE_SENTIMENT,
    )

    sensors = SensorSummary(
        active_count=SENSOR_ACTIVE_COUNT,
        recent_events=SENSOR_RECENT_EVENTS,
        triggered_nudges=sum(1 for n in nudges if n.type == "sensor_triggered"),
    )

    return DashboardStats(
        household_id=household_id,
        rent=rent,
        bills=bill_summary,
        chores=chore_summary,
        conflicts=conflicts,
        sensors=sensors,
    )


def fallback_stats(household_id: str, now: datetime) -> DashboardStats:
    """The fixed snapshot shown when real data cannot be loaded."""
    return DashboardStats(
        household_id=household_id,
        rent=RentSummary(
            total_due=FALLBACK_TOTAL_DUE,
            total_paid=FALLBACK_TOTAL_PAID,
            overdue_amount=FALLBACK_OVERDUE,
            next_due_date=first_of_next_month(now.date()),
        ),
        bills=BillSummary(
            total_due=Decimal("450"),
            total_paid=Decimal("200"),
            overdue_count=1,
            upcoming_due=[(now + timedelta(days=3)).date()],
        ),
        chores=ChoreSummary(
            pending_count=8,
            completed_this_week=12,
            total_points=340,
            leaderboard=[
                LeaderboardEntry(user_id="user1", points=120, completed_chores=4),
                LeaderboardEntry(user_id="user2", points=95, completed_chores=3),
                LeaderboardEntry(user_id="user3", points=125, completed_chores=5),
            ],
        ),
        conflicts=ConflictSummary(active_sessions=0, resolved_this_week=2, average_sentiment="positive"),
        sensors=SensorSummary(active_count=6, recent_events=24, triggered_nudges=8),
        is_fallback=True,
    )


# ─── Service ────────────────────────────────────────────────────────────────────

class DashboardService:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.clock = clock

    async def _read(self, fetch: Callable[[AsyncSession], Awaitable[R]]) -> R:
        async with self.session_factory() as session:
            return await fetch(session)

    async def _list(self, model, household_id: str, order_by, limit: int) -> Sequence:
        """One collection; a failing table reads as empty like every entity read."""
        try:
            return await self._read(
                lambda s: SqlStore(s, model).list_for_household(household_id, order_by=order_by, limit=limit)
            )
        except SQLAlchemyError:
            logger.exception("Error fetching %s for household %s", model.__tablename__, household_id)
            return []

    async def get_dashboard_stats(self, household_id: str) -> DashboardStats:
        now = self.clock()
        try:
            household = await self._read(lambda s: s.get(Household, household_id))
            if household is None:
                raise NotFoundError("Household not found")

            rent, bills, chores, completions, sessions, nudges = await asyncio.gather(
                self._list(RentPayment, household_id, RentPayment.due_date, 50),
                self._list(Bill, household_id, Bill.due_date, 50),
                self._list(Chore, household_id, Chore.created_at, 100),
                self._list(ChoreCompletion, household_id, ChoreCompletion.completed_at, 100),
                self._list(ConflictCoachSession, household_id, ConflictCoachSession.started_at, 50),
                self._list(Nudge, household_id, Nudge.created_at, 50),
            )
            return build_dashboard_stats(household_id, now, rent, bills, chores, completions, sessions, nudges)
        except Exception:
            # The dashboard never errors; the fallback is flagged instead
            logger.exception("Error building dashboard stats for household %s; serving fallback", household_id)
            return fallback_stats(household_id, now)

    async def user_notifications(self, user_id: str) -> Sequence[Notification]:
        return await self._read(lambda s: NotificationService(s).list_for_user(user_id, unread_only=False))

    async def household_nudges(self, household_id: str, user_id: str | None = None) -> Sequence[Nudge]:
        return await self._read(lambda s: NudgeService(s).list_nudges(household_id, user_id=user_id))
