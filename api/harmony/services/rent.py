"""Rent payments and the monthly rent schedule.

The schedule says how much each member owes per month and on which day; a
beat task (``harmony.services.scheduled``) turns it into one pending payment
per member at the start of every month.
"""

import calendar
import logging
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from harmony.core.errors import NotFoundError
from harmony.models.household import Household
from harmony.models.rent import RentPayment, RentSchedule
from harmony.repositories.store import SqlStore
from harmony.schemas.rent import RentPaymentResponse, RentStats
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)

FALLBACK_TOTAL_DUE = Decimal("2400")
FALLBACK_TOTAL_PAID = Decimal("1800")
FALLBACK_OVERDUE = Decimal("0")


# ─── Date helpers ───────────────────────────────────────────────────────────────

def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def clamp_due_date(year: int, month: int, due_day: int) -> date:
    """``due_day`` in the given month; 31 becomes the 30th in April, the 28th/29th in February."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(due_day, 1), last_day))


def first_of_next_month(today: date) -> date:
    return month_bounds(today.year, today.month)[1]


def next_due_date(today: date, due_day: int | None) -> date:
    if due_day is None:
        return first_of_next_month(today)
    candidate = clamp_due_date(today.year, today.month, due_day)
    if candidate <= today:
        following = first_of_next_month(today)
        candidate = clamp_due_date(following.year, following.month, due_day)
    return candidate


def build_monthly_payments(
    household_id: str,
    splits: Iterable[dict[str, Any]],
    due_day: int,
    year: int,
    month: int,
) -> list[dict[str, Any]]:
    """One pending payment per split for the given month (no I/O)."""
    due = clamp_due_date(year, month, due_day)
    label = date(year, month, 1).strftime("%B %Y")
    return [
        {
            "household_id": household_id,
            "user_id": split["user_id"],
            "amount": Decimal(str(split["amount"])),
            "due_date": due,
            "status": "pending",
            "method": "pending",
            "notes": f"Monthly rent payment - {label}",
        }
        for split in splits
    ]


def fallback_rent_stats(today: date) -> RentStats:
    return RentStats(
        total_due=FALLBACK_TOTAL_DUE,
        total_paid=FALLBACK_TOTAL_PAID,
        overdue_amount=FALLBACK_OVERDUE,
        next_due_date=first_of_next_month(today),
        payment_history=[],
        is_fallback=True,
    )


# ─── Service ────────────────────────────────────────────────────────────────────

class RentService(EntityService[RentPayment]):
    model = RentPayment
    label = "rent payment"
    order_field = "due_date"

    def __init__(self, session):
        super().__init__(session)
        self.schedules: SqlStore[RentSchedule] = SqlStore(session, RentSchedule)

    # Payments

    async def current_month_payments(self, household_id: str, today: date | None = None) -> Sequence[RentPayment]:
        today = today or date.today()
        start, end = month_bounds(today.year, today.month)
        return await self.list_for_household(
            household_id,
            filters=[RentPayment.due_date >= start, RentPayment.due_date < end],
        )

    async def overdue_payments(self, household_id: str) -> Sequence[RentPayment]:
        return await self.list_for_household(household_id, filters=[RentPayment.status == "overdue"])

    async def mark_paid(self, payment_id: str, user_id: str, paid_date: date | None = None) -> RentPayment:
        async with write_guard("mark payment as paid"):
            payment = await self.store.update(
                payment_id,
                {"status": "paid", "paid_date": paid_date or date.today(), "paid_by": user_id},
            )
        if payment is None:
            raise NotFoundError("Rent payment not found")
        logger.info("Rent payment %s marked paid by %s", payment_id, user_id)
        return payment

    # Schedule

    async def create_schedule(self, payload) -> RentSchedule:
        async with write_guard("create rent schedule"):
            return await self.schedules.create(**payload.model_dump())

    async def get_active_schedule(self, household_id: str) -> RentSchedule | None:
        try:
            rows = await self.schedules.list_for_household(
                household_id,
                order_by=RentSchedule.created_at,
                limit=1,
                filters=[RentSchedule.is_active.is_(True)],
            )
        except SQLAlchemyError:
            logger.exception("Error fetching rent schedule for household %s", household_id)
            return None
        return rows[0] if rows else None

    async def update_schedule(self, schedule_id: str, payload) -> RentSchedule:
        async with write_guard("update rent schedule"):
            schedule = await self.schedules.update(schedule_id, payload.model_dump(exclude_unset=True))
        if schedule is None:
            raise NotFoundError("Rent schedule not found")
        return schedule

    async def generate_monthly_payments(self, household_id: str, year: int, month: int) -> list[RentPayment]:
        """Create the month's payments from the active schedule.

        Returns the new payments, or an empty list when the month already has
        payments.
        """
        schedule = await self.get_active_schedule(household_id)
        if schedule is None:
            raise NotFoundError("No active rent schedule found")
        if await self.session.get(Household, household_id) is None:
            raise NotFoundError("Household not found")

        existing = await self.current_month_payments(household_id, today=date(year, month, 1))
        if existing:
            logger.info("Rent payments already exist for %s %04d-%02d", household_id, year, month)
            return []

        rows = build_monthly_payments(household_id, schedule.splits, schedule.due_day, year, month)
        created = []
        async with write_guard("generate monthly payments"):
            for row in rows:
                created.append(await self.store.create(**row))
        logger.info("Generated %d rent payments for household %s", len(created), household_id)
        return created

    # Stats

    async def get_rent_stats(self, household_id: str, today: date | None = None) -> RentStats:
        """Current-month totals, overdue amount and next due date.

        Any backend failure returns the fixed fallback stats (``is_fallback``).
        """
        today = today or date.today()
        start, end = month_bounds(today.year, today.month)
        try:
            current = await self.store.list_for_household(
                household_id,
                order_by=RentPayment.due_date,
                filters=[RentPayment.due_date >= start, RentPayment.due_date < end],
            )
            overdue = await self.store.list_for_household(
                household_id,
                order_by=RentPayment.due_date,
                filters=[RentPayment.status == "overdue"],
            )
            schedules = await self.schedules.list_for_household(
                household_id,
                order_by=RentSchedule.created_at,
                limit=1,
                filters=[RentSchedule.is_active.is_(True)],
            )
        except SQLAlchemyError:
            logger.exception("Error getting rent stats for household %s", household_id)
            return fallback_rent_stats(today)

        history = {p.id: p for p in [*current, *overdue]}
        return RentStats(
            total_due=sum((p.amount for p in current), Decimal(0)),
            total_paid=sum((p.amount for p in current if p.status == "paid"), Decimal(0)),
            overdue_amount=sum((p.amount for p in overdue), Decimal(0)),
            next_due_date=next_due_date(today, schedules[0].due_day if schedules else None),
            payment_history=[
                RentPaymentResponse.model_validate(p)
                for p in sorted(history.values(), key=lambda p: p.due_date, reverse=True)
            ],
        )
