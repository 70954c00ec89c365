"""
Scheduled household jobs (Celery beat).

All functions are synchronous and use a sync SQLAlchemy session, like every
Celery task module.  The ``_do_*`` helpers take the session and the clock so
they can run against any engine; the tasks only open the session.

Scheduled tasks:
  mark_overdue           : 00:15 UTC daily; pending rent/bills and open chores past due → overdue
  generate_monthly_rent  : 01:00 UTC on the 1st; one payment per split of every active schedule
  send_rent_reminders    : 09:00 UTC daily; notify members whose rent is due within RENT_REMINDER_DAYS
  post_time_based_nudges : hourly; morning / evening / weekend nudges, once per title per day
"""

import logging
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import Engine, create_engine, func, select, update
from sqlalchemy.orm import Session

from harmony.core.config import settings
from harmony.models.bill import Bill
from harmony.models.chore import Chore
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.rent import RentPayment, RentSchedule
from harmony.services.nudges import time_based_templates
from harmony.services.rent import build_monthly_payments, month_bounds
from harmony.worker import celery_app

logger = logging.getLogger(__name__)

_engine: Engine | None = None


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(settings.sync_database_url, pool_pre_ping=True)
    return _engine


# ─── Core jobs (sync) ───────────────────────────────────────────────────────────

def _do_mark_overdue(db: Session, today: date) -> dict[str, int]:
    counts = {}
    for model, open_statuses in (
        (RentPayment, ("pending",)),
        (Bill, ("pending",)),
        (Chore, ("pending", "in_progress")),
    ):
        result = db.execute(
            update(model)
            .where(model.status.in_(open_statuses), model.due_date < today)
            .values(status="overdue", updated_at=datetime.now(timezone.utc))
        )
        counts[model.__tablename__] = result.rowcount or 0
    db.commit()
    return counts


def _do_generate_monthly_rent(db: Session, today: date) -> int:
    start, end = month_bounds(today.year, today.month)
    schedules = db.execute(
        select(RentSchedule).where(
            RentSchedule.is_active == True,  # noqa: E712
            RentSchedule.start_date < end,
        )
    ).scalars().all()

    created = 0
    for schedule in schedules:
        if schedule.end_date is not None and schedule.end_date < start:
            continue
        existing = db.execute(
            select(func.count()).select_from(RentPayment).where(
                RentPayment.household_id == schedule.household_id,
                RentPayment.due_date >= start,
                RentPayment.due_date < end,
            )
        ).scalar_one()
        if existing:
            continue
        for row in build_monthly_payments(
            schedule.household_id, schedule.splits, schedule.due_day, today.year, today.month
        ):
            db.add(RentPayment(**row))
            created += 1
    db.commit()
    return created


def _do_send_rent_reminders(db: Session, today: date, days: int) -> int:
    horizon = today + timedelta(days=days)
    payments = db.execute(
        select(RentPayment).where(
            RentPayment.status == "pending",
            RentPayment.due_date >= today,
            RentPayment.due_date <= horizon,
        )
    ).scalars().all()

    start_of_day = datetime.combine(today, datetime.min.time(), tzinfo=timezone.utc)
    sent = 0
    for payment in payments:
        already = db.execute(
            select(func.count()).select_from(Notification).where(
                Notification.user_id == payment.user_id,
                Notification.type == "rent_due",
                Notification.created_at >= start_of_day,
            )
        ).scalar_one()
        if already:
            continue
        db.add(Notification(
            user_id=payment.user_id,
            household_id=payment.household_id,
            type="rent_due",
            title="Rent Due Soon",
            message=f"Your rent payment of ${payment.amount:,.2f} is due on {payment.due_date:%b %d}",
            action_url="/rent",
            meta={"payment_id": payment.id, "amount": str(payment.amount)},
        ))
        sent += 1
    db.commit()
    return sent


def _do_post_time_based_nudges(db: Session, now: datetime) -> int:
    templates = time_based_templates(now)
    if not templates:
        return 0

    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
    posted = 0
    for household in db.execute(select(Household)).scalars().all():
        for template in templates:
            already = db.execute(
                select(func.count()).select_from(Nudge).where(
                    Nudge.household_id == household.id,
                    Nudge.title == template["title"],
                    Nudge.created_at >= start_of_day,
                )
            ).scalar_one()
            if already:
                continue
            db.add(Nudge(household_id=household.id, target_users=list(household.members), **template))
            posted += 1
    db.commit()
    return posted


# ─── Celery tasks ───────────────────────────────────────────────────────────────

@celery_app.task(name="harmony.services.scheduled.mark_overdue")
def mark_overdue():
    with Session(_get_engine()) as db:
        counts = _do_mark_overdue(db, date.today())
    logger.info("Marked overdue: %s", counts)
    return counts


@celery_app.task(name="harmony.services.scheduled.generate_monthly_rent")
def generate_monthly_rent():
    with Session(_get_engine()) as db:
        created = _do_generate_monthly_rent(db, date.today())
    logger.info("Generated %d rent payments", created)
    return {"created": created}


@celery_app.task(name="harmony.services.scheduled.send_rent_reminders")
def send_rent_reminders():
    with Session(_get_engine()) as db:
        sent = _do_send_rent_reminders(db, date.today(), settings.rent_reminder_days)
    logger.info("Sent %d rent reminders", sent)
    return {"sent": sent}


@celery_app.task(name="harmony.services.scheduled.post_time_based_nudges")
def post_time_based_nudges():
    with Session(_get_engine()) as db:
        posted = _do_post_time_based_nudges(db, datetime.now(timezone.utc))
    logger.info("Posted %d time-based nudges", posted)
    return {"posted": posted}
