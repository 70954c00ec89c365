"""
Tests for the Celery beat jobs.  The ``_do_*`` helpers run against a sync
SQLite session; the task wrappers only open the session and are not called.
"""
from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import select

from harmony.models.bill import Bill
from harmony.models.chore import Chore
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.rent import RentPayment, RentSchedule
from harmony.services.scheduled import (
    _do_generate_monthly_rent,
    _do_mark_overdue,
    _do_post_time_based_nudges,
    _do_send_rent_reminders,
)
from harmony.worker import celery_app

TODAY = date(2025, 10, 18)


def _rent(db, **overrides):
    fields = {"household_id": "house-1", "user_id": "user1", "amount": Decimal("900"), "due_date": TODAY}
    payment = RentPayment(**{**fields, **overrides})
    db.add(payment)
    db.commit()
    return payment


class TestBeatSchedule:
    def test_tasks_registered(self):
        scheduled = {entry["task"] for entry in celery_app.conf.beat_schedule.values()}
        assert scheduled == {
            "harmony.services.scheduled.mark_overdue",
            "harmony.services.scheduled.generate_monthly_rent",
            "harmony.services.scheduled.send_rent_reminders",
            "harmony.services.scheduled.post_time_based_nudges",
        }
        assert "harmony.services.scheduled" in celery_app.conf.include


class TestMarkOverdue:
    def test_only_open_past_due_rows(self, sync_session):
        db = sync_session
        _rent(db, due_date=date(2025, 10, 1))
        _rent(db, due_date=date(2025, 10, 1), status="paid")
        _rent(db, due_date=TODAY)
        db.add_all([
            Bill(household_id="house-1", name="Water", amount=Decimal("45"), due_date=date(2025, 10, 10)),
            Chore(household_id="house-1", title="Vacuum", due_date=date(2025, 10, 17), status="in_progress"),
            Chore(household_id="house-1", title="Dust", due_date=date(2025, 10, 17), status="completed"),
            Chore(household_id="house-1", title="Someday"),
        ])
        db.commit()

        counts = _do_mark_overdue(db, TODAY)

        assert counts == {"rent_payments": 1, "bills": 1, "chores": 1}
        statuses = db.execute(select(RentPayment.status).order_by(RentPayment.due_date)).scalars().all()
        assert sorted(statuses) == ["overdue", "paid", "pending"]


class TestGenerateMonthlyRent:
    def _schedule(self, db, **overrides):
        fields = {
            "household_id": "house-1",
            "monthly_amount": Decimal("1800"),
            "due_day": 31,
            "splits": [{"user_id": "user1", "amount": "900"}, {"user_id": "user2", "amount": "900"}],
            "start_date": date(2025, 1, 1),
        }
        db.add(RentSchedule(**{**fields, **overrides}))
        db.commit()

    def test_creates_one_payment_per_split(self, sync_session):
        self._schedule(sync_session)
        assert _do_generate_monthly_rent(sync_session, date(2025, 11, 1)) == 2
        due_dates = sync_session.execute(select(RentPayment.due_date)).scalars().all()
        assert set(due_dates) == {date(2025, 11, 30)}

    def test_idempotent_within_month(self, sync_session):
        self._schedule(sync_session)
        _do_generate_monthly_rent(sync_session, date(2025, 11, 1))
        assert _do_generate_monthly_rent(sync_session, date(2025, 11, 1)) == 0

    def test_skips_inactive_and_ended_schedules(self, sync_session):
        self._schedule(sync_session, is_active=False)
        self._schedule(sync_session, household_id="house-2", end_date=date(2025, 6, 30))
        self._schedule(sync_session, household_id="house-3", start_date=date(2026, 1, 1))
        assert _do_generate_monthly_rent(sync_session, date(2025, 11, 1)) == 0


class TestRentReminders:
    def test_due_within_window(self, sync_session):
        db = sync_session
        _rent(db, due_date=date(2025, 10, 20))
        _rent(db, user_id="user2", due_date=date(2025, 10, 25))
        _rent(db, user_id="user3", due_date=date(2025, 10, 19), status="paid")

        assert _do_send_rent_reminders(db, TODAY, days=3) == 1

        notification = db.execute(select(Notification)).scalar_one()
        assert notification.user_id == "user1"
        assert notification.type == "rent_due"
        assert "$900.00" in notification.message
        assert "Oct 20" in notification.message

    def test_one_reminder_per_user_per_day(self, sync_session):
        _rent(sync_session, due_date=date(2025, 10, 20))
        _do_send_rent_reminders(sync_session, TODAY, days=3)
        assert _do_send_rent_reminders(sync_session, TODAY, days=3) == 0


class TestTimeBasedNudges:
    def test_posts_to_every_household_once(self, sync_session):
        db = sync_session
        db.add_all([
            Household(id="house-1", name="One", members=["user1"]),
            Household(id="house-2", name="Two", members=["user2", "user3"]),
        ])
        db.commit()
        saturday_morning = datetime(2025, 10, 11, 10, 0, tzinfo=timezone.utc)

        assert _do_post_time_based_nudges(db, saturday_morning) == 4
        assert _do_post_time_based_nudges(db, saturday_morning) == 0

        nudge = db.execute(select(Nudge).where(Nudge.household_id == "house-2")).scalars().first()
        assert nudge.target_users == ["user2", "user3"]

    def test_quiet_hours(self, sync_session):
        sync_session.add(Household(id="house-1", name="One", members=["user1"]))
        sync_session.commit()
        afternoon = datetime(2025, 10, 14, 14, 0, tzinfo=timezone.utc)
        assert _do_post_time_based_nudges(sync_session, afternoon) == 0
