"""Sample-data seeding and table clearing for development databases.

``SeedService.seed_all`` inserts one household ("Sunset Apartments #302",
users user1..user3) with a rent schedule, rent payments, bills, chores, a
completion, sensors, sensor events, nudges, chat and notifications.  Rows get
fresh ids; ``SeedService.ids`` maps logical keys ("household1", "chore2",
"sensor3", ...) to them so later rows can reference earlier ones.

Dates are relative to ``today`` so a freshly seeded dashboard shows
current-month rent and upcoming bills.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.database import RESERVED_SENTINEL_ID
from harmony.models.bill import Bill
from harmony.models.chat import ChatMessage
from harmony.models.chore import Chore, ChoreCompletion
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.registry import MODELS_IN_DEPENDENCY_ORDER
from harmony.models.rent import RentPayment, RentSchedule
from harmony.models.sensor import Sensor, SensorEvent
from harmony.repositories.store import SqlStore
from harmony.services.base import write_guard
from harmony.services.rent import month_bounds

logger = logging.getLogger(__name__)

SAMPLE_USERS = ["user1", "user2", "user3"]
SEEDABLE_TYPES = ("households", "chores", "bills", "sensors")


def _at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute), tzinfo=timezone.utc)


# ─── Sample dataset ─────────────────────────────────────────────────────────────

def sample_household() -> dict[str, Any]:
    return {
        "name": "Sunset Apartments #302",
        "address": "123 Sunset Blvd, Apt 302, Los Angeles, CA 90210",
        "members": list(SAMPLE_USERS),
    }


def sample_rent_schedule(today: date) -> dict[str, Any]:
    start = date(today.year, 1, 1)
    return {
        "monthly_amount": Decimal("2800.00"),
        "due_day": 1,
        "split_type": "equal",
        "splits": [
            {"user_id": "user1", "amount": "933.33"},
            {"user_id": "user2", "amount": "933.33"},
            {"user_id": "user3", "amount": "933.34"},
        ],
        "start_date": start,
        "end_date": date(today.year, 12, 31),
        "is_active": True,
    }


def sample_rent_payments(today: date) -> list[dict[str, Any]]:
    due = month_bounds(today.year, today.month)[0]
    label = due.strftime("%B")
    return [
        {"user_id": "user1", "amount": Decimal("933.33"), "due_date": due, "paid_date": due,
         "status": "paid", "method": "bank_transfer", "paid_by": "user1", "notes": f"{label} rent payment"},
        {"user_id": "user2", "amount": Decimal("933.33"), "due_date": due, "paid_date": due + timedelta(days=1),
         "status": "paid", "method": "credit_card", "paid_by": "user2", "notes": f"{label} rent payment"},
        {"user_id": "user3", "amount": Decimal("933.34"), "due_date": due, "paid_date": None,
         "status": "overdue", "method": "pending", "notes": f"{label} rent payment - overdue"},
    ]


def sample_bills(today: date) -> list[dict[str, Any]]:
    return [
        {"name": "Electricity", "amount": Decimal("120.50"), "due_date": today + timedelta(days=5),
         "category": "electricity", "status": "pending", "split_between": list(SAMPLE_USERS),
         "notes": "Monthly electricity bill"},
        {"name": "Internet", "amount": Decimal("89.99"), "due_date": today - timedelta(days=2),
         "category": "internet", "status": "paid", "paid_by": "user2", "paid_date": today - timedelta(days=3),
         "split_between": list(SAMPLE_USERS), "notes": "Monthly internet bill"},
        {"name": "Water", "amount": Decimal("45.00"), "due_date": today + timedelta(days=10),
         "category": "water", "status": "pending", "split_between": list(SAMPLE_USERS),
         "notes": "Monthly water bill"},
    ]


def sample_chores(today: date) -> list[dict[str, Any]]:
    return [
        {"title": "Clean Kitchen", "description": "Wipe counters, clean sink, take out trash",
         "assigned_to": "user1", "assigned_by": "user1", "points": 10, "status": "pending",
         "priority": "high", "category": "cleaning", "due_date": today,
         "recurring": {"frequency": "daily", "interval": 1}},
        {"title": "Vacuum Living Room", "description": "Vacuum carpets and clean surfaces",
         "assigned_to": "user2", "assigned_by": "user1", "points": 15, "status": "completed",
         "priority": "medium", "category": "cleaning", "due_date": today - timedelta(days=1),
         "completed_date": today - timedelta(days=1), "recurring": {"frequency": "weekly", "interval": 1}},
        {"title": "Take Out Recycling", "description": "Sort and take out recycling bins",
         "assigned_to": "user3", "assigned_by": "user1", "points": 8, "status": "pending",
         "priority": "low", "category": "cleaning", "due_date": today + timedelta(days=1),
         "recurring": {"frequency": "weekly", "interval": 1}},
        {"title": "Clean Bathroom", "description": "Clean toilet, sink, and shower",
         "assigned_to": "user1", "assigned_by": "user1", "points": 20, "status": "pending",
         "priority": "medium", "category": "cleaning", "due_date": today + timedelta(days=3),
         "recurring": {"frequency": "weekly", "interval": 1}},
    ]


def sample_sensors() -> list[dict[str, Any]]:
    return [
        {"name": "Kitchen Motion Sensor", "type": "motion", "location": "kitchen", "is_active": True},
        {"name": "Living Room Motion Sensor", "type": "motion", "location": "living_room", "is_active": True},
        {"name": "Bathroom Door Sensor", "type": "door", "location": "bathroom", "is_active": True},
    ]


def sample_sensor_events(today: date) -> list[tuple[str, dict[str, Any]]]:
    """(sensor logical key, event) pairs."""
    return [
        ("sensor1", {"event_type": "motion_detected", "timestamp": _at(today, 8, 30),
                     "value": {"duration": 45, "intensity": "medium"}}),
        ("sensor2", {"event_type": "motion_detected", "timestamp": _at(today, 19, 15),
                     "value": {"duration": 120, "intensity": "high"}}),
        ("sensor3", {"event_type": "door_opened", "timestamp": _at(today, 20, 45),
                     "value": {"open_duration": 300}}),
    ]


def sample_nudges(today: date) -> list[dict[str, Any]]:
    return [
        {"title": "Kitchen Cleaning Due", "type": "chore_reminder", "priority": "medium",
         "message": "Your kitchen cleaning chore is due today. Don't forget to wipe the counters!",
         "target_users": ["user1"], "expires_at": _at(today + timedelta(days=1), 23, 59)},
        {"title": "Rent Payment Overdue", "type": "rent_due", "priority": "high",
         "message": "Your rent payment is overdue. Please submit payment as soon as possible.",
         "target_users": ["user3"], "expires_at": _at(today + timedelta(days=5), 23, 59)},
        {"title": "Internet Bill Due Soon", "type": "bill_due", "priority": "medium", "is_read": True,
         "message": "Your internet bill is due in 3 days. Amount: $89.99",
         "target_users": ["user2"], "expires_at": _at(today + timedelta(days=8), 23, 59)},
    ]


def sample_chat_messages(today: date) -> list[dict[str, Any]]:
    return [
        {"user_id": "user1", "timestamp": _at(today, 8, 0),
         "content": "Hey everyone! I cleaned the kitchen this morning. All set for the day!"},
        {"user_id": "user2", "timestamp": _at(today, 8, 5),
         "content": "Thanks Alex! I'll handle the living room vacuuming this evening."},
        {"user_id": "user3", "timestamp": _at(today, 8, 10),
         "content": "I'm a bit behind on rent this month. Can we talk about a payment plan?"},
        {"user_id": "user1", "timestamp": _at(today, 8, 15),
         "content": "No worries Jordan, we can work something out. Let's discuss it tonight."},
    ]


# Smaller dataset written by ``upload_sample_data`` into an existing household id
UPLOAD_HOUSEHOLD = {"name": "Sample Household", "address": "123 Sample Street, City, State 12345"}


def upload_rent_payments(today: date) -> list[dict[str, Any]]:
    due = month_bounds(today.year, today.month)[0]
    return [
        {"user_id": "user1", "amount": Decimal("800"), "due_date": due, "status": "paid",
         "method": "bank_transfer", "paid_date": due, "paid_by": "user1", "notes": "Monthly rent payment"},
        {"user_id": "user2", "amount": Decimal("800"), "due_date": due, "status": "paid",
         "method": "check", "paid_date": due + timedelta(days=1), "paid_by": "user2", "notes": "Monthly rent payment"},
        {"user_id": "user3", "amount": Decimal("800"), "due_date": due, "status": "pending",
         "method": "pending", "notes": "Monthly rent payment"},
    ]


def upload_bills(today: date) -> list[dict[str, Any]]:
    return [
        {"name": "Electricity Bill", "amount": Decimal("120"), "category": "electricity",
         "due_date": today - timedelta(days=1), "status": "paid", "paid_by": "user1",
         "paid_date": today - timedelta(days=1), "split_between": list(SAMPLE_USERS),
         "notes": "Last month's electricity bill"},
        {"name": "Internet Bill", "amount": Decimal("80"), "category": "internet",
         "due_date": today + timedelta(days=4), "status": "pending", "split_between": list(SAMPLE_USERS),
         "notes": "Monthly internet bill"},
    ]


def upload_chores(today: date) -> list[dict[str, Any]]:
    return [
        {"title": "Clean Kitchen", "description": "Wash dishes, wipe counters, sweep floor",
         "category": "cleaning", "priority": "high", "points": 15, "assigned_to": "user1",
         "assigned_by": "user1", "due_date": today - timedelta(days=2), "status": "completed",
         "completed_date": today - timedelta(days=2)},
        {"title": "Take Out Trash", "description": "Empty all trash bins and take to curb",
         "category": "cleaning", "priority": "medium", "points": 10, "assigned_to": "user2",
         "assigned_by": "user1", "due_date": today, "status": "pending"},
        {"title": "Pay Bills", "description": "Pay electricity and internet bills",
         "category": "other", "priority": "high", "points": 20, "assigned_to": "user1",
         "assigned_by": "user1", "due_date": today + timedelta(days=3), "status": "pending"},
    ]


# ─── Service ────────────────────────────────────────────────────────────────────

class SeedService:
    def __init__(self, session: AsyncSession, today: date | None = None):
        self.session = session
        self.today = today or date.today()
        self.ids: dict[str, str] = {}

    async def _add(self, model, key: str, fields: dict[str, Any]):
        row = await SqlStore(self.session, model).create(**fields)
        self.ids[key] = row.id
        return row

    def _household_id(self) -> str:
        return self.ids.get("household1", "household1")

    # ─── Per-type seeders ───────────────────────────────────────────────────

    async def seed_households(self) -> None:
        await self._add(Household, "household1", sample_household())
        logger.info("Seeded households")

    async def seed_rent(self) -> None:
        hid = self._household_id()
        await self._add(RentSchedule, "rentSchedule1", {**sample_rent_schedule(self.today), "household_id": hid})
        for i, payment in enumerate(sample_rent_payments(self.today), start=1):
            await self._add(RentPayment, f"rentPayment{i}", {**payment, "household_id": hid})
        logger.info("Seeded rent schedule and payments")

    async def seed_bills(self) -> None:
        hid = self._household_id()
        for i, bill in enumerate(sample_bills(self.today), start=1):
            await self._add(Bill, f"bill{i}", {**bill, "household_id": hid})
        logger.info("Seeded bills")

    async def seed_chores(self) -> None:
        hid = self._household_id()
        for i, chore in enumerate(sample_chores(self.today), start=1):
            await self._add(Chore, f"chore{i}", {**chore, "household_id": hid})
        logger.info("Seeded chores")

    async def seed_completions(self) -> None:
        await self._add(ChoreCompletion, "choreCompletion1", {
            "household_id": self._household_id(),
            "chore_id": self.ids.get("chore2", "chore2"),
            "user_id": "user2",
            "completed_at": _at(self.today - timedelta(days=1), 14, 30),
            "points_earned": 15,
            "notes": "Completed vacuuming and dusting",
        })
        logger.info("Seeded chore completions")

    async def seed_sensors(self) -> None:
        hid = self._household_id()
        for i, sensor in enumerate(sample_sensors(), start=1):
            await self._add(Sensor, f"sensor{i}", {**sensor, "household_id": hid})
        logger.info("Seeded sensors")

    async def seed_sensor_events(self) -> None:
        hid = self._household_id()
        for i, (sensor_key, event) in enumerate(sample_sensor_events(self.today), start=1):
            await self._add(SensorEvent, f"sensorEvent{i}", {
                **event, "household_id": hid, "sensor_id": self.ids.get(sensor_key, sensor_key),
            })
        logger.info("Seeded sensor events")

    async def seed_nudges(self) -> None:
        hid = self._household_id()
        for i, nudge in enumerate(sample_nudges(self.today), start=1):
            await self._add(Nudge, f"nudge{i}", {**nudge, "household_id": hid})
        logger.info("Seeded nudges")

    async def seed_chat(self) -> None:
        hid = self._household_id()
        for i, message in enumerate(sample_chat_messages(self.today), start=1):
            await self._add(ChatMessage, f"chatMessage{i}", {**message, "household_id": hid})
        logger.info("Seeded chat messages")

    async def seed_notifications(self) -> None:
        hid = self._household_id()
        await self._add(Notification, "notification1", {
            "user_id": "user1", "household_id": hid, "type": "chore_completed",
            "title": "Chore Completed", "message": "Sam completed the living room vacuuming chore",
            "meta": {"chore_id": self.ids.get("chore2", "chore2"), "completed_by": "user2"},
        })
        await self._add(Notification, "notification2", {
            "user_id": "user3", "household_id": hid, "type": "rent_due",
            "title": "Rent Payment Overdue", "message": "Your rent payment is overdue. Please submit payment.",
            "meta": {"amount": "933.34", "due_date": month_bounds(self.today.year, self.today.month)[0].isoformat()},
        })
        logger.info("Seeded notifications")

    # ─── Entry points ───────────────────────────────────────────────────────

    async def seed_all(self) -> dict[str, str]:
        """Insert the whole dataset in dependency order; returns logical key → id."""
        logger.info("Starting database seeding...")
        async with write_guard("seed sample data"):
            await self.seed_households()
            await self.seed_rent()
            await self.seed_bills()
            await self.seed_chores()
            await self.seed_completions()
            await self.seed_sensors()
            await self.seed_sensor_events()
            await self.seed_nudges()
            await self.seed_chat()
            await self.seed_notifications()
        logger.info("All data seeded (%d rows)", len(self.ids))
        return dict(self.ids)

    async def seed_specific(self, data_type: str) -> dict[str, str]:
        seeders = {
            "households": self.seed_households,
            "chores": self.seed_chores,
            "bills": self.seed_bills,
            "sensors": self.seed_sensors,
        }
        if data_type not in seeders:
            raise ValueError(f"Unknown data type: {data_type}")
        async with write_guard(f"seed {data_type}"):
            await seeders[data_type]()
        return dict(self.ids)

    async def clear_all(self) -> dict[str, int]:
        """Delete every row except the reserved sentinel, children first."""
        deleted: dict[str, int] = {}
        async with write_guard("clear sample data"):
            for model in reversed(MODELS_IN_DEPENDENCY_ORDER):
                deleted[model.__tablename__] = await SqlStore(self.session, model).delete_all_except(
                    RESERVED_SENTINEL_ID
                )
        logger.info("Cleared tables: %s", deleted)
        return deleted

    async def upload_sample_data(self, household_id: str) -> dict[str, int]:
        """Write the upload dataset into ``household_id``, creating the household if needed."""
        households = SqlStore(self.session, Household)
        async with write_guard("upload sample data"):
            if await households.get(household_id) is None:
                await households.create(id=household_id, members=list(SAMPLE_USERS), **UPLOAD_HOUSEHOLD)
            else:
                await households.update(household_id, dict(UPLOAD_HOUSEHOLD))

            counts = {"households": 1}
            for model, rows in (
                (RentPayment, upload_rent_payments(self.today)),
                (Bill, upload_bills(self.today)),
                (Chore, upload_chores(self.today)),
            ):
                store = SqlStore(self.session, model)
                for row in rows:
                    await store.create(**row, household_id=household_id)
                counts[model.__tablename__] = len(rows)
        logger.info("Uploaded sample data for household %s: %s", household_id, counts)
        return counts
