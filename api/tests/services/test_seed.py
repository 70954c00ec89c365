"""
Tests for SeedService: full seeding, per-type seeding, clearing and the
household upload.
"""
from datetime import date

import pytest

from harmony.core.database import RESERVED_SENTINEL_ID
from harmony.models.bill import Bill
from harmony.models.chore import Chore, ChoreCompletion
from harmony.models.household import Household
from harmony.models.registry import MODELS_IN_DEPENDENCY_ORDER
from harmony.models.rent import RentPayment
from harmony.models.sensor import Sensor, SensorEvent
from harmony.repositories.store import SqlStore
from harmony.services.seed import SeedService

TODAY = date(2026, 10, 18)


async def _count(session, model) -> int:
    return await SqlStore(session, model).count()


# ── seed_all ─────────────────────────────────────────────────────────────────

class TestSeedAll:
    async def test_rows_per_table(self, session):
        ids = await SeedService(session, today=TODAY).seed_all()
        await session.commit()

        assert len(ids) == 28
        assert await _count(session, Household) == 1
        assert await _count(session, RentPayment) == 3
        assert await _count(session, Bill) == 3
        assert await _count(session, Chore) == 4
        assert await _count(session, Sensor) == 3

    async def test_references_use_generated_ids(self, session):
        ids = await SeedService(session, today=TODAY).seed_all()
        await session.commit()

        completion = await session.get(ChoreCompletion, ids["choreCompletion1"])
        assert completion.chore_id == ids["chore2"]
        assert completion.household_id == ids["household1"]

        event = await session.get(SensorEvent, ids["sensorEvent3"])
        assert event.sensor_id == ids["sensor3"]

    async def test_rent_is_due_this_month(self, session):
        ids = await SeedService(session, today=TODAY).seed_all()
        payment = await session.get(RentPayment, ids["rentPayment1"])
        assert payment.due_date == date(2026, 10, 1)


# ── seed_specific ────────────────────────────────────────────────────────────

class TestSeedSpecific:
    async def test_single_type(self, session):
        await SeedService(session, today=TODAY).seed_specific("bills")
        assert await _count(session, Bill) == 3
        assert await _count(session, Household) == 0

    async def test_unknown_type(self, session):
        with pytest.raises(ValueError, match="Unknown data type"):
            await SeedService(session, today=TODAY).seed_specific("listings")


# ── clear_all ────────────────────────────────────────────────────────────────

class TestClearAll:
    async def test_only_sentinel_survives(self, session):
        await SqlStore(session, Household).create(id=RESERVED_SENTINEL_ID, name="Reserved", members=[])
        await SeedService(session, today=TODAY).seed_all()
        await session.commit()

        deleted = await SeedService(session).clear_all()
        await session.commit()

        assert deleted["households"] == 1
        assert deleted["rent_payments"] == 3
        for model in MODELS_IN_DEPENDENCY_ORDER:
            expected = 1 if model is Household else 0
            assert await _count(session, model) == expected, model.__tablename__
        assert await session.get(Household, RESERVED_SENTINEL_ID) is not None

    async def test_empty_tables(self, session):
        deleted = await SeedService(session).clear_all()
        assert set(deleted.values()) == {0}


# ── upload_sample_data ───────────────────────────────────────────────────────

class TestUploadSampleData:
    async def test_creates_missing_household(self, session):
        counts = await SeedService(session, today=TODAY).upload_sample_data("household-123")
        await session.commit()

        assert counts == {"households": 1, "rent_payments": 3, "bills": 2, "chores": 3}
        household = await session.get(Household, "household-123")
        assert household.name == "Sample Household"
        assert household.members == ["user1", "user2", "user3"]

    async def test_updates_existing_household(self, session):
        await SqlStore(session, Household).create(id="household-123", name="Old", members=["a"])
        await SeedService(session, today=TODAY).upload_sample_data("household-123")
        await session.commit()

        household = await session.get(Household, "household-123")
        assert household.name == "Sample Household"
        assert household.members == ["a"]
        assert await _count(session, Household) == 1
