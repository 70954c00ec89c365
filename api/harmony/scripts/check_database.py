"""
Smoke-test the configured database: connection, table access, a CRUD
round trip on a throwaway household and a LISTEN/NOTIFY round trip.

    test-supabase

Exit status: 0 if all checks pass, 1 otherwise.
"""
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from harmony.core.database import dispose_engine, get_session_factory
from harmony.core.errors import HarmonyError
from harmony.models.household import Household
from harmony.models.registry import MODELS_IN_DEPENDENCY_ORDER
from harmony.schemas.household import HouseholdCreate, HouseholdUpdate
from harmony.services.households import HouseholdService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("check_database")


async def check_connection() -> bool:
    async with get_session_factory()() as session:
        ok = await HouseholdService(session).check_connection()
    if ok:
        logger.info("  ✓ connection successful")
    else:
        logger.error("  ✗ connection failed")
    return ok


async def check_tables() -> bool:
    ok = True
    async with get_session_factory()() as session:
        for model in MODELS_IN_DEPENDENCY_ORDER:
            try:
                count = (await session.execute(select(func.count()).select_from(model))).scalar_one()
                logger.info("  ✓ %-26s accessible (%d rows)", model.__tablename__, count)
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("  ✗ %-26s %s", model.__tablename__, e)
                ok = False
    return ok


async def check_crud() -> bool:
    async with get_session_factory()() as session:
        service = HouseholdService(session)
        household = await service.create(
            HouseholdCreate(name="Test Household", address="123 Test St", members=["test-user-1", "test-user-2"])
        )
        await session.commit()
        logger.info("  ✓ created household %s", household.id)

        read = await service.get(household.id)
        if read is None:
            logger.error("  ✗ could not read back household %s", household.id)
            return False
        logger.info("  ✓ read household %r", read.name)

        await service.update(household.id, HouseholdUpdate(name="Updated Test Household"))
        await session.commit()
        logger.info("  ✓ updated household")

        await service.delete(household.id)
        await session.commit()
        if await session.get(Household, household.id) is not None:
            logger.error("  ✗ household %s still present after delete", household.id)
            return False
        logger.info("  ✓ deleted test household")
    return True


REALTIME_CHANNEL = "harmony_check"
REALTIME_TIMEOUT = 5


async def check_realtime() -> bool:
    """LISTEN/NOTIFY round trip; only Postgres delivers notifications."""
    async with get_session_factory()() as session:
        conn = await session.connection()
        if conn.dialect.name != "postgresql":
            logger.info("  - realtime skipped (%s has no LISTEN/NOTIFY)", conn.dialect.name)
            return True

        raw = await conn.get_raw_connection()
        driver = raw.driver_connection  # asyncpg.Connection
        received: asyncio.Future[str] = asyncio.get_running_loop().create_future()

        def on_notify(connection, pid, channel, payload):
            if not received.done():
                received.set_result(payload)

        await driver.add_listener(REALTIME_CHANNEL, on_notify)
        try:
            await driver.execute(f"NOTIFY {REALTIME_CHANNEL}, 'ping'")
            payload = await asyncio.wait_for(received, timeout=REALTIME_TIMEOUT)
        except asyncio.TimeoutError:
            logger.error("  ✗ no notification within %ds", REALTIME_TIMEOUT)
            return False
        finally:
            await driver.remove_listener(REALTIME_CHANNEL, on_notify)

    logger.info("  ✓ realtime notification received (%s)", payload)
    return payload == "ping"


CHECKS: list[tuple[str, Callable[[], Awaitable[bool]]]] = [
    ("Connection", check_connection),
    ("Table access", check_tables),
    ("CRUD operations", check_crud),
    ("Realtime", check_realtime),
]


async def run_checks() -> tuple[int, int]:
    passed = failed = 0
    try:
        for name, check in CHECKS:
            logger.info("── %s ──────────────────────", name)
            try:
                ok = await check()
            except (SQLAlchemyError, HarmonyError) as e:
                logger.error("  ✗ %s failed: %s", name, e)
                ok = False
            if ok:
                passed += 1
            else:
                failed += 1
    finally:
        await dispose_engine()
    return passed, failed


def main() -> int:
    logger.info("Starting database checks...")
    passed, failed = asyncio.run(run_checks())
    logger.info("Passed: %d  Failed: %d", passed, failed)
    if failed:
        logger.warning("Some checks failed. Please check the database configuration.")
        return 1
    logger.info("All checks passed. The database is ready to use.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
