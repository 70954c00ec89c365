"""
Load the sample dataset into one household, or clear a household's data.

    upload-sample-data upload <householdId>
    upload-sample-data clear <householdId>
    upload-sample-data help
"""
import asyncio
import logging
import sys

from harmony.core.database import dispose_engine, get_session_factory
from harmony.services.households import HouseholdService
from harmony.services.seed import SeedService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("upload_sample_data")

USAGE = """\
Usage: upload-sample-data <command> [householdId]

Commands:
  upload <householdId>    Upload sample data for a household
  clear <householdId>     Clear all data for a household
  help                    Show this help message

Examples:
  upload-sample-data upload household-123
  upload-sample-data clear household-123
"""


async def upload(household_id: str) -> dict[str, int]:
    try:
        async with get_session_factory()() as session:
            async with session.begin():
                return await SeedService(session).upload_sample_data(household_id)
    finally:
        await dispose_engine()


async def clear(household_id: str) -> dict[str, int]:
    try:
        async with get_session_factory()() as session:
            async with session.begin():
                return await HouseholdService(session).clear_household_data(household_id)
    finally:
        await dispose_engine()


COMMANDS = {"upload": upload, "clear": clear}


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    command = args[0] if args else "help"

    if command == "help":
        print(USAGE)
        return 0
    if command not in COMMANDS:
        logger.error("Unknown command: %s", command)
        print(USAGE)
        return 1
    if len(args) < 2 or not args[1]:
        logger.error("Household ID is required")
        print(USAGE)
        return 1

    household_id = args[1]
    logger.info("Running %s for household %s", command, household_id)
    counts = asyncio.run(COMMANDS[command](household_id))
    for table, count in counts.items():
        logger.info("  • %-18s %d", table, count)
    logger.info("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
