"""
Copy a Firestore JSON export into the Supabase Postgres database.

    FIRESTORE_EXPORT_PATH=./firestore-export.json migrate-to-supabase

FIRESTORE_EXPORT_PATH is either one export file or a directory holding one
``<collection>.json`` per collection.  Rows are upserted by their Firestore
document id, so the script is safe to re-run.

Exit status: 0 if every collection migrated, 1 otherwise (including missing
configuration).
"""
import asyncio
import logging
import sys
from pathlib import Path

from harmony.core.config import settings
from harmony.core.database import dispose_engine, get_session_factory
from harmony.services.migration import FirestoreExportSource, MigrationReport, MigrationService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("migrate")


async def run(export_path: Path) -> MigrationReport:
    service = MigrationService(get_session_factory(), FirestoreExportSource(export_path))
    try:
        return await service.run()
    finally:
        await dispose_engine()


def main() -> int:
    if not settings.firestore_export_path:
        logger.error("FIRESTORE_EXPORT_PATH is not set")
        return 1
    export_path = Path(settings.firestore_export_path)
    if not export_path.exists():
        logger.error("Firestore export not found: %s", export_path)
        return 1

    logger.info("Starting Firestore → Supabase migration from %s", export_path)
    report = asyncio.run(run(export_path))

    logger.info("── Migration summary ────────────────────────")
    for name, count in report.succeeded.items():
        logger.info("  ✓ %-14s %d rows", name, count)
    for name, error in report.failed.items():
        logger.info("  ✗ %-14s %s", name, error)

    if report.ok:
        logger.info("Migration completed successfully.")
        return 0
    logger.warning("%d collection(s) failed; see the log above.", len(report.failed))
    return 1


if __name__ == "__main__":
    sys.exit(main())
