"""Firestore export → relational migration.

Source is a Firestore JSON export: either one file holding
``{"<collection>": [...docs] | {"<docId>": {...}}}`` or a directory of
``<collection>.json`` files in the same two shapes.  For every collection:

    1. Timestamp objects ({"_seconds", "_nanoseconds"} / {"seconds", "nanoseconds"})
       become ISO-8601 strings, recursively.
    2. Keys are mapped camelCase → snake_case, recursively.
    3. Collection-specific renames are applied, unknown keys dropped, values
       coerced to the column types (date-only columns take the YYYY-MM-DD part).
    4. Rows are upserted keyed by the original document id, so re-running the
       migration leaves the tables unchanged.

A failing collection is logged and counted; the run carries on with the rest.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any

from sqlalchemy import JSON, Boolean, Date, DateTime, Integer, Numeric, inspect
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from harmony.core.casing import to_snake_case
from harmony.core.database import Base
from harmony.models.bill import Bill
from harmony.models.chat import ChatMessage
from harmony.models.chore import Chore
from harmony.models.household import Household
from harmony.models.notification import Notification
from harmony.models.nudge import Nudge
from harmony.models.rent import RentPayment
from harmony.models.sensor import Sensor
from harmony.repositories.store import SqlStore

logger = logging.getLogger(__name__)

# Firestore collection → target model, in migration order
COLLECTIONS: dict[str, type[Base]] = {
    "households": Household,
    "chores": Chore,
    "bills": Bill,
    "rentPayments": RentPayment,
    "sensors": Sensor,
    "nudges": Nudge,
    "chatMessages": ChatMessage,
    "notifications": Notification,
}

# snake_case source key → model attribute, where they differ
FIELD_RENAMES: dict[str, dict[str, str]] = {
    "households": {"member_ids": "members"},
    "notifications": {"metadata": "meta", "data": "meta"},
}


# ─── Document conversion ────────────────────────────────────────────────────────

def _timestamp_seconds(value: dict) -> float | None:
    for secs, nanos in (("_seconds", "_nanoseconds"), ("seconds", "nanoseconds")):
        if secs in value and set(value) <= {secs, nanos}:
            return value[secs] + value.get(nanos, 0) / 1e9
    return None


def convert_timestamp(value: Any) -> Any:
    """Firestore timestamp objects and datetimes → ISO-8601 strings; anything else unchanged."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        seconds = _timestamp_seconds(value)
        if seconds is not None:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()
    return value


def _convert_timestamps(obj: Any) -> Any:
    converted = convert_timestamp(obj)
    if converted is not obj:
        return converted
    if isinstance(obj, dict):
        return {k: _convert_timestamps(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_timestamps(v) for v in obj]
    return obj


def convert_document(doc: dict[str, Any]) -> dict[str, Any]:
    return to_snake_case(_convert_timestamps(doc))


def _coerce(column_type, value: Any) -> Any:
    if value is None or isinstance(column_type, JSON):
        return value
    if isinstance(column_type, DateTime):
        if isinstance(value, str):
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value
    if isinstance(column_type, Date):
        if isinstance(value, str):
            return date.fromisoformat(value[:10])
        return value
    if isinstance(column_type, Numeric):
        return Decimal(str(value))
    if isinstance(column_type, Boolean):
        return bool(value)
    if isinstance(column_type, Integer):
        return int(value)
    return value


def to_row(model: type[Base], doc: dict[str, Any], renames: dict[str, str] | None = None) -> dict[str, Any]:
    """A converted document → upsert row keyed by model attribute.

    Raises ``ValueError`` when a required column is missing or a value does
    not fit its column.
    """
    renames = renames or {}
    attrs = {attr.key: attr.columns[0] for attr in inspect(model).column_attrs}
    row: dict[str, Any] = {}
    for key, value in doc.items():
        key = renames.get(key, key)
        column = attrs.get(key)
        if column is None:
            continue
        value = _coerce(column.type, value)
        if value is None and not column.nullable:
            # Let the column default apply (or keep the stored value on conflict)
            continue
        row[key] = value

    missing = [
        key for key, column in attrs.items()
        if key not in row
        and not column.nullable
        and column.default is None
        and column.server_default is None
    ]
    if missing:
        raise ValueError(f"{model.__tablename__} row {doc.get('id')!r} is missing {', '.join(missing)}")
    return row


# ─── Source ─────────────────────────────────────────────────────────────────────

class FirestoreExportSource:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._bundle: dict[str, Any] | None = None

    def _load(self, file: Path) -> Any:
        with file.open(encoding="utf-8") as fh:
            return json.load(fh)

    def read_collection(self, name: str) -> list[dict[str, Any]]:
        """Documents of one collection, each carrying its document id as ``id``."""
        if self.path.is_dir():
            file = self.path / f"{name}.json"
            raw = self._load(file) if file.exists() else []
        else:
            if self._bundle is None:
                self._bundle = self._load(self.path)
            raw = self._bundle.get(name, [])

        if isinstance(raw, dict):
            return [{**doc, "id": doc.get("id", doc_id)} for doc_id, doc in raw.items()]
        return list(raw)


# ─── Migration run ──────────────────────────────────────────────────────────────

@dataclass
class MigrationReport:
    succeeded: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


class MigrationService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], source: FirestoreExportSource):
        self.session_factory = session_factory
        self.source = source

    async def migrate_collection(self, name: str, model: type[Base]) -> int:
        renames = FIELD_RENAMES.get(name, {})
        rows = []
        for doc in self.source.read_collection(name):
            if not isinstance(doc, dict):
                raise ValueError(f"{name}: document is not an object: {doc!r}")
            if not doc.get("id"):
                raise ValueError(f"{name}: document without an id")
            rows.append(to_row(model, convert_document(doc), renames))

        if not rows:
            logger.info("No %s to migrate", name)
            return 0

        async with self.session_factory() as session:
            async with session.begin():
                written = await SqlStore(session, model).upsert_many(rows)
        logger.info("Migrated %d %s", written, name)
        return written

    async def run(self) -> MigrationReport:
        report = MigrationReport()
        for name, model in COLLECTIONS.items():
            logger.info("Migrating %s...", name)
            try:
                report.succeeded[name] = await self.migrate_collection(name, model)
            except Exception as e:
                # Malformed documents fail in many ways; one collection never stops the run
                logger.exception("Error migrating %s", name)
                report.failed[name] = str(e)

        logger.info(
            "Migration finished: %d collections succeeded, %d failed",
            len(report.succeeded), len(report.failed),
        )
        return report
