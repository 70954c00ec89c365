"""Household-scoped entity store.

One storage interface (``EntityStore``) with one concrete adapter
(``SqlStore``) over async SQLAlchemy.  Every household-owned table goes through
the same create / get / list / update / delete / upsert code path; the
per-entity services layer their domain queries and error policy on top.

Example:
    store = SqlStore(session, Bill)
    bills = await store.list_for_household("household1", order_by=Bill.due_date, limit=50)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Generic, Protocol, TypeVar

from pydantic_core import to_jsonable_python
from sqlalchemy import JSON, ColumnElement, String, cast, delete, func, inspect, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.database import Base

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)

# Requests above this are silently capped
MAX_LIMIT = 1000


class EntityStore(Protocol[T]):
    async def create(self, **fields: Any) -> T: ...

    async def get(self, entity_id: str) -> T | None: ...

    async def list_for_household(
        self,
        household_id: str,
        *,
        order_by: Any = None,
        limit: int | None = None,
        filters: Iterable[ColumnElement[bool]] = (),
    ) -> Sequence[T]: ...

    async def update(self, entity_id: str, fields: dict[str, Any]) -> T | None: ...

    async def delete(self, entity_id: str) -> bool: ...

    async def upsert_many(self, rows: Sequence[dict[str, Any]]) -> int: ...


class SqlStore(Generic[T]):
    """SQLAlchemy adapter for ``EntityStore``.

    Writes are flushed but not committed; the owner of the session commits
    (``get_db`` does it at the end of each request).
    """

    def __init__(self, session: AsyncSession, model_class: type[T]) -> None:
        self.session = session
        self.model_class = model_class
        self._json_attrs = {
            attr.key
            for attr in inspect(model_class).column_attrs
            if isinstance(attr.columns[0].type, JSON)
        }

    # ── Reads ──────────────────────────────────────────────────────────────

    async def get(self, entity_id: str) -> T | None:
        return await self.session.get(self.model_class, entity_id)

    async def list_for_household(
        self,
        household_id: str,
        *,
        order_by: Any = None,
        limit: int | None = None,
        filters: Iterable[ColumnElement[bool]] = (),
    ) -> Sequence[T]:
        """Rows owned by one household, newest first by ``order_by``."""
        if not household_id:
            raise ValueError("household_id is required")
        stmt = select(self.model_class).where(self.model_class.household_id == household_id)
        for clause in filters:
            stmt = stmt.where(clause)
        if order_by is not None:
            stmt = stmt.order_by(order_by.desc())
        if limit is not None:
            stmt = stmt.limit(min(limit, MAX_LIMIT))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_where(
        self,
        *filters: ColumnElement[bool],
        order_by: Any = None,
        limit: int | None = None,
    ) -> Sequence[T]:
        stmt = select(self.model_class)
        for clause in filters:
            stmt = stmt.where(clause)
        if order_by is not None:
            stmt = stmt.order_by(order_by.desc())
        if limit is not None:
            stmt = stmt.limit(min(limit, MAX_LIMIT))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(self.model_class))
        return result.scalar_one()

    async def count_for_household(self, household_id: str, *filters: ColumnElement[bool]) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model_class)
            .where(self.model_class.household_id == household_id, *filters)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    # ── Writes ─────────────────────────────────────────────────────────────

    async def create(self, **fields: Any) -> T:
        entity = self.model_class(**self._prepare(fields))
        self.session.add(entity)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def update(self, entity_id: str, fields: dict[str, Any]) -> T | None:
        """Partial update; ``updated_at`` is refreshed by the column's onupdate."""
        entity = await self.get(entity_id)
        if entity is None:
            return None
        for field, value in self._prepare(fields).items():
            setattr(entity, field, value)
        await self.session.flush()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        entity = await self.get(entity_id)
        if entity is None:
            return False
        await self.session.delete(entity)
        await self.session.flush()
        return True

    async def delete_for_household(self, household_id: str) -> int:
        result = await self.session.execute(
            delete(self.model_class).where(self.model_class.household_id == household_id)
        )
        return result.rowcount or 0

    async def delete_all_except(self, keep_id: str) -> int:
        result = await self.session.execute(
            delete(self.model_class).where(self.model_class.id != keep_id)
        )
        return result.rowcount or 0

    async def upsert_many(self, rows: Sequence[dict[str, Any]]) -> int:
        """Insert rows or overwrite them by ``id``.

        Keys are attribute names.  Rows are grouped by their key set so that a
        column missing from a row keeps its stored value on conflict (and its
        default on insert), which keeps repeated runs idempotent.
        """
        if not rows:
            return 0

        table = self.model_class.__table__
        columns = {attr.key: attr.columns[0].name for attr in inspect(self.model_class).column_attrs}
        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            insert = pg_insert
        elif dialect == "sqlite":
            insert = sqlite_insert
        else:
            raise NotImplementedError(f"upsert is not supported on {dialect}")

        groups: dict[frozenset[str], list[dict[str, Any]]] = {}
        for row in rows:
            if not row.get("id"):
                raise ValueError("upsert rows must carry an id")
            values = {
                columns[key]: value
                for key, value in self._prepare(row).items()
                if key in columns
            }
            groups.setdefault(frozenset(values), []).append(values)

        written = 0
        for keys, group in groups.items():
            stmt = insert(table).values(group)
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.id],
                set_={name: stmt.excluded[name] for name in keys if name != "id"},
            )
            await self.session.execute(stmt)
            written += len(group)
        return written

    # ── Helpers ────────────────────────────────────────────────────────────

    def _prepare(self, fields: dict[str, Any]) -> dict[str, Any]:
        """JSON columns only take JSON-native values (no Decimal, date or models)."""
        return {
            key: to_jsonable_python(value) if key in self._json_attrs and value is not None else value
            for key, value in fields.items()
        }


def json_list_contains(column, value: str) -> ColumnElement[bool]:
    """``value`` is an element of the JSON string list in ``column``.

    JSON containment operators differ per dialect; matching the quoted id in the
    serialized list works on both Postgres and SQLite.  ``_`` and ``%`` in ids
    are matched literally.
    """
    return cast(column, String).contains(f'"{value}"', autoescape=True)
