"""Shared plumbing for the per-entity query services.

Error policy:
    reads   – ``SQLAlchemyError`` is logged and an empty list / ``None`` is returned
    writes  – ``SQLAlchemyError`` becomes ``DataAccessError("Failed to <action>")``;
              updating or deleting a missing row raises ``NotFoundError``
"""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.config import settings
from harmony.core.database import Base
from harmony.core.errors import DataAccessError, NotFoundError
from harmony.repositories.store import SqlStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Base)


@asynccontextmanager
async def write_guard(action: str):
    """Turn backend failures inside the block into ``DataAccessError``."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.exception("Failed to %s", action)
        raise DataAccessError(f"Failed to {action}") from e


class EntityService(Generic[T]):
    """CRUD over one household-scoped table.

    Subclasses set ``model``, ``label`` (used in error messages) and
    ``order_field`` (the column lists are sorted on, newest first).
    """

    model: ClassVar[type[Base]]
    label: ClassVar[str]
    order_field: ClassVar[str] = "created_at"
    default_limit: ClassVar[int | None] = None

    def __init__(self, session: AsyncSession):
        self.session = session
        self.store: SqlStore[T] = SqlStore(session, self.model)

    @property
    def _order_column(self):
        return getattr(self.model, self.order_field)

    # ─── Reads ──────────────────────────────────────────────────────────────

    async def list_for_household(
        self,
        household_id: str,
        limit: int | None = None,
        filters: Sequence[Any] = (),
    ) -> Sequence[T]:
        try:
            return await self.store.list_for_household(
                household_id,
                order_by=self._order_column,
                limit=limit or self.default_limit or settings.default_query_limit,
                filters=filters,
            )
        except SQLAlchemyError:
            logger.exception("Error fetching %ss for household %s", self.label, household_id)
            return []

    async def get(self, entity_id: str) -> T | None:
        try:
            return await self.store.get(entity_id)
        except SQLAlchemyError:
            logger.exception("Error fetching %s %s", self.label, entity_id)
            return None

    # ─── Writes ─────────────────────────────────────────────────────────────

    async def create(self, payload: BaseModel | dict[str, Any]) -> T:
        fields = payload.model_dump() if isinstance(payload, BaseModel) else dict(payload)
        async with write_guard(f"create {self.label}"):
            entity = await self.store.create(**fields)
        logger.info("Created %s %s", self.label, entity.id)
        return entity

    async def update(self, entity_id: str, payload: BaseModel | dict[str, Any]) -> T:
        """Partial update: only fields the caller actually set are written."""
        if isinstance(payload, BaseModel):
            fields = payload.model_dump(exclude_unset=True)
        else:
            fields = dict(payload)
        async with write_guard(f"update {self.label}"):
            entity = await self.store.update(entity_id, fields)
        if entity is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return entity

    async def delete(self, entity_id: str) -> None:
        async with write_guard(f"delete {self.label}"):
            deleted = await self.store.delete(entity_id)
        if not deleted:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        logger.info("Deleted %s %s", self.label, entity_id)

    async def _require(self, entity_id: str) -> T:
        async with write_guard(f"load {self.label}"):
            entity = await self.store.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return entity
