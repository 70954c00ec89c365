import logging
from collections.abc import Sequence
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import inspect, select, text
from sqlalchemy.exc import SQLAlchemyError

from harmony.models.bill import Bill
from harmony.models.chore import Chore
from harmony.models.household import Household
from harmony.models.registry import SCOPED_MODELS
from harmony.models.rent import RentPayment
from harmony.repositories.store import SqlStore, json_list_contains
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)


class HouseholdService(EntityService[Household]):
    model = Household
    label = "household"

    async def list_for_member(self, user_id: str) -> Sequence[Household]:
        """Households whose ``members`` list contains ``user_id``."""
        try:
            result = await self.session.execute(
                select(Household)
                .where(json_list_contains(Household.members, user_id))
                .order_by(Household.created_at.desc())
            )
            return result.scalars().all()
        except SQLAlchemyError:
            logger.exception("Error fetching households for member %s", user_id)
            return []

    async def export_household_data(self, household_id: str) -> dict[str, Any] | None:
        """Household plus its rent payments, bills and chores, for download."""
        household = await self.get(household_id)
        if household is None:
            return None

        try:
            rent = await SqlStore(self.session, RentPayment).list_for_household(
                household_id, order_by=RentPayment.due_date
            )
            bills = await SqlStore(self.session, Bill).list_for_household(
                household_id, order_by=Bill.due_date
            )
            chores = await SqlStore(self.session, Chore).list_for_household(
                household_id, order_by=Chore.created_at
            )
        except SQLAlchemyError:
            logger.exception("Error exporting household %s", household_id)
            return None

        return {
            "household": _row_to_dict(household),
            "rent_payments": [_row_to_dict(r) for r in rent],
            "bills": [_row_to_dict(b) for b in bills],
            "chores": [_row_to_dict(c) for c in chores],
            "exported_at": datetime.now(timezone.utc).isoformat(),
        }

    async def clear_household_data(self, household_id: str) -> dict[str, int]:
        """Delete every row the household owns, then the household itself.

        Returns deleted-row counts per table.
        """
        deleted: dict[str, int] = {}
        async with write_guard("clear household data"):
            for model in reversed(SCOPED_MODELS):
                count = await SqlStore(self.session, model).delete_for_household(household_id)
                deleted[model.__tablename__] = count
            deleted[Household.__tablename__] = int(await self.store.delete(household_id))
        logger.info("Cleared household %s: %s", household_id, deleted)
        return deleted

    async def check_connection(self) -> bool:
        try:
            await self.session.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError:
            logger.exception("Database connection check failed")
            return False


def _row_to_dict(row) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr in inspect(row).mapper.column_attrs:
        value = getattr(row, attr.key)
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif value is not None and not isinstance(value, (str, int, float, bool, list, dict)):
            value = str(value)
        out[attr.columns[0].name] = value
    return out
