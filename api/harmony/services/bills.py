import logging
from datetime import date

from harmony.core.errors import NotFoundError
from harmony.models.bill import Bill
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)


class BillService(EntityService[Bill]):
    model = Bill
    label = "bill"
    order_field = "due_date"

    async def mark_paid(self, bill_id: str, user_id: str, paid_date: date | None = None) -> Bill:
        async with write_guard("mark bill as paid"):
            bill = await self.store.update(
                bill_id,
                {"status": "paid", "paid_date": paid_date or date.today(), "paid_by": user_id},
            )
        if bill is None:
            raise NotFoundError("Bill not found")
        logger.info("Bill %s marked paid by %s", bill_id, user_id)
        return bill
