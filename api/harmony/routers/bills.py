from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_bill_service
from harmony.schemas.bill import BillCreate, BillResponse, BillUpdate, MarkBillPaid
from harmony.services.bills import BillService

router = APIRouter(tags=["bills"])


@router.get("/households/{household_id}/bills", response_model=list[BillResponse])
async def list_bills(
    household_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: BillService = Depends(get_bill_service),
):
    return await service.list_for_household(household_id, limit=limit)


@router.post("/bills", response_model=BillResponse, status_code=201)
async def create_bill(
    payload: BillCreate,
    service: BillService = Depends(get_bill_service),
):
    return await service.create(payload)


@router.patch("/bills/{bill_id}", response_model=BillResponse)
async def update_bill(
    bill_id: str,
    payload: BillUpdate,
    service: BillService = Depends(get_bill_service),
):
    return await service.update(bill_id, payload)


@router.delete("/bills/{bill_id}", status_code=204)
async def delete_bill(
    bill_id: str,
    service: BillService = Depends(get_bill_service),
):
    await service.delete(bill_id)


@router.post("/bills/{bill_id}/paid", response_model=BillResponse)
async def mark_bill_paid(
    bill_id: str,
    payload: MarkBillPaid,
    service: BillService = Depends(get_bill_service),
):
    return await service.mark_paid(bill_id, payload.user_id, payload.paid_date)
