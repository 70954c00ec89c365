from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from harmony.core.deps import get_rent_service
from harmony.schemas.rent import (
    MarkRentPaid,
    RentPaymentCreate,
    RentPaymentResponse,
    RentPaymentUpdate,
    RentScheduleCreate,
    RentScheduleResponse,
    RentScheduleUpdate,
    RentStats,
)
from harmony.services.rent import RentService

router = APIRouter(tags=["rent"])


# ─── Payments ────────────────────────────────────────────────────────────────

@router.get("/households/{household_id}/rent/payments", response_model=list[RentPaymentResponse])
async def list_payments(
    household_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: RentService = Depends(get_rent_service),
):
    return await service.list_for_household(household_id, limit=limit)


@router.get("/households/{household_id}/rent/payments/current", response_model=list[RentPaymentResponse])
async def current_month_payments(
    household_id: str,
    service: RentService = Depends(get_rent_service),
):
    return await service.current_month_payments(household_id)


@router.get("/households/{household_id}/rent/payments/overdue", response_model=list[RentPaymentResponse])
async def overdue_payments(
    household_id: str,
    service: RentService = Depends(get_rent_service),
):
    return await service.overdue_payments(household_id)


@router.post("/rent/payments", response_model=RentPaymentResponse, status_code=201)
async def create_payment(
    payload: RentPaymentCreate,
    service: RentService = Depends(get_rent_service),
):
    return await service.create(payload)


@router.patch("/rent/payments/{payment_id}", response_model=RentPaymentResponse)
async def update_payment(
    payment_id: str,
    payload: RentPaymentUpdate,
    service: RentService = Depends(get_rent_service),
):
    return await service.update(payment_id, payload)


@router.delete("/rent/payments/{payment_id}", status_code=204)
async def delete_payment(
    payment_id: str,
    service: RentService = Depends(get_rent_service),
):
    await service.delete(payment_id)


@router.post("/rent/payments/{payment_id}/paid", response_model=RentPaymentResponse)
async def mark_payment_paid(
    payment_id: str,
    payload: MarkRentPaid,
    service: RentService = Depends(get_rent_service),
):
    return await service.mark_paid(payment_id, payload.user_id, payload.paid_date)


# ─── Schedule ────────────────────────────────────────────────────────────────

@router.post("/rent/schedules", response_model=RentScheduleResponse, status_code=201)
async def create_schedule(
    payload: RentScheduleCreate,
    service: RentService = Depends(get_rent_service),
):
    return await service.create_schedule(payload)


@router.get("/households/{household_id}/rent/schedule", response_model=RentScheduleResponse)
async def get_schedule(
    household_id: str,
    service: RentService = Depends(get_rent_service),
):
    schedule = await service.get_active_schedule(household_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="No active rent schedule")
    return schedule


@router.patch("/rent/schedules/{schedule_id}", response_model=RentScheduleResponse)
async def update_schedule(
    schedule_id: str,
    payload: RentScheduleUpdate,
    service: RentService = Depends(get_rent_service),
):
    return await service.update_schedule(schedule_id, payload)


@router.post("/households/{household_id}/rent/generate", response_model=list[RentPaymentResponse])
async def generate_payments(
    household_id: str,
    year: int | None = Query(default=None, ge=2000, le=2100),
    month: int | None = Query(default=None, ge=1, le=12),
    service: RentService = Depends(get_rent_service),
):
    """Create this month's (or the given month's) payments from the active schedule."""
    today = date.today()
    return await service.generate_monthly_payments(household_id, year or today.year, month or today.month)


@router.get("/households/{household_id}/rent/stats", response_model=RentStats)
async def rent_stats(
    household_id: str,
    service: RentService = Depends(get_rent_service),
):
    return await service.get_rent_stats(household_id)
