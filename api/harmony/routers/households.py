from fastapi import APIRouter, Depends, HTTPException, Query

from harmony.core.deps import get_household_service
from harmony.schemas.household import HouseholdCreate, HouseholdResponse, HouseholdUpdate
from harmony.services.households import HouseholdService

router = APIRouter(tags=["households"])


@router.post("/households", response_model=HouseholdResponse, status_code=201)
async def create_household(
    payload: HouseholdCreate,
    service: HouseholdService = Depends(get_household_service),
):
    return await service.create(payload)


@router.get("/households", response_model=list[HouseholdResponse])
async def list_households(
    member: str = Query(min_length=1),
    service: HouseholdService = Depends(get_household_service),
):
    return await service.list_for_member(member)


@router.get("/households/{household_id}", response_model=HouseholdResponse)
async def get_household(
    household_id: str,
    service: HouseholdService = Depends(get_household_service),
):
    household = await service.get(household_id)
    if not household:
        raise HTTPException(status_code=404, detail="Household not found")
    return household


@router.patch("/households/{household_id}", response_model=HouseholdResponse)
async def update_household(
    household_id: str,
    payload: HouseholdUpdate,
    service: HouseholdService = Depends(get_household_service),
):
    return await service.update(household_id, payload)


@router.delete("/households/{household_id}")
async def delete_household(
    household_id: str,
    service: HouseholdService = Depends(get_household_service),
):
    """Delete the household and everything it owns; returns deleted rows per table."""
    if not await service.get(household_id):
        raise HTTPException(status_code=404, detail="Household not found")
    return await service.clear_household_data(household_id)


@router.get("/households/{household_id}/export")
async def export_household(
    household_id: str,
    service: HouseholdService = Depends(get_household_service),
):
    data = await service.export_household_data(household_id)
    if data is None:
        raise HTTPException(status_code=404, detail="Household not found")
    return data
