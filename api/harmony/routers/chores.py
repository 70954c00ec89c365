from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_chore_service, get_sensor_nudge_service
from harmony.schemas.chore import (
    ChoreCompletionCreate,
    ChoreCompletionResponse,
    ChoreCompletionResult,
    ChoreCreate,
    ChoreResponse,
    ChoreUpdate,
)
from harmony.services.chores import ChoreService
from harmony.services.sensor_nudges import SensorNudgeService

router = APIRouter(tags=["chores"])


@router.get("/households/{household_id}/chores", response_model=list[ChoreResponse])
async def list_chores(
    household_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: ChoreService = Depends(get_chore_service),
):
    return await service.list_for_household(household_id, limit=limit)


@router.post("/chores", response_model=ChoreResponse, status_code=201)
async def create_chore(
    payload: ChoreCreate,
    service: ChoreService = Depends(get_chore_service),
):
    return await service.create(payload)


@router.patch("/chores/{chore_id}", response_model=ChoreResponse)
async def update_chore(
    chore_id: str,
    payload: ChoreUpdate,
    service: ChoreService = Depends(get_chore_service),
):
    return await service.update(chore_id, payload)


@router.delete("/chores/{chore_id}", status_code=204)
async def delete_chore(
    chore_id: str,
    service: ChoreService = Depends(get_chore_service),
):
    await service.delete(chore_id)


@router.post("/chores/{chore_id}/complete", response_model=ChoreCompletionResult, status_code=201)
async def complete_chore(
    chore_id: str,
    payload: ChoreCompletionCreate,
    service: ChoreService = Depends(get_chore_service),
    nudger: SensorNudgeService = Depends(get_sensor_nudge_service),
):
    completion = await service.complete_chore(chore_id, payload)
    chore = await service.get(chore_id)
    nudge = await nudger.process_chore_completion(chore.household_id, payload.user_id, chore.title)
    return {"completion": completion, "nudge": nudge}


@router.get("/households/{household_id}/chores/completions", response_model=list[ChoreCompletionResponse])
async def list_completions(
    household_id: str,
    days: int | None = Query(default=None, ge=1, le=365),
    service: ChoreService = Depends(get_chore_service),
):
    return await service.list_completions(household_id, days=days)
