from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_nudge_service
from harmony.schemas.nudge import NudgeCreate, NudgeResponse
from harmony.services.nudges import NudgeService

router = APIRouter(tags=["nudges"])


@router.get("/households/{household_id}/nudges", response_model=list[NudgeResponse])
async def list_nudges(
    household_id: str,
    user_id: str | None = Query(default=None, alias="userId"),
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: NudgeService = Depends(get_nudge_service),
):
    return await service.list_nudges(household_id, user_id=user_id, limit=limit)


@router.post("/nudges", response_model=NudgeResponse, status_code=201)
async def create_nudge(
    payload: NudgeCreate,
    service: NudgeService = Depends(get_nudge_service),
):
    return await service.create(payload)


@router.post("/nudges/{nudge_id}/read", response_model=NudgeResponse)
async def mark_nudge_read(
    nudge_id: str,
    service: NudgeService = Depends(get_nudge_service),
):
    return await service.mark_read(nudge_id)


@router.post("/nudges/{nudge_id}/dismiss", response_model=NudgeResponse)
async def dismiss_nudge(
    nudge_id: str,
    service: NudgeService = Depends(get_nudge_service),
):
    return await service.dismiss(nudge_id)


@router.post("/households/{household_id}/nudges/time-based", response_model=list[NudgeResponse])
async def post_time_based_nudges(
    household_id: str,
    service: NudgeService = Depends(get_nudge_service),
):
    return await service.create_time_based_nudges(household_id)
