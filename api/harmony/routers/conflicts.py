from fastapi import APIRouter, Depends, Query
from pydantic import Field

from harmony.core.deps import get_chat_service, get_conflict_service
from harmony.schemas.base import CamelModel
from harmony.schemas.conflict import (
    ConflictAnalysisResponse,
    ConflictSessionCreate,
    ConflictSessionResponse,
    ConflictSessionUpdate,
)
from harmony.services.chat import ChatService
from harmony.services.conflicts import ANALYSIS_WINDOW, ConflictService

router = APIRouter(tags=["conflicts"])


class ResolutionRequest(CamelModel):
    context: str = Field(min_length=1, max_length=4000)


# ─── Coach sessions ──────────────────────────────────────────────────────────

@router.get("/households/{household_id}/conflicts/sessions", response_model=list[ConflictSessionResponse])
async def list_sessions(
    household_id: str,
    active: bool = False,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: ConflictService = Depends(get_conflict_service),
):
    if active:
        return await service.active_sessions(household_id)
    return await service.list_for_household(household_id, limit=limit)


@router.post("/conflicts/sessions", response_model=ConflictSessionResponse, status_code=201)
async def create_session(
    payload: ConflictSessionCreate,
    service: ConflictService = Depends(get_conflict_service),
):
    return await service.create(payload)


@router.patch("/conflicts/sessions/{session_id}", response_model=ConflictSessionResponse)
async def update_session(
    session_id: str,
    payload: ConflictSessionUpdate,
    service: ConflictService = Depends(get_conflict_service),
):
    return await service.update_session(session_id, payload)


@router.post("/conflicts/sessions/{session_id}/resolution", response_model=ConflictSessionResponse)
async def suggest_resolution(
    session_id: str,
    payload: ResolutionRequest,
    service: ConflictService = Depends(get_conflict_service),
):
    return await service.suggest_resolution(session_id, payload.context)


# ─── Analyses ────────────────────────────────────────────────────────────────

@router.post("/households/{household_id}/conflicts/analyze", response_model=ConflictAnalysisResponse, status_code=201)
async def analyze_chat(
    household_id: str,
    service: ConflictService = Depends(get_conflict_service),
    chat: ChatService = Depends(get_chat_service),
):
    """Analyze the latest chat messages and store the result."""
    recent = await chat.list_recent(household_id, limit=ANALYSIS_WINDOW)
    return await service.analyze_household(household_id, list(reversed(recent)))


@router.get("/households/{household_id}/conflicts/analyses", response_model=list[ConflictAnalysisResponse])
async def list_analyses(
    household_id: str,
    service: ConflictService = Depends(get_conflict_service),
):
    return await service.list_analyses(household_id)


@router.post("/conflicts/analyses/{analysis_id}/resolve", response_model=ConflictAnalysisResponse)
async def resolve_analysis(
    analysis_id: str,
    service: ConflictService = Depends(get_conflict_service),
):
    return await service.resolve_analysis(analysis_id)
