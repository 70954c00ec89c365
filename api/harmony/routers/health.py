from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from harmony.core.deps import get_household_service
from harmony.services.households import HouseholdService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db(service: HouseholdService = Depends(get_household_service)):
    if not await service.check_connection():
        return JSONResponse(status_code=503, content={"status": "error", "database": "unreachable"})
    return {"status": "ok", "database": "connected"}
