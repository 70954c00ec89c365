from fastapi import APIRouter, Depends

from harmony.core.deps import get_dashboard_service
from harmony.schemas.dashboard import DashboardStats
from harmony.services.dashboard import DashboardService

router = APIRouter(tags=["dashboard"])


@router.get("/households/{household_id}/dashboard", response_model=DashboardStats)
async def dashboard(
    household_id: str,
    service: DashboardService = Depends(get_dashboard_service),
):
    return await service.get_dashboard_stats(household_id)
