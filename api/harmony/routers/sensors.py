from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_sensor_nudge_service, get_sensor_service
from harmony.schemas.sensor import (
    SensorCreate,
    SensorEventCreate,
    SensorEventResponse,
    SensorEventResult,
    SensorInsights,
    SensorPatterns,
    SensorResponse,
    SensorUpdate,
)
from harmony.services.sensor_nudges import SensorNudgeService
from harmony.services.sensors import SensorService

router = APIRouter(tags=["sensors"])


@router.get("/households/{household_id}/sensors", response_model=list[SensorResponse])
async def list_active_sensors(
    household_id: str,
    service: SensorService = Depends(get_sensor_service),
):
    return await service.list_active(household_id)


@router.get("/households/{household_id}/sensors/patterns", response_model=SensorPatterns)
async def sensor_patterns(
    household_id: str,
    service: SensorNudgeService = Depends(get_sensor_nudge_service),
):
    """Busiest hour and area over the last seven days."""
    return await service.analyze_sensor_patterns(household_id)


@router.get("/households/{household_id}/sensors/insights", response_model=SensorInsights)
async def sensor_insights(
    household_id: str,
    service: SensorNudgeService = Depends(get_sensor_nudge_service),
):
    return await service.get_sensor_insights(household_id)


@router.post("/sensors", response_model=SensorResponse, status_code=201)
async def create_sensor(
    payload: SensorCreate,
    service: SensorService = Depends(get_sensor_service),
):
    return await service.create(payload)


@router.patch("/sensors/{sensor_id}", response_model=SensorResponse)
async def update_sensor(
    sensor_id: str,
    payload: SensorUpdate,
    service: SensorService = Depends(get_sensor_service),
):
    return await service.update(sensor_id, payload)


@router.delete("/sensors/{sensor_id}", status_code=204)
async def delete_sensor(
    sensor_id: str,
    service: SensorService = Depends(get_sensor_service),
):
    await service.delete(sensor_id)


@router.post("/sensors/{sensor_id}/events", response_model=SensorEventResult, status_code=201)
async def record_event(
    sensor_id: str,
    payload: SensorEventCreate,
    service: SensorNudgeService = Depends(get_sensor_nudge_service),
):
    """Record a reading; a matching pattern also posts a nudge to the household."""
    event, nudge = await service.process_sensor_event(sensor_id, payload)
    return {"event": event, "nudge": nudge}


@router.get("/sensors/{sensor_id}/events", response_model=list[SensorEventResponse])
async def recent_events(
    sensor_id: str,
    hours: int = Query(default=24, ge=1, le=24 * 30),
    service: SensorService = Depends(get_sensor_service),
):
    return await service.recent_events(sensor_id, hours=hours)
