from fastapi import APIRouter, Depends, Query

from harmony.core.deps import get_notification_service
from harmony.schemas.notification import NotificationCreate, NotificationResponse
from harmony.services.notifications import NotificationService

router = APIRouter(tags=["notifications"])


@router.post("/notifications", response_model=NotificationResponse, status_code=201)
async def create_notification(
    payload: NotificationCreate,
    service: NotificationService = Depends(get_notification_service),
):
    return await service.create(payload)


@router.get("/users/{user_id}/notifications", response_model=list[NotificationResponse])
async def list_user_notifications(
    user_id: str,
    unread: bool = True,
    service: NotificationService = Depends(get_notification_service),
):
    return await service.list_for_user(user_id, unread_only=unread)


@router.get("/households/{household_id}/notifications", response_model=list[NotificationResponse])
async def list_household_notifications(
    household_id: str,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: NotificationService = Depends(get_notification_service),
):
    return await service.list_for_household(household_id, limit=limit)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
):
    return await service.mark_read(notification_id)
