import logging
from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from harmony.core.errors import NotFoundError
from harmony.models.notification import Notification
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 20


class NotificationService(EntityService[Notification]):
    model = Notification
    label = "notification"
    default_limit = NOTIFICATION_LIMIT

    async def list_for_user(
        self,
        user_id: str,
        unread_only: bool = True,
        limit: int = NOTIFICATION_LIMIT,
    ) -> Sequence[Notification]:
        filters = [Notification.user_id == user_id]
        if unread_only:
            filters.append(Notification.is_read.is_(False))
        try:
            return await self.store.list_where(*filters, order_by=Notification.created_at, limit=limit)
        except SQLAlchemyError:
            logger.exception("Error fetching notifications for user %s", user_id)
            return []

    async def mark_read(self, notification_id: str) -> Notification:
        async with write_guard("mark notification as read"):
            notification = await self.store.update(notification_id, {"is_read": True})
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification
