from collections.abc import Sequence
from datetime import datetime, timezone

from harmony.models.chat import ChatMessage
from harmony.services.base import EntityService


class ChatService(EntityService[ChatMessage]):
    model = ChatMessage
    label = "chat message"
    order_field = "timestamp"

    async def send(self, payload) -> ChatMessage:
        return await self.create({**payload.model_dump(), "timestamp": datetime.now(timezone.utc)})

    async def list_recent(self, household_id: str, limit: int | None = None) -> Sequence[ChatMessage]:
        """Newest first."""
        return await self.list_for_household(household_id, limit=limit)

    async def edit(self, message_id: str, content: str) -> ChatMessage:
        return await self.update(
            message_id,
            {"content": content, "is_edited": True, "edited_at": datetime.now(timezone.utc)},
        )
