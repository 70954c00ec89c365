from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, Field

from harmony.schemas.base import CamelModel

NotificationType = Literal[
    "rent_due", "bill_due", "chore_assigned", "chore_completed", "conflict_detected", "nudge_received"
]


class NotificationCreate(CamelModel):
    user_id: str = Field(min_length=1)
    household_id: str | None = None
    type: NotificationType
    title: str = Field(min_length=1, max_length=255)
    message: str
    action_url: str | None = None
    meta: dict | None = Field(
        default=None,
        validation_alias=AliasChoices("metadata", "meta"),
        serialization_alias="metadata",
    )


class NotificationResponse(CamelModel):
    id: str
    user_id: str
    household_id: str | None
    type: str
    title: str
    message: str
    is_read: bool
    action_url: str | None
    meta: dict | None = Field(
        default=None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )
    created_at: datetime
