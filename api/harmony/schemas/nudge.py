from datetime import datetime
from typing import Literal

from pydantic import Field

from harmony.schemas.base import CamelModel

NudgeType = Literal[
    "chore_reminder", "bill_due", "rent_due", "sensor_triggered", "conflict_warning", "chore_completed"
]
NudgePriority = Literal["low", "medium", "high"]


class NudgeCreate(CamelModel):
    household_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    message: str
    type: NudgeType
    priority: NudgePriority = "medium"
    target_users: list[str] = []
    expires_at: datetime | None = None
    action_url: str | None = None


class NudgeResponse(CamelModel):
    id: str
    household_id: str
    title: str
    message: str
    type: str
    priority: str
    target_users: list[str]
    is_read: bool
    is_dismissed: bool
    expires_at: datetime | None
    action_url: str | None
    created_at: datetime
