from datetime import datetime
from typing import Literal

from pydantic import Field

from harmony.schemas.base import CamelModel

Sentiment = Literal["positive", "neutral", "negative"]


class ChatMessageCreate(CamelModel):
    household_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    content: str = Field(min_length=1)
    sentiment: Sentiment | None = None


class ChatMessageEdit(CamelModel):
    content: str = Field(min_length=1)


class ChatMessageResponse(CamelModel):
    id: str
    household_id: str
    user_id: str
    content: str
    timestamp: datetime
    sentiment: str | None
    is_edited: bool
    edited_at: datetime | None
