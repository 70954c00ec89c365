from datetime import datetime
from typing import Literal

from pydantic import Field

from harmony.schemas.base import CamelModel, UpdateModel
from harmony.schemas.chat import Sentiment

SessionStatus = Literal["active", "completed", "cancelled"]
Severity = Literal["low", "medium", "high"]


class CoachMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime


class ConflictSessionCreate(CamelModel):
    household_id: str = Field(min_length=1)
    participants: list[str] = Field(min_length=1)
    topic: str = Field(min_length=1, max_length=255)


class ConflictSessionUpdate(UpdateModel):
    status: SessionStatus | None = None
    messages: list[CoachMessage] | None = None
    suggestions: list[str] | None = None


class ConflictSessionResponse(CamelModel):
    id: str
    household_id: str
    participants: list[str]
    topic: str
    status: str
    messages: list[CoachMessage]
    suggestions: list[str]
    started_at: datetime
    ended_at: datetime | None


class SentimentAnalysis(CamelModel):
    sentiment: Sentiment
    severity: Severity
    topics: list[str]
    suggestions: list[str]


class ConflictAnalysisResponse(CamelModel):
    id: str
    household_id: str
    trigger_message_id: str | None
    analysis: SentimentAnalysis
    is_resolved: bool
    resolved_at: datetime | None
    created_at: datetime
