from datetime import date, datetime
from typing import ClassVar, Literal

from pydantic import Field

from harmony.schemas.base import CamelModel, UpdateModel
from harmony.schemas.nudge import NudgeResponse

ChoreStatus = Literal["pending", "in_progress", "completed", "overdue"]
ChorePriority = Literal["low", "medium", "high"]
ChoreCategory = Literal["cleaning", "maintenance", "shopping", "cooking", "other"]


class Recurrence(CamelModel):
    frequency: Literal["daily", "weekly", "monthly"]
    interval: int = Field(default=1, ge=1)


# ─── Chore ─────────────────────────────────────────────────────────────────

class ChoreCreate(CamelModel):
    household_id: str = Field(min_length=1)
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    assigned_to: str | None = None
    assigned_by: str | None = None
    due_date: date | None = None
    status: ChoreStatus = "pending"
    priority: ChorePriority = "medium"
    category: ChoreCategory = "other"
    points: int = Field(default=0, ge=0)
    recurring: Recurrence | None = None


class ChoreUpdate(UpdateModel):
    clearable: ClassVar[frozenset[str]] = frozenset({"description", "assigned_to", "due_date", "recurring"})

    title: str | None = None
    description: str | None = None
    assigned_to: str | None = None
    due_date: date | None = None
    status: ChoreStatus | None = None
    priority: ChorePriority | None = None
    category: ChoreCategory | None = None
    points: int | None = Field(default=None, ge=0)
    recurring: Recurrence | None = None


class ChoreResponse(CamelModel):
    id: str
    household_id: str
    title: str
    description: str | None
    assigned_to: str | None
    assigned_by: str | None
    due_date: date | None
    completed_date: date | None
    status: str
    priority: str
    category: str
    points: int
    recurring: Recurrence | None
    created_at: datetime
    updated_at: datetime


# ─── ChoreCompletion ───────────────────────────────────────────────────────

class ChoreCompletionCreate(CamelModel):
    user_id: str = Field(min_length=1)
    points_earned: int | None = Field(default=None, ge=0)  # defaults to the chore's points
    verified_by: str | None = None
    notes: str | None = None


class ChoreCompletionResponse(CamelModel):
    id: str
    household_id: str
    chore_id: str
    user_id: str
    completed_at: datetime
    points_earned: int
    verified_by: str | None
    notes: str | None


class ChoreCompletionResult(CamelModel):
    completion: ChoreCompletionResponse
    nudge: NudgeResponse | None = None
