from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, Field

from harmony.schemas.base import CamelModel, UpdateModel
from harmony.schemas.nudge import NudgeResponse

SensorType = Literal[
    "motion", "door", "trash", "dishwasher", "washer", "dryer", "temperature", "humidity"
]
SensorEventType = Literal[
    "motion_detected", "door_opened", "trash_emptied", "appliance_completed", "threshold_exceeded"
]


class SensorCreate(CamelModel):
    household_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    type: SensorType
    location: str = Field(min_length=1, max_length=100)
    is_active: bool = True


class SensorUpdate(UpdateModel):
    name: str | None = None
    location: str | None = None
    is_active: bool | None = None


class SensorResponse(CamelModel):
    id: str
    household_id: str
    name: str
    type: str
    location: str
    is_active: bool
    last_reading: dict | None
    created_at: datetime
    updated_at: datetime


class SensorEventCreate(CamelModel):
    event_type: SensorEventType
    value: Any = None
    meta: dict | None = Field(
        default=None,
        validation_alias=AliasChoices("metadata", "meta"),
        serialization_alias="metadata",
    )


class SensorEventResponse(CamelModel):
    id: str
    household_id: str
    sensor_id: str
    event_type: str
    value: Any
    timestamp: datetime
    meta: dict | None = Field(
        default=None,
        validation_alias=AliasChoices("meta", "metadata"),
        serialization_alias="metadata",
    )


class SensorEventResult(CamelModel):
    event: SensorEventResponse
    nudge: NudgeResponse | None = None


class SensorPatterns(CamelModel):
    most_active_time: str | None  # "H:00" UTC; None without events
    most_active_area: str
    chore_completion_rate: float
    suggestions: list[str]


class SensorInsights(CamelModel):
    total_events: int
    active_sensors: int
    recent_activity: str
    efficiency_score: float
