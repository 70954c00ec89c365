from datetime import datetime

from pydantic import Field

from harmony.schemas.base import CamelModel, UpdateModel


class HouseholdCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    address: str = ""
    members: list[str] = Field(min_length=1)


class HouseholdUpdate(UpdateModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    address: str | None = None
    members: list[str] | None = Field(default=None, min_length=1)


class HouseholdResponse(CamelModel):
    id: str
    name: str
    address: str
    members: list[str]
    created_at: datetime
    updated_at: datetime
