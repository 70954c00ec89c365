from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Literal

from pydantic import Field

from harmony.schemas.base import CamelModel, UpdateModel

BillStatus = Literal["pending", "paid", "overdue"]
BillCategory = Literal["electricity", "water", "gas", "internet", "trash", "other"]


class BillCreate(CamelModel):
    household_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=255)
    amount: Decimal = Field(gt=0)
    due_date: date
    paid_date: date | None = None
    status: BillStatus = "pending"
    category: BillCategory = "other"
    paid_by: str | None = None
    split_between: list[str] = Field(min_length=1)
    receipt_url: str | None = None
    notes: str | None = None


class BillUpdate(UpdateModel):
    clearable: ClassVar[frozenset[str]] = frozenset({"paid_date", "paid_by", "receipt_url", "notes"})

    name: str | None = None
    amount: Decimal | None = Field(default=None, gt=0)
    due_date: date | None = None
    paid_date: date | None = None
    status: BillStatus | None = None
    category: BillCategory | None = None
    paid_by: str | None = None
    split_between: list[str] | None = Field(default=None, min_length=1)
    receipt_url: str | None = None
    notes: str | None = None


class MarkBillPaid(CamelModel):
    user_id: str = Field(min_length=1)
    paid_date: date | None = None


class BillResponse(CamelModel):
    id: str
    household_id: str
    name: str
    amount: Decimal
    due_date: date
    paid_date: date | None
    status: str
    category: str
    paid_by: str | None
    split_between: list[str]
    receipt_url: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
