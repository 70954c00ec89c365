from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Literal

from pydantic import Field

from harmony.schemas.base import CamelModel, UpdateModel

RentStatus = Literal["pending", "paid", "overdue", "partial"]
PaymentMethod = Literal["bank_transfer", "cash", "check", "digital", "credit_card", "pending"]
SplitType = Literal["equal", "percentage", "fixed_amounts"]


# ─── RentPayment ───────────────────────────────────────────────────────────

class RentPaymentCreate(CamelModel):
    household_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    due_date: date
    paid_date: date | None = None
    status: RentStatus = "pending"
    method: PaymentMethod | None = None
    notes: str | None = None


class RentPaymentUpdate(UpdateModel):
    clearable: ClassVar[frozenset[str]] = frozenset({"paid_date", "method", "paid_by", "notes"})

    amount: Decimal | None = Field(default=None, gt=0)
    due_date: date | None = None
    paid_date: date | None = None
    status: RentStatus | None = None
    method: PaymentMethod | None = None
    paid_by: str | None = None
    notes: str | None = None


class MarkRentPaid(CamelModel):
    user_id: str = Field(min_length=1)
    paid_date: date | None = None


class RentPaymentResponse(CamelModel):
    id: str
    household_id: str
    user_id: str
    amount: Decimal
    due_date: date
    paid_date: date | None
    status: str
    method: str | None
    paid_by: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


# ─── RentSchedule ──────────────────────────────────────────────────────────

class RentSplit(CamelModel):
    user_id: str
    amount: Decimal
    percentage: Decimal | None = None


class RentScheduleCreate(CamelModel):
    household_id: str = Field(min_length=1)
    monthly_amount: Decimal = Field(gt=0)
    due_day: int = Field(default=1, ge=1, le=31)
    split_type: SplitType = "equal"
    splits: list[RentSplit] = Field(min_length=1)
    start_date: date
    end_date: date | None = None
    is_active: bool = True


class RentScheduleUpdate(UpdateModel):
    clearable: ClassVar[frozenset[str]] = frozenset({"end_date"})

    monthly_amount: Decimal | None = Field(default=None, gt=0)
    due_day: int | None = Field(default=None, ge=1, le=31)
    split_type: SplitType | None = None
    splits: list[RentSplit] | None = None
    end_date: date | None = None
    is_active: bool | None = None


class RentScheduleResponse(CamelModel):
    id: str
    household_id: str
    monthly_amount: Decimal
    due_day: int
    split_type: str
    splits: list[RentSplit]
    start_date: date
    end_date: date | None
    is_active: bool


class RentStats(CamelModel):
    total_due: Decimal
    total_paid: Decimal
    overdue_amount: Decimal
    next_due_date: date
    payment_history: list[RentPaymentResponse] = []
    is_fallback: bool = False
