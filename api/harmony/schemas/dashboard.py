from datetime import date
from decimal import Decimal
from typing import Literal

from harmony.schemas.base import CamelModel


class RentSummary(CamelModel):
    total_due: Decimal
    total_paid: Decimal
    overdue_amount: Decimal
    next_due_date: date


class BillSummary(CamelModel):
    total_due: Decimal
    total_paid: Decimal
    overdue_count: int
    upcoming_due: list[date]


class LeaderboardEntry(CamelModel):
    user_id: str
    points: int
    completed_chores: int


class ChoreSummary(CamelModel):
    pending_count: int
    completed_this_week: int
    total_points: int
    leaderboard: list[LeaderboardEntry]


class ConflictSummary(CamelModel):
    active_sessions: int
    resolved_this_week: int
    average_sentiment: Literal["positive", "neutral", "negative"]


class SensorSummary(CamelModel):
    active_count: int
    recent_events: int
    triggered_nudges: int


class DashboardStats(CamelModel):
    """Household snapshot; recomputed per request, never stored."""

    household_id: str
    rent: RentSummary
    bills: BillSummary
    chores: ChoreSummary
    conflicts: ConflictSummary
    sensors: SensorSummary
    # True when the numbers are the canned fallback, not real data
    is_fallback: bool = False
