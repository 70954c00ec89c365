"""FastAPI dependencies: one service object per request, bound to the request session."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from harmony.core.database import get_db, get_session_factory
from harmony.services.bills import BillService
from harmony.services.chat import ChatService
from harmony.services.chores import ChoreService
from harmony.services.conflicts import ConflictService
from harmony.services.dashboard import DashboardService
from harmony.services.households import HouseholdService
from harmony.services.notifications import NotificationService
from harmony.services.nudges import NudgeService
from harmony.services.rent import RentService
from harmony.services.sensor_nudges import SensorNudgeService
from harmony.services.sensors import SensorService


def get_household_service(db: AsyncSession = Depends(get_db)) -> HouseholdService:
    return HouseholdService(db)


def get_rent_service(db: AsyncSession = Depends(get_db)) -> RentService:
    return RentService(db)


def get_bill_service(db: AsyncSession = Depends(get_db)) -> BillService:
    return BillService(db)


def get_chore_service(db: AsyncSession = Depends(get_db)) -> ChoreService:
    return ChoreService(db)


def get_sensor_service(db: AsyncSession = Depends(get_db)) -> SensorService:
    return SensorService(db)


def get_sensor_nudge_service(db: AsyncSession = Depends(get_db)) -> SensorNudgeService:
    return SensorNudgeService(db)


def get_nudge_service(db: AsyncSession = Depends(get_db)) -> NudgeService:
    return NudgeService(db)


def get_chat_service(db: AsyncSession = Depends(get_db)) -> ChatService:
    return ChatService(db)


def get_conflict_service(db: AsyncSession = Depends(get_db)) -> ConflictService:
    return ConflictService(db)


def get_notification_service(db: AsyncSession = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_dashboard_service() -> DashboardService:
    # Opens its own sessions: the six fetches run concurrently
    return DashboardService(get_session_factory())
