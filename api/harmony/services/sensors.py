import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import SQLAlchemyError

from harmony.models.sensor import Sensor, SensorEvent
from harmony.repositories.store import SqlStore
from harmony.schemas.sensor import SensorEventCreate
from harmony.services.base import EntityService, write_guard

logger = logging.getLogger(__name__)


class SensorService(EntityService[Sensor]):
    model = Sensor
    label = "sensor"

    def __init__(self, session):
        super().__init__(session)
        self.events: SqlStore[SensorEvent] = SqlStore(session, SensorEvent)

    async def list_active(self, household_id: str) -> Sequence[Sensor]:
        return await self.list_for_household(household_id, filters=[Sensor.is_active.is_(True)])

    async def record_event(
        self,
        sensor_id: str,
        payload: SensorEventCreate,
        timestamp: datetime | None = None,
    ) -> SensorEvent:
        """Store the event and refresh the sensor's ``last_reading``."""
        sensor = await self._require(sensor_id)
        timestamp = timestamp or datetime.now(timezone.utc)

        async with write_guard("record sensor event"):
            event = await self.events.create(
                household_id=sensor.household_id,
                sensor_id=sensor.id,
                event_type=payload.event_type,
                value=payload.value,
                timestamp=timestamp,
                meta=payload.meta,
            )
            await self.store.update(
                sensor.id,
                {"last_reading": {"value": payload.value, "timestamp": timestamp.isoformat()}},
            )
        return event

    async def recent_events(
        self,
        sensor_id: str,
        hours: int = 24,
        now: datetime | None = None,
    ) -> Sequence[SensorEvent]:
        since = (now or datetime.now(timezone.utc)) - timedelta(hours=hours)
        try:
            return await self.events.list_where(
                SensorEvent.sensor_id == sensor_id,
                SensorEvent.timestamp >= since,
                order_by=SensorEvent.timestamp,
            )
        except SQLAlchemyError:
            logger.exception("Error fetching events for sensor %s", sensor_id)
            return []

    async def household_events(self, household_id: str, since: datetime) -> Sequence[SensorEvent]:
        """Events of every sensor in the household since ``since``, newest first."""
        try:
            return await self.events.list_for_household(
                household_id,
                order_by=SensorEvent.timestamp,
                filters=[SensorEvent.timestamp >= since],
            )
        except SQLAlchemyError:
            logger.exception("Error fetching sensor events for household %s", household_id)
            return []

    async def count_household_events(self, household_id: str) -> int:
        try:
            return await self.events.count_for_household(household_id)
        except SQLAlchemyError:
            logger.exception("Error counting sensor events for household %s", household_id)
            return 0
