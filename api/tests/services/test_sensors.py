"""
Tests for sensors: event recording, sensor → nudge pattern matching (pure)
and the chore-completion congratulations.
"""
from datetime import datetime, timedelta, timezone

import pytest

from harmony.core.errors import NotFoundError
from harmony.models.household import Household
from harmony.models.chore import Chore
from harmony.models.sensor import Sensor, SensorEvent
from harmony.repositories.store import SqlStore
from harmony.schemas.sensor import SensorCreate, SensorEventCreate
from harmony.services.sensor_nudges import (
    CHORE_COMPLETION_PATTERNS,
    MEAL_PREP_SUGGESTION,
    QUIET_HOURS_SUGGESTION,
    SENSOR_NUDGE_PATTERNS,
    SensorNudgeService,
    analyze_patterns,
    match_sensor_pattern,
    summarize_insights,
)
from harmony.services.sensors import SensorService

NOW = datetime(2026, 10, 14, 8, 30, tzinfo=timezone.utc)


def _sensor(**overrides) -> SensorCreate:
    fields = {"household_id": "house-1", "name": "Kitchen Motion Sensor", "type": "motion", "location": "kitchen"}
    return SensorCreate(**{**fields, **overrides})


# ── match_sensor_pattern ─────────────────────────────────────────────────────

class TestMatchSensorPattern:
    def test_kitchen_motion_morning(self):
        assert match_sensor_pattern("motion", "kitchen", "motion_detected", None, 8) == \
            SENSOR_NUDGE_PATTERNS["motion"]["kitchen"]["morning"]

    def test_kitchen_motion_evening(self):
        assert match_sensor_pattern("motion", "kitchen", "motion_detected", None, 19) == \
            SENSOR_NUDGE_PATTERNS["motion"]["kitchen"]["evening"]

    def test_kitchen_motion_afternoon(self):
        assert match_sensor_pattern("motion", "kitchen", "motion_detected", None, 14) is None

    def test_living_room_any_hour(self):
        template = match_sensor_pattern("motion", "living_room", "motion_detected", None, 3)
        assert template["title"] == "Living room activity detected"

    def test_unknown_location(self):
        assert match_sensor_pattern("motion", "garage", "motion_detected", None, 8) is None

    def test_trash_door(self):
        assert match_sensor_pattern("door", "trash", "door_opened", None, 12)["type"] == "sensor_triggered"

    def test_trash_emptied(self):
        assert match_sensor_pattern("trash", "kitchen", "trash_emptied", None, 12)["title"] == "Trash bin emptied"

    def test_trash_fill_level(self):
        assert match_sensor_pattern("trash", "kitchen", "threshold_exceeded", {"level": 85}, 12)["priority"] == "high"
        assert match_sensor_pattern("trash", "kitchen", "threshold_exceeded", {"level": 80}, 12) is None

    def test_dishwasher(self):
        assert match_sensor_pattern("dishwasher", "kitchen", "appliance_completed", None, 12)["title"] == \
            "Dishwasher cycle completed"
        assert match_sensor_pattern("dishwasher", "kitchen", "motion_detected", None, 12)["title"] == \
            "Dishwasher started"

    def test_laundry(self):
        assert match_sensor_pattern("washer", "laundry", "appliance_completed", None, 12) is not None
        assert match_sensor_pattern("dryer", "laundry", "door_opened", None, 12) is None

    def test_temperature_thresholds(self):
        assert match_sensor_pattern("temperature", "hall", "threshold_exceeded", {"temperature": 78}, 12)["title"] == \
            "Temperature is high"
        assert match_sensor_pattern("temperature", "hall", "threshold_exceeded", {"temperature": 60}, 12)["title"] == \
            "Temperature is low"
        assert match_sensor_pattern("temperature", "hall", "threshold_exceeded", {"temperature": 70}, 12) is None

    def test_humidity(self):
        assert match_sensor_pattern("humidity", "bathroom", "threshold_exceeded", {"humidity": 65}, 12) is not None
        assert match_sensor_pattern("humidity", "bathroom", "threshold_exceeded", {"humidity": 55}, 12) is None

    def test_non_numeric_reading(self):
        assert match_sensor_pattern("temperature", "hall", "threshold_exceeded", "hot", 12) is None

    def test_unknown_sensor_type(self):
        assert match_sensor_pattern("smoke", "kitchen", "threshold_exceeded", None, 12) is None


# ── analyze_patterns / summarize_insights ────────────────────────────────────

def _event(sensor_id: str, hour: int) -> SensorEvent:
    return SensorEvent(sensor_id=sensor_id, event_type="motion_detected", timestamp=NOW.replace(hour=hour))


class TestAnalyzePatterns:
    LOCATIONS = {"k": "kitchen", "l": "living_room", "b": "bathroom"}

    def test_busiest_hour_and_area(self):
        events = [_event("k", 8), _event("k", 8), _event("l", 19), _event("b", 8)]
        result = analyze_patterns(events, self.LOCATIONS, 0.5)
        assert result["most_active_time"] == "8:00"
        assert result["most_active_area"] == "kitchen"
        assert result["chore_completion_rate"] == 0.5

    def test_tied_hours_pick_earliest(self):
        events = [_event("l", 19), _event("l", 9)]
        assert analyze_patterns(events, self.LOCATIONS, 0.0)["most_active_time"] == "9:00"

    def test_no_events(self):
        result = analyze_patterns([], self.LOCATIONS, 0.0)
        assert result["most_active_time"] is None
        assert result["most_active_area"] == "Unknown"
        assert result["suggestions"] == []

    def test_late_night_suggests_quiet_hours(self):
        for hour in (23, 3, 6):
            result = analyze_patterns([_event("l", hour)], self.LOCATIONS, 0.0)
            assert result["suggestions"] == [QUIET_HOURS_SUGGESTION]
        assert analyze_patterns([_event("l", 7)], self.LOCATIONS, 0.0)["suggestions"] == []

    def test_busy_kitchen_suggests_meal_prep(self):
        events = [_event("k", 12)] * 3 + [_event("l", 12)]
        assert analyze_patterns(events, self.LOCATIONS, 0.0)["suggestions"] == [MEAL_PREP_SUGGESTION]
        events = [_event("k", 12)] * 2 + [_event("l", 12)]
        assert analyze_patterns(events, self.LOCATIONS, 0.0)["suggestions"] == []

    def test_unknown_sensor_not_counted_as_area(self):
        result = analyze_patterns([_event("gone", 12)], self.LOCATIONS, 0.0)
        assert result["most_active_time"] == "12:00"
        assert result["most_active_area"] == "Unknown"


class TestSummarizeInsights:
    def test_score_scales_with_recent_events(self):
        insights = summarize_insights(40, 3, 4)
        assert insights["recent_activity"] == "4 events in the last 24 hours"
        assert insights["efficiency_score"] == pytest.approx(40.0)

    def test_score_capped(self):
        assert summarize_insights(40, 3, 25)["efficiency_score"] == 100.0


# ── SensorService ────────────────────────────────────────────────────────────

class TestSensorService:
    async def test_list_active(self, session):
        service = SensorService(session)
        await service.create(_sensor())
        await service.create(_sensor(name="Old sensor", is_active=False))
        assert [s.name for s in await service.list_active("house-1")] == ["Kitchen Motion Sensor"]

    async def test_record_event_updates_last_reading(self, session):
        service = SensorService(session)
        sensor = await service.create(_sensor())

        event = await service.record_event(
            sensor.id,
            SensorEventCreate(event_type="motion_detected", value={"duration": 45}, metadata={"battery": 90}),
            timestamp=NOW,
        )

        assert event.household_id == "house-1"
        assert event.meta == {"battery": 90}
        refreshed = await session.get(Sensor, sensor.id)
        assert refreshed.last_reading == {"value": {"duration": 45}, "timestamp": NOW.isoformat()}

    async def test_record_event_unknown_sensor(self, session):
        with pytest.raises(NotFoundError, match="Sensor not found"):
            await SensorService(session).record_event("nope", SensorEventCreate(event_type="door_opened"))

    async def test_recent_events(self, session):
        service = SensorService(session)
        sensor = await service.create(_sensor())
        await service.record_event(sensor.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW)
        await service.record_event(
            sensor.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW - timedelta(hours=30)
        )
        events = await service.recent_events(sensor.id, hours=24, now=NOW + timedelta(hours=1))
        assert len(events) == 1


# ── SensorNudgeService ───────────────────────────────────────────────────────

class TestSensorNudgeService:
    @pytest.fixture
    async def household(self, session):
        return await SqlStore(session, Household).create(id="house-1", name="Flat", members=["user1", "user2"])

    async def test_matching_event_posts_nudge(self, session, household):
        sensor = await SensorService(session).create(_sensor(name="Trash bin", type="trash"))
        event, nudge = await SensorNudgeService(session).process_sensor_event(
            sensor.id, SensorEventCreate(event_type="trash_emptied"), now=NOW
        )
        assert event.sensor_id == sensor.id
        assert nudge.title == "Trash bin emptied"
        assert nudge.target_users == ["user1", "user2"]

    async def test_no_pattern_no_nudge(self, session, household):
        sensor = await SensorService(session).create(_sensor())
        event, nudge = await SensorNudgeService(session).process_sensor_event(
            sensor.id, SensorEventCreate(event_type="motion_detected"), now=NOW.replace(hour=14)
        )
        assert event is not None
        assert nudge is None

    async def test_chore_completion_congratulates_member(self, session, household):
        nudge = await SensorNudgeService(session).process_chore_completion("house-1", "user2", "Take out trash")
        assert nudge.type == "chore_completed"
        assert nudge.target_users == ["user2"]
        assert nudge.title == CHORE_COMPLETION_PATTERNS["Take out trash"]["title"]

    async def test_unknown_chore_title(self, session, household):
        assert await SensorNudgeService(session).process_chore_completion("house-1", "user2", "Water plants") is None

    async def test_analyze_sensor_patterns(self, session, household):
        sensors = SensorService(session)
        kitchen = await sensors.create(_sensor())
        hall = await sensors.create(_sensor(name="Hall", location="living_room"))
        for hours_ago in (0, 24, 48):
            await sensors.record_event(
                kitchen.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW - timedelta(hours=hours_ago)
            )
        await sensors.record_event(
            hall.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW.replace(hour=19) - timedelta(days=1)
        )
        # Outside the seven-day window
        await sensors.record_event(
            hall.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW - timedelta(days=10)
        )
        chores = SqlStore(session, Chore)
        await chores.create(household_id="house-1", title="Clean kitchen", status="completed")
        await chores.create(household_id="house-1", title="Do laundry", status="pending")
        await chores.create(household_id="house-1", title="Vacuum living room", status="pending")
        await chores.create(household_id="house-1", title="Take out trash", status="completed")

        patterns = await SensorNudgeService(session).analyze_sensor_patterns("house-1", now=NOW)

        assert patterns["most_active_time"] == "8:00"
        assert patterns["most_active_area"] == "kitchen"
        assert patterns["chore_completion_rate"] == 0.5
        assert patterns["suggestions"] == [MEAL_PREP_SUGGESTION]

    async def test_patterns_without_chores(self, session, household):
        patterns = await SensorNudgeService(session).analyze_sensor_patterns("house-1", now=NOW)
        assert patterns["chore_completion_rate"] == 0.0
        assert patterns["most_active_time"] is None

    async def test_get_sensor_insights(self, session, household):
        sensors = SensorService(session)
        kitchen = await sensors.create(_sensor())
        await sensors.create(_sensor(name="Old sensor", is_active=False))
        await sensors.record_event(kitchen.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW)
        await sensors.record_event(
            kitchen.id, SensorEventCreate(event_type="motion_detected"), timestamp=NOW - timedelta(hours=30)
        )

        insights = await SensorNudgeService(session).get_sensor_insights("house-1", now=NOW + timedelta(hours=1))

        assert insights == {
            "total_events": 2,
            "active_sensors": 1,
            "recent_activity": "1 events in the last 24 hours",
            "efficiency_score": pytest.approx(10.0),
        }
