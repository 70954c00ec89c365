"""Turn sensor events and chore completions into household nudges.

``match_sensor_pattern`` is a pure lookup over ``SENSOR_NUDGE_PATTERNS``:

    motion       – by location; kitchen has morning / evening variants
    door         – by location (front door, trash door)
    trash        – emptied event, or fill level above 80
    dishwasher   – cycle completed, or started (motion on the appliance)
    washer/dryer – cycle completed
    temperature  – above 75 or below 65 (°F)
    humidity     – above 60 %

``analyze_patterns`` and ``summarize_insights`` read a window of events back
into a household summary (busiest hour and area, activity score).
"""

import logging
from collections import Counter
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from harmony.core.database import as_utc
from harmony.models.nudge import Nudge
from harmony.models.sensor import SensorEvent
from harmony.schemas.sensor import SensorEventCreate
from harmony.services.chores import ChoreService
from harmony.services.nudges import EVENING_HOURS, MORNING_HOURS, NudgeService
from harmony.services.sensors import SensorService

logger = logging.getLogger(__name__)

TRASH_FULL_LEVEL = 80
TEMPERATURE_HIGH = 75
TEMPERATURE_LOW = 65
HUMIDITY_HIGH = 60

PATTERN_WINDOW = timedelta(days=7)
INSIGHT_WINDOW = timedelta(hours=24)
QUIET_HOURS_START = 22
QUIET_HOURS_END = 6
BUSY_KITCHEN_RATIO = 2
EFFICIENCY_FULL_EVENTS = 10  # events per day that score 100

QUIET_HOURS_SUGGESTION = "Consider establishing quiet hours during late night/early morning periods"
MEAL_PREP_SUGGESTION = "The kitchen sees a lot of activity - consider setting up a meal prep schedule"


def _nudge(title: str, message: str, type_: str, priority: str) -> dict[str, str]:
    return {"title": title, "message": message, "type": type_, "priority": priority}


SENSOR_NUDGE_PATTERNS: dict[str, dict[str, Any]] = {
    "motion": {
        "kitchen": {
            "morning": _nudge(
                "Good morning! Time to start the day",
                "The kitchen is active - perfect time to check today's chores!",
                "chore_reminder", "low",
            ),
            "evening": _nudge(
                "Evening kitchen activity detected",
                "Great time to clean up after dinner and prepare for tomorrow!",
                "chore_reminder", "medium",
            ),
        },
        "living_room": _nudge(
            "Living room activity detected",
            "Remember to keep shared spaces tidy for everyone!",
            "chore_reminder", "low",
        ),
        "bathroom": _nudge(
            "Bathroom activity detected",
            "Don't forget to restock supplies and keep it clean!",
            "chore_reminder", "medium",
        ),
    },
    "door": {
        "front": _nudge(
            "Front door activity",
            "Welcome home! Time to check if any chores need attention.",
            "chore_reminder", "low",
        ),
        "trash": _nudge(
            "Trash taken out! 🎉",
            "Great job! You've earned chore credit for taking out the trash.",
            "sensor_triggered", "medium",
        ),
    },
    "trash": {
        "emptied": _nudge(
            "Trash bin emptied",
            "Excellent! Taking out the trash helps keep our home clean and organized.",
            "sensor_triggered", "medium",
        ),
        "full": _nudge(
            "Trash bin is getting full",
            "The trash bin is nearly full. Time to take it out!",
            "chore_reminder", "high",
        ),
    },
    "dishwasher": {
        "completed": _nudge(
            "Dishwasher cycle completed",
            "Dishes are clean! Time to unload and put them away.",
            "chore_reminder", "medium",
        ),
        "started": _nudge(
            "Dishwasher started",
            "Great initiative! Dishes are being cleaned.",
            "sensor_triggered", "low",
        ),
    },
    "washer": {
        "completed": _nudge(
            "Laundry cycle completed",
            "Laundry is done! Don't forget to move it to the dryer or fold it.",
            "chore_reminder", "medium",
        ),
    },
    "dryer": {
        "completed": _nudge(
            "Dryer cycle completed",
            "Clothes are dry! Time to fold and put them away.",
            "chore_reminder", "medium",
        ),
    },
    "temperature": {
        "high": _nudge(
            "Temperature is high",
            "The temperature is elevated. Consider adjusting the thermostat or opening windows.",
            "sensor_triggered", "medium",
        ),
        "low": _nudge(
            "Temperature is low",
            "The temperature is low. Consider adjusting the thermostat for comfort.",
            "sensor_triggered", "medium",
        ),
    },
    "humidity": {
        "high": _nudge(
            "High humidity detected",
            "Humidity levels are high. Consider using a dehumidifier or opening windows.",
            "sensor_triggered", "medium",
        ),
    },
}

# Congratulations keyed by chore title
CHORE_COMPLETION_PATTERNS: dict[str, dict[str, Any]] = {
    "Take out trash": {
        "title": "Trash duty completed! 🗑️",
        "message": "Great job keeping our home clean! You've earned 10 points.",
        "points": 10,
    },
    "Load dishwasher": {
        "title": "Dishwasher loaded! 🍽️",
        "message": "Nice work! Dishes are being cleaned automatically. You've earned 15 points.",
        "points": 15,
    },
    "Unload dishwasher": {
        "title": "Dishes put away! 🏠",
        "message": "Excellent! Everything is organized and ready for the next meal. You've earned 15 points.",
        "points": 15,
    },
    "Clean kitchen": {
        "title": "Kitchen cleaned! 🧽",
        "message": "The kitchen looks great! You've earned 20 points.",
        "points": 20,
    },
    "Vacuum living room": {
        "title": "Living room vacuumed! 🧹",
        "message": "The living room is spotless! You've earned 25 points.",
        "points": 25,
    },
    "Clean bathroom": {
        "title": "Bathroom cleaned! 🚿",
        "message": "The bathroom is fresh and clean! You've earned 30 points.",
        "points": 30,
    },
    "Do laundry": {
        "title": "Laundry completed! 👕",
        "message": "All clothes are clean and put away! You've earned 35 points.",
        "points": 35,
    },
}


def _reading(value: Any, key: str) -> float | None:
    if isinstance(value, dict) and isinstance(value.get(key), (int, float)):
        return value[key]
    return None


def match_sensor_pattern(
    sensor_type: str,
    location: str,
    event_type: str,
    value: Any,
    hour: int,
) -> dict[str, str] | None:
    """The nudge template for one sensor event, or None."""
    patterns = SENSOR_NUDGE_PATTERNS.get(sensor_type)
    if not patterns:
        return None

    if sensor_type == "motion":
        by_location = patterns.get(location)
        if by_location is None or "title" in by_location:
            return by_location
        if hour in MORNING_HOURS:
            return by_location.get("morning")
        if hour in EVENING_HOURS:
            return by_location.get("evening")
        return None

    if sensor_type == "door":
        return patterns.get(location)

    if sensor_type == "trash":
        if event_type == "trash_emptied":
            return patterns["emptied"]
        level = _reading(value, "level")
        return patterns["full"] if level is not None and level > TRASH_FULL_LEVEL else None

    if sensor_type == "dishwasher":
        if event_type == "appliance_completed":
            return patterns["completed"]
        if event_type == "motion_detected":
            return patterns["started"]
        return None

    if sensor_type in ("washer", "dryer"):
        return patterns["completed"] if event_type == "appliance_completed" else None

    if sensor_type == "temperature":
        temperature = _reading(value, "temperature")
        if temperature is None:
            return None
        if temperature > TEMPERATURE_HIGH:
            return patterns["high"]
        if temperature < TEMPERATURE_LOW:
            return patterns["low"]
        return None

    if sensor_type == "humidity":
        humidity = _reading(value, "humidity")
        return patterns["high"] if humidity is not None and humidity > HUMIDITY_HIGH else None

    return None


def analyze_patterns(
    events: Sequence[SensorEvent],
    locations: dict[str, str],
    completion_rate: float,
) -> dict[str, Any]:
    """Busiest hour (UTC) and area over ``events``, with suggestions.

    ``locations`` maps sensor id to location; events of unknown sensors are
    left out of the area count.
    """
    hours = Counter(as_utc(e.timestamp).hour for e in events)
    areas = Counter(locations[e.sensor_id] for e in events if e.sensor_id in locations)

    busiest_hour = min(hours, key=lambda h: (-hours[h], h)) if hours else None
    busiest_area = areas.most_common(1)[0][0] if areas else "Unknown"

    suggestions = []
    if busiest_hour is not None and (busiest_hour >= QUIET_HOURS_START or busiest_hour <= QUIET_HOURS_END):
        suggestions.append(QUIET_HOURS_SUGGESTION)
    if areas["kitchen"] > BUSY_KITCHEN_RATIO * areas["living_room"]:
        suggestions.append(MEAL_PREP_SUGGESTION)

    return {
        "most_active_time": f"{busiest_hour}:00" if busiest_hour is not None else None,
        "most_active_area": busiest_area,
        "chore_completion_rate": completion_rate,
        "suggestions": suggestions,
    }


def summarize_insights(total_events: int, active_sensors: int, recent_events: int) -> dict[str, Any]:
    return {
        "total_events": total_events,
        "active_sensors": active_sensors,
        "recent_activity": f"{recent_events} events in the last 24 hours",
        "efficiency_score": min(100.0, recent_events / EFFICIENCY_FULL_EVENTS * 100),
    }


class SensorNudgeService:
    def __init__(self, session):
        self.sensors = SensorService(session)
        self.nudges = NudgeService(session)
        self.chores = ChoreService(session)

    async def process_sensor_event(
        self,
        sensor_id: str,
        payload: SensorEventCreate,
        now: datetime | None = None,
    ) -> tuple[SensorEvent, Nudge | None]:
        """Record the event, then post a nudge to every member if a pattern matches."""
        now = now or datetime.now(timezone.utc)
        event = await self.sensors.record_event(sensor_id, payload, timestamp=now)
        sensor = await self.sensors.get(sensor_id)

        template = match_sensor_pattern(sensor.type, sensor.location, payload.event_type, payload.value, now.hour)
        if template is None:
            return event, None

        nudge = await self.nudges.notify_household(sensor.household_id, template)
        logger.info("Sensor %s (%s) triggered nudge %r", sensor.id, payload.event_type, template["title"])
        return event, nudge

    async def process_chore_completion(self, household_id: str, user_id: str, chore_title: str) -> Nudge | None:
        """Congratulate the member who finished a well-known chore."""
        pattern = CHORE_COMPLETION_PATTERNS.get(chore_title)
        if pattern is None:
            return None
        return await self.nudges.notify_household(
            household_id,
            {
                "title": pattern["title"],
                "message": pattern["message"],
                "type": "chore_completed",
                "priority": "medium",
            },
            target_users=[user_id],
        )

    async def analyze_sensor_patterns(self, household_id: str, now: datetime | None = None) -> dict[str, Any]:
        """Activity patterns over the last week plus the household's chore completion rate."""
        now = now or datetime.now(timezone.utc)
        events = await self.sensors.household_events(household_id, since=now - PATTERN_WINDOW)
        sensors = await self.sensors.list_for_household(household_id)
        chores = await self.chores.list_for_household(household_id)

        completed = sum(1 for c in chores if c.status == "completed")
        completion_rate = completed / len(chores) if chores else 0.0
        return analyze_patterns(events, {s.id: s.location for s in sensors}, completion_rate)

    async def get_sensor_insights(self, household_id: str, now: datetime | None = None) -> dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        total = await self.sensors.count_household_events(household_id)
        active = await self.sensors.list_active(household_id)
        recent = await self.sensors.household_events(household_id, since=now - INSIGHT_WINDOW)
        return summarize_insights(total, len(active), len(recent))
