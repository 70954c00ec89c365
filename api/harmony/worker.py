from celery import Celery
from celery.schedules import crontab

from harmony.core.config import settings

celery_app = Celery(
    "harmony",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# ─── Scheduled tasks ──────────────────────────
celery_app.conf.beat_schedule = {
    "mark-overdue-daily": {
        "task": "harmony.services.scheduled.mark_overdue",
        "schedule": crontab(hour=0, minute=15),
    },
    "generate-monthly-rent": {
        "task": "harmony.services.scheduled.generate_monthly_rent",
        "schedule": crontab(hour=1, minute=0, day_of_month=1),
    },
    "rent-reminders-daily": {
        "task": "harmony.services.scheduled.send_rent_reminders",
        "schedule": crontab(hour=9, minute=0),
    },
    "time-based-nudges": {
        "task": "harmony.services.scheduled.post_time_based_nudges",
        "schedule": crontab(minute=0),  # hourly; the task picks the templates due this hour
    },
}

# autodiscover_tasks() only looks for "tasks.py" modules
celery_app.conf.include = [
    "harmony.services.scheduled",
]
