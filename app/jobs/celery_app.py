"""Celery worker and beat wiring

Notifications are queued here by the API; beat drives the reminder and
auto-complete sweeps defined in app.jobs.tasks.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings

TASK_MODULES = ["app.jobs.tasks"]

BEAT_SCHEDULE = {
    "reservation-reminders-hourly": {
        "task": "send_reservation_reminders",
        "schedule": crontab(minute=0),
    },
    "complete-finished-reservations": {
        "task": "complete_finished_reservations",
        "schedule": crontab(minute="*/15"),
    },
}

celery_app = Celery(
    "bistro_reservations",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=TASK_MODULES,
)

celery_app.conf.task_serializer = "json"
celery_app.conf.result_serializer = "json"
celery_app.conf.accept_content = ["json"]
celery_app.conf.timezone = "UTC"
celery_app.conf.enable_utc = True

# Redeliver a notification if the worker dies mid-send
celery_app.conf.task_acks_late = True
celery_app.conf.task_reject_on_worker_lost = True
celery_app.conf.worker_prefetch_multiplier = 1
celery_app.conf.task_time_limit = 120

celery_app.conf.beat_schedule = BEAT_SCHEDULE
