"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

# Create Celery instance
celery_app = Celery(
    "taskmaster",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.batch_tasks"],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=1000,
)

# Configure Celery Beat schedule for the daily batch jobs
celery_app.conf.beat_schedule = {
    "daily-assessment": {
        "task": "app.tasks.batch_tasks.daily_assessment_task",
        "schedule": crontab(hour=6, minute=0),
        "options": {"expires": 3600},  # Task expires after 1 hour
    },
    "dependency-check": {
        "task": "app.tasks.batch_tasks.dependency_check_task",
        "schedule": crontab(hour=7, minute=0),
        "options": {"expires": 3600},
    },
}

celery_app.conf.task_routes = {
    "app.tasks.batch_tasks.*": {"queue": "batch"},
}
