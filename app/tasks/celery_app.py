from datetime import timedelta
import os

from celery import Celery

from app.core.config import settings

broker_url = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
result_backend = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/1")

celery_app = Celery(
    "coaching",
    broker=broker_url,
    backend=result_backend,
    include=["app.tasks.notifications", "app.tasks.completions"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_ignore_result=True,
    beat_schedule={
        "complete-finished-sessions": {
            "task": "sessions.complete_finished",
            "schedule": timedelta(minutes=settings.session_completion_interval_minutes),
        },
    },
)
