"""Celery application configuration"""

from celery import Celery
from app.config import settings

# Create Celery app
celery_app = Celery(
    "pickup_api",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.jobs.tasks",
    ],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=60,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Order requests must not hang on an unreachable broker
    task_publish_retry_policy={
        "max_retries": 2,
        "interval_start": 0,
        "interval_step": 0.2,
        "interval_max": 0.5,
    },
)
