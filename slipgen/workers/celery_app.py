from celery import Celery

from slipgen.core.config import get_settings
from slipgen.workers.schedules import CELERY_BEAT_SCHEDULE

settings = get_settings()

celery = Celery(
    "slipgen",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["slipgen.workers.tasks"],
)

celery.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    # One browser per worker process; a run must not be retried by redelivery.
    worker_prefetch_multiplier=1,
    task_acks_late=False,
    task_time_limit=settings.run_deadline_seconds + 60,
    beat_schedule=CELERY_BEAT_SCHEDULE,
)
