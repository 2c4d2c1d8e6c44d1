"""
Celery application configuration.

The pricing service runs a single periodic job: purging quote locks
that expired longer ago than the retention window. Tasks go to a
dedicated ``maintenance`` queue so they never compete with other
workers sharing the broker.
"""

from celery import Celery

from app.config import settings

celery_app = Celery(
    "pricing",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.quote_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    result_expires=settings.QUOTE_PURGE_INTERVAL_SECONDS,
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_routes={"app.tasks.quote_tasks.*": {"queue": "maintenance"}},
)

# Beat schedule: expiry is lazy, so the purge cadence only bounds table size
celery_app.conf.beat_schedule = {
    "purge-expired-quotes": {
        "task": "app.tasks.quote_tasks.purge_expired_quotes",
        "schedule": settings.QUOTE_PURGE_INTERVAL_SECONDS,
        "options": {"expires": settings.QUOTE_PURGE_INTERVAL_SECONDS},
    },
}
