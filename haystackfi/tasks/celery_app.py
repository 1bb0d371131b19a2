"""
Celery Application Configuration

Research runs go to the "research" queue; start a worker with
``celery -A haystackfi.tasks.celery_app worker -Q research,celery`` and the
scheduler with ``celery -A haystackfi.tasks.celery_app beat``.
"""

from celery import Celery
from celery.schedules import crontab

from ..api.config import get_settings

settings = get_settings()

app = Celery(
    "haystackfi",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["haystackfi.tasks.research"],
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,
    task_soft_time_limit=8 * 60,
    task_routes={"tasks.run_vendor_research": {"queue": "research"}},
    result_expires=24 * 3600,
    worker_prefetch_multiplier=1,
    task_always_eager=settings.celery_task_always_eager,
    task_store_eager_result=False,
)

app.conf.beat_schedule = {
    # Runs left in pending/in_progress by a dead worker
    "fail-stale-research-hourly": {
        "task": "tasks.fail_stale_research",
        "schedule": crontab(minute=15),
        "kwargs": {"older_than_hours": settings.research_stale_after_hours},
    },
}

if __name__ == "__main__":
    app.start()
