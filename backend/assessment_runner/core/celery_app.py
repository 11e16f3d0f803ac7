from celery import Celery

from .config import get_settings
from .logging import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

celery_app = Celery(
    "assessment_runner",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    task_routes={
        "assessment_runner.services.runner.poll_assessment_triggers": {"queue": "assessments"},
    },
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Keep the JSON handler installed by configure_logging()
    worker_hijack_root_logger=False,
    imports=("assessment_runner.services.runner",),
    beat_schedule={
        "poll-assessment-triggers": {
            "task": "assessment_runner.services.runner.poll_assessment_triggers",
            "schedule": settings.POLL_INTERVAL_SECONDS,
            # Firings still waiting after one interval are dropped, not stacked
            "options": {"queue": "assessments", "expires": settings.POLL_INTERVAL_SECONDS},
        },
    },
)
