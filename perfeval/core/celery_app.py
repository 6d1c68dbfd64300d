"""
Celery application for background notification delivery.

Redis is both the broker and the result backend. Start a worker with:

    celery -A perfeval.core.celery_app worker --loglevel=info
"""

from celery import Celery
from celery.signals import setup_logging as celery_setup_logging

from perfeval.core.config import settings
from perfeval.core.logging_config import setup_logging

celery_app = Celery(
    "perfeval_worker",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["perfeval.tasks.notification_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    timezone="UTC",
    enable_utc=True,

    # A notification is only acknowledged once it has been recorded
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=60,
    task_soft_time_limit=45,
    task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,

    result_expires=3600,

    worker_prefetch_multiplier=1,
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the application's log format in workers instead of Celery's own."""
    setup_logging(settings.LOG_LEVEL, settings.JSON_LOGS, process_role="worker")
