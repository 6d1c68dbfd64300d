"""
Celery tasks for notification delivery.

Rendering and recording happen in the worker so that a slow or failing
notification backend never holds up the workflow that triggered it.
"""

import logging
from typing import Any, Dict

from perfeval.core.celery_app import celery_app
from perfeval.core.database import SessionLocal
from perfeval.crud.persistence import Persistence
from perfeval.services.notifications import NotificationService

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    name="perfeval.tasks.notification_tasks.send_notification_task",
    max_retries=3,
    default_retry_delay=30,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True
)
def send_notification_task(self, template_key: str, recipient: int, variables: Dict[str, Any]):
    """
    Render a notification template and record it for the recipient.

    Args:
        template_key: Key of the notification template
        recipient: User id (or manager employee id when no account is linked)
        variables: Placeholder values for the template

    Returns:
        dict: Status and the id of the created notification
    """
    db = SessionLocal()
    try:
        logger.info(f"[Task {self.request.id}] Sending {template_key} to {recipient} (attempt {self.request.retries + 1})")

        persistence = Persistence(db)
        with persistence.unit_of_work():
            notification_id = NotificationService(persistence).create_from_template(
                template_key, recipient, variables
            )

        return {"status": "success", "notification_id": notification_id}

    except Exception as e:
        logger.error(f"[Task {self.request.id}] Failed to send {template_key} to {recipient}: {e}")

        if self.request.retries >= self.max_retries:
            logger.error(f"[Task {self.request.id}] All retry attempts exhausted for {template_key}")

        raise  # Re-raise to trigger Celery retry

    finally:
        db.close()
