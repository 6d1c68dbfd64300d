"""
Template-based notifications.

``NotificationService`` renders a named template and records the resulting
notification. ``QueuedNotifier`` is what the workflow calls: it hands the
work to a Celery worker and returns immediately.
"""

import json
import logging
from typing import Any, Dict, Optional

from perfeval.core.config import settings
from perfeval.core.exceptions import NotFoundError
from perfeval.crud.persistence import Persistence

logger = logging.getLogger(__name__)


def render_template(template: str, variables: Dict[str, Any]) -> str:
    """Substitute {name} placeholders; unknown placeholders are left as-is."""
    for key, value in variables.items():
        template = template.replace(f"{{{key}}}", str(value))
    return template


class NotificationService:
    def __init__(self, persistence: Persistence):
        self.persistence = persistence

    def get_template(self, template_key: str) -> Optional[Dict[str, Any]]:
        return self.persistence.fetch_one(
            """
            SELECT template_key, type, title_template, message_template
            FROM notification_templates
            WHERE template_key = :template_key AND is_active = :is_active
            """,
            {"template_key": template_key, "is_active": True},
        )

    def create_from_template(
        self,
        template_key: str,
        recipient: int,
        variables: Optional[Dict[str, Any]] = None,
        priority: Optional[str] = None,
    ) -> int:
        """
        Render a template and record the notification for the recipient.

        Args:
            template_key: Key in notification_templates
            recipient: User id (or employee id when no account is linked)
            variables: Values for the template placeholders

        Returns:
            Id of the notification row

        Raises:
            NotFoundError: If the template does not exist or is inactive
        """
        variables = variables or {}
        template = self.get_template(template_key)
        if not template:
            raise NotFoundError("Notification template", template_key)

        notification_id = self.persistence.insert_record(
            """
            INSERT INTO notifications (user_id, type, title, message, data, priority, is_read)
            VALUES (:user_id, :type, :title, :message, :data, :priority, :is_read)
            RETURNING id
            """,
            {
                "user_id": recipient,
                "type": template["type"],
                "title": render_template(template["title_template"], variables),
                "message": render_template(template["message_template"], variables),
                "data": json.dumps(variables, default=str),
                "priority": priority or settings.NOTIFICATION_PRIORITY,
                "is_read": False,
            },
        )
        logger.info(f"Notification {notification_id} ({template_key}) recorded for recipient {recipient}")
        return notification_id


class QueuedNotifier:
    """Fire-and-forget notifier backed by the Celery notification queue."""

    def notify(self, template_name: str, recipient: int, substitutions: Dict[str, Any]) -> None:
        # Imported here so services can be used without a configured broker
        from perfeval.tasks.notification_tasks import send_notification_task

        task = send_notification_task.delay(template_name, recipient, substitutions)
        logger.info(f"Queued notification {template_name} for recipient {recipient} (task {getattr(task, 'id', None)})")
