"""
Celery tasks package.

- notification_tasks: template rendering and notification recording
"""

from perfeval.tasks import notification_tasks

__all__ = ["notification_tasks"]
