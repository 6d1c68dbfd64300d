"""
FastAPI dependencies that wire request-scoped services.

Actor identity comes from the ``X-Actor-Id`` header. It is used for audit and
assessor attribution only; authentication happens in front of this service.
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from perfeval.core.database import get_db
from perfeval.crud.persistence import Persistence
from perfeval.services.kpis import KPIService
from perfeval.services.notifications import QueuedNotifier
from perfeval.services.self_assessment import AssessmentWorkflow
from perfeval.services.values import ValueService


def get_persistence(db: Session = Depends(get_db)) -> Persistence:
    return Persistence(db)


def get_actor(x_actor_id: Optional[int] = Header(None)) -> Optional[int]:
    """
    Extract the acting user id from the X-Actor-Id header.

    Raises:
        HTTPException 422: If the header is present but not a positive id
    """
    if x_actor_id is not None and x_actor_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="X-Actor-Id must be a positive integer",
        )
    return x_actor_id


def get_notifier() -> QueuedNotifier:
    return QueuedNotifier()


def get_workflow(
    persistence: Persistence = Depends(get_persistence),
    notifier: QueuedNotifier = Depends(get_notifier),
) -> AssessmentWorkflow:
    return AssessmentWorkflow(persistence, notifier)


def get_kpi_service(persistence: Persistence = Depends(get_persistence)) -> KPIService:
    return KPIService(persistence)


def get_value_service(persistence: Persistence = Depends(get_persistence)) -> ValueService:
    return ValueService(persistence)
