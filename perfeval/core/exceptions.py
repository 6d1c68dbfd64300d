"""
Error taxonomy shared by the scoring, statistics and workflow services.

Every failure carries enough context (field, entity, current state) for the
API layer to produce an actionable message.
"""

from typing import Any, Optional


class PerformanceError(Exception):
    """Base class for all domain errors raised by the services."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message}


class ValidationError(PerformanceError):
    """Malformed or missing input (bad identifiers, empty fields, invalid literals)."""

    status_code = 422

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.field:
            payload["field"] = self.field
        return payload


class NotFoundError(PerformanceError):
    """Referenced record does not exist or has been archived."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class StateConflictError(PerformanceError):
    """Operation not permitted in the record's current workflow state."""

    status_code = 409

    def __init__(self, message: str, current_status: Optional[str] = None):
        super().__init__(message)
        self.current_status = current_status

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.current_status:
            payload["current_status"] = self.current_status
        return payload


class CollaboratorError(PerformanceError):
    """Persistence or notification backend failure."""
    status_code = 503
