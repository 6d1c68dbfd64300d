"""
Audit trail for mutating operations.

Entries are written inside the caller's unit of work, so an audit row exists
exactly when the change it describes was committed.
"""

import json
import logging
from typing import Any, Optional

from perfeval.crud.persistence import Persistence

logger = logging.getLogger(__name__)


def _snapshot(value: Any) -> Optional[str]:
    if value is None:
        return None
    # Timestamps and Decimals from the store are not JSON types
    return json.dumps(value, default=str, sort_keys=True)


class AuditRecorder:
    def __init__(self, persistence: Persistence):
        self.persistence = persistence

    def record(
        self,
        actor: Optional[int],
        action: str,
        entity_kind: str,
        entity_id: Optional[int],
        before: Any = None,
        after: Any = None,
    ) -> int:
        """
        Record who did what to which row.

        Args:
            actor: User id performing the operation
            action: Action name (e.g. "self_assessment_submitted")
            entity_kind: Table the entity lives in
            entity_id: Primary key of the entity
            before: State before the change (None for creations)
            after: State or payload after the change

        Returns:
            Id of the audit entry
        """
        audit_id = self.persistence.insert_record(
            """
            INSERT INTO audit_log (user_id, action, table_name, record_id, old_values, new_values)
            VALUES (:user_id, :action, :table_name, :record_id, :old_values, :new_values)
            RETURNING id
            """,
            {
                "user_id": actor,
                "action": action,
                "table_name": entity_kind,
                "record_id": entity_id,
                "old_values": _snapshot(before),
                "new_values": _snapshot(after),
            },
        )
        logger.debug(f"Audit {action} on {entity_kind}:{entity_id} by actor {actor}")
        return audit_id
