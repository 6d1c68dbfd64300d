"""
Self-assessment workflow.

Lifecycle:

    draft --submit--> submitted --update(status)--> approved
      |                   |
      +-------------------+--update(status)--> archived

Only drafts can be changed. Every operation re-reads the row before acting
and state-gated writes are conditional on the status they observed, so when
two submits race only one of them succeeds and notifies the manager.
"""

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from perfeval.core.config import settings
from perfeval.core.exceptions import CollaboratorError, NotFoundError, StateConflictError, ValidationError
from perfeval.crud.persistence import Persistence
from perfeval.models.self_assessment import SelfAssessmentStatus
from perfeval.schemas.self_assessment import ResponseItem
from perfeval.services.audit import AuditRecorder
from perfeval.services.directory import DirectoryService
from perfeval.services.scoring import MAX_RATING, MIN_RATING, round_half_up, to_number
from perfeval.services.validation import require_positive_id, require_text

logger = logging.getLogger(__name__)

TABLE = "employee_self_assessments"
VALID_STATUSES = {status.value for status in SelfAssessmentStatus}


class Notifier(Protocol):
    def notify(self, template_name: str, recipient: int, substitutions: Dict[str, Any]) -> None:
        ...


def normalize_responses(responses: Any) -> Dict[str, Dict[str, Any]]:
    """
    Validate a criterion -> response mapping into its stored form.

    Raises:
        ValidationError: If responses is empty or not a mapping, an entry is
            not an object, or a numeric score is outside 1-5
    """
    if not isinstance(responses, Mapping) or not responses:
        raise ValidationError("responses must be a non-empty object", field="responses")

    normalized = {}
    for criterion, response in responses.items():
        field = f"responses.{criterion}"
        if not isinstance(response, Mapping):
            raise ValidationError(f"Response for '{criterion}' must be an object", field=field)
        try:
            item = ResponseItem.model_validate(dict(response))
        except PydanticValidationError as e:
            reason = e.errors()[0].get("msg", "invalid value")
            raise ValidationError(f"Invalid response for '{criterion}': {reason}", field=field) from e
        normalized[str(criterion)] = item.model_dump(exclude_none=True)
    return normalized


def compute_overall_score(responses: Mapping[str, Mapping[str, Any]]) -> Optional[float]:
    """Mean of the numeric scores, rounded to 2 decimals; None when nothing is scored."""
    scores = []
    for response in responses.values():
        score = to_number(response.get("score"))
        if score is not None:
            scores.append(score)
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores), 2)


class AssessmentWorkflow:
    def __init__(
        self,
        persistence: Persistence,
        notifier: Notifier,
        directory: Optional[DirectoryService] = None,
        audit: Optional[AuditRecorder] = None,
    ):
        self.persistence = persistence
        self.notifier = notifier
        self.directory = directory or DirectoryService(persistence)
        self.audit = audit or AuditRecorder(persistence)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _fetch(self, assessment_id: int) -> Optional[Dict[str, Any]]:
        return self.persistence.fetch_one(
            f"SELECT * FROM {TABLE} WHERE self_assessment_id = :assessment_id",
            {"assessment_id": assessment_id},
        )

    def _fetch_required(self, assessment_id: int) -> Dict[str, Any]:
        row = self._fetch(assessment_id)
        if row is None:
            raise NotFoundError("Self assessment", assessment_id)
        return row

    @staticmethod
    def _decode(row: Dict[str, Any]) -> Dict[str, Any]:
        decoded = dict(row)
        if isinstance(decoded.get("responses"), str):
            decoded["responses"] = json.loads(decoded["responses"])
        decoded["overall_score"] = to_number(decoded.get("overall_score"))
        return decoded

    def get_assessment(self, assessment_id: Any) -> Dict[str, Any]:
        assessment_id = require_positive_id(assessment_id, "assessment_id")
        return self._decode(self._fetch_required(assessment_id))

    def get_employee_assessments(self, employee_id: Any, period_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """List an employee's assessments, newest first, optionally for one period."""
        employee_id = require_positive_id(employee_id, "employee_id")
        query = f"SELECT * FROM {TABLE} WHERE employee_id = :employee_id"
        params: Dict[str, Any] = {"employee_id": employee_id}
        if period_id is not None:
            query += " AND period_id = :period_id"
            params["period_id"] = require_positive_id(period_id, "period_id")
        query += " ORDER BY created_at DESC, self_assessment_id DESC"
        return [self._decode(row) for row in self.persistence.fetch_all(query, params)]

    @staticmethod
    def _require_draft(assessment: Dict[str, Any], action: str) -> None:
        status = assessment["status"]
        if status != SelfAssessmentStatus.DRAFT.value:
            raise StateConflictError(
                f"Only draft assessments can be {action}; assessment "
                f"{assessment['self_assessment_id']} is {status}",
                current_status=status,
            )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, employee_id: Any, period_id: Any, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        """
        Create a draft self-assessment.

        Args:
            employee_id: Employee being assessed
            period_id: Evaluation period
            data: dimension, responses and an optional overall_score
            actor: User creating the assessment (recorded as assessor)

        Returns:
            Id of the new assessment
        """
        employee_id = require_positive_id(employee_id, "employee_id")
        period_id = require_positive_id(period_id, "period_id")
        if not isinstance(data, Mapping) or not data:
            raise ValidationError("Assessment data must be a non-empty object", field="data")

        dimension = require_text(data.get("dimension"), "dimension", max_length=255, escape=True)
        responses = normalize_responses(data.get("responses"))

        if data.get("overall_score") is not None:
            overall_score = to_number(data["overall_score"])
            if overall_score is None:
                raise ValidationError("overall_score must be numeric", field="overall_score")
            if not MIN_RATING <= overall_score <= MAX_RATING:
                raise ValidationError(
                    f"overall_score must be between {MIN_RATING} and {MAX_RATING}", field="overall_score"
                )
            overall_score = round_half_up(overall_score, 2)
        else:
            overall_score = compute_overall_score(responses)

        try:
            with self.persistence.unit_of_work():
                assessment_id = self.persistence.insert_record(
                    f"""
                    INSERT INTO {TABLE}
                        (employee_id, period_id, assessor_user_id, dimension, responses,
                         overall_score, status, created_at, updated_at)
                    VALUES
                        (:employee_id, :period_id, :assessor, :dimension, :responses,
                         :overall_score, :status, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
                    RETURNING self_assessment_id
                    """,
                    {
                        "employee_id": employee_id,
                        "period_id": period_id,
                        "assessor": actor,
                        "dimension": dimension,
                        "responses": json.dumps(responses),
                        "overall_score": overall_score,
                        "status": SelfAssessmentStatus.DRAFT.value,
                    },
                )
                self.audit.record(actor, "self_assessment_created", TABLE, assessment_id, None, dict(data))
        except CollaboratorError as e:
            logger.error(f"Create self assessment for employee {employee_id} failed: {e}")
            raise

        logger.info(f"Created self assessment {assessment_id} for employee {employee_id}, period {period_id}")
        return assessment_id

    def update(self, assessment_id: Any, data: Mapping[str, Any], actor: Optional[int] = None) -> int:
        """
        Apply a partial update to a draft assessment.

        Recognized fields: responses (recomputes overall_score), dimension,
        status. A payload with none of them changes nothing.

        Returns:
            Number of rows written (0 for a no-op update)
        """
        assessment_id = require_positive_id(assessment_id, "assessment_id")
        current = self._fetch_required(assessment_id)
        self._require_draft(current, "updated")

        if not isinstance(data, Mapping):
            raise ValidationError("Assessment data must be an object", field="data")

        changes: Dict[str, Any] = {}
        audit_after: Dict[str, Any] = {}

        if data.get("responses") is not None:
            responses = normalize_responses(data["responses"])
            changes["responses"] = json.dumps(responses)
            changes["overall_score"] = compute_overall_score(responses)
            audit_after.update(responses=responses, overall_score=changes["overall_score"])

        if data.get("dimension") is not None:
            changes["dimension"] = require_text(data["dimension"], "dimension", max_length=255, escape=True)
            audit_after["dimension"] = changes["dimension"]

        if data.get("status") is not None:
            status = data["status"]
            if not isinstance(status, str) or status not in VALID_STATUSES:
                raise ValidationError(
                    f"Invalid status '{status}'; expected one of {', '.join(sorted(VALID_STATUSES))}",
                    field="status",
                )
            changes["status"] = SelfAssessmentStatus(status).value
            audit_after["status"] = changes["status"]

        if not changes:
            logger.debug(f"Update of self assessment {assessment_id} had no recognized fields")
            return 0

        # Column names come from the fixed set above, never from the payload
        assignments = [f"{column} = :{column}" for column in changes]
        if changes.get("status") == SelfAssessmentStatus.SUBMITTED.value:
            assignments.append("submitted_at = CURRENT_TIMESTAMP")
        assignments.append("updated_at = CURRENT_TIMESTAMP")

        try:
            with self.persistence.unit_of_work():
                affected = self.persistence.update_record(
                    f"""
                    UPDATE {TABLE} SET {', '.join(assignments)}
                    WHERE self_assessment_id = :assessment_id AND status = :expected_status
                    """,
                    {**changes, "assessment_id": assessment_id, "expected_status": SelfAssessmentStatus.DRAFT.value},
                )
                if affected == 0:
                    raise StateConflictError(
                        f"Self assessment {assessment_id} is no longer a draft"
                    )
                self.audit.record(actor, "self_assessment_updated", TABLE, assessment_id, current, audit_after)
        except CollaboratorError as e:
            logger.error(f"Update self assessment {assessment_id} failed: {e}")
            raise

        logger.info(f"Updated self assessment {assessment_id}: {', '.join(changes)}")
        return affected

    def submit(self, assessment_id: Any, actor: Optional[int] = None) -> int:
        """
        Submit a draft for manager review and notify the manager.

        The status change and its audit entry are committed first; the
        manager notification afterwards is best-effort and never undoes the
        submission.

        Returns:
            Number of rows written (1)
        """
        assessment_id = require_positive_id(assessment_id, "assessment_id")
        assessment = self._fetch_required(assessment_id)
        self._require_draft(assessment, "submitted")

        try:
            with self.persistence.unit_of_work():
                affected = self.persistence.update_record(
                    f"""
                    UPDATE {TABLE}
                    SET status = :submitted, submitted_at = CURRENT_TIMESTAMP, updated_at = CURRENT_TIMESTAMP
                    WHERE self_assessment_id = :assessment_id AND status = :draft
                    """,
                    {
                        "submitted": SelfAssessmentStatus.SUBMITTED.value,
                        "draft": SelfAssessmentStatus.DRAFT.value,
                        "assessment_id": assessment_id,
                    },
                )
                if affected == 0:
                    # Another request submitted it between our read and write
                    raise StateConflictError(
                        f"Self assessment {assessment_id} was already submitted",
                        current_status=SelfAssessmentStatus.SUBMITTED.value,
                    )
                self.audit.record(
                    actor, "self_assessment_submitted", TABLE, assessment_id,
                    assessment, {"status": SelfAssessmentStatus.SUBMITTED.value},
                )
        except CollaboratorError as e:
            logger.error(f"Submit self assessment {assessment_id} failed: {e}")
            raise

        logger.info(f"Self assessment {assessment_id} submitted")
        self._notify_manager(assessment)
        return affected

    def _notify_manager(self, assessment: Dict[str, Any]) -> None:
        try:
            employee = self.directory.resolve_employee(assessment["employee_id"])
            if not employee or not employee.get("manager_id"):
                logger.info(f"No manager on file for employee {assessment['employee_id']}; skipping notification")
                return

            manager_id = employee["manager_id"]
            manager_account = self.directory.resolve_manager_account(manager_id)
            recipient = manager_account if manager_account is not None else manager_id

            self.notifier.notify(
                settings.SELF_ASSESSMENT_SUBMITTED_TEMPLATE,
                recipient,
                {
                    "employee_name": employee["display_name"],
                    "period_id": assessment["period_id"],
                },
            )
        except Exception as e:
            self.persistence.rollback()
            logger.error(
                f"Manager notification for self assessment {assessment['self_assessment_id']} failed: {e}",
                exc_info=True,
            )

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def compare_with_manager_rating(self, assessment_id: Any) -> Dict[str, Any]:
        """
        Compare the self rating with the manager's evaluation for the same
        employee and period.

        Returns:
            dict with self_overall, manager_rating, manager_summary and
            difference (self minus manager; None unless both are numeric)
        """
        assessment_id = require_positive_id(assessment_id, "assessment_id")
        assessment = self._fetch_required(assessment_id)

        result = self.persistence.fetch_one(
            """
            SELECT e.evidence_rating AS manager_rating, e.evidence_summary AS manager_summary
            FROM evaluations e
            WHERE e.employee_id = :employee_id AND e.period_id = :period_id AND e.manager_id IS NOT NULL
            ORDER BY e.created_at DESC, e.id DESC
            LIMIT 1
            """,
            {"employee_id": assessment["employee_id"], "period_id": assessment["period_id"]},
        )

        self_overall = to_number(assessment.get("overall_score"))
        manager_rating = to_number(result["manager_rating"]) if result else None
        difference = None
        if self_overall is not None and manager_rating is not None:
            difference = round_half_up(self_overall - manager_rating, 2)

        return {
            "self_overall": self_overall,
            "manager_rating": manager_rating,
            "manager_summary": result["manager_summary"] if result else None,
            "difference": difference,
        }
