"""
Test suite for the self-assessment workflow and its endpoints.

Tests cover:
- Draft creation (overall score, sanitizing, validation, audit)
- Updates (draft only, partial fields, status literals)
- Submission (single notification, races, best-effort delivery)
- Listing and manager comparison
"""

import json

import pytest
from sqlalchemy import text

from perfeval.core.exceptions import NotFoundError, StateConflictError, ValidationError
from perfeval.services.self_assessment import AssessmentWorkflow, compute_overall_score, normalize_responses

from conftest import RecordingNotifier, make_evaluation


RESPONSES = {
    "delivery": {"score": 4, "commentary": "Shipped the billing rewrite"},
    "teamwork": {"score": 2, "commentary": "Missed a few syncs"},
}


@pytest.fixture
def workflow(persistence, notifier, employees):
    return AssessmentWorkflow(persistence, notifier)


def _create(workflow, employee_id=11, period_id=1, **overrides):
    data = {"dimension": "Annual review", "responses": RESPONSES}
    data.update(overrides)
    return workflow.create(employee_id, period_id, data, actor=501)


class TestResponseHandling:
    """Tests for response normalization and the overall score"""

    def test_overall_score_is_mean_of_scores(self):
        assert compute_overall_score(normalize_responses(RESPONSES)) == 3.0

    def test_overall_score_rounds_to_two_decimals(self):
        responses = normalize_responses({"a": {"score": 4}, "b": {"score": 4}, "c": {"score": 5}})
        assert compute_overall_score(responses) == 4.33

    def test_non_numeric_scores_are_ignored(self):
        responses = normalize_responses({"a": {"score": "n/a", "commentary": "skip"}, "b": {"score": 5}})
        assert "score" not in responses["a"]
        assert compute_overall_score(responses) == 5.0

    def test_no_scores_gives_no_overall(self):
        responses = normalize_responses({"a": {"commentary": "text only"}})
        assert compute_overall_score(responses) is None

    def test_out_of_range_score_names_criterion(self):
        with pytest.raises(ValidationError) as exc_info:
            normalize_responses({"delivery": {"score": 7}})
        assert exc_info.value.field == "responses.delivery"

    @pytest.mark.parametrize("responses", [{}, None, ["delivery"], {"delivery": 4}])
    def test_malformed_responses(self, responses):
        with pytest.raises(ValidationError):
            normalize_responses(responses)


class TestCreate:
    """Tests for AssessmentWorkflow.create"""

    def test_create_draft(self, workflow):
        assessment_id = _create(workflow)
        assessment = workflow.get_assessment(assessment_id)

        assert assessment["status"] == "draft"
        assert assessment["overall_score"] == 3.0
        assert assessment["assessor_user_id"] == 501
        assert assessment["responses"]["delivery"]["commentary"] == "Shipped the billing rewrite"
        assert assessment["submitted_at"] is None

    def test_supplied_overall_score_is_kept(self, workflow):
        assessment_id = _create(workflow, overall_score=4.25)
        assert workflow.get_assessment(assessment_id)["overall_score"] == 4.25

    def test_non_numeric_overall_score_rejected(self, workflow):
        with pytest.raises(ValidationError):
            _create(workflow, overall_score="high")

    @pytest.mark.parametrize("overall_score", [150, 0, 5.01, -2])
    def test_out_of_range_overall_score_rejected(self, workflow, db_session, overall_score):
        with pytest.raises(ValidationError) as exc_info:
            _create(workflow, overall_score=overall_score)

        assert exc_info.value.field == "overall_score"
        assert db_session.execute(text("SELECT COUNT(*) FROM employee_self_assessments")).scalar() == 0

    def test_supplied_overall_score_rounds_to_two_decimals(self, workflow):
        assessment_id = _create(workflow, overall_score=3.456)
        assert workflow.get_assessment(assessment_id)["overall_score"] == 3.46

    def test_dimension_is_sanitized(self, workflow):
        assessment_id = _create(workflow, dimension="  <b>Growth</b> ")
        assert workflow.get_assessment(assessment_id)["dimension"] == "&lt;b&gt;Growth&lt;/b&gt;"

    @pytest.mark.parametrize("employee_id,period_id", [(0, 1), (11, -3), ("abc", 1), (True, 1)])
    def test_invalid_identifiers(self, workflow, employee_id, period_id):
        with pytest.raises(ValidationError):
            _create(workflow, employee_id=employee_id, period_id=period_id)

    def test_dimension_length_counts_typed_characters(self, workflow):
        dimension = "R&D " * 62 + "ok"
        assert len(dimension) == 250

        assessment_id = _create(workflow, dimension=dimension)

        assert workflow.get_assessment(assessment_id)["dimension"] == dimension.strip().replace("&", "&amp;")

    def test_overlong_dimension_rejected(self, workflow):
        with pytest.raises(ValidationError) as exc_info:
            _create(workflow, dimension="x" * 256)
        assert exc_info.value.field == "dimension"
        assert "255" in exc_info.value.message

    def test_blank_dimension_rejected(self, workflow):
        with pytest.raises(ValidationError) as exc_info:
            _create(workflow, dimension="   ")
        assert exc_info.value.field == "dimension"

    def test_create_is_audited(self, workflow, db_session):
        assessment_id = _create(workflow)

        entry = db_session.execute(
            text("SELECT user_id, action, record_id, old_values, new_values FROM audit_log")
        ).one()
        assert entry.action == "self_assessment_created"
        assert entry.user_id == 501
        assert entry.record_id == assessment_id
        assert entry.old_values is None
        assert json.loads(entry.new_values)["dimension"] == "Annual review"

    def test_failed_validation_writes_nothing(self, workflow, db_session):
        with pytest.raises(ValidationError):
            _create(workflow, responses={"delivery": {"score": 0}})

        count = db_session.execute(text("SELECT COUNT(*) FROM employee_self_assessments")).scalar()
        assert count == 0


class TestUpdate:
    """Tests for AssessmentWorkflow.update"""

    def test_update_responses_recomputes_overall(self, workflow):
        assessment_id = _create(workflow)

        affected = workflow.update(assessment_id, {"responses": {"delivery": {"score": 5}}}, actor=501)

        assert affected == 1
        assessment = workflow.get_assessment(assessment_id)
        assert assessment["overall_score"] == 5.0
        assert list(assessment["responses"]) == ["delivery"]
        assert assessment["updated_at"] is not None

    def test_update_dimension(self, workflow):
        assessment_id = _create(workflow)
        workflow.update(assessment_id, {"dimension": "Mid-year"}, actor=501)
        assert workflow.get_assessment(assessment_id)["dimension"] == "Mid-year"

    def test_no_recognized_fields_is_noop(self, workflow):
        assessment_id = _create(workflow)
        assert workflow.update(assessment_id, {"color": "blue"}, actor=501) == 0

    @pytest.mark.parametrize("status", ["done", "DRAFT", 3])
    def test_invalid_status_rejected(self, workflow, status):
        assessment_id = _create(workflow)
        with pytest.raises(ValidationError) as exc_info:
            workflow.update(assessment_id, {"status": status}, actor=501)
        assert exc_info.value.field == "status"

    def test_status_submitted_stamps_submitted_at(self, workflow, notifier):
        assessment_id = _create(workflow)

        workflow.update(assessment_id, {"status": "submitted"}, actor=501)

        assessment = workflow.get_assessment(assessment_id)
        assert assessment["status"] == "submitted"
        assert assessment["submitted_at"] is not None
        assert notifier.calls == []

    @pytest.mark.parametrize("payload", [{}, {"dimension": "Late edit"}, {"status": "draft"}])
    def test_update_after_submit_conflicts(self, workflow, payload):
        """Once submitted, any update is refused"""
        assessment_id = _create(workflow)
        workflow.submit(assessment_id, actor=501)

        with pytest.raises(StateConflictError) as exc_info:
            workflow.update(assessment_id, payload, actor=501)
        assert exc_info.value.current_status == "submitted"

    def test_update_missing_assessment(self, workflow):
        with pytest.raises(NotFoundError):
            workflow.update(999, {"dimension": "x"}, actor=501)


class TestSubmit:
    """Tests for AssessmentWorkflow.submit"""

    def test_submit_notifies_manager_account(self, workflow, notifier):
        assessment_id = _create(workflow)

        assert workflow.submit(assessment_id, actor=501) == 1

        assessment = workflow.get_assessment(assessment_id)
        assert assessment["status"] == "submitted"
        assert assessment["submitted_at"] is not None
        assert notifier.calls == [
            ("self_assessment_submitted", 500, {"employee_name": "Dan Cho", "period_id": 1})
        ]

    def test_second_submit_conflicts_and_notifies_once(self, workflow, notifier):
        assessment_id = _create(workflow)
        workflow.submit(assessment_id, actor=501)

        with pytest.raises(StateConflictError):
            workflow.submit(assessment_id, actor=501)

        assert len(notifier.calls) == 1

    def test_racing_submit_loses_on_conditional_write(self, workflow, notifier, monkeypatch):
        """A submit that read a stale draft must not notify a second time"""
        assessment_id = _create(workflow)
        stale = workflow._fetch_required(assessment_id)
        workflow.submit(assessment_id, actor=501)

        monkeypatch.setattr(workflow, "_fetch_required", lambda _id: dict(stale))
        with pytest.raises(StateConflictError):
            workflow.submit(assessment_id, actor=501)

        assert len(notifier.calls) == 1

    def test_manager_without_account_gets_employee_id(self, workflow, notifier):
        assessment_id = _create(workflow, employee_id=21)
        workflow.submit(assessment_id, actor=502)

        assert notifier.calls[0][1] == 20
        assert notifier.calls[0][2]["employee_name"] == "Leo Hart"

    def test_no_manager_no_notification(self, workflow, notifier):
        assessment_id = _create(workflow, employee_id=30)
        workflow.submit(assessment_id, actor=503)

        assert notifier.calls == []
        assert workflow.get_assessment(assessment_id)["status"] == "submitted"

    def test_notification_failure_keeps_submission(self, persistence, employees):
        failing = RecordingNotifier(error=RuntimeError("broker down"))
        workflow = AssessmentWorkflow(persistence, failing)
        assessment_id = _create(workflow)

        assert workflow.submit(assessment_id, actor=501) == 1

        assert len(failing.calls) == 1
        assert workflow.get_assessment(assessment_id)["status"] == "submitted"

    def test_submit_is_audited(self, workflow, db_session):
        assessment_id = _create(workflow)
        workflow.submit(assessment_id, actor=501)

        actions = db_session.execute(
            text("SELECT action FROM audit_log WHERE record_id = :id ORDER BY id"), {"id": assessment_id}
        ).scalars().all()
        assert actions == ["self_assessment_created", "self_assessment_submitted"]

    def test_submit_missing_assessment(self, workflow):
        with pytest.raises(NotFoundError):
            workflow.submit(12345, actor=501)


class TestReads:
    """Tests for listing and manager comparison"""

    def test_employee_assessments_newest_first(self, workflow):
        first = _create(workflow, period_id=1)
        second = _create(workflow, period_id=2)
        _create(workflow, employee_id=30)

        listed = workflow.get_employee_assessments(11)

        assert [a["self_assessment_id"] for a in listed] == [second, first]

    def test_employee_assessments_for_period(self, workflow):
        _create(workflow, period_id=1)
        second = _create(workflow, period_id=2)

        listed = workflow.get_employee_assessments(11, period_id=2)

        assert [a["self_assessment_id"] for a in listed] == [second]

    @pytest.mark.parametrize("period_id", [0, -1])
    def test_employee_assessments_invalid_period(self, workflow, period_id):
        _create(workflow, period_id=1)

        with pytest.raises(ValidationError) as exc_info:
            workflow.get_employee_assessments(11, period_id=period_id)
        assert exc_info.value.field == "period_id"

    def test_comparison_without_manager_evaluation(self, workflow):
        assessment_id = _create(workflow)

        comparison = workflow.compare_with_manager_rating(assessment_id)

        assert comparison == {
            "self_overall": 3.0,
            "manager_rating": None,
            "manager_summary": None,
            "difference": None,
        }

    def test_comparison_with_manager_evaluation(self, workflow, db_session):
        assessment_id = _create(workflow)
        make_evaluation(db_session, evidence_rating=3.5, evidence_summary="Solid year")

        comparison = workflow.compare_with_manager_rating(assessment_id)

        assert comparison["manager_rating"] == 3.5
        assert comparison["manager_summary"] == "Solid year"
        assert comparison["difference"] == -0.5

    def test_comparison_ignores_evaluations_without_manager(self, workflow, db_session):
        assessment_id = _create(workflow)
        make_evaluation(db_session, manager_id=None, evidence_rating=1.0)

        assert workflow.compare_with_manager_rating(assessment_id)["manager_rating"] is None

    def test_comparison_without_self_score(self, workflow, db_session):
        assessment_id = _create(workflow, responses={"delivery": {"commentary": "no score"}})
        make_evaluation(db_session, evidence_rating=4.0)

        comparison = workflow.compare_with_manager_rating(assessment_id)
        assert comparison["self_overall"] is None
        assert comparison["difference"] is None


class TestSelfAssessmentEndpoints:
    """Tests for the self-assessment HTTP routes"""

    payload = {
        "employee_id": 11,
        "period_id": 1,
        "dimension": "Annual review",
        "responses": RESPONSES,
    }

    def test_create_and_fetch(self, client, employees):
        response = client.post("/api/v1/self-assessments/", json=self.payload, headers={"X-Actor-Id": "501"})

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "draft"
        assert data["overall_score"] == 3.0

        fetched = client.get(f"/api/v1/self-assessments/{data['self_assessment_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["assessor_user_id"] == 501

    def test_create_out_of_range_overall_score(self, client, employees):
        payload = dict(self.payload, overall_score=150)
        response = client.post("/api/v1/self-assessments/", json=payload)

        assert response.status_code == 422
        assert response.json()["field"] == "overall_score"

    def test_create_invalid_score(self, client, employees):
        payload = dict(self.payload, responses={"delivery": {"score": 9}})
        response = client.post("/api/v1/self-assessments/", json=payload)

        assert response.status_code == 422
        assert response.json()["field"] == "responses.delivery"

    def test_submit_queues_one_notification(self, client, employees, queued_tasks):
        assessment_id = client.post("/api/v1/self-assessments/", json=self.payload).json()["self_assessment_id"]

        first = client.post(f"/api/v1/self-assessments/{assessment_id}/submit", headers={"X-Actor-Id": "501"})
        second = client.post(f"/api/v1/self-assessments/{assessment_id}/submit", headers={"X-Actor-Id": "501"})

        assert first.status_code == 200
        assert first.json()["status"] == "submitted"
        assert second.status_code == 409
        assert second.json()["current_status"] == "submitted"

        assert len(queued_tasks) == 1
        assert queued_tasks[0].task == "perfeval.tasks.notification_tasks.send_notification_task"
        assert queued_tasks[0].args == (
            "self_assessment_submitted", 500, {"employee_name": "Dan Cho", "period_id": 1}
        )

    def test_patch_after_submit_conflicts(self, client, employees, queued_tasks):
        assessment_id = client.post("/api/v1/self-assessments/", json=self.payload).json()["self_assessment_id"]
        client.post(f"/api/v1/self-assessments/{assessment_id}/submit")

        response = client.patch(f"/api/v1/self-assessments/{assessment_id}", json={"dimension": "Edit"})

        assert response.status_code == 409

    def test_patch_draft(self, client, employees):
        assessment_id = client.post("/api/v1/self-assessments/", json=self.payload).json()["self_assessment_id"]

        response = client.patch(
            f"/api/v1/self-assessments/{assessment_id}",
            json={"responses": {"delivery": {"score": 5}}},
        )

        assert response.status_code == 200
        assert response.json()["overall_score"] == 5.0

    def test_get_missing_assessment(self, client):
        response = client.get("/api/v1/self-assessments/99999")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"].lower()

    def test_invalid_actor_header(self, client, employees):
        response = client.post("/api/v1/self-assessments/", json=self.payload, headers={"X-Actor-Id": "0"})
        assert response.status_code == 422

    def test_comparison_route(self, client, employees, db_session):
        assessment_id = client.post("/api/v1/self-assessments/", json=self.payload).json()["self_assessment_id"]
        make_evaluation(db_session, evidence_rating=4.0, evidence_summary="Great")

        response = client.get(f"/api/v1/self-assessments/{assessment_id}/comparison")

        assert response.status_code == 200
        assert response.json()["difference"] == -1.0

    def test_employee_listing_route(self, client, employees):
        client.post("/api/v1/self-assessments/", json=self.payload)
        client.post("/api/v1/self-assessments/", json=dict(self.payload, period_id=2))

        response = client.get("/api/v1/employees/11/self-assessments", params={"period_id": 2})

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["period_id"] == 2
