import logging
from typing import List, Optional

from fastapi import APIRouter, Depends

from perfeval.core.deps import get_actor, get_workflow
from perfeval.schemas.self_assessment import (
    ManagerComparisonResponse,
    SelfAssessmentCreateRequest,
    SelfAssessmentCreateResponse,
    SelfAssessmentResponse,
    SelfAssessmentUpdateRequest,
)
from perfeval.services.self_assessment import AssessmentWorkflow

router = APIRouter(tags=["Self Assessments"])
logger = logging.getLogger(__name__)


@router.post("/self-assessments/", status_code=201, response_model=SelfAssessmentCreateResponse)
def create_self_assessment(
    request: SelfAssessmentCreateRequest,
    workflow: AssessmentWorkflow = Depends(get_workflow),
    actor: Optional[int] = Depends(get_actor),
):
    """
    Create a draft self-assessment.

    overall_score defaults to the mean of the numeric response scores,
    rounded to two decimals.
    """
    data = request.model_dump(exclude={"employee_id", "period_id"}, exclude_none=True)
    assessment_id = workflow.create(request.employee_id, request.period_id, data, actor)
    assessment = workflow.get_assessment(assessment_id)

    return SelfAssessmentCreateResponse(
        self_assessment_id=assessment_id,
        status=assessment["status"],
        overall_score=assessment["overall_score"],
        message="Self assessment created as draft.",
    )


@router.get("/self-assessments/{assessment_id}", response_model=SelfAssessmentResponse)
def get_self_assessment(assessment_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    return workflow.get_assessment(assessment_id)


@router.patch("/self-assessments/{assessment_id}", response_model=SelfAssessmentResponse)
def update_self_assessment(
    assessment_id: int,
    request: SelfAssessmentUpdateRequest,
    workflow: AssessmentWorkflow = Depends(get_workflow),
    actor: Optional[int] = Depends(get_actor),
):
    """Update a draft. Returns 409 once the assessment has left draft."""
    workflow.update(assessment_id, request.model_dump(exclude_none=True), actor)
    return workflow.get_assessment(assessment_id)


@router.post("/self-assessments/{assessment_id}/submit", response_model=SelfAssessmentResponse)
def submit_self_assessment(
    assessment_id: int,
    workflow: AssessmentWorkflow = Depends(get_workflow),
    actor: Optional[int] = Depends(get_actor),
):
    """
    Submit a draft for manager review.

    The manager is notified asynchronously; a notification failure does not
    undo the submission.
    """
    workflow.submit(assessment_id, actor)
    return workflow.get_assessment(assessment_id)


@router.get("/self-assessments/{assessment_id}/comparison", response_model=ManagerComparisonResponse)
def compare_with_manager(assessment_id: int, workflow: AssessmentWorkflow = Depends(get_workflow)):
    return workflow.compare_with_manager_rating(assessment_id)


@router.get("/employees/{employee_id}/self-assessments", response_model=List[SelfAssessmentResponse])
def list_employee_self_assessments(
    employee_id: int,
    period_id: Optional[int] = None,
    workflow: AssessmentWorkflow = Depends(get_workflow),
):
    """An employee's self-assessments, newest first."""
    return workflow.get_employee_assessments(employee_id, period_id)
