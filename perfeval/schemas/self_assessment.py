"""
Pydantic schemas for self-assessment requests/responses.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from perfeval.models.self_assessment import SelfAssessmentStatus
from perfeval.services.scoring import MAX_RATING, MIN_RATING, to_number


class ResponseItem(BaseModel):
    """
    Answer to one assessment criterion.

    Non-numeric scores are treated as "not scored" rather than as errors;
    numeric scores must fall within the 1-5 scale.
    """
    model_config = ConfigDict(extra="allow")

    score: Optional[float] = Field(None, description="Self rating from 1 to 5")
    commentary: Optional[str] = Field(None, description="Free-text justification")

    @field_validator("score", mode="before")
    @classmethod
    def coerce_score(cls, v: Any) -> Optional[float]:
        number = to_number(v)
        if number is None:
            return None
        if not MIN_RATING <= number <= MAX_RATING:
            raise ValueError(f"score must be between {MIN_RATING} and {MAX_RATING}")
        return number


class SelfAssessmentCreateRequest(BaseModel):
    employee_id: int
    period_id: int
    dimension: str
    responses: Dict[str, Any]
    overall_score: Optional[float] = Field(None, description="Stored as given instead of the computed mean")


class SelfAssessmentUpdateRequest(BaseModel):
    """Partial update; only fields that are sent are applied."""
    dimension: Optional[str] = None
    responses: Optional[Dict[str, Any]] = None
    status: Optional[str] = Field(None, description="draft, submitted, approved or archived")


class SelfAssessmentResponse(BaseModel):
    self_assessment_id: int
    employee_id: int
    period_id: int
    assessor_user_id: Optional[int] = None
    dimension: str
    responses: Dict[str, Any]
    overall_score: Optional[float] = None
    status: SelfAssessmentStatus
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SelfAssessmentCreateResponse(BaseModel):
    self_assessment_id: int
    status: SelfAssessmentStatus
    overall_score: Optional[float] = None
    message: str


class ManagerComparisonResponse(BaseModel):
    self_overall: Optional[float] = None
    manager_rating: Optional[float] = None
    manager_summary: Optional[str] = None
    difference: Optional[float] = None
