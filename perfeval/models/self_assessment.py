"""
Employee self-assessment model.

Tracks the self-assessment workflow from draft through submission to
approval or archival.
"""

import enum
from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, DateTime, func
from perfeval.core.database import Base


class SelfAssessmentStatus(str, enum.Enum):
    """
    Self-assessment lifecycle:

    DRAFT -> SUBMITTED -> APPROVED
      |          |
      +----------+----> ARCHIVED   (administrative, from any state)
    """
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    ARCHIVED = "archived"


class SelfAssessment(Base):
    __tablename__ = "employee_self_assessments"

    self_assessment_id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.employee_id"), nullable=False, index=True)
    period_id = Column(Integer, nullable=False, index=True)
    assessor_user_id = Column(Integer, nullable=True)

    dimension = Column(Text, nullable=False)

    # Serialized mapping: criterion -> {"score": 1-5, "commentary": "..."}
    responses = Column(Text, nullable=False)
    overall_score = Column(Numeric(4, 2), nullable=True)

    status = Column(String(20), nullable=False, default=SelfAssessmentStatus.DRAFT.value,
                    server_default=SelfAssessmentStatus.DRAFT.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<SelfAssessment(id={self.self_assessment_id}, employee_id={self.employee_id}, status={self.status})>"
