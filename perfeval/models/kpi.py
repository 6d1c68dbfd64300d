"""
Company KPI model.

A measurable indicator with a target policy that decides how an achieved
value is converted into a 1-5 score.
"""

import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, func
from perfeval.core.database import Base
from perfeval.models.lifecycle import LifecycleState


class TargetPolicy(str, enum.Enum):
    """Direction in which achieved values are judged against the target."""
    HIGHER_BETTER = "higher_better"  # sales, productivity
    LOWER_BETTER = "lower_better"    # defects, costs
    TARGET_RANGE = "target_range"    # stay close to the target


class CompanyKPI(Base):
    __tablename__ = "company_kpis"

    id = Column(Integer, primary_key=True, index=True)
    kpi_name = Column(String(255), nullable=False, index=True)
    kpi_description = Column(Text, nullable=True)
    measurement_unit = Column(String(50), nullable=True)
    category = Column(String(100), nullable=True, index=True)
    target_type = Column(String(20), nullable=False, default=TargetPolicy.HIGHER_BETTER.value)

    # Soft delete via lifecycle state (never hard-deleted while referenced)
    lifecycle_state = Column(String(20), nullable=False, default=LifecycleState.ACTIVE.value,
                             server_default=LifecycleState.ACTIVE.value, index=True)

    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<CompanyKPI(id={self.id}, name='{self.kpi_name}', target_type={self.target_type})>"
