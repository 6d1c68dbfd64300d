from sqlalchemy import Column, Integer, String, Text, DateTime, func
from perfeval.core.database import Base
from perfeval.models.lifecycle import LifecycleState


class CompanyValue(Base):
    """
    Qualitative company value scored from behavior ratings.

    sort_order drives display and report ordering; it is not unique.
    """
    __tablename__ = "company_values"

    id = Column(Integer, primary_key=True, index=True)
    value_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0, server_default="0")

    lifecycle_state = Column(String(20), nullable=False, default=LifecycleState.ACTIVE.value,
                             server_default=LifecycleState.ACTIVE.value, index=True)

    created_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<CompanyValue(id={self.id}, name='{self.value_name}', sort_order={self.sort_order})>"
