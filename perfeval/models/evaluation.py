"""
Manager evaluation records and their per-KPI / per-Value results.

These tables are written by the evaluation module; the scoring engine only
reads them (statistics and self-assessment comparison).
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Text, DateTime, func
from sqlalchemy.orm import relationship
from perfeval.core.database import Base


class Evaluation(Base):
    __tablename__ = "evaluations"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.employee_id"), nullable=False, index=True)
    period_id = Column(Integer, nullable=False, index=True)
    manager_id = Column(Integer, ForeignKey("employees.employee_id"), nullable=True)

    # Manager's overall rating and narrative
    evidence_rating = Column(Numeric(4, 2), nullable=True)
    evidence_summary = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="draft")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    kpi_results = relationship("EvaluationKPIResult", back_populates="evaluation", cascade="all, delete-orphan")
    value_results = relationship("EvaluationValueResult", back_populates="evaluation", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Evaluation(id={self.id}, employee_id={self.employee_id}, period_id={self.period_id})>"


class EvaluationKPIResult(Base):
    __tablename__ = "evaluation_kpi_results"

    id = Column(Integer, primary_key=True, index=True)
    evaluation_id = Column(Integer, ForeignKey("evaluations.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("company_kpis.id"), nullable=False, index=True)
    target_value = Column(Numeric(12, 2), nullable=True)
    achieved_value = Column(Numeric(12, 2), nullable=True)
    score = Column(Numeric(3, 1), nullable=True)
    comments = Column(Text, nullable=True)

    evaluation = relationship("Evaluation", back_populates="kpi_results")


class EvaluationValueResult(Base):
    __tablename__ = "evaluation_value_results"

    id = Column(Integer, primary_key=True, index=True)
    evaluation_id = Column(Integer, ForeignKey("evaluations.id"), nullable=False, index=True)
    value_id = Column(Integer, ForeignKey("company_values.id"), nullable=False, index=True)
    score = Column(Numeric(3, 1), nullable=True)
    comments = Column(Text, nullable=True)

    evaluation = relationship("Evaluation", back_populates="value_results")
