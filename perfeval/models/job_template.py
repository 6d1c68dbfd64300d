"""
Job position templates and the KPIs / Values attached to them.
"""

from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, Numeric
from perfeval.core.database import Base


class JobPositionTemplate(Base):
    __tablename__ = "job_position_templates"

    id = Column(Integer, primary_key=True, index=True)
    position_title = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class JobTemplateKPI(Base):
    __tablename__ = "job_template_kpis"

    id = Column(Integer, primary_key=True, index=True)
    job_template_id = Column(Integer, ForeignKey("job_position_templates.id"), nullable=False, index=True)
    kpi_id = Column(Integer, ForeignKey("company_kpis.id"), nullable=False, index=True)
    target_value = Column(Numeric(12, 2), nullable=True)
    weight_percentage = Column(Numeric(5, 2), nullable=True)


class JobTemplateValue(Base):
    __tablename__ = "job_template_values"

    id = Column(Integer, primary_key=True, index=True)
    job_template_id = Column(Integer, ForeignKey("job_position_templates.id"), nullable=False, index=True)
    value_id = Column(Integer, ForeignKey("company_values.id"), nullable=False, index=True)
    weight_percentage = Column(Numeric(5, 2), nullable=True)
