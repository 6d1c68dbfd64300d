"""
Database models package.
"""

from perfeval.models.lifecycle import LifecycleState
from perfeval.models.kpi import CompanyKPI, TargetPolicy
from perfeval.models.company_value import CompanyValue
from perfeval.models.employee import Employee
from perfeval.models.evaluation import Evaluation, EvaluationKPIResult, EvaluationValueResult
from perfeval.models.job_template import JobPositionTemplate, JobTemplateKPI, JobTemplateValue
from perfeval.models.self_assessment import SelfAssessment, SelfAssessmentStatus
from perfeval.models.notification import Notification, NotificationTemplate
from perfeval.models.audit_log import AuditLog

__all__ = [
    "LifecycleState",
    "CompanyKPI",
    "TargetPolicy",
    "CompanyValue",
    "Employee",
    "Evaluation",
    "EvaluationKPIResult",
    "EvaluationValueResult",
    "JobPositionTemplate",
    "JobTemplateKPI",
    "JobTemplateValue",
    "SelfAssessment",
    "SelfAssessmentStatus",
    "Notification",
    "NotificationTemplate",
    "AuditLog",
]
