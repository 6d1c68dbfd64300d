"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Mock Celery tasks and a recording notifier
- Seed data (employees, catalog entries, evaluations)
"""

from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from perfeval.core.database import Base, get_db
from perfeval.crud.persistence import Persistence
from perfeval.models import (
    CompanyKPI,
    CompanyValue,
    Employee,
    Evaluation,
    EvaluationKPIResult,
    EvaluationValueResult,
    JobPositionTemplate,
    JobTemplateKPI,
    JobTemplateValue,
    NotificationTemplate,
)
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session():
    """
    Create a fresh database session for each test.
    Tables are dropped after the test completes.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def persistence(db_session):
    return Persistence(db_session)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def queued_tasks(monkeypatch):
    """
    Record Celery .delay() calls instead of sending them to Redis.
    """
    calls = []

    def mock_delay(self, *args, **kwargs):
        calls.append(SimpleNamespace(task=self.name, args=args, kwargs=kwargs))
        return SimpleNamespace(id=f"test-task-{len(calls)}")

    monkeypatch.setattr("celery.Task.delay", mock_delay)
    return calls


@pytest.fixture
def mock_celery(monkeypatch):
    """
    Execute Celery tasks synchronously against the test database.
    """
    from perfeval.tasks import notification_tasks

    monkeypatch.setattr(notification_tasks, "SessionLocal", TestingSessionLocal)

    def mock_delay(self, *args, **kwargs):
        """Execute task synchronously instead of queuing"""
        return self(*args, **kwargs)

    monkeypatch.setattr("celery.Task.delay", mock_delay)
    return mock_delay


class RecordingNotifier:
    """Notifier double that remembers what it was asked to send."""

    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def notify(self, template_name, recipient, substitutions):
        self.calls.append((template_name, recipient, substitutions))
        if self.error is not None:
            raise self.error


@pytest.fixture
def notifier():
    return RecordingNotifier()


# ----------------------------------------------------------------------
# Seed data
# ----------------------------------------------------------------------

@pytest.fixture
def employees(db_session):
    """
    Small org chart:
    - 10 Maria Lopez (manager, login account 500)
    - 11 Dan Cho (reports to 10)
    - 20 Ines Park (manager without a login account)
    - 21 Leo Hart (reports to 20)
    - 30 Sam Reed (no manager)
    """
    db_session.add_all([
        Employee(employee_id=10, user_id=500, first_name="Maria", last_name="Lopez", email="maria@example.com"),
        Employee(employee_id=11, user_id=501, first_name="Dan", last_name="Cho", manager_id=10),
        Employee(employee_id=20, user_id=None, first_name="Ines", last_name="Park"),
        Employee(employee_id=21, user_id=502, first_name="Leo", last_name="Hart", manager_id=20),
        Employee(employee_id=30, user_id=503, first_name="Sam", last_name="Reed"),
    ])
    db_session.commit()
    return {"manager": 10, "report": 11, "manager_no_account": 20, "report_of_unlinked": 21, "no_manager": 30}


@pytest.fixture
def submission_template(db_session):
    template = NotificationTemplate(
        template_key="self_assessment_submitted",
        type="self_assessment",
        title_template="Self-assessment from {employee_name}",
        message_template="{employee_name} submitted a self-assessment for period {period_id}.",
        is_active=True,
    )
    db_session.add(template)
    db_session.commit()
    return template


def make_kpi(db_session, name="Revenue Growth", category="Sales", target_type="higher_better", **fields):
    kpi = CompanyKPI(kpi_name=name, category=category, target_type=target_type, **fields)
    db_session.add(kpi)
    db_session.commit()
    return kpi


def make_value(db_session, name="Integrity", sort_order=0, **fields):
    value = CompanyValue(value_name=name, sort_order=sort_order, **fields)
    db_session.add(value)
    db_session.commit()
    return value


def make_evaluation(db_session, employee_id=11, period_id=1, manager_id=10, created_at=None, **fields):
    evaluation = Evaluation(
        employee_id=employee_id,
        period_id=period_id,
        manager_id=manager_id,
        status="completed",
        created_at=created_at or datetime(2026, 3, 15, 10, 0, 0),
        **fields,
    )
    db_session.add(evaluation)
    db_session.commit()
    return evaluation


def add_kpi_result(db_session, evaluation, kpi, score, achieved_value=None, target_value=None):
    db_session.add(EvaluationKPIResult(
        evaluation_id=evaluation.id,
        kpi_id=kpi.id,
        score=score,
        achieved_value=achieved_value,
        target_value=target_value,
    ))
    db_session.commit()


def add_value_result(db_session, evaluation, value, score):
    db_session.add(EvaluationValueResult(evaluation_id=evaluation.id, value_id=value.id, score=score))
    db_session.commit()


def make_job_template(db_session, title="Account Executive", department="Sales", is_active=True,
                      kpis=(), values=()):
    """kpis: (kpi, target_value, weight) tuples; values: (value, weight) tuples."""
    template = JobPositionTemplate(position_title=title, department=department, is_active=is_active)
    db_session.add(template)
    db_session.flush()
    for kpi, target_value, weight in kpis:
        db_session.add(JobTemplateKPI(job_template_id=template.id, kpi_id=kpi.id,
                                      target_value=target_value, weight_percentage=weight))
    for value, weight in values:
        db_session.add(JobTemplateValue(job_template_id=template.id, value_id=value.id, weight_percentage=weight))
    db_session.commit()
    return template
