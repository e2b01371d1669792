"""
Shared fixtures for KPI tracker tests.

Every test gets a fresh in-memory SQLite database.
"""
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from kpi_tracker.database import Base, get_db
from kpi_tracker.models import Company, User, Task
from kpi_tracker.constants import ROLE_ADMIN, ROLE_EMPLOYEE, TASK_STATUS_PENDING


@pytest.fixture
def db_session():
    """Fresh database session backed by in-memory SQLite"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def company(db_session):
    company = Company(name="Acme")
    db_session.add(company)
    db_session.commit()
    return company


@pytest.fixture
def other_company(db_session):
    company = Company(name="Globex")
    db_session.add(company)
    db_session.commit()
    return company


def create_user(db_session, company, email, role=ROLE_EMPLOYEE, first_name=None, last_name=None):
    """Helper to create a user in a company"""
    user = User(
        company_id=company.id,
        email=email,
        role=role,
        first_name=first_name,
        last_name=last_name
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture
def admin(db_session, company):
    return create_user(db_session, company, "admin@acme.test", ROLE_ADMIN, "Ada", "Admin")


@pytest.fixture
def employee(db_session, company):
    return create_user(db_session, company, "emp@acme.test", ROLE_EMPLOYEE, "Eve", "Worker")


@pytest.fixture
def second_employee(db_session, company):
    return create_user(db_session, company, "bob@acme.test", ROLE_EMPLOYEE, "Bob", "Builder")


@pytest.fixture
def outsider(db_session, other_company):
    return create_user(db_session, other_company, "out@globex.test", ROLE_EMPLOYEE, "Oscar", "Out")


def create_task(db_session, company, assignee, **kwargs):
    """Helper to create a task with sensible defaults"""
    values = {
        "title": "Task",
        "company_id": company.id,
        "assigned_to": assignee.id if assignee is not None else None,
        "status": TASK_STATUS_PENDING,
        "points": 10,
        "completion_percent": 0,
        "earned_points": 0,
        "is_active": True,
    }
    values.update(kwargs)
    task = Task(**values)
    db_session.add(task)
    db_session.commit()
    return task


@pytest.fixture
def deadline():
    """Soft deadline used across scoring scenarios"""
    return datetime(2026, 3, 10, 12, 0, 0)


@pytest.fixture
def grace(deadline):
    """Hard deadline two days after the soft one"""
    return deadline + timedelta(hours=48)


@pytest.fixture
def client(db_session):
    """API client wired to the test database"""
    from fastapi.testclient import TestClient
    from kpi_tracker.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def auth_headers(user):
    """Headers identifying `user` to the API"""
    from kpi_tracker.auth import API_KEY
    return {
        "X-API-Key": API_KEY,
        "X-User-Id": str(user.id),
        "X-Company-Id": str(user.company_id),
    }
