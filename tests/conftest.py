"""Shared fixtures for the billing engine and API tests."""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from core.clock import FixedClock, get_clock
from core.database import get_session
from main import app
from models.models import Organization, Student, StudentStatus
from schemas.student_schema import StudentSnapshot

API_TODAY = date(2025, 6, 14)


@pytest.fixture
def make_student():
    """Factory for roster snapshots with sensible defaults."""

    def _make(
        student_id=1,
        organization_id=1,
        active=True,
        enrollment_date="2025-03-15",
        last_payment_date=None,
        **extra,
    ) -> StudentSnapshot:
        return StudentSnapshot(
            id=student_id,
            organization_id=organization_id,
            active=active,
            enrollment_date=enrollment_date,
            last_payment_date=last_payment_date,
            **extra,
        )

    return _make


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def seeded_roster(db_session):
    """Two organizations; the first one holds a student in every state as of API_TODAY."""
    school = Organization(name="Rockstar School", slug="rockstar")
    other = Organization(name="Other School", slug="other")
    db_session.add(school)
    db_session.add(other)
    db_session.commit()
    db_session.refresh(school)
    db_session.refresh(other)

    students = [
        # paid this month -> current
        Student(full_name="Ana", organization_id=school.id,
                enrollment_date=date(2025, 3, 15), last_payment_date=date(2025, 6, 10)),
        # paid May, cutoff tomorrow -> upcoming
        Student(full_name="Luis", organization_id=school.id,
                enrollment_date=date(2025, 3, 15), last_payment_date=date(2025, 5, 14)),
        # last paid April -> overdue since May 15
        Student(full_name="Sofia", organization_id=school.id, monthly_fee=1100.0,
                instrument="Canto", teacher_name="Paola", phone="555-0142",
                enrollment_date=date(2025, 3, 15), last_payment_date=date(2025, 4, 15)),
        # withdrawn -> inactive
        Student(full_name="Carla", organization_id=school.id, status=StudentStatus.WITHDRAWN.value,
                enrollment_date=date(2025, 1, 5), last_payment_date=None),
        # no enrollment date -> unknown
        Student(full_name="Mario", organization_id=school.id),
        # other tenant, overdue
        Student(full_name="Outsider", organization_id=other.id,
                enrollment_date=date(2025, 2, 1), last_payment_date=None),
    ]
    for student in students:
        db_session.add(student)
    db_session.commit()
    return {"school": school, "other": other, "students": students}


@pytest.fixture
def client(db_session):
    """API client bound to the test session and a clock pinned to API_TODAY."""
    app.dependency_overrides[get_session] = lambda: db_session
    app.dependency_overrides[get_clock] = lambda: FixedClock(API_TODAY)
    yield TestClient(app)
    app.dependency_overrides.clear()
