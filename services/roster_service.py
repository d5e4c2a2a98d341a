# ================================================================
# services/roster_service.py: Roster provider backed by the database
# ================================================================
from typing import List, Optional

from sqlmodel import Session, select

from models.models import Organization, Student
from schemas.student_schema import StudentSnapshot, status_is_active


def to_snapshot(student: Student) -> StudentSnapshot:
    return StudentSnapshot(
        id=student.id,
        organization_id=student.organization_id,
        active=status_is_active(student.status),
        enrollment_date=student.enrollment_date,
        last_payment_date=student.last_payment_date,
        monthly_fee=student.monthly_fee,
        full_name=student.full_name,
        instrument=student.instrument,
        teacher_name=student.teacher_name,
        phone=student.phone,
    )


def get_organization(session: Session, organization_id: int) -> Optional[Organization]:
    return session.get(Organization, organization_id)


def load_roster(session: Session, organization_id: int) -> List[StudentSnapshot]:
    """All students of one organization, active and withdrawn, ordered by id."""
    statement = (
        select(Student)
        .where(Student.organization_id == organization_id)
        .order_by(Student.id)
    )
    return [to_snapshot(student) for student in session.exec(statement).all()]


def get_student(session: Session, organization_id: int, student_id: int) -> Optional[StudentSnapshot]:
    """One student, only if it belongs to the organization."""
    student = session.get(Student, student_id)
    if not student or student.organization_id != organization_id:
        return None
    return to_snapshot(student)
