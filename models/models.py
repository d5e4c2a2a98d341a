# models/models.py
from typing import Optional, List
from datetime import date, datetime
from enum import Enum
from sqlmodel import SQLModel, Field, Relationship


# ============================================================
# ENUMS
# ============================================================
class StudentStatus(str, Enum):
    ACTIVE = "Activo"
    WITHDRAWN = "Baja"


# ============================================================
# ORGANIZATION (tenant)
# ============================================================
class Organization(SQLModel, table=True):
    __tablename__ = "organization"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    slug: Optional[str] = Field(default=None, max_length=50, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    students: List["Student"] = Relationship(back_populates="organization")


# ============================================================
# STUDENT (billable subscriber)
# ============================================================
class Student(SQLModel, table=True):
    __tablename__ = "student"

    id: Optional[int] = Field(default=None, primary_key=True)
    full_name: str = Field(max_length=150)
    status: str = Field(default=StudentStatus.ACTIVE.value, max_length=20, index=True)

    # Billing anchor: day-of-month of enrollment_date is the monthly due day
    enrollment_date: Optional[date] = Field(default=None)
    last_payment_date: Optional[date] = Field(default=None)
    monthly_fee: Optional[float] = Field(default=None, ge=0.0)

    # Roster details shown next to the payment status
    instrument: Optional[str] = Field(default=None, max_length=50)
    teacher_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=30)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Tenant scoping
    organization_id: int = Field(foreign_key="organization.id", index=True)
    organization: Optional["Organization"] = Relationship(back_populates="students")
