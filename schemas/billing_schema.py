# billing_schema.py
from pydantic import BaseModel, Field, ConfigDict, computed_field
from typing import Optional, List
from datetime import date
from enum import Enum

from schemas.student_schema import RecordId, StudentSnapshot


class PaymentStatus(str, Enum):
    CURRENT = "current"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"
    INACTIVE = "inactive"
    UNKNOWN = "unknown"


# ---------------------------
# Billing Cycle
# ---------------------------
class BillingCycle(BaseModel):
    """One month's cutoff date and the grace window around it."""

    cutoff_date: date
    grace_window_start: date
    grace_window_end: date

    model_config = ConfigDict(frozen=True)

    def in_grace_window(self, day: date) -> bool:
        return self.grace_window_start <= day <= self.grace_window_end


class AlertOptions(BaseModel):
    upcoming_horizon_days: int = Field(default=3, ge=0, description="Days before the cutoff that open the payment window")
    overdue_confirm_days: int = Field(default=5, ge=0, description="Days after the cutoff still inside grace")

    model_config = ConfigDict(frozen=True)


# ---------------------------
# Per-student results
# ---------------------------
class StudentBillingStatus(BaseModel):
    student_id: RecordId
    full_name: Optional[str] = None
    status: PaymentStatus
    cutoff_date: Optional[date] = None
    next_due_date: Optional[date] = None
    days_until_due: Optional[int] = None


class UpcomingAlert(BaseModel):
    student: StudentSnapshot
    cutoff_date: date
    days_remaining: int = Field(ge=0)


class OverdueAlert(BaseModel):
    student: StudentSnapshot
    cutoff_date: date
    days_overdue: int = Field(ge=1)


# ---------------------------
# Roster aggregate
# ---------------------------
class RosterError(BaseModel):
    student_id: RecordId
    kind: str
    field: Optional[str] = None
    message: str


class RosterSummary(BaseModel):
    total: int = 0
    active: int = 0
    current: int = 0
    upcoming: int = 0
    overdue: int = 0
    inactive: int = 0
    unknown: int = 0
    errors: List[RosterError] = Field(default_factory=list)

    @computed_field
    @property
    def pending(self) -> int:
        return self.upcoming + self.overdue


class AlertRoster(BaseModel):
    organization_id: RecordId
    reference_date: date
    upcoming: List[UpcomingAlert] = Field(default_factory=list)
    overdue: List[OverdueAlert] = Field(default_factory=list)
    summary: RosterSummary = Field(default_factory=RosterSummary)
