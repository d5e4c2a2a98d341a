# routes/billing.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from core.clock import ClockSource, get_clock
from core.config import settings
from core.database import get_session
from core.exceptions import BillingEngineError, InvalidDateError
from schemas.billing_schema import AlertOptions, AlertRoster, PaymentStatus, StudentBillingStatus
from services.payment_status import describe_student
from services.roster_alerts import build_alerts, filter_by_status
from services.roster_service import get_organization, get_student, load_roster

router = APIRouter(prefix="/billing", tags=["Billing"])


# -------------------------
# Dependencies
# -------------------------
def get_alert_options() -> AlertOptions:
    """Grace window thresholds from the environment."""
    return AlertOptions(
        upcoming_horizon_days=settings.UPCOMING_HORIZON_DAYS,
        overdue_confirm_days=settings.OVERDUE_CONFIRM_DAYS,
    )


def require_organization(organization_id: int, session: Session = Depends(get_session)) -> int:
    if not get_organization(session, organization_id):
        raise HTTPException(status_code=404, detail="Organization not found")
    return organization_id


def engine_error_detail(error: BillingEngineError) -> dict:
    detail = {"kind": error.kind, "message": str(error)}
    if isinstance(error, InvalidDateError):
        detail["field"] = error.field
    return detail


# ==================================================================
#  ✅ PAYMENT ALERTS FOR AN ORGANIZATION
# ==================================================================
@router.get("/organizations/{organization_id}/alerts", response_model=AlertRoster)
def get_payment_alerts(
    organization_id: int = Depends(require_organization),
    as_of: Optional[date] = Query(default=None, description="Reference date, defaults to today"),
    session: Session = Depends(get_session),
    clock: ClockSource = Depends(get_clock),
    options: AlertOptions = Depends(get_alert_options),
):
    """Students about to owe and students who already owe."""
    roster = load_roster(session, organization_id)
    return build_alerts(roster, organization_id, as_of or clock.today(), options)


# ==================================================================
#  ✅ ROSTER FILTERED BY PAYMENT STATUS
# ==================================================================
@router.get("/organizations/{organization_id}/students", response_model=List[StudentBillingStatus])
def list_students_by_status(
    organization_id: int = Depends(require_organization),
    payment_status: Optional[PaymentStatus] = Query(default=None, alias="status"),
    as_of: Optional[date] = Query(default=None),
    session: Session = Depends(get_session),
    clock: ClockSource = Depends(get_clock),
    options: AlertOptions = Depends(get_alert_options),
):
    roster = load_roster(session, organization_id)
    return filter_by_status(roster, payment_status, as_of or clock.today(), options)


# ==================================================================
#  ✅ SINGLE STUDENT STATUS
# ==================================================================
@router.get(
    "/organizations/{organization_id}/students/{student_id}/status",
    response_model=StudentBillingStatus,
)
def get_student_status(
    student_id: int,
    organization_id: int = Depends(require_organization),
    as_of: Optional[date] = Query(default=None),
    session: Session = Depends(get_session),
    clock: ClockSource = Depends(get_clock),
    options: AlertOptions = Depends(get_alert_options),
):
    student = get_student(session, organization_id, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    try:
        return describe_student(student, as_of or clock.today(), options)
    except BillingEngineError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=engine_error_detail(e),
        )
