# ================================================================
# services/payment_status.py: Payment state of a single student
# ================================================================
from datetime import date
from typing import Any, Optional, Tuple

from core.exceptions import InvalidDateError
from schemas.billing_schema import AlertOptions, BillingCycle, PaymentStatus, StudentBillingStatus
from schemas.student_schema import StudentSnapshot
from services.billing_cycle import (
    compute_cycle,
    next_due_date,
    parse_calendar_date,
    resolve_reference_date,
    shift_month,
)


def payment_flags(last_payment: Optional[date], reference: date) -> Tuple[bool, bool]:
    """(paid this month, paid the month before) relative to the reference date."""
    if last_payment is None:
        return False, False
    paid_month = (last_payment.year, last_payment.month)
    paid_this_month = paid_month == (reference.year, reference.month)
    paid_previous_month = paid_month == shift_month(reference.year, reference.month, -1)
    return paid_this_month, paid_previous_month


def classify(student: StudentSnapshot, cycle: Optional[BillingCycle], reference_date: Any) -> PaymentStatus:
    """
    Classify one student for the reference date.

    Rules, in order:
      1. withdrawn -> inactive (date fields are not even read)
      2. no usable enrollment date (or no cycle) -> unknown
      3. paid this month -> current
      4. did not pay last month -> overdue, wherever we are in the window
      5. paid last month: inside the grace window -> upcoming,
         after it -> overdue, before it -> current

    A malformed last payment date raises InvalidDateError.
    """
    reference = resolve_reference_date(reference_date)

    if not student.active:
        return PaymentStatus.INACTIVE

    try:
        enrolled = parse_calendar_date(student.enrollment_date, "enrollment_date")
    except InvalidDateError:
        return PaymentStatus.UNKNOWN
    if enrolled is None or cycle is None:
        return PaymentStatus.UNKNOWN

    last_payment = parse_calendar_date(student.last_payment_date, "last_payment_date")
    paid_this_month, paid_previous_month = payment_flags(last_payment, reference)

    if paid_this_month:
        return PaymentStatus.CURRENT
    if not paid_previous_month:
        return PaymentStatus.OVERDUE
    if cycle.in_grace_window(reference):
        return PaymentStatus.UPCOMING
    if reference > cycle.grace_window_end:
        return PaymentStatus.OVERDUE
    # reference < grace_window_start
    return PaymentStatus.CURRENT


def describe_student(
    student: StudentSnapshot,
    reference_date: Any,
    options: Optional[AlertOptions] = None,
) -> StudentBillingStatus:
    """Status plus the dates shown next to a student on the roster."""
    reference = resolve_reference_date(reference_date)
    options = options or AlertOptions()

    if not student.active:
        return StudentBillingStatus(
            student_id=student.id,
            full_name=student.full_name,
            status=PaymentStatus.INACTIVE,
        )

    try:
        cycle = compute_cycle(
            student.enrollment_date,
            reference,
            options.upcoming_horizon_days,
            options.overdue_confirm_days,
        )
    except InvalidDateError:
        cycle = None

    status = classify(student, cycle, reference)
    due = next_due_date(student, reference)

    return StudentBillingStatus(
        student_id=student.id,
        full_name=student.full_name,
        status=status,
        cutoff_date=cycle.cutoff_date if cycle else None,
        next_due_date=due,
        days_until_due=(due - reference).days if due else None,
    )
