# ================================================================
# services/roster_alerts.py: Roster-wide payment alerts
# ================================================================
import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Tuple, Union

from core.exceptions import BillingEngineError, InvalidDateError
from schemas.billing_schema import (
    AlertOptions,
    AlertRoster,
    BillingCycle,
    OverdueAlert,
    PaymentStatus,
    RosterError,
    RosterSummary,
    StudentBillingStatus,
    UpcomingAlert,
)
from schemas.student_schema import RecordId, StudentSnapshot
from services.billing_cycle import compute_cycle, parse_calendar_date, previous_cutoff, resolve_reference_date
from services.payment_status import classify, describe_student

logger = logging.getLogger(__name__)

ClassifiedRecord = Tuple[PaymentStatus, Optional[BillingCycle]]


# -------------------------
# Helpers
# -------------------------
def _same_tenant(left: RecordId, right: RecordId) -> bool:
    # Providers may send tenant ids as strings ("1") or integers (1)
    return str(left) == str(right)


def _id_sort_key(student_id: RecordId) -> Tuple[int, Union[int, str]]:
    if isinstance(student_id, int):
        return 0, student_id
    return 1, str(student_id)


def _classify_record(student: StudentSnapshot, reference: date, options: AlertOptions) -> ClassifiedRecord:
    if parse_calendar_date(student.enrollment_date, "enrollment_date") is None:
        return PaymentStatus.UNKNOWN, None

    cycle = compute_cycle(
        student.enrollment_date,
        reference,
        options.upcoming_horizon_days,
        options.overdue_confirm_days,
    )
    return classify(student, cycle, reference), cycle


def days_overdue(student: StudentSnapshot, cycle: BillingCycle, reference: date) -> Tuple[int, date]:
    """
    Days since the most recent missed cutoff, with that cutoff.
    Before this month's cutoff the missed one is last month's.
    """
    if reference > cycle.cutoff_date:
        return (reference - cycle.cutoff_date).days, cycle.cutoff_date
    missed = previous_cutoff(student.enrollment_date, reference)
    return (reference - missed).days, missed


# =========================================
# Alert roster
# =========================================
def build_alerts(
    students: Iterable[StudentSnapshot],
    organization_id: RecordId,
    reference_date: Any,
    options: Optional[AlertOptions] = None,
) -> AlertRoster:
    """
    Classify every student of one organization and group the ones that owe.

    - upcoming: soonest cutoff first, then by student id
    - overdue: most days overdue first, then by student id
    - current / inactive / unknown students are only counted in the summary
    - a malformed record never aborts the batch: it is reported in summary.errors
    """
    reference = resolve_reference_date(reference_date)
    options = options or AlertOptions()

    summary = RosterSummary()
    upcoming: List[UpcomingAlert] = []
    overdue: List[OverdueAlert] = []

    for student in students:
        if not _same_tenant(student.organization_id, organization_id):
            continue
        summary.total += 1

        if not student.active:
            summary.inactive += 1
            continue
        summary.active += 1

        try:
            status, cycle = _classify_record(student, reference, options)
        except BillingEngineError as e:
            logger.warning("⚠️ Skipping student %s in alert roster: %s", student.id, e)
            summary.errors.append(
                RosterError(
                    student_id=student.id,
                    kind=e.kind,
                    field=e.field if isinstance(e, InvalidDateError) else None,
                    message=str(e),
                )
            )
            continue

        if status == PaymentStatus.UPCOMING:
            summary.upcoming += 1
            upcoming.append(
                UpcomingAlert(
                    student=student,
                    cutoff_date=cycle.cutoff_date,
                    days_remaining=max((cycle.cutoff_date - reference).days, 0),
                )
            )
        elif status == PaymentStatus.OVERDUE:
            summary.overdue += 1
            days, missed_cutoff = days_overdue(student, cycle, reference)
            overdue.append(OverdueAlert(student=student, cutoff_date=missed_cutoff, days_overdue=days))
        elif status == PaymentStatus.CURRENT:
            summary.current += 1
        else:
            summary.unknown += 1

    upcoming.sort(key=lambda entry: (entry.days_remaining, _id_sort_key(entry.student.id)))
    overdue.sort(key=lambda entry: (-entry.days_overdue, _id_sort_key(entry.student.id)))

    logger.debug(
        "Alert roster for organization %s on %s: %d upcoming, %d overdue, %d errors",
        organization_id, reference, summary.upcoming, summary.overdue, len(summary.errors),
    )
    return AlertRoster(
        organization_id=organization_id,
        reference_date=reference,
        upcoming=upcoming,
        overdue=overdue,
        summary=summary,
    )


def filter_by_status(
    students: Iterable[StudentSnapshot],
    status: Optional[PaymentStatus],
    reference_date: Any,
    options: Optional[AlertOptions] = None,
) -> List[StudentBillingStatus]:
    """
    Billing status of every student whose computed status matches.

    ``status=None`` keeps everyone. Withdrawn students only match ``inactive``.
    Records with malformed dates are left out.
    """
    reference = resolve_reference_date(reference_date)
    matches: List[StudentBillingStatus] = []

    for student in students:
        if not student.active and status not in (None, PaymentStatus.INACTIVE):
            continue
        try:
            described = describe_student(student, reference, options)
        except BillingEngineError as e:
            logger.warning("⚠️ Skipping student %s in status filter: %s", student.id, e)
            continue
        if status is None or described.status == status:
            matches.append(described)

    return matches
