# ================================================================
# services/billing_cycle.py: Monthly cutoff, grace window, next due date
# ================================================================
import calendar
import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple

from core.exceptions import InvalidDateError, MissingReferenceDateError
from schemas.billing_schema import BillingCycle
from schemas.student_schema import StudentSnapshot

logger = logging.getLogger(__name__)

# Calendar part of every accepted string; ISO week and basic forms are rejected
ISO_CALENDAR_DATE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


# -------------------------
# Date helpers
# -------------------------
def parse_calendar_date(value: Any, field: str) -> Optional[date]:
    """
    Read a date field from a roster record.

    Accepts ``date``/``datetime`` objects and ISO strings (``YYYY-MM-DD``,
    optionally followed by a time part). ``None`` and blank strings mean
    "missing" and return None; anything else that is not a real calendar
    date raises InvalidDateError.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(field, value)

    text = value.strip()
    if not text:
        return None
    if not ISO_CALENDAR_DATE.fullmatch(text[:10]):
        raise InvalidDateError(field, value)
    if len(text) > 10 and (text[10] not in (" ", "T") or len(text) == 11):
        raise InvalidDateError(field, value)
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # The time part must be a real time too
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateError(field, value) from None


def resolve_reference_date(reference_date: Any) -> date:
    """The caller's "today"; must always be supplied."""
    parsed = parse_calendar_date(reference_date, "reference_date")
    if parsed is None:
        raise MissingReferenceDateError()
    return parsed


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def clamp_to_month(year: int, month: int, day: int) -> date:
    """Anchor day in the given month, pulled back to the month's last day on overflow."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def _require_enrollment(enrollment_date: Any) -> date:
    enrolled = parse_calendar_date(enrollment_date, "enrollment_date")
    if enrolled is None:
        raise InvalidDateError("enrollment_date", enrollment_date, "Enrollment date is missing")
    return enrolled


# =========================================
# Billing cycle
# =========================================
def compute_cycle(
    enrollment_date: Any,
    reference_date: Any,
    upcoming_horizon_days: int = 3,
    overdue_confirm_days: int = 5,
) -> BillingCycle:
    """
    Cutoff date for the reference month plus the grace window around it.

    The cutoff is the enrollment day-of-month placed in the reference
    date's month (clamped, so an anchor of 31 lands on Apr 30 / Feb 28 / Feb 29).
    The window runs from ``cutoff - upcoming_horizon_days`` to
    ``cutoff + overdue_confirm_days`` inclusive.
    """
    if upcoming_horizon_days < 0 or overdue_confirm_days < 0:
        raise ValueError("Grace window thresholds must be non-negative")

    reference = resolve_reference_date(reference_date)
    enrolled = _require_enrollment(enrollment_date)

    cutoff = clamp_to_month(reference.year, reference.month, enrolled.day)
    return BillingCycle(
        cutoff_date=cutoff,
        grace_window_start=cutoff - timedelta(days=upcoming_horizon_days),
        grace_window_end=cutoff + timedelta(days=overdue_confirm_days),
    )


def previous_cutoff(enrollment_date: Any, reference_date: Any) -> date:
    """Cutoff of the month before the reference month."""
    reference = resolve_reference_date(reference_date)
    enrolled = _require_enrollment(enrollment_date)
    year, month = shift_month(reference.year, reference.month, -1)
    return clamp_to_month(year, month, enrolled.day)


# =========================================
# Next due date
# =========================================
def next_due_date(student: StudentSnapshot, reference_date: Any) -> Optional[date]:
    """
    Next calendar due date strictly after the reference date.

    Independent of payment history: it only follows the anchor day.
    Returns None when the enrollment date is missing or malformed.
    """
    reference = resolve_reference_date(reference_date)
    try:
        enrolled = parse_calendar_date(student.enrollment_date, "enrollment_date")
    except InvalidDateError as e:
        logger.debug("Student %s has no usable enrollment date: %s", student.id, e)
        return None
    if enrolled is None:
        return None

    due = clamp_to_month(reference.year, reference.month, enrolled.day)
    if due <= reference:
        year, month = shift_month(reference.year, reference.month, 1)
        due = clamp_to_month(year, month, enrolled.day)
    return due
