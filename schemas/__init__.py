from .billing_schema import (
    PaymentStatus, BillingCycle, AlertOptions,
    StudentBillingStatus, UpcomingAlert, OverdueAlert,
    RosterError, RosterSummary, AlertRoster,
)
from .student_schema import StudentSnapshot, INACTIVE_STATUS_SENTINELS, status_is_active

__all__ = [
    # Billing
    "PaymentStatus", "BillingCycle", "AlertOptions",
    "StudentBillingStatus", "UpcomingAlert", "OverdueAlert",
    "RosterError", "RosterSummary", "AlertRoster",

    # Student
    "StudentSnapshot", "INACTIVE_STATUS_SENTINELS", "status_is_active",
]
