"""Tests for the roster-wide alert aggregation."""

import random
from datetime import date, timedelta

import pytest

from core.exceptions import MissingReferenceDateError
from schemas.billing_schema import AlertOptions, PaymentStatus
from services.roster_alerts import build_alerts, filter_by_status

TODAY = date(2025, 6, 14)


@pytest.fixture
def roster(make_student):
    return [
        # current
        make_student(student_id=1, enrollment_date="2025-03-15", last_payment_date="2025-06-10"),
        # upcoming, cutoff tomorrow
        make_student(student_id=2, enrollment_date="2025-03-15", last_payment_date="2025-05-14"),
        # upcoming, cutoff in three days
        make_student(student_id=3, enrollment_date="2025-01-17", last_payment_date="2025-05-17"),
        # upcoming, cutoff tomorrow (tie with id 2)
        make_student(student_id=4, enrollment_date="2024-11-15", last_payment_date="2025-05-02"),
        # overdue: never paid, cutoff on the 1st -> 13 days
        make_student(student_id=5, enrollment_date="2025-02-01", last_payment_date=None),
        # overdue: paid April, cutoff on the 10th -> 4 days
        make_student(student_id=6, enrollment_date="2025-02-10", last_payment_date="2025-04-10"),
        # withdrawn
        make_student(student_id=7, active=False, enrollment_date="2025-02-10"),
        # no enrollment date
        make_student(student_id=8, enrollment_date=None),
        # malformed last payment
        make_student(student_id=9, enrollment_date="2025-02-10", last_payment_date="2025-02-30"),
        # other tenant
        make_student(student_id=10, organization_id=2, enrollment_date="2025-02-01"),
    ]


class TestBuildAlerts:
    """Test build_alerts."""

    def test_buckets_and_ordering(self, roster):
        alerts = build_alerts(roster, 1, TODAY)

        assert [entry.student.id for entry in alerts.upcoming] == [2, 4, 3]
        assert [entry.days_remaining for entry in alerts.upcoming] == [1, 1, 3]
        assert [entry.student.id for entry in alerts.overdue] == [5, 6]
        assert [entry.days_overdue for entry in alerts.overdue] == [13, 4]
        assert alerts.reference_date == TODAY
        assert alerts.organization_id == 1

    def test_summary_counts(self, roster):
        summary = build_alerts(roster, 1, TODAY).summary

        assert summary.total == 9
        assert summary.active == 8
        assert summary.current == 1
        assert summary.upcoming == 3
        assert summary.overdue == 2
        assert summary.pending == 5
        assert summary.inactive == 1
        assert summary.unknown == 1
        assert [error.student_id for error in summary.errors] == [9]

    def test_malformed_record_is_reported_not_raised(self, roster):
        error = build_alerts(roster, 1, TODAY).summary.errors[0]
        assert error.kind == "invalid_date"
        assert error.field == "last_payment_date"
        assert "2025-02-30" in error.message

    def test_malformed_enrollment_is_reported(self, make_student):
        alerts = build_alerts([make_student(student_id=1, enrollment_date="31-01-2025")], 1, TODAY)
        assert alerts.summary.errors[0].field == "enrollment_date"
        assert alerts.summary.unknown == 0
        assert not alerts.upcoming and not alerts.overdue

    def test_tenant_ids_compare_across_types(self, roster):
        assert build_alerts(roster, "1", TODAY).summary.total == 9
        other = build_alerts(roster, 2, TODAY)
        assert other.summary.total == 1
        assert [entry.student.id for entry in other.overdue] == [10]

    def test_unknown_tenant_is_empty(self, roster):
        alerts = build_alerts(roster, 99, TODAY)
        assert alerts.summary.total == 0
        assert alerts.upcoming == [] and alerts.overdue == []

    def test_overdue_measured_from_last_missed_cutoff(self, make_student):
        # Before this month's cutoff: counted from May 15
        before = build_alerts(
            [make_student(enrollment_date="2025-03-15", last_payment_date="2025-04-15")], 1, date(2025, 6, 5)
        )
        assert before.overdue[0].days_overdue == 21
        assert before.overdue[0].cutoff_date == date(2025, 5, 15)

        # Past the grace window: counted from this month's cutoff
        after = build_alerts(
            [make_student(enrollment_date="2025-03-15", last_payment_date="2025-05-15")], 1, date(2025, 6, 25)
        )
        assert after.overdue[0].days_overdue == 10
        assert after.overdue[0].cutoff_date == date(2025, 6, 15)

    def test_overdue_on_clamped_cutoff_day(self, make_student):
        alerts = build_alerts([make_student(enrollment_date="2025-01-31", last_payment_date=None)], 1, date(2025, 2, 28))
        assert alerts.overdue[0].cutoff_date == date(2025, 1, 31)
        assert alerts.overdue[0].days_overdue == 28

    def test_upcoming_after_cutoff_has_zero_days_remaining(self, make_student):
        alerts = build_alerts(
            [make_student(enrollment_date="2025-03-15", last_payment_date="2025-05-15")], 1, date(2025, 6, 18)
        )
        assert alerts.upcoming[0].days_remaining == 0

    def test_string_ids_sort_after_integers(self, make_student):
        students = [
            make_student(student_id="b-2", last_payment_date=None),
            make_student(student_id=3, last_payment_date=None),
            make_student(student_id="a-1", last_payment_date=None),
        ]
        alerts = build_alerts(students, 1, TODAY)
        assert [entry.student.id for entry in alerts.overdue] == [3, "a-1", "b-2"]

    def test_options_tune_the_window(self, make_student):
        students = [make_student(enrollment_date="2025-03-15", last_payment_date="2025-05-15")]
        assert build_alerts(students, 1, date(2025, 6, 8)).summary.current == 1
        wide = build_alerts(students, 1, date(2025, 6, 8), AlertOptions(upcoming_horizon_days=7))
        assert wide.upcoming[0].days_remaining == 7

    def test_idempotent(self, roster):
        assert build_alerts(roster, 1, TODAY) == build_alerts(roster, 1, TODAY)

    def test_missing_reference_date(self, roster):
        with pytest.raises(MissingReferenceDateError):
            build_alerts(roster, 1, None)

    def test_accepts_generators(self, roster):
        alerts = build_alerts((student for student in roster), 1, TODAY)
        assert alerts.summary.total == 9

    def test_large_roster_accounts_for_everyone_once(self, make_student):
        rng = random.Random(2025)
        students = []
        for student_id in range(1, 501):
            enrolled = date(2024, 1, 1) + timedelta(days=rng.randrange(0, 500))
            kind = rng.random()
            if kind < 0.1:
                students.append(make_student(student_id=student_id, active=False, enrollment_date=enrolled))
            elif kind < 0.15:
                students.append(make_student(student_id=student_id, enrollment_date="2025-02-29"))
            elif kind < 0.2:
                students.append(make_student(student_id=student_id, enrollment_date=None))
            else:
                paid = TODAY - timedelta(days=rng.randrange(0, 90)) if rng.random() < 0.9 else None
                students.append(make_student(student_id=student_id, enrollment_date=enrolled, last_payment_date=paid))

        alerts = build_alerts(students, 1, TODAY)
        summary = alerts.summary

        accounted = (
            len(alerts.upcoming)
            + len(alerts.overdue)
            + summary.current
            + summary.unknown
            + summary.inactive
            + len(summary.errors)
        )
        assert accounted == summary.total == 500

        bucket_ids = [entry.student.id for entry in alerts.upcoming + alerts.overdue]
        error_ids = [error.student_id for error in summary.errors]
        assert len(set(bucket_ids)) == len(bucket_ids)
        assert not set(bucket_ids) & set(error_ids)

        assert all(entry.days_overdue >= 1 for entry in alerts.overdue)
        assert all(entry.days_remaining >= 0 for entry in alerts.upcoming)
        assert alerts.overdue == sorted(alerts.overdue, key=lambda e: (-e.days_overdue, e.student.id))


class TestFilterByStatus:
    """Test filter_by_status."""

    def test_overdue_only(self, roster):
        tenant = [student for student in roster if student.organization_id == 1]
        matches = filter_by_status(tenant, PaymentStatus.OVERDUE, TODAY)
        assert [match.student_id for match in matches] == [5, 6]

    def test_inactive_only(self, roster):
        matches = filter_by_status(roster, PaymentStatus.INACTIVE, TODAY)
        assert [match.student_id for match in matches] == [7]

    def test_no_filter_skips_malformed(self, roster):
        matches = filter_by_status(roster, None, TODAY)
        ids = [match.student_id for match in matches]
        assert 9 not in ids
        assert 7 in ids
        assert len(ids) == 9

    def test_unknown(self, roster):
        matches = filter_by_status(roster, PaymentStatus.UNKNOWN, TODAY)
        assert [match.student_id for match in matches] == [8]
