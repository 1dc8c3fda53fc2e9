from __future__ import annotations

from datetime import date

import pytest

from src.student_inactivity.student_inactivity.attendance.service import AttendanceLookbackReader
from src.student_inactivity.student_inactivity.core.enums import LifecycleStatus, NoticeCategory
from src.student_inactivity.student_inactivity.core.exceptions import NotFoundError
from src.student_inactivity.student_inactivity.inactivity.notifier import AtRiskNotifier
from src.student_inactivity.student_inactivity.inactivity.sweep import InactivitySweepService
from src.student_inactivity.student_inactivity.lifecycle.state_machine import LifecycleStateMachine
from src.student_inactivity.student_inactivity.tenants.service import AutomatedActorResolver

from tests.fakes import TODAY, InMemoryActors, InMemoryAttendance, InMemoryNotices, InMemoryStudents, InMemoryTenants

TEN_DAYS_AGO = date(2024, 1, 8)
NINE_DAYS_AGO = date(2024, 1, 9)
FIVE_DAYS_AGO = date(2024, 1, 15)
FOUR_DAYS_AGO = date(2024, 1, 16)


def _notifier(tenants, students, attendance, notices):
    return AtRiskNotifier(
        tenants,
        students,
        AttendanceLookbackReader(attendance),
        LifecycleStateMachine(students),
        notices,
    )


def _school():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    for student_id, last in [(1, NINE_DAYS_AGO), (2, FIVE_DAYS_AGO), (3, FOUR_DAYS_AGO), (4, TEN_DAYS_AGO)]:
        students.add(student_id)
        attendance.add(last, student_id=student_id)
    return students, attendance


def test_only_students_in_warning_band_are_notified():
    students, attendance = _school()
    notices = InMemoryNotices()

    report = _notifier(InMemoryTenants.with_ids(1), students, attendance, notices).notify_at_risk(today=TODAY)

    assert report.total_at_risk == 2
    assert report.notifications_sent == 2
    assert report.notifications_failed == 0
    assert [n.payload["student_id"] for n in notices.created] == [1, 2]


def test_warning_expiry_is_counted_in_school_days():
    students, attendance = _school()
    notices = InMemoryNotices()

    _notifier(InMemoryTenants.with_ids(1), students, attendance, notices).notify_at_risk(today=TODAY)

    nine, five = notices.created
    # one school day left: Tuesday; five left: the following Monday
    assert nine.expiry == date(2024, 1, 23)
    assert five.expiry == date(2024, 1, 29)
    assert nine.category == NoticeCategory.INACTIVITY_WARNING
    assert nine.priority == "high"
    assert nine.recipient_person_ids == (1001,)
    assert nine.payload == {
        "student_id": 1,
        "days_absent": 9,
        "days_remaining": 1,
        "threshold": 10,
        "last_present_date": "2024-01-09",
    }
    assert "absent from school for 9 school days" in nine.content
    assert "within the next 1 school days" in nine.content


def test_notifier_never_changes_status():
    students, attendance = _school()

    _notifier(InMemoryTenants.with_ids(1), students, attendance, InMemoryNotices()).notify_at_risk(today=TODAY)

    assert all(students.status_of(i) == LifecycleStatus.ACTIVE for i in (1, 2, 3, 4))
    assert students.history_of(1) == []


def test_student_without_person_link_counts_as_failed():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add_without_person(1)
    attendance.add(NINE_DAYS_AGO, student_id=1)
    notices = InMemoryNotices()

    report = _notifier(InMemoryTenants.with_ids(1), students, attendance, notices).notify_at_risk(today=TODAY)

    assert report.total_at_risk == 1
    assert report.notifications_failed == 1
    assert notices.created == []
    row = report.per_tenant_breakdown[0].students[0]
    assert row["status"] == "failed"
    assert "no associated user" in row["error"]


def test_notice_store_failure_does_not_stop_the_run():
    students, attendance = _school()
    notices = InMemoryNotices()
    notices.failing_recipients.add(1001)

    report = _notifier(InMemoryTenants.with_ids(1), students, attendance, notices).notify_at_risk(today=TODAY)

    assert report.notifications_sent == 1
    assert report.notifications_failed == 1
    assert notices.created[0].payload["student_id"] == 2


def test_same_person_is_warned_once_per_run():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add(1, person_id=77)
    students.add(2, person_id=77)
    attendance.add(NINE_DAYS_AGO, student_id=1)
    attendance.add(NINE_DAYS_AGO, student_id=2)
    notices = InMemoryNotices()

    report = _notifier(InMemoryTenants.with_ids(1), students, attendance, notices).notify_at_risk(today=TODAY)

    assert report.notifications_sent == 1
    assert report.duplicates_suppressed == 1
    assert len(notices.created) == 1


def test_single_branch_run():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add(1, tenant_id=1)
    students.add(2, tenant_id=2)
    attendance.add(NINE_DAYS_AGO, tenant_id=1, student_id=1)
    attendance.add(NINE_DAYS_AGO, tenant_id=2, student_id=2)
    notices = InMemoryNotices()

    report = _notifier(InMemoryTenants.with_ids(1, 2), students, attendance, notices).notify_at_risk(2, today=TODAY)

    assert [b.tenant_id for b in report.per_tenant_breakdown] == [2]
    assert [n.tenant_id for n in notices.created] == [2]


def test_unknown_branch_raises_not_found():
    notifier = _notifier(InMemoryTenants.with_ids(1), InMemoryStudents(), InMemoryAttendance(), InMemoryNotices())

    with pytest.raises(NotFoundError):
        notifier.notify_at_risk(42, today=TODAY)


def test_suspended_students_are_not_at_risk():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add(1, status=LifecycleStatus.SUSPENDED)
    attendance.add(NINE_DAYS_AGO, student_id=1)

    at_risk = _notifier(InMemoryTenants.with_ids(1), students, attendance, InMemoryNotices()).list_students_at_risk(
        1, today=TODAY
    )

    assert at_risk == []


def test_list_students_at_risk_reports_days_remaining():
    students, attendance = _school()

    at_risk = _notifier(InMemoryTenants.with_ids(1), students, attendance, InMemoryNotices()).list_students_at_risk(
        1, today=TODAY
    )

    assert [(s.student_id, s.days_absent, s.days_remaining) for s in at_risk] == [(1, 9, 1), (2, 5, 5)]


def test_sweep_before_notify_leaves_only_warning_band():
    students, attendance = _school()
    tenants = InMemoryTenants.with_ids(1)
    notices = InMemoryNotices()
    machine = LifecycleStateMachine(students)
    reader = AttendanceLookbackReader(attendance)
    sweep = InactivitySweepService(tenants, students, reader, machine, AutomatedActorResolver(InMemoryActors()))
    notifier = AtRiskNotifier(tenants, students, reader, machine, notices)

    sweep.run_sweep(today=TODAY)
    report = notifier.notify_at_risk(today=TODAY)

    assert students.status_of(4) == LifecycleStatus.INACTIVE_BY_POLICY
    assert report.total_at_risk == 2
    assert 4 not in [n.payload["student_id"] for n in notices.created]
