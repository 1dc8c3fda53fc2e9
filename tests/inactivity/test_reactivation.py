from __future__ import annotations

import threading
from datetime import date

import pytest

from src.student_inactivity.student_inactivity.attendance.service import AttendanceLookbackReader
from src.student_inactivity.student_inactivity.core.enums import LifecycleStatus, ReactivationOutcome
from src.student_inactivity.student_inactivity.core.exceptions import NotFoundError
from src.student_inactivity.student_inactivity.inactivity.reactivation import AutoReactivationHook
from src.student_inactivity.student_inactivity.inactivity.sweep import InactivitySweepService
from src.student_inactivity.student_inactivity.lifecycle.state_machine import LifecycleStateMachine
from src.student_inactivity.student_inactivity.tenants.service import AutomatedActorResolver

from tests.fakes import TODAY, InMemoryActors, InMemoryAttendance, InMemoryStudents, InMemoryTenants

TEN_DAYS_AGO = date(2024, 1, 8)


def _hook(students, actors=None):
    return AutoReactivationHook(students, LifecycleStateMachine(students), AutomatedActorResolver(actors or InMemoryActors()))


def test_sweep_then_attendance_round_trip():
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add(1)
    attendance.add(TEN_DAYS_AGO, student_id=1)
    actors = InMemoryActors()
    machine = LifecycleStateMachine(students)
    resolver = AutomatedActorResolver(actors)
    sweep = InactivitySweepService(
        InMemoryTenants.with_ids(1), students, AttendanceLookbackReader(attendance), machine, resolver
    )
    hook = AutoReactivationHook(students, machine, resolver)

    sweep.run_sweep(today=TODAY)
    assert students.status_of(1) == LifecycleStatus.INACTIVE_BY_POLICY

    result = hook.on_attendance_recorded(1, 1)

    assert result.reactivated
    assert result.outcome == ReactivationOutcome.REACTIVATED
    assert result.changed_by == 9001
    assert students.status_of(1) == LifecycleStatus.ACTIVE

    history = students.history_of(1)
    assert [(h.previous_status, h.new_status) for h in history] == [
        (LifecycleStatus.ACTIVE, LifecycleStatus.INACTIVE_BY_POLICY),
        (LifecycleStatus.INACTIVE_BY_POLICY, LifecycleStatus.ACTIVE),
    ]
    assert "attendance recorded" in history[1].reason


def test_active_student_is_a_cheap_no_op():
    students = InMemoryStudents()
    students.add(1)
    actors = InMemoryActors()

    result = _hook(students, actors).on_attendance_recorded(1, 1)

    assert not result.reactivated
    assert result.outcome == ReactivationOutcome.NOT_INACTIVE_BY_POLICY
    assert actors.create_calls == 0
    assert students.lookups == 1
    assert students.history_reads == 0
    assert students.history_of(1) == []


@pytest.mark.parametrize("status", [LifecycleStatus.SUSPENDED, LifecycleStatus.INACTIVE, LifecycleStatus.DROPPED])
def test_manual_statuses_are_not_reactivated(status):
    students = InMemoryStudents()
    students.add(1, status=status)

    result = _hook(students).on_attendance_recorded(1, 1)

    assert not result.reactivated
    assert result.current_status == status
    assert students.status_of(1) == status


def test_unknown_student_is_reported_not_raised():
    result = _hook(InMemoryStudents()).on_attendance_recorded(99, 1)

    assert result.outcome == ReactivationOutcome.STUDENT_NOT_FOUND
    assert not result.reactivated


def test_attendance_from_another_branch_is_ignored():
    students = InMemoryStudents()
    students.add(1, tenant_id=1, status=LifecycleStatus.INACTIVE_BY_POLICY)

    result = _hook(students).on_attendance_recorded(1, 2)

    assert result.outcome == ReactivationOutcome.TENANT_MISMATCH
    assert students.status_of(1) == LifecycleStatus.INACTIVE_BY_POLICY


def test_acting_identity_is_recorded_as_changed_by():
    students = InMemoryStudents()
    students.add(1, status=LifecycleStatus.INACTIVE_BY_POLICY)
    actors = InMemoryActors()

    result = _hook(students, actors).on_attendance_recorded(1, 1, acting_identity=55)

    assert result.changed_by == 55
    assert students.history_of(1)[0].changed_by == 55
    assert actors.create_calls == 0


def test_concurrent_attendance_writes_reactivate_once():
    students = InMemoryStudents()
    students.add(1, status=LifecycleStatus.INACTIVE_BY_POLICY)
    hook = _hook(students)
    barrier = threading.Barrier(8)
    results = []
    lock = threading.Lock()

    def record():
        barrier.wait()
        outcome = hook.on_attendance_recorded(1, 1)
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=record) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in results if r.reactivated) == 1
    assert len(students.history_of(1)) == 1
    assert students.status_of(1) == LifecycleStatus.ACTIVE


def test_manual_reactivation_uses_the_same_guard():
    students = InMemoryStudents()
    students.add(1, status=LifecycleStatus.INACTIVE_BY_POLICY)
    students.add(2, status=LifecycleStatus.SUSPENDED)
    hook = _hook(students)

    done = hook.reactivate_student(1, changed_by=7, reason="Parent confirmed return")
    refused = hook.reactivate_student(2, changed_by=7)

    assert done.reactivated
    assert students.history_of(1)[0].reason == "Parent confirmed return"
    assert not refused.reactivated
    assert students.status_of(2) == LifecycleStatus.SUSPENDED


def test_manual_reactivation_of_unknown_student_raises():
    with pytest.raises(NotFoundError):
        _hook(InMemoryStudents()).reactivate_student(99, changed_by=7)
