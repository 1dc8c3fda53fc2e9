from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from apscheduler.schedulers.background import BackgroundScheduler

from src.student_inactivity.student_inactivity.container import assemble
from src.student_inactivity.student_inactivity.core.constants import (
    DEFAULT_NOTIFY_CRON,
    DEFAULT_SWEEP_CRON,
    NOTIFY_JOB_NAME,
    SWEEP_JOB_NAME,
)
from src.student_inactivity.student_inactivity.core.enums import LifecycleStatus
from src.student_inactivity.student_inactivity.core.exceptions import ConfigurationError
from src.student_inactivity.student_inactivity.core.settings import InactivitySettings
from src.student_inactivity.student_inactivity.jobs.scheduler import build_cron_trigger

from tests.fakes import InMemoryActors, InMemoryAttendance, InMemoryNotices, InMemoryStudents, InMemoryTenants


def _container(settings=None, tenants=None):
    students = InMemoryStudents()
    attendance = InMemoryAttendance()
    students.add(1)
    attendance.add(date(2023, 12, 11), student_id=1)
    sleeps = []
    container = assemble(
        settings=settings or InactivitySettings(),
        students=students,
        attendance=attendance,
        tenants=tenants or InMemoryTenants.with_ids(1),
        actors=InMemoryActors(),
        notices=InMemoryNotices(),
        sleep=sleeps.append,
        background_scheduler=BackgroundScheduler(),
    )
    return container, students, sleeps


def test_both_jobs_are_registered_before_first_run():
    container, *_ = _container()

    assert container.job_registry.names() == sorted([SWEEP_JOB_NAME, NOTIFY_JOB_NAME])


def test_schedule_adds_both_cron_jobs():
    container, *_ = _container()

    container.scheduler.schedule()
    container.scheduler.schedule()
    status = container.scheduler.jobs_status()

    assert status[SWEEP_JOB_NAME]["scheduled"]
    assert status[NOTIFY_JOB_NAME]["scheduled"]
    assert not status[SWEEP_JOB_NAME]["running"]


def test_unscheduled_jobs_are_reported():
    container, *_ = _container()

    status = container.scheduler.jobs_status()

    assert status[SWEEP_JOB_NAME] == {"scheduled": False, "running": False, "next_run_time": None}


def test_manual_sweep_goes_through_the_registry():
    container, students, _ = _container()

    outcome = container.scheduler.run_sweep_now()

    assert outcome.success
    assert outcome.result.total_marked_inactive == 1
    assert students.status_of(1) == LifecycleStatus.INACTIVE_BY_POLICY
    record = container.job_registry.get(SWEEP_JOB_NAME)
    assert record.total_runs == 1
    assert record.last_success is not None


def test_manual_sweep_retries_when_branch_store_is_down():
    tenants = InMemoryTenants.with_ids(1)
    tenants.list_failures_remaining = 1
    container, students, sleeps = _container(tenants=tenants)

    outcome = container.scheduler.run_sweep_now()

    assert outcome.success
    assert outcome.attempts == 2
    assert sleeps == [2]
    assert students.status_of(1) == LifecycleStatus.INACTIVE_BY_POLICY


def test_job_health_reflects_failures():
    tenants = InMemoryTenants.with_ids(1)
    tenants.list_failures_remaining = 10
    container, *_ = _container(tenants=tenants)

    container.scheduler.run_notifier_now()
    container.scheduler.run_notifier_now()

    report = container.scheduler.get_job_health()
    notify = next(j for j in report.jobs if j.name == NOTIFY_JOB_NAME)
    assert notify.state.value == "critical"
    assert container.notices_repo.created[0].payload["job_name"] == NOTIFY_JOB_NAME


def test_invalid_cron_expression_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_cron_trigger("not a cron", "Africa/Nairobi")


def test_invalid_timezone_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        InactivitySettings(tenant_timezone="Mars/Olympus")


def _fire_times(expression, count=10):
    trigger = build_cron_trigger(expression, "Africa/Nairobi")
    # Sunday noon in Nairobi
    now = datetime(2024, 1, 21, 12, 0, tzinfo=ZoneInfo("Africa/Nairobi"))
    fires = []
    previous = None
    for _ in range(count):
        previous = trigger.get_next_fire_time(previous, previous or now)
        fires.append(previous)
    return fires


@pytest.mark.parametrize("expression", [DEFAULT_SWEEP_CRON, DEFAULT_NOTIFY_CRON, "0 6 * * 1-5"])
def test_default_schedules_fire_monday_to_friday_only(expression):
    fires = _fire_times(expression)

    assert fires[0].date() == date(2024, 1, 22)
    assert {f.weekday() for f in fires} == {0, 1, 2, 3, 4}


def test_sweep_fires_before_notifier_each_school_day():
    sweeps = _fire_times(DEFAULT_SWEEP_CRON, count=5)
    notifies = _fire_times(DEFAULT_NOTIFY_CRON, count=5)

    assert [s.date() for s in sweeps] == [n.date() for n in notifies]
    assert all(s.hour == 6 and n.hour == 8 for s, n in zip(sweeps, notifies))


@pytest.mark.parametrize(
    "expression, weekdays",
    [
        ("0 6 * * 0", {6}),
        ("0 6 * * 7", {6}),
        ("0 6 * * 6,0", {5, 6}),
        ("0 6 * * 0-6", {0, 1, 2, 3, 4, 5, 6}),
        ("0 6 * * 1-5/2", {0, 2, 4}),
        ("0 6 * * sat,sun", {5, 6}),
    ],
)
def test_crontab_weekday_numbers_use_sunday_as_zero(expression, weekdays):
    assert {f.weekday() for f in _fire_times(expression, count=14)} == weekdays


def test_out_of_range_weekday_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        build_cron_trigger("0 6 * * 8", "Africa/Nairobi")
