from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceLookbackReader
from .core.settings import InactivitySettings
from .database.connection import DBConfig, DatabaseConnection
from .inactivity.notifier import AtRiskNotifier
from .inactivity.reactivation import AutoReactivationHook
from .inactivity.status import InactivityStatusService
from .inactivity.sweep import InactivitySweepService
from .jobs.alerts import AdminNoticeAlerter
from .jobs.registry import JobRegistry
from .jobs.retry import ReliableJobRunner
from .jobs.scheduler import JobScheduler
from .lifecycle.policy import InactivityPolicy
from .lifecycle.state_machine import LifecycleStateMachine
from .notices.mysql_notice_repository import MySQLNoticeRepository
from .notices.repository import NoticeRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .tenants.mysql_tenant_repository import MySQLActorRepository, MySQLTenantRepository
from .tenants.repository import ActorRepository, TenantRepository
from .tenants.service import AutomatedActorResolver


@dataclass(frozen=True)
class Container:
    settings: InactivitySettings

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository
    tenants_repo: TenantRepository
    actors_repo: ActorRepository
    notices_repo: NoticeRepository

    state_machine: LifecycleStateMachine
    sweep_service: InactivitySweepService
    notifier: AtRiskNotifier
    reactivation_hook: AutoReactivationHook
    status_service: InactivityStatusService
    job_registry: JobRegistry
    job_runner: ReliableJobRunner
    scheduler: JobScheduler


def assemble(
    *,
    settings: InactivitySettings,
    students: StudentRepository,
    attendance: AttendanceRepository,
    tenants: TenantRepository,
    actors: ActorRepository,
    notices: NoticeRepository,
    sleep: Callable[[float], None] = time.sleep,
    background_scheduler: BackgroundScheduler | None = None,
) -> Container:
    """Wire services on top of any repository implementations."""

    policy = InactivityPolicy(threshold_days=settings.absence_threshold_days)
    machine = LifecycleStateMachine(students, policy)
    reader = AttendanceLookbackReader(attendance)
    actor_resolver = AutomatedActorResolver(actors, email=settings.system_actor_email)
    tz = settings.tenant_timezone

    sweep_service = InactivitySweepService(
        tenants,
        students,
        reader,
        machine,
        actor_resolver,
        default_timezone=tz,
        max_workers=settings.sweep_max_workers,
    )
    notifier = AtRiskNotifier(tenants, students, reader, machine, notices, default_timezone=tz)
    reactivation_hook = AutoReactivationHook(students, machine, actor_resolver)
    status_service = InactivityStatusService(students, tenants, reader, machine, default_timezone=tz)

    job_registry = JobRegistry(
        alert_after_failures=settings.job_alert_after_failures,
        stale_warning=settings.stale_warning,
        stale_critical=settings.stale_critical,
    )
    job_runner = ReliableJobRunner(
        job_registry,
        alerter=AdminNoticeAlerter(notices, actors),
        max_attempts=settings.job_max_attempts,
        backoff_base=settings.job_backoff_base_seconds,
        sleep=sleep,
    )
    scheduler = JobScheduler(
        job_runner,
        sweep_service,
        notifier,
        timezone=tz,
        sweep_cron=settings.sweep_cron,
        notify_cron=settings.notify_cron,
        scheduler=background_scheduler,
    )

    return Container(
        settings=settings,
        students_repo=students,
        attendance_repo=attendance,
        tenants_repo=tenants,
        actors_repo=actors,
        notices_repo=notices,
        state_machine=machine,
        sweep_service=sweep_service,
        notifier=notifier,
        reactivation_hook=reactivation_hook,
        status_service=status_service,
        job_registry=job_registry,
        job_runner=job_runner,
        scheduler=scheduler,
    )


def build_container(*, db_config: dict, settings: InactivitySettings) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 10)),
        statement_timeout_ms=db_config.get("statement_timeout_ms"),
    )
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        settings=settings,
        students=MySQLStudentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        tenants=MySQLTenantRepository(conn),
        actors=MySQLActorRepository(conn),
        notices=MySQLNoticeRepository(conn),
    )
