"""Inactivity sweep: deactivate students absent for too long, branch by branch."""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime

from ..attendance.service import AttendanceLookbackReader
from ..core.constants import DEFAULT_TENANT_TIMEZONE
from ..core.enums import LifecycleStatus, NoOpReason
from ..lifecycle.model import NoOp
from ..lifecycle.state_machine import LifecycleStateMachine
from ..students.repository import StudentRepository
from ..tenants.model import Tenant
from ..tenants.repository import TenantRepository
from ..tenants.service import AutomatedActorResolver, local_today
from .model import DeactivatedStudent, ItemError, SweepReport, TenantSweepReport

logger = logging.getLogger(__name__)


class InactivitySweepService:
    def __init__(
        self,
        tenants: TenantRepository,
        students: StudentRepository,
        reader: AttendanceLookbackReader,
        machine: LifecycleStateMachine,
        actors: AutomatedActorResolver,
        *,
        default_timezone: str = DEFAULT_TENANT_TIMEZONE,
        max_workers: int = 1,
    ):
        self._tenants = tenants
        self._students = students
        self._reader = reader
        self._machine = machine
        self._actors = actors
        self._default_timezone = default_timezone
        self._max_workers = max(int(max_workers), 1)

    def run_sweep(self, *, today: date | None = None, cancel_event: threading.Event | None = None) -> SweepReport:
        """Check every active student of every active branch.

        Listing branches is the only step allowed to raise (store unreachable);
        branch and student failures are recorded in the report instead.
        """

        started = time.monotonic()
        report = SweepReport(started_at=datetime.now())

        tenants = list(self._tenants.list_active())
        logger.info(
            "Inactivity sweep started: %s active branch(es), threshold=%s school days",
            len(tenants),
            self._machine.policy.threshold_days,
        )

        if self._max_workers == 1 or len(tenants) <= 1:
            for tenant in tenants:
                if cancel_event is not None and cancel_event.is_set():
                    report.cancelled = True
                    break
                report.merge(self._sweep_tenant_isolated(tenant, today))
        else:
            with ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="inactivity-sweep") as pool:
                futures = []
                for tenant in tenants:
                    if cancel_event is not None and cancel_event.is_set():
                        report.cancelled = True
                        break
                    futures.append(pool.submit(self._sweep_tenant_isolated, tenant, today))
                # Merge on the calling thread only; workers never share counters.
                for future in futures:
                    report.merge(future.result())

        report.duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "Inactivity sweep finished: checked=%s marked_inactive=%s skipped_no_history=%s errors=%s duration=%sms",
            report.total_students_checked,
            report.total_marked_inactive,
            report.total_skipped_no_history,
            len(report.errors),
            report.duration_ms,
        )
        return report

    def _sweep_tenant_isolated(self, tenant: Tenant, today: date | None) -> TenantSweepReport:
        partial = TenantSweepReport(tenant_id=tenant.tenant_id, tenant_name=tenant.name)
        try:
            self._sweep_tenant(tenant, today or local_today(tenant, self._default_timezone), partial)
        except Exception as exc:
            logger.exception("Inactivity sweep failed for branch %s (%s)", tenant.name, tenant.tenant_id)
            partial.failed = True
            partial.errors.append(
                ItemError(scope="tenant", ref=str(tenant.tenant_id), message=str(exc), tenant_id=tenant.tenant_id)
            )
        return partial

    def _sweep_tenant(self, tenant: Tenant, today: date, partial: TenantSweepReport) -> None:
        actor = self._actors.resolve(tenant.tenant_id)
        students = self._students.list_by_tenant_and_status(tenant_id=tenant.tenant_id, status=LifecycleStatus.ACTIVE)
        logger.info("Branch %s: %s active student(s) to check", tenant.name, len(students))

        for student in students:
            try:
                last_present = self._reader.last_present_date(student.student_id, student.person_id, tenant.tenant_id)
                decision = self._machine.decide(student, last_present, today)

                if isinstance(decision, NoOp):
                    if decision.reason == NoOpReason.NO_HISTORY:
                        partial.skipped_no_history += 1
                        logger.info("Skipping %s - no attendance history", student.display_code)
                    else:
                        partial.checked += 1
                    continue

                partial.checked += 1
                result = self._machine.apply(decision, changed_by=actor.actor_id)
                if not result.applied:
                    partial.concurrent_changes += 1
                    continue

                partial.marked_inactive += 1
                partial.students.append(
                    DeactivatedStudent(
                        student_id=student.student_id,
                        display_code=student.display_code,
                        previous_status=decision.previous_status,
                        new_status=decision.new_status,
                        last_present_date=decision.last_present_date,
                        days_absent=decision.days_absent,
                    )
                )
                logger.warning(
                    "Marked inactive: %s - last attendance %s (%s school days ago)",
                    student.display_code,
                    decision.last_present_date,
                    decision.days_absent,
                )
            except Exception as exc:
                logger.exception("Error processing student %s in branch %s", student.student_id, tenant.tenant_id)
                partial.errors.append(
                    ItemError(scope="student", ref=str(student.student_id), message=str(exc), tenant_id=tenant.tenant_id)
                )

        logger.info("Branch %s: checked=%s marked_inactive=%s", tenant.name, partial.checked, partial.marked_inactive)
