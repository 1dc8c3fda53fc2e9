"""At-risk notifier: warn students who are close to automatic deactivation."""

from __future__ import annotations

import logging
import time
from datetime import date, datetime
from typing import Sequence

from ..attendance.service import AttendanceLookbackReader
from ..core.constants import DEFAULT_TENANT_TIMEZONE
from ..core.enums import LifecycleStatus, NoticeCategory
from ..core.exceptions import NotFoundError, NotificationError
from ..lifecycle.model import NoOp
from ..lifecycle.state_machine import LifecycleStateMachine
from ..notices.model import NotificationRecord
from ..notices.repository import NoticeRepository
from ..students.repository import StudentRepository
from ..tenants.model import Tenant
from ..tenants.repository import TenantRepository
from ..tenants.service import local_today
from ..workdays.business_days import add_business_days
from .model import AtRiskStudent, ItemError, NotificationReport, TenantNotificationReport

logger = logging.getLogger(__name__)

WARNING_TITLE = "Attendance Warning - Risk of Deactivation"


class AtRiskNotifier:
    def __init__(
        self,
        tenants: TenantRepository,
        students: StudentRepository,
        reader: AttendanceLookbackReader,
        machine: LifecycleStateMachine,
        notices: NoticeRepository,
        *,
        default_timezone: str = DEFAULT_TENANT_TIMEZONE,
    ):
        self._tenants = tenants
        self._students = students
        self._reader = reader
        self._machine = machine
        self._notices = notices
        self._default_timezone = default_timezone

    def list_students_at_risk(self, tenant_id: int, *, today: date | None = None) -> list[AtRiskStudent]:
        """Active students of one branch currently inside the warning band."""

        tenant = self._get_tenant(tenant_id)
        errors: list[ItemError] = []
        found = self._collect_at_risk(tenant, today or local_today(tenant, self._default_timezone), errors)
        for err in errors:
            logger.warning("At-risk lookup failed for student %s: %s", err.ref, err.message)
        return found

    def notify_at_risk(self, tenant_id: int | None = None, *, today: date | None = None) -> NotificationReport:
        """Create one warning notice per at-risk student, for one branch or all active branches."""

        started = time.monotonic()
        report = NotificationReport(started_at=datetime.now())

        tenants: Sequence[Tenant]
        if tenant_id is not None:
            tenants = [self._get_tenant(tenant_id)]
        else:
            tenants = list(self._tenants.list_active())
        logger.info("At-risk notifications started for %s branch(es)", len(tenants))

        sent_keys: set[tuple] = set()
        for tenant in tenants:
            partial = TenantNotificationReport(tenant_id=tenant.tenant_id, tenant_name=tenant.name)
            try:
                self._notify_tenant(tenant, today or local_today(tenant, self._default_timezone), partial, sent_keys)
            except Exception as exc:
                logger.exception("At-risk notifications failed for branch %s (%s)", tenant.name, tenant.tenant_id)
                partial.errors.append(
                    ItemError(scope="tenant", ref=str(tenant.tenant_id), message=str(exc), tenant_id=tenant.tenant_id)
                )
            report.merge(partial)

        report.duration_ms = int((time.monotonic() - started) * 1000)
        logger.info(
            "At-risk notifications finished: at_risk=%s sent=%s failed=%s",
            report.total_at_risk,
            report.notifications_sent,
            report.notifications_failed,
        )
        return report

    def _get_tenant(self, tenant_id: int) -> Tenant:
        tenant = self._tenants.get_by_id(int(tenant_id))
        if not tenant:
            raise NotFoundError(f"Branch {tenant_id} not found")
        return tenant

    def _collect_at_risk(self, tenant: Tenant, today: date, errors: list[ItemError]) -> list[AtRiskStudent]:
        policy = self._machine.policy
        students = self._students.list_by_tenant_and_status(tenant_id=tenant.tenant_id, status=LifecycleStatus.ACTIVE)

        found: list[AtRiskStudent] = []
        for student in students:
            try:
                last_present = self._reader.last_present_date(student.student_id, student.person_id, tenant.tenant_id)
                decision = self._machine.decide(student, last_present, today)
                if not (isinstance(decision, NoOp) and decision.at_risk):
                    continue
                found.append(
                    AtRiskStudent(
                        student_id=student.student_id,
                        tenant_id=tenant.tenant_id,
                        display_code=student.display_code,
                        person_id=student.person_id,
                        name=student.label,
                        last_present_date=last_present,
                        days_absent=int(decision.days_absent),
                        days_remaining=policy.days_remaining(int(decision.days_absent)),
                    )
                )
            except Exception as exc:
                logger.exception("At-risk check failed for student %s", student.student_id)
                errors.append(
                    ItemError(scope="student", ref=str(student.student_id), message=str(exc), tenant_id=tenant.tenant_id)
                )
        return found

    def _notify_tenant(
        self,
        tenant: Tenant,
        today: date,
        partial: TenantNotificationReport,
        sent_keys: set[tuple],
    ) -> None:
        at_risk = self._collect_at_risk(tenant, today, partial.errors)
        partial.at_risk = len(at_risk)
        if not at_risk:
            logger.info("Branch %s: no at-risk students", tenant.name)
            return

        for student in at_risk:
            expiry = add_business_days(today, student.days_remaining)
            key = (tenant.tenant_id, student.person_id, NoticeCategory.INACTIVITY_WARNING, expiry)
            row = {
                "student_id": student.student_id,
                "display_code": student.display_code,
                "name": student.name,
                "days_absent": student.days_absent,
                "days_remaining": student.days_remaining,
            }

            if student.person_id is not None and key in sent_keys:
                partial.duplicates_suppressed += 1
                partial.students.append({**row, "status": "duplicate"})
                continue

            try:
                notice_id = self._send_warning(student, expiry)
            except Exception as exc:
                logger.warning("Failed to notify student %s: %s", student.student_id, exc)
                partial.failed += 1
                partial.students.append({**row, "status": "failed", "error": str(exc)})
                continue

            sent_keys.add(key)
            partial.sent += 1
            partial.students.append({**row, "status": "notified", "notice_id": notice_id})
            logger.info("Sent at-risk notification to %s (%s school days absent)", student.name, student.days_absent)

    def _send_warning(self, student: AtRiskStudent, expiry: date) -> int:
        if student.person_id is None:
            raise NotificationError("Student has no associated user")

        threshold = self._machine.policy.threshold_days
        content = (
            f"Dear {student.name},\n\n"
            f"You have been absent from school for {student.days_absent} school days. "
            f"If you do not attend school within the next {student.days_remaining} school days, "
            "your student account will be automatically marked as inactive.\n\n"
            "Please return to school as soon as possible or contact the administration if you have any issues."
        )
        return self._notices.create(
            NotificationRecord(
                category=NoticeCategory.INACTIVITY_WARNING,
                title=WARNING_TITLE,
                content=content,
                tenant_id=student.tenant_id,
                recipient_person_ids=(int(student.person_id),),
                expiry=expiry,
                payload={
                    "student_id": student.student_id,
                    "days_absent": student.days_absent,
                    "days_remaining": student.days_remaining,
                    "threshold": threshold,
                    "last_present_date": student.last_present_date.isoformat(),
                },
            )
        )
