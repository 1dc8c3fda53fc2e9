from __future__ import annotations

from datetime import date

from ..attendance.service import AttendanceLookbackReader
from ..core.constants import DEFAULT_HISTORY_SLICE, DEFAULT_TENANT_TIMEZONE
from ..core.enums import LifecycleStatus
from ..core.exceptions import NotFoundError
from ..lifecycle.state_machine import LifecycleStateMachine
from ..students.repository import StudentRepository
from ..tenants.repository import TenantRepository
from ..tenants.service import local_today
from ..workdays.business_days import add_business_days
from .model import StudentStatusReport


class InactivityStatusService:
    """Read-only diagnostics for one student (admin query endpoint)."""

    def __init__(
        self,
        students: StudentRepository,
        tenants: TenantRepository,
        reader: AttendanceLookbackReader,
        machine: LifecycleStateMachine,
        *,
        default_timezone: str = DEFAULT_TENANT_TIMEZONE,
        history_limit: int = DEFAULT_HISTORY_SLICE,
    ):
        self._students = students
        self._tenants = tenants
        self._reader = reader
        self._machine = machine
        self._default_timezone = default_timezone
        self._history_limit = int(history_limit)

    def get_student_inactivity_status(self, student_id: int, *, today: date | None = None) -> StudentStatusReport:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError(f"Student {student_id} not found")

        policy = self._machine.policy
        today = today or local_today(self._tenants.get_by_id(student.tenant_id), self._default_timezone)
        last_present = self._reader.last_present_date(student.student_id, student.person_id, student.tenant_id)
        is_active = student.lifecycle_status == LifecycleStatus.ACTIVE

        days_absent = None
        days_until = None
        projected = None
        if last_present is not None:
            days_absent = self._machine.days_absent(last_present, today)
            if is_active:
                days_until = policy.days_remaining(days_absent)
                projected = add_business_days(last_present, policy.threshold_days)

        history = tuple(self._students.recent_history(student.student_id, limit=self._history_limit))
        auto_deactivated = bool(
            student.lifecycle_status == LifecycleStatus.INACTIVE_BY_POLICY
            and history
            and history[0].new_status == LifecycleStatus.INACTIVE_BY_POLICY
        )

        return StudentStatusReport(
            student_id=student.student_id,
            tenant_id=student.tenant_id,
            display_code=student.display_code,
            lifecycle_status=student.lifecycle_status,
            last_present_date=last_present,
            days_absent=days_absent,
            threshold_days=policy.threshold_days,
            warning_band_start=policy.warning_band_start,
            is_at_risk=bool(is_active and days_absent is not None and policy.in_warning_band(days_absent)),
            will_be_deactivated=bool(is_active and days_absent is not None and policy.should_deactivate(days_absent)),
            days_until_deactivation=days_until,
            projected_deactivation_date=projected,
            auto_deactivated=auto_deactivated,
            recent_history=history,
        )
