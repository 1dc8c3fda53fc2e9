from __future__ import annotations

import logging
from typing import Optional

from ..core.constants import REACTIVATION_REASON
from ..core.enums import LifecycleStatus, ReactivationOutcome
from ..core.exceptions import NotFoundError
from ..lifecycle.model import NoOp
from ..lifecycle.state_machine import LifecycleStateMachine
from ..students.model import Student
from ..students.repository import StudentRepository
from ..tenants.service import AutomatedActorResolver
from .model import ReactivationResult

logger = logging.getLogger(__name__)


class AutoReactivationHook:
    """Called by attendance ingestion after every qualifying attendance write.

    The common case (student already active) returns after a single read.
    """

    def __init__(
        self,
        students: StudentRepository,
        machine: LifecycleStateMachine,
        actors: AutomatedActorResolver,
    ):
        self._students = students
        self._machine = machine
        self._actors = actors

    def on_attendance_recorded(
        self,
        student_id: int,
        tenant_id: int,
        acting_identity: Optional[int] = None,
    ) -> ReactivationResult:
        student = self._students.get_by_id(int(student_id))
        if not student:
            return ReactivationResult(student_id=int(student_id), outcome=ReactivationOutcome.STUDENT_NOT_FOUND)

        if student.tenant_id != int(tenant_id):
            logger.warning(
                "Attendance for student %s reported under branch %s but student belongs to %s",
                student_id,
                tenant_id,
                student.tenant_id,
            )
            return ReactivationResult(
                student_id=student.student_id,
                outcome=ReactivationOutcome.TENANT_MISMATCH,
                current_status=student.lifecycle_status,
            )

        if student.lifecycle_status != LifecycleStatus.INACTIVE_BY_POLICY:
            return ReactivationResult(
                student_id=student.student_id,
                outcome=ReactivationOutcome.NOT_INACTIVE_BY_POLICY,
                current_status=student.lifecycle_status,
            )

        changed_by = acting_identity
        if changed_by is None:
            changed_by = self._actors.resolve(student.tenant_id).actor_id

        return self._apply(student, changed_by=int(changed_by), reason=REACTIVATION_REASON)

    def reactivate_student(self, student_id: int, *, changed_by: int, reason: str = "Student returned to school") -> ReactivationResult:
        """Operator-initiated reactivation; same guard as the automatic path."""

        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        return self._apply(student, changed_by=int(changed_by), reason=reason)

    def _apply(self, student: Student, *, changed_by: int, reason: str) -> ReactivationResult:
        decision = self._machine.reactivate(student, reason=reason)
        if isinstance(decision, NoOp):
            return ReactivationResult(
                student_id=student.student_id,
                outcome=ReactivationOutcome.NOT_INACTIVE_BY_POLICY,
                current_status=student.lifecycle_status,
            )

        result = self._machine.apply(decision, changed_by=changed_by)
        if not result.applied:
            return ReactivationResult(
                student_id=student.student_id,
                outcome=ReactivationOutcome.CONCURRENT_CHANGE,
                previous_status=decision.previous_status,
            )

        logger.info("Auto-reactivated student %s (was: %s)", student.display_code, decision.previous_status.value)
        return ReactivationResult(
            student_id=student.student_id,
            outcome=ReactivationOutcome.REACTIVATED,
            reactivated=True,
            previous_status=decision.previous_status,
            current_status=decision.new_status,
            changed_by=changed_by,
        )
