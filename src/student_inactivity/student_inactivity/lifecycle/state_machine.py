"""Lifecycle state machine for automated (in)activity.

Only two states matter here:

    active --(no presence for >= threshold business days)--> inactive_by_policy
    inactive_by_policy --(new qualifying attendance)--> active

Any other status (suspended, dropped, ...) was set by a person and is never
touched. Writes are compare-and-set on the current status, so a sweep and an
attendance-triggered reactivation racing on the same student end in one
consistent status with exactly one history entry per applied change.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..core.constants import DEACTIVATION_REASON, REACTIVATION_REASON
from ..core.enums import LifecycleStatus, NoOpReason, TransitionKind
from ..students.model import StatusHistoryEntry, Student
from ..students.repository import StudentRepository
from ..workdays.business_days import count_business_days_between
from .model import ApplyResult, Decision, NoOp, Transition
from .policy import InactivityPolicy

logger = logging.getLogger(__name__)


class LifecycleStateMachine:
    def __init__(
        self,
        students: StudentRepository,
        policy: InactivityPolicy | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ):
        self._students = students
        self._policy = policy or InactivityPolicy()
        self._clock = clock or datetime.now

    @property
    def policy(self) -> InactivityPolicy:
        return self._policy

    def days_absent(self, last_present: date, today: date) -> int:
        return count_business_days_between(last_present, today)

    def decide(self, student: Student, last_present: Optional[date], today: date) -> Decision:
        if not self._policy.is_eligible(student.lifecycle_status):
            return NoOp(student_id=student.student_id, reason=NoOpReason.NOT_ELIGIBLE)

        # Never-attended students are skipped, not deactivated.
        if last_present is None:
            return NoOp(student_id=student.student_id, reason=NoOpReason.NO_HISTORY)

        days_absent = self.days_absent(last_present, today)

        if self._policy.should_deactivate(days_absent):
            reason = DEACTIVATION_REASON.format(threshold=self._policy.threshold_days)
            return Transition(
                student_id=student.student_id,
                tenant_id=student.tenant_id,
                kind=TransitionKind.DEACTIVATE,
                previous_status=student.lifecycle_status,
                new_status=LifecycleStatus.INACTIVE_BY_POLICY,
                reason=f"{reason}. Last attendance: {last_present.isoformat()}",
                last_present_date=last_present,
                days_absent=days_absent,
            )

        if self._policy.in_warning_band(days_absent):
            return NoOp(student_id=student.student_id, reason=NoOpReason.WARNING_BAND, days_absent=days_absent)

        return NoOp(student_id=student.student_id, reason=NoOpReason.BELOW_THRESHOLD, days_absent=days_absent)

    def reactivate(self, student: Student, *, reason: str = REACTIVATION_REASON) -> Decision:
        """Any single qualifying attendance reactivates; absence length is irrelevant."""

        if student.lifecycle_status != LifecycleStatus.INACTIVE_BY_POLICY:
            return NoOp(student_id=student.student_id, reason=NoOpReason.NOT_INACTIVE_BY_POLICY)

        return Transition(
            student_id=student.student_id,
            tenant_id=student.tenant_id,
            kind=TransitionKind.REACTIVATE,
            previous_status=LifecycleStatus.INACTIVE_BY_POLICY,
            new_status=LifecycleStatus.ACTIVE,
            reason=reason,
        )

    def apply(self, transition: Transition, *, changed_by: int, now: datetime | None = None) -> ApplyResult:
        entry = StatusHistoryEntry(
            previous_status=transition.previous_status,
            new_status=transition.new_status,
            changed_by=int(changed_by),
            changed_at=now or self._clock(),
            reason=transition.reason,
        )

        applied = self._students.compare_and_set_status(
            student_id=transition.student_id,
            expected=transition.previous_status,
            entry=entry,
        )
        if not applied:
            logger.info(
                "Skipped %s for student %s: status changed concurrently (expected %s)",
                transition.kind.value,
                transition.student_id,
                transition.previous_status.value,
            )
            return ApplyResult(transition=transition, applied=False)

        return ApplyResult(transition=transition, applied=True, entry=entry)
