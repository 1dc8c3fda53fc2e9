from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..common.serialization import to_jsonable
from ..core.enums import LifecycleStatus, ReactivationOutcome
from ..students.model import StatusHistoryEntry


@dataclass(frozen=True)
class ItemError:
    """A failure isolated to one tenant or one student during a run."""

    scope: str
    ref: str
    message: str
    tenant_id: Optional[int] = None


@dataclass(frozen=True)
class DeactivatedStudent:
    student_id: int
    display_code: str
    previous_status: LifecycleStatus
    new_status: LifecycleStatus
    last_present_date: Optional[date]
    days_absent: Optional[int]


@dataclass
class TenantSweepReport:
    """Per-tenant accumulator; merged into SweepReport once the tenant is done."""

    tenant_id: int
    tenant_name: str
    checked: int = 0
    marked_inactive: int = 0
    skipped_no_history: int = 0
    concurrent_changes: int = 0
    failed: bool = False
    students: list[DeactivatedStudent] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)


@dataclass
class SweepReport:
    started_at: datetime
    total_students_checked: int = 0
    total_marked_inactive: int = 0
    total_skipped_no_history: int = 0
    total_concurrent_changes: int = 0
    per_tenant_breakdown: list[TenantSweepReport] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)
    duration_ms: int = 0
    cancelled: bool = False

    def merge(self, partial: TenantSweepReport) -> None:
        self.per_tenant_breakdown.append(partial)
        self.total_students_checked += partial.checked
        self.total_marked_inactive += partial.marked_inactive
        self.total_skipped_no_history += partial.skipped_no_history
        self.total_concurrent_changes += partial.concurrent_changes
        self.errors.extend(partial.errors)

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


@dataclass(frozen=True)
class AtRiskStudent:
    student_id: int
    tenant_id: int
    display_code: str
    person_id: Optional[int]
    name: str
    last_present_date: date
    days_absent: int
    days_remaining: int


@dataclass
class TenantNotificationReport:
    tenant_id: int
    tenant_name: str
    at_risk: int = 0
    sent: int = 0
    failed: int = 0
    duplicates_suppressed: int = 0
    students: list[dict[str, Any]] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)


@dataclass
class NotificationReport:
    started_at: datetime
    total_at_risk: int = 0
    notifications_sent: int = 0
    notifications_failed: int = 0
    duplicates_suppressed: int = 0
    per_tenant_breakdown: list[TenantNotificationReport] = field(default_factory=list)
    errors: list[ItemError] = field(default_factory=list)
    duration_ms: int = 0

    def merge(self, partial: TenantNotificationReport) -> None:
        self.per_tenant_breakdown.append(partial)
        self.total_at_risk += partial.at_risk
        self.notifications_sent += partial.sent
        self.notifications_failed += partial.failed
        self.duplicates_suppressed += partial.duplicates_suppressed
        self.errors.extend(partial.errors)

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


@dataclass(frozen=True)
class ReactivationResult:
    student_id: int
    outcome: ReactivationOutcome
    reactivated: bool = False
    previous_status: Optional[LifecycleStatus] = None
    current_status: Optional[LifecycleStatus] = None
    changed_by: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)


@dataclass(frozen=True)
class StudentStatusReport:
    student_id: int
    tenant_id: int
    display_code: str
    lifecycle_status: LifecycleStatus
    last_present_date: Optional[date]
    days_absent: Optional[int]
    threshold_days: int
    warning_band_start: int
    is_at_risk: bool
    will_be_deactivated: bool
    days_until_deactivation: Optional[int]
    projected_deactivation_date: Optional[date]
    auto_deactivated: bool
    recent_history: tuple[StatusHistoryEntry, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return to_jsonable(self)
