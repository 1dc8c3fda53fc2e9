from __future__ import annotations

from enum import Enum


class LifecycleStatus(str, Enum):
    """Student lifecycle status stored on the student row."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    DROPPED = "dropped"
    GRADUATED = "graduated"
    TRANSFERRED = "transferred"
    DECEASED = "deceased"
    INACTIVE_BY_POLICY = "inactive_by_policy"


class PresenceState(str, Enum):
    """Normalized attendance state produced by the ingestion pipeline."""

    PRESENT = "present"
    LATE = "late"
    HALF_DAY = "half_day"
    ABSENT = "absent"
    EARLY_DEPARTURE = "early_departure"


# States that mean the person was physically at school that day.
PRESENT_EQUIVALENT_STATES = frozenset({PresenceState.PRESENT, PresenceState.LATE, PresenceState.HALF_DAY})


class TenantStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class TransitionKind(str, Enum):
    DEACTIVATE = "deactivate"
    REACTIVATE = "reactivate"


class NoOpReason(str, Enum):
    """Why the state machine decided not to transition a student."""

    NOT_ELIGIBLE = "not_eligible"
    NO_HISTORY = "no_history"
    BELOW_THRESHOLD = "below_threshold"
    WARNING_BAND = "warning_band"
    NOT_INACTIVE_BY_POLICY = "not_inactive_by_policy"


class NoticeCategory(str, Enum):
    INACTIVITY_WARNING = "inactivity-warning"
    JOB_FAILURE_ALERT = "job-failure-alert"


class HealthState(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class ReactivationOutcome(str, Enum):
    REACTIVATED = "reactivated"
    NOT_INACTIVE_BY_POLICY = "not_inactive_by_policy"
    CONCURRENT_CHANGE = "concurrent_change"
    STUDENT_NOT_FOUND = "student_not_found"
    TENANT_MISMATCH = "tenant_mismatch"
