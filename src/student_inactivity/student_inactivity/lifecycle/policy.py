from __future__ import annotations

from dataclasses import dataclass, field

from ..core.constants import DEFAULT_ABSENCE_THRESHOLD_DAYS
from ..core.enums import LifecycleStatus
from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class InactivityPolicy:
    """Thresholds that drive deactivation and the at-risk warning band."""

    threshold_days: int = DEFAULT_ABSENCE_THRESHOLD_DAYS
    eligible_statuses: frozenset[LifecycleStatus] = field(default_factory=lambda: frozenset({LifecycleStatus.ACTIVE}))

    def __post_init__(self):
        if int(self.threshold_days) < 1:
            raise ConfigurationError("ABSENCE_THRESHOLD_DAYS must be at least 1")
        if LifecycleStatus.INACTIVE_BY_POLICY in self.eligible_statuses:
            raise ConfigurationError("inactive_by_policy cannot be an eligible starting status")

    @property
    def warning_band_start(self) -> int:
        return self.threshold_days // 2

    def is_eligible(self, status: LifecycleStatus) -> bool:
        return status in self.eligible_statuses

    def should_deactivate(self, days_absent: int) -> bool:
        return days_absent >= self.threshold_days

    def in_warning_band(self, days_absent: int) -> bool:
        return self.warning_band_start <= days_absent < self.threshold_days

    def days_remaining(self, days_absent: int) -> int:
        return max(self.threshold_days - days_absent, 0)
