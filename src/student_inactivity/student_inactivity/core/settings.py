from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from types import ModuleType

from ..common.datetime_utils import resolve_timezone
from .constants import (
    DEFAULT_ABSENCE_THRESHOLD_DAYS,
    DEFAULT_ALERT_AFTER_FAILURES,
    DEFAULT_BACKOFF_BASE_SECONDS,
    DEFAULT_JOB_MAX_ATTEMPTS,
    DEFAULT_NOTIFY_CRON,
    DEFAULT_STALE_CRITICAL_HOURS,
    DEFAULT_STALE_WARNING_HOURS,
    DEFAULT_SWEEP_CRON,
    DEFAULT_TENANT_TIMEZONE,
    SYSTEM_ACTOR_EMAIL,
)
from .exceptions import ConfigurationError


@dataclass(frozen=True)
class InactivitySettings:
    """Externally injected knobs of the inactivity engine (see config/*.py)."""

    absence_threshold_days: int = DEFAULT_ABSENCE_THRESHOLD_DAYS
    tenant_timezone: str = DEFAULT_TENANT_TIMEZONE
    sweep_cron: str = DEFAULT_SWEEP_CRON
    notify_cron: str = DEFAULT_NOTIFY_CRON
    job_max_attempts: int = DEFAULT_JOB_MAX_ATTEMPTS
    job_backoff_base_seconds: float = DEFAULT_BACKOFF_BASE_SECONDS
    job_alert_after_failures: int = DEFAULT_ALERT_AFTER_FAILURES
    job_stale_warning_hours: int = DEFAULT_STALE_WARNING_HOURS
    job_stale_critical_hours: int = DEFAULT_STALE_CRITICAL_HOURS
    sweep_max_workers: int = 1
    scheduler_enabled: bool = False
    system_actor_email: str = SYSTEM_ACTOR_EMAIL

    def __post_init__(self):
        if self.absence_threshold_days < 1:
            raise ConfigurationError("ABSENCE_THRESHOLD_DAYS must be at least 1")
        if self.job_max_attempts < 1:
            raise ConfigurationError("JOB_MAX_ATTEMPTS must be at least 1")
        if self.job_stale_warning_hours > self.job_stale_critical_hours:
            raise ConfigurationError("JOB_STALE_WARNING_HOURS must not exceed JOB_STALE_CRITICAL_HOURS")
        resolve_timezone(self.tenant_timezone)

    @property
    def stale_warning(self) -> timedelta:
        return timedelta(hours=self.job_stale_warning_hours)

    @property
    def stale_critical(self) -> timedelta:
        return timedelta(hours=self.job_stale_critical_hours)

    @classmethod
    def from_module(cls, settings: ModuleType) -> "InactivitySettings":
        try:
            return cls(
                absence_threshold_days=int(getattr(settings, "ABSENCE_THRESHOLD_DAYS", DEFAULT_ABSENCE_THRESHOLD_DAYS)),
                tenant_timezone=str(getattr(settings, "TENANT_TIMEZONE", DEFAULT_TENANT_TIMEZONE)),
                sweep_cron=str(getattr(settings, "SWEEP_CRON", DEFAULT_SWEEP_CRON)),
                notify_cron=str(getattr(settings, "NOTIFY_CRON", DEFAULT_NOTIFY_CRON)),
                job_max_attempts=int(getattr(settings, "JOB_MAX_ATTEMPTS", DEFAULT_JOB_MAX_ATTEMPTS)),
                job_backoff_base_seconds=float(getattr(settings, "JOB_BACKOFF_BASE_SECONDS", DEFAULT_BACKOFF_BASE_SECONDS)),
                job_alert_after_failures=int(getattr(settings, "JOB_ALERT_AFTER_FAILURES", DEFAULT_ALERT_AFTER_FAILURES)),
                job_stale_warning_hours=int(getattr(settings, "JOB_STALE_WARNING_HOURS", DEFAULT_STALE_WARNING_HOURS)),
                job_stale_critical_hours=int(getattr(settings, "JOB_STALE_CRITICAL_HOURS", DEFAULT_STALE_CRITICAL_HOURS)),
                sweep_max_workers=int(getattr(settings, "SWEEP_MAX_WORKERS", 1)),
                scheduler_enabled=bool(getattr(settings, "SCHEDULER_ENABLED", False)),
                system_actor_email=str(getattr(settings, "SYSTEM_ACTOR_EMAIL", SYSTEM_ACTOR_EMAIL)),
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Invalid inactivity settings: {exc}")
