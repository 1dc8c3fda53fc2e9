"""Cron wiring for the inactivity sweep and the at-risk notifier.

Both jobs share a single worker thread and a run lock, so the notifier never
starts before a sweep that is still running has finished. A student
deactivated in the morning sweep is therefore not warned afterwards.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..common.datetime_utils import resolve_timezone
from ..core.constants import DEFAULT_NOTIFY_CRON, DEFAULT_SWEEP_CRON, DEFAULT_TENANT_TIMEZONE, NOTIFY_JOB_NAME, SWEEP_JOB_NAME
from ..core.exceptions import ConfigurationError
from ..inactivity.notifier import AtRiskNotifier
from ..inactivity.sweep import InactivitySweepService
from .retry import JobOutcome, ReliableJobRunner

logger = logging.getLogger(__name__)


# Crontab numbering (0 and 7 are Sunday); APScheduler counts from Monday.
_WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _crontab_weekdays(field: str) -> str:
    """Rewrite a numeric crontab day-of-week field as day names."""

    if field == "*" or not any(ch.isdigit() for ch in field):
        return field

    days: set[int] = set()
    for item in field.split(","):
        span, _, step = item.partition("/")
        if span == "*":
            low, high = 0, 6
        elif "-" in span:
            low, high = (int(part) for part in span.split("-", 1))
        else:
            low = int(span)
            high = 7 if step else low
        if not 0 <= low <= high <= 7:
            raise ValueError(f"day-of-week value out of range: {item!r}")
        days.update(day % 7 for day in range(low, high + 1, int(step or 1)))
    return ",".join(_WEEKDAY_NAMES[day] for day in sorted(days))


def build_cron_trigger(expression: str, timezone: str) -> CronTrigger:
    try:
        fields = expression.split()
        if len(fields) == 5:
            fields[4] = _crontab_weekdays(fields[4])
        return CronTrigger.from_crontab(" ".join(fields), timezone=resolve_timezone(timezone))
    except ValueError as exc:
        raise ConfigurationError(f"Invalid cron expression {expression!r}: {exc}")


class JobScheduler:
    def __init__(
        self,
        runner: ReliableJobRunner,
        sweep: InactivitySweepService,
        notifier: AtRiskNotifier,
        *,
        timezone: str = DEFAULT_TENANT_TIMEZONE,
        sweep_cron: str = DEFAULT_SWEEP_CRON,
        notify_cron: str = DEFAULT_NOTIFY_CRON,
        scheduler: BackgroundScheduler | None = None,
    ):
        self._runner = runner
        self._sweep = sweep
        self._notifier = notifier
        self._timezone = timezone
        self._sweep_trigger = build_cron_trigger(sweep_cron, timezone)
        self._notify_trigger = build_cron_trigger(notify_cron, timezone)
        self._scheduler = scheduler or BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 3600},
            timezone=resolve_timezone(timezone),
        )
        self._run_lock = threading.Lock()
        self._scheduled = False

        runner.registry.register(SWEEP_JOB_NAME)
        runner.registry.register(NOTIFY_JOB_NAME)

    def schedule(self) -> None:
        if self._scheduled:
            return
        self._scheduler.add_job(
            self.run_sweep_now,
            self._sweep_trigger,
            id=SWEEP_JOB_NAME,
            name="Student inactivity check",
            replace_existing=True,
        )
        self._scheduler.add_job(
            self.run_notifier_now,
            self._notify_trigger,
            id=NOTIFY_JOB_NAME,
            name="At-risk notifications",
            replace_existing=True,
        )
        self._scheduled = True
        logger.info("Scheduled %s (%s) and %s (%s)", SWEEP_JOB_NAME, self._sweep_trigger, NOTIFY_JOB_NAME, self._notify_trigger)

    def start(self) -> None:
        self.schedule()
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Job scheduler started (timezone=%s)", self._timezone)

    def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Job scheduler stopped")

    def run_sweep_now(self) -> JobOutcome:
        """Scheduled and manual sweeps go through the same retry/registry path."""

        with self._run_lock:
            return self._runner.run_with_retry(SWEEP_JOB_NAME, self._sweep.run_sweep)

    def run_notifier_now(self, tenant_id: Optional[int] = None) -> JobOutcome:
        with self._run_lock:
            return self._runner.run_with_retry(NOTIFY_JOB_NAME, lambda: self._notifier.notify_at_risk(tenant_id))

    def jobs_status(self) -> dict[str, dict]:
        status = {}
        for job_id in (SWEEP_JOB_NAME, NOTIFY_JOB_NAME):
            job = self._scheduler.get_job(job_id)
            next_run = getattr(job, "next_run_time", None) if job else None
            status[job_id] = {
                "scheduled": job is not None,
                "running": bool(self._scheduler.running and job is not None),
                "next_run_time": next_run.isoformat() if next_run else None,
            }
        return status

    def get_job_health(self):
        return self._runner.registry.health_report()
