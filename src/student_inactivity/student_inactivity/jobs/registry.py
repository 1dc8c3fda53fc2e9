"""In-process bookkeeping of scheduled job runs.

One JobRegistry is created at process start (see container.assemble) and
handed to the retry runner and the health endpoint.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.serialization import to_jsonable
from ..core.constants import DEFAULT_ALERT_AFTER_FAILURES, DEFAULT_STALE_CRITICAL_HOURS, DEFAULT_STALE_WARNING_HOURS
from ..core.enums import HealthState


@dataclass(frozen=True)
class JobRecord:
    name: str
    registered_at: datetime
    last_run: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None
    last_error: Optional[str] = None
    consecutive_failures: int = 0
    total_runs: int = 0
    total_failures: int = 0
    running: bool = False


@dataclass(frozen=True)
class JobHealth:
    name: str
    state: HealthState
    last_run: Optional[datetime]
    last_success: Optional[datetime]
    hours_since_success: float
    consecutive_failures: int
    last_error: Optional[str] = None


@dataclass(frozen=True)
class HealthReport:
    generated_at: datetime
    overall: HealthState
    jobs: list[JobHealth] = field(default_factory=list)

    def to_dict(self) -> dict:
        return to_jsonable(self)


_SEVERITY = {HealthState.HEALTHY: 0, HealthState.WARNING: 1, HealthState.CRITICAL: 2}


class JobRegistry:
    def __init__(
        self,
        *,
        clock: Callable[[], datetime] | None = None,
        alert_after_failures: int = DEFAULT_ALERT_AFTER_FAILURES,
        stale_warning: timedelta = timedelta(hours=DEFAULT_STALE_WARNING_HOURS),
        stale_critical: timedelta = timedelta(hours=DEFAULT_STALE_CRITICAL_HOURS),
    ):
        self._clock = clock or datetime.now
        self._alert_after = int(alert_after_failures)
        self._stale_warning = stale_warning
        self._stale_critical = stale_critical
        self._records: dict[str, JobRecord] = {}
        self._lock = threading.Lock()

    @property
    def alert_after_failures(self) -> int:
        return self._alert_after

    def register(self, name: str) -> JobRecord:
        with self._lock:
            record = self._records.get(name)
            if record is None:
                record = JobRecord(name=name, registered_at=self._clock())
                self._records[name] = record
            return record

    def get(self, name: str) -> Optional[JobRecord]:
        with self._lock:
            return self._records.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._records)

    def mark_started(self, name: str) -> JobRecord:
        self.register(name)
        with self._lock:
            record = self._records[name]
            record = replace(record, last_run=self._clock(), total_runs=record.total_runs + 1, running=True)
            self._records[name] = record
            return record

    def mark_succeeded(self, name: str) -> JobRecord:
        self.register(name)
        with self._lock:
            record = replace(self._records[name], last_success=self._clock(), consecutive_failures=0, running=False)
            self._records[name] = record
            return record

    def mark_failed(self, name: str, error: str) -> JobRecord:
        """Record one exhausted invocation (all retries failed)."""

        self.register(name)
        with self._lock:
            record = self._records[name]
            record = replace(
                record,
                last_failure=self._clock(),
                last_error=error,
                consecutive_failures=record.consecutive_failures + 1,
                total_failures=record.total_failures + 1,
                running=False,
            )
            self._records[name] = record
            return record

    def classify(self, record: JobRecord, now: datetime) -> HealthState:
        staleness = now - (record.last_success or record.registered_at)
        if record.consecutive_failures >= self._alert_after or staleness >= self._stale_critical:
            return HealthState.CRITICAL
        if record.consecutive_failures >= 1 or staleness >= self._stale_warning:
            return HealthState.WARNING
        return HealthState.HEALTHY

    def health_report(self, now: datetime | None = None) -> HealthReport:
        now = now or self._clock()
        with self._lock:
            records = [self._records[name] for name in sorted(self._records)]

        jobs = []
        for record in records:
            since = now - (record.last_success or record.registered_at)
            jobs.append(
                JobHealth(
                    name=record.name,
                    state=self.classify(record, now),
                    last_run=record.last_run,
                    last_success=record.last_success,
                    hours_since_success=round(since.total_seconds() / 3600, 2),
                    consecutive_failures=record.consecutive_failures,
                    last_error=record.last_error,
                )
            )

        overall = max((j.state for j in jobs), key=lambda s: _SEVERITY[s], default=HealthState.HEALTHY)
        return HealthReport(generated_at=now, overall=overall, jobs=jobs)
