from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..core.constants import DEFAULT_BACKOFF_BASE_SECONDS, DEFAULT_JOB_MAX_ATTEMPTS
from .alerts import AlertSink
from .registry import JobRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobOutcome:
    job_name: str
    success: bool
    attempts: int
    result: Any = None
    error: Optional[str] = None


class ReliableJobRunner:
    """Bounded retry with exponential backoff, failure streaks and operator alerts."""

    def __init__(
        self,
        registry: JobRegistry,
        *,
        alerter: AlertSink | None = None,
        max_attempts: int = DEFAULT_JOB_MAX_ATTEMPTS,
        backoff_base: float = DEFAULT_BACKOFF_BASE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._registry = registry
        self._alerter = alerter
        self._max_attempts = max(int(max_attempts), 1)
        self._backoff_base = float(backoff_base)
        self._sleep = sleep

    @property
    def registry(self) -> JobRegistry:
        return self._registry

    def run_with_retry(self, job_name: str, job_fn: Callable[[], Any], max_attempts: int | None = None) -> JobOutcome:
        attempts_allowed = max(int(max_attempts or self._max_attempts), 1)
        self._registry.mark_started(job_name)

        last_error: Optional[BaseException] = None
        for attempt in range(1, attempts_allowed + 1):
            try:
                result = job_fn()
            except Exception as exc:
                last_error = exc
                logger.warning("Job %s attempt %s/%s failed: %s", job_name, attempt, attempts_allowed, exc)
                if attempt < attempts_allowed:
                    self._sleep(self._backoff_base**attempt)
                continue

            self._registry.mark_succeeded(job_name)
            if attempt > 1:
                logger.info("Job %s succeeded on attempt %s", job_name, attempt)
            return JobOutcome(job_name=job_name, success=True, attempts=attempt, result=result)

        error = str(last_error) if last_error else "unknown error"
        record = self._registry.mark_failed(job_name, error)
        logger.error(
            "Job %s failed after %s attempt(s) (consecutive failures: %s)",
            job_name,
            attempts_allowed,
            record.consecutive_failures,
        )

        if self._alerter is not None and record.consecutive_failures >= self._registry.alert_after_failures:
            try:
                self._alerter.alert(record)
            except Exception:
                logger.exception("Failed to deliver operator alert for job %s", job_name)

        return JobOutcome(job_name=job_name, success=False, attempts=attempts_allowed, error=error)
