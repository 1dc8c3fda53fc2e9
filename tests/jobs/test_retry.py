from __future__ import annotations

from datetime import datetime

from src.student_inactivity.student_inactivity.core.enums import NoticeCategory
from src.student_inactivity.student_inactivity.jobs.alerts import AdminNoticeAlerter
from src.student_inactivity.student_inactivity.jobs.registry import JobRegistry
from src.student_inactivity.student_inactivity.jobs.retry import ReliableJobRunner

from tests.fakes import InMemoryActors, InMemoryNotices


class RecordingAlerter:
    def __init__(self, fail: bool = False):
        self.records = []
        self.fail = fail

    def alert(self, record):
        self.records.append(record)
        if self.fail:
            raise RuntimeError("mail relay down")


class FlakyJob:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"database unavailable (call {self.calls})")
        return {"ok": True}


def _runner(alerter=None, sleeps=None):
    registry = JobRegistry(clock=lambda: datetime(2024, 1, 22, 6, 0))
    sleeps = sleeps if sleeps is not None else []
    return ReliableJobRunner(registry, alerter=alerter, sleep=sleeps.append), registry


def test_transient_failures_are_retried_with_backoff():
    sleeps = []
    runner, registry = _runner(sleeps=sleeps)
    job = FlakyJob(failures=2)

    outcome = runner.run_with_retry("sweep", job)

    assert outcome.success
    assert outcome.attempts == 3
    assert outcome.result == {"ok": True}
    assert sleeps == [2, 4]
    record = registry.get("sweep")
    assert record.consecutive_failures == 0
    assert record.last_success is not None
    assert not record.running


def test_exhausted_retries_do_not_raise():
    sleeps = []
    runner, registry = _runner(sleeps=sleeps)

    outcome = runner.run_with_retry("sweep", FlakyJob(failures=10))

    assert not outcome.success
    assert outcome.attempts == 3
    assert "call 3" in outcome.error
    assert sleeps == [2, 4]
    assert registry.get("sweep").consecutive_failures == 1


def test_alert_fires_once_the_failure_streak_reaches_threshold():
    alerter = RecordingAlerter()
    runner, registry = _runner(alerter=alerter)

    runner.run_with_retry("sweep", FlakyJob(failures=10))
    assert alerter.records == []

    runner.run_with_retry("sweep", FlakyJob(failures=10))
    assert len(alerter.records) == 1
    assert alerter.records[0].consecutive_failures == 2


def test_success_resets_the_streak():
    alerter = RecordingAlerter()
    runner, registry = _runner(alerter=alerter)

    runner.run_with_retry("sweep", FlakyJob(failures=10))
    runner.run_with_retry("sweep", FlakyJob(failures=0))
    runner.run_with_retry("sweep", FlakyJob(failures=10))

    assert registry.get("sweep").consecutive_failures == 1
    assert alerter.records == []


def test_alert_failure_is_logged_not_raised():
    alerter = RecordingAlerter(fail=True)
    runner, _ = _runner(alerter=alerter)

    runner.run_with_retry("sweep", FlakyJob(failures=10))
    outcome = runner.run_with_retry("sweep", FlakyJob(failures=10))

    assert not outcome.success
    assert len(alerter.records) == 1


def test_per_call_attempt_override():
    sleeps = []
    runner, _ = _runner(sleeps=sleeps)
    job = FlakyJob(failures=10)

    outcome = runner.run_with_retry("notify", job, max_attempts=1)

    assert outcome.attempts == 1
    assert job.calls == 1
    assert sleeps == []


def test_admin_notice_alerter_addresses_all_admins():
    notices = InMemoryNotices()
    runner, registry = _runner(alerter=AdminNoticeAlerter(notices, InMemoryActors(admin_ids=(1, 2))))

    runner.run_with_retry("student_inactivity_sweep", FlakyJob(failures=10))
    runner.run_with_retry("student_inactivity_sweep", FlakyJob(failures=10))

    assert len(notices.created) == 1
    alert = notices.created[0]
    assert alert.category == NoticeCategory.JOB_FAILURE_ALERT
    assert alert.recipient_person_ids == (1, 2)
    assert alert.priority == "urgent"
    assert alert.payload["consecutive_failures"] == 2
    assert "database unavailable" in alert.content


def test_admin_notice_alerter_without_admins_sends_nothing():
    notices = InMemoryNotices()
    alerter = AdminNoticeAlerter(notices, InMemoryActors(admin_ids=()))
    registry = JobRegistry()
    registry.mark_failed("sweep", "boom")

    alerter.alert(registry.get("sweep"))

    assert notices.created == []
